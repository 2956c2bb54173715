"""
Helpers that build a Sequence and a FrequencyLookupTable from event streams.

HardwareSequenceHelper accumulates note-on / note-off events, as produced
by a keyboard or a MIDI file. SoftwareSequenceHelper takes complete notes.
Both keep a clock that the caller moves forward between events.

Frequencies given in Hz are collected into a growing table, equal
frequencies (within machine epsilon) sharing one id. Alternatively a helper
can be built over an existing table and fed frequency ids directly.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..errors import HelperModeError, UnknownInstrumentIdError
from .frequency import FrequencyLookupTable
from .sequence import Note, Sequence


@dataclass
class PartialNote:
    """A note that has started but not stopped yet."""
    start_at: float
    on_velocity: float


class _SequenceHelperBase:
    """Clock and frequency table handling shared by both helpers."""

    def __init__(self, frequency_lut: Optional[FrequencyLookupTable] = None):
        self.sequence = Sequence()
        self.frequency_lut = frequency_lut
        self.frequency_lut_builder: Optional[List[float]] = [] if frequency_lut is None else None
        self.at_time = 0.0

    def time_forward(self, time_passed: float) -> None:
        """Move the clock forward by time_passed seconds."""
        if time_passed < 0:
            raise ValueError(f"Time can only move forward, got {time_passed}")
        self.at_time += time_passed

    def reset_time(self) -> None:
        self.at_time = 0.0

    def _builder(self, method: str) -> List[float]:
        if self.frequency_lut_builder is None:
            raise HelperModeError(method, f"{method}_with_flut")
        return self.frequency_lut_builder

    def _find_frequency_id(self, frequency: float, method: str) -> Optional[int]:
        for index, value in enumerate(self._builder(method)):
            if abs(value - frequency) < sys.float_info.epsilon:
                return index
        return None

    def _frequency_id(self, frequency: float, method: str) -> int:
        frequency_id = self._find_frequency_id(frequency, method)
        if frequency_id is None:
            builder = self._builder(method)
            builder.append(float(frequency))
            frequency_id = len(builder) - 1
        return frequency_id

    def get_frequency_lut(self) -> FrequencyLookupTable:
        """Return a copy of the frequency table, given or built."""
        if self.frequency_lut is not None:
            return self.frequency_lut.copy()
        return FrequencyLookupTable(dict(enumerate(self.frequency_lut_builder)))

    def get_sequence(self) -> Sequence:
        """Return a copy of the sequence built so far."""
        return self.sequence.copy()


class HardwareSequenceHelper(_SequenceHelperBase):
    """
    Builds a sequence from note-on / note-off events.

    Example:
        >>> helper = HardwareSequenceHelper()
        >>> helper.start_note(440.0, on_velocity=0.8, instrument_id=0)
        >>> helper.time_forward(0.5)
        >>> helper.stop_note(440.0, off_velocity=0.2, instrument_id=0)
        >>> helper.get_sequence().notes[0].duration
        0.5
    """

    def __init__(self, frequency_lut: Optional[FrequencyLookupTable] = None):
        super().__init__(frequency_lut)
        self.current_instruments: Dict[int, Dict[int, PartialNote]] = {}

    def start_note(self, frequency: float, on_velocity: float, instrument_id: int) -> None:
        """A note starts at the current time."""
        frequency_id = self._frequency_id(frequency, "start_note")
        self.start_note_with_flut(frequency_id, on_velocity, instrument_id)

    def start_note_with_flut(self, frequency_id: int, on_velocity: float, instrument_id: int) -> None:
        """Like start_note() with a known frequency id. Ignored if already sounding."""
        sounding = self.current_instruments.setdefault(instrument_id, {})
        if frequency_id not in sounding:
            sounding[frequency_id] = PartialNote(start_at=self.at_time, on_velocity=on_velocity)

    def stop_note(self, frequency: float, off_velocity: float, instrument_id: int) -> None:
        """A note stops at the current time. Ignored for a frequency never started."""
        frequency_id = self._find_frequency_id(frequency, "stop_note")
        if frequency_id is not None:
            self.stop_note_with_flut(frequency_id, off_velocity, instrument_id)

    def stop_note_with_flut(self, frequency_id: int, off_velocity: float, instrument_id: int) -> None:
        """Like stop_note() with a known frequency id."""
        if instrument_id not in self.current_instruments:
            raise UnknownInstrumentIdError(instrument_id)
        partial = self.current_instruments[instrument_id].pop(frequency_id, None)
        if partial is None:
            return
        self.sequence.add_note(Note(
            start_at=partial.start_at,
            duration=self.at_time - partial.start_at,
            frequency_id=frequency_id,
            instrument_id=instrument_id,
            on_velocity=partial.on_velocity,
            off_velocity=off_velocity,
            end_at=self.at_time,
        ))

    def sounding_notes(self) -> int:
        """Number of notes started and not yet stopped."""
        return sum(len(notes) for notes in self.current_instruments.values())


class SoftwareSequenceHelper(_SequenceHelperBase):
    """
    Builds a sequence from complete notes placed at the current time.

    Example:
        >>> helper = SoftwareSequenceHelper()
        >>> helper.new_note(440.0, 0.25, on_velocity=1.0, off_velocity=1.0, instrument_id=0)
        >>> helper.time_forward(0.25)
        >>> helper.new_note(440.0, 0.25, on_velocity=1.0, off_velocity=1.0, instrument_id=0)
        >>> len(helper.get_frequency_lut())
        1
    """

    def new_note(
        self,
        frequency: float,
        duration: float,
        on_velocity: float,
        off_velocity: float,
        instrument_id: int,
    ) -> None:
        frequency_id = self._frequency_id(frequency, "new_note")
        self.new_note_with_flut(frequency_id, duration, on_velocity, off_velocity, instrument_id)

    def new_note_with_flut(
        self,
        frequency_id: int,
        duration: float,
        on_velocity: float,
        off_velocity: float,
        instrument_id: int,
    ) -> None:
        self.sequence.add_note(Note(
            start_at=self.at_time,
            duration=duration,
            frequency_id=frequency_id,
            instrument_id=instrument_id,
            on_velocity=on_velocity,
            off_velocity=off_velocity,
        ))
