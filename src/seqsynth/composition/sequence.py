"""
Notes, loop regions and the analysis the renderer needs from a sequence.

All times are in seconds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import InvalidLoopError, InvalidNoteError

# Tolerance for end_at == start_at + duration
_TIME_TOLERANCE = 1e-9


def _check_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidNoteError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(value):
        raise InvalidNoteError(f"{name} must be finite, got {value}")
    return value


@dataclass
class Note:
    """
    One sounding event.

    Attributes:
        start_at: Time at which the note starts (>= 0)
        duration: How long the note plays (>= 0)
        frequency_id: Key into the frequency lookup table
        instrument_id: Instrument that plays the note
        on_velocity: Velocity of the key press, intended range 0-1
        off_velocity: Velocity of the key release, intended range 0-1
        end_at: Time at which the note stops; derived from start_at and
            duration when omitted, checked against them when given

    Example:
        >>> note = Note(start_at=0.5, duration=0.25, frequency_id=0, instrument_id=0)
        >>> note.end_at
        0.75
    """
    start_at: float
    duration: float
    frequency_id: int
    instrument_id: int
    on_velocity: float = 1.0
    off_velocity: float = 1.0
    end_at: Optional[float] = None

    def __post_init__(self):
        self.start_at = _check_finite("start_at", self.start_at)
        self.duration = _check_finite("duration", self.duration)
        if self.start_at < 0:
            raise InvalidNoteError(f"start_at must be >= 0, got {self.start_at}")
        if self.duration < 0:
            raise InvalidNoteError(f"duration must be >= 0, got {self.duration}")

        expected_end = self.start_at + self.duration
        if self.end_at is None:
            self.end_at = expected_end
        else:
            self.end_at = _check_finite("end_at", self.end_at)
            if abs(self.end_at - expected_end) > _TIME_TOLERANCE * max(1.0, abs(expected_end)):
                raise InvalidNoteError(
                    f"end_at {self.end_at} does not match start_at + duration = {expected_end}"
                )

        for name in ("on_velocity", "off_velocity"):
            velocity = _check_finite(name, getattr(self, name))
            if velocity < 0:
                raise InvalidNoteError(f"{name} must be >= 0, got {velocity}")
            setattr(self, name, velocity)

        if self.frequency_id < 0 or self.instrument_id < 0:
            raise InvalidNoteError("frequency_id and instrument_id must be non-negative")


@dataclass
class LoopInfo:
    """
    A loop region, in seconds.

    Carried alongside the sequence for a downstream player; the renderer does
    not apply it.
    """
    loop_start: float
    loop_end: float

    def __post_init__(self):
        self.loop_start = float(self.loop_start)
        self.loop_end = float(self.loop_end)
        if not (math.isfinite(self.loop_start) and math.isfinite(self.loop_end)):
            raise InvalidLoopError(f"Loop bounds must be finite, got {self.loop_start}-{self.loop_end}")
        if self.loop_start < 0:
            raise InvalidLoopError(f"Loop start must be >= 0, got {self.loop_start}")
        if self.loop_end <= self.loop_start:
            raise InvalidLoopError(
                f"Loop end ({self.loop_end}) must be after loop start ({self.loop_start})"
            )

    def to_frames(self, sample_rate: int) -> Tuple[int, int]:
        """Loop region as (start_frame, end_frame) at the given sample rate."""
        return int(round(self.loop_start * sample_rate)), int(round(self.loop_end * sample_rate))


@dataclass
class Sequence:
    """
    Notes to play, plus optional loop regions.

    Notes may be added in any order; analyses that need time order sort the
    notes in place first.

    Example:
        >>> seq = Sequence()
        >>> seq.add_note(Note(0.0, 1.0, frequency_id=0, instrument_id=0))
        >>> seq.add_note(Note(0.5, 1.0, frequency_id=1, instrument_id=0))
        >>> seq.calc_max_notes_at_once()
        2
        >>> seq.calc_music_duration()
        1.5
    """
    notes: List[Note] = field(default_factory=list)
    loop_info: List[LoopInfo] = field(default_factory=list)

    def add_note(self, note: Note) -> None:
        self.notes.append(note)

    def add_loop(self, loop: LoopInfo) -> None:
        self.loop_info.append(loop)

    def sort_by_time(self) -> None:
        """Stable sort of the notes by start time."""
        self.notes.sort(key=lambda note: note.start_at)

    def calc_max_notes_at_once(self, release: Optional[Callable[[Note], float]] = None) -> int:
        """
        Largest number of notes sounding at the same time.

        Sweeps the time-sorted notes keeping the [start, end) intervals that
        still contain the current note's start. Used as the mix divisor so
        the busiest moment cannot clip.

        Args:
            release: Optional seconds a note keeps sounding after its end,
                e.g. an envelope release tail. Each interval becomes
                [start, end + release(note)).

        Returns:
            0 for an empty sequence, otherwise at least 1
        """
        if not self.notes:
            return 0
        self.sort_by_time()

        max_notes_at_once = 1
        active: List[Tuple[float, float]] = []
        for note in self.notes:
            active = [(start, end) for start, end in active if start <= note.start_at < end]
            note_end = note.end_at + (release(note) if release is not None else 0.0)
            active.append((note.start_at, note_end))
            max_notes_at_once = max(max_notes_at_once, len(active))
        return max_notes_at_once

    def list_frequencies_for_instruments(self) -> Dict[int, List[Tuple[int, float]]]:
        """
        Frequencies each instrument must produce, with the longest duration
        requested at each.

        Returns:
            Mapping instrument_id -> [(frequency_id, max_duration), ...],
            frequency ids in the order they first appear
        """
        needed: Dict[int, Dict[int, float]] = {}
        for note in self.notes:
            durations = needed.setdefault(note.instrument_id, {})
            previous = durations.get(note.frequency_id)
            if previous is None or note.duration > previous:
                durations[note.frequency_id] = note.duration
        return {
            instrument_id: list(durations.items())
            for instrument_id, durations in needed.items()
        }

    def calc_music_duration(self) -> float:
        """Time at which the last note ends, 0.0 for an empty sequence."""
        return max((note.end_at for note in self.notes), default=0.0)

    def copy(self) -> "Sequence":
        return Sequence(notes=list(self.notes), loop_info=list(self.loop_info))

    def __len__(self) -> int:
        return len(self.notes)
