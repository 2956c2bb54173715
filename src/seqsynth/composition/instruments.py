"""
Instruments and the keys they play.

An Instrument owns one Key per frequency id it has to play. Keys are
generated in one pass before rendering, by the instrument's KeyGenerator or,
if it has none, by changing the pitch of a key it already holds.
"""

from __future__ import annotations

import logging
import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from ..errors import (
    InvalidTimeOrFrequencyError,
    NoDefaultKeyError,
    UnknownInstrumentIdError,
    UnknownKeyIdError,
    UnsupportedError,
)
from ..modulation.envelopes import Envelope
from ..pcm import PCM, PCMParameters
from .frequency import FrequencyLookupTable, check_valid_time_frequency

logger = logging.getLogger(__name__)


@dataclass
class Key:
    """
    Sound made by an instrument at one frequency.

    Attributes:
        audio: The generated waveform
        frequency: Frequency in Hz this key produces
    """
    audio: PCM
    frequency: float


class KeyGenerator(ABC):
    """Generates the key of an instrument for a given frequency."""

    @abstractmethod
    def key_gen(self, frequency: float, parameters: PCMParameters, duration: float) -> Key:
        """
        Generate a new key.

        Args:
            frequency: Frequency in Hz the key should produce
            parameters: PCM parameters the key audio must respect
            duration: Longest duration in seconds the key will be played for

        Returns:
            Key: The generated key
        """


@dataclass
class KeyPitchChanger(KeyGenerator):
    """
    Derives keys from an existing key by changing its pitch.

    Used when an instrument has no key generator. Pitch changing is not
    implemented: key_gen() raises UnsupportedError.
    """
    original_key: Key

    def key_gen(self, frequency: float, parameters: PCMParameters, duration: float) -> Key:
        raise UnsupportedError(
            f"changing the pitch of a {self.original_key.frequency}Hz key to {frequency}Hz"
        )


def _extend_frames(frames: np.ndarray, num_frames: int, loop: bool) -> np.ndarray:
    """
    Stretch cached frames to num_frames.

    Looping repeats the buffer; otherwise the buffer is copied and its last
    frame held for the remainder.
    """
    length = frames.shape[0]
    if loop:
        indices = np.arange(num_frames) % length
    else:
        indices = np.minimum(np.arange(num_frames), length - 1)
    return frames[indices]


def _as_float(frames: np.ndarray) -> np.ndarray:
    """Key frames as float64 in [-1, 1], integer samples scaled by their full range."""
    frames = np.asarray(frames)
    if np.issubdtype(frames.dtype, np.integer):
        return frames.astype(np.float64) / np.iinfo(frames.dtype).max
    return frames.astype(np.float64)


def _evaluate(envelope: Envelope, stage, times: np.ndarray) -> np.ndarray:
    """Evaluate an envelope stage over an array of times."""
    if not envelope.vectorized:
        stage = np.vectorize(stage, otypes=[np.float64])
    return np.broadcast_to(np.asarray(stage(times), dtype=np.float64), times.shape)


@dataclass
class Instrument:
    """
    Defines how a note played on it sounds.

    Attributes:
        key_generator: Generator for every needed key. When None, at least
            one key must be put in `keys` beforehand; it seeds the pitch
            changing fallback.
        loopable: Whether keys repeat to fill long notes. Non-loopable keys
            hold their last frame instead.
        envelope: Loudness envelope; None plays at full loudness throughout.
        keys: Generated keys, by frequency id

    Example:
        >>> from seqsynth.audio import SquareWaveGenerator
        >>> lead = Instrument(key_generator=SquareWaveGenerator(), loopable=True)
    """
    key_generator: Optional[KeyGenerator] = None
    loopable: bool = True
    envelope: Optional[Envelope] = None
    keys: Dict[int, Key] = field(default_factory=dict)

    def gen_keys(
        self,
        frequencies: Iterable[Tuple[int, float]],
        frequency_lut: FrequencyLookupTable,
        parameters: PCMParameters,
    ) -> None:
        """
        Generate the keys for the given (frequency_id, duration) pairs.

        With a key generator the cache is rebuilt from scratch, so keys for
        frequency ids no longer played are dropped.
        Without a key generator, keys already present are kept as given and
        the missing ones are derived from any existing key.

        Raises:
            NoDefaultKeyError: No key generator and no key to start from
            UnsupportedError: A missing key would need pitch changing
        """
        if self.key_generator is not None:
            self.keys.clear()
            for frequency_id, duration in frequencies:
                frequency = frequency_lut.get(frequency_id)
                self.keys[frequency_id] = self.key_generator.key_gen(frequency, parameters, duration)
            return

        pitch_changer = KeyPitchChanger(original_key=self.get_any_key())
        for frequency_id, duration in frequencies:
            frequency = frequency_lut.get(frequency_id)
            if frequency_id in self.keys:
                continue
            self.keys[frequency_id] = pitch_changer.key_gen(frequency, parameters, duration)

    def get_any_key(self) -> Key:
        """Return one of the cached keys."""
        for key in self.keys.values():
            return key
        raise NoDefaultKeyError()

    def get_key(self, frequency_id: int) -> Key:
        try:
            return self.keys[frequency_id]
        except KeyError:
            raise UnknownKeyIdError(frequency_id) from None

    def gen_sound(self, frequency_id: int, duration: float) -> np.ndarray:
        """
        Render the cached key for a given duration.

        Args:
            frequency_id: Frequency id of the key to play
            duration: Duration in seconds (positive)

        Returns:
            Frames of shape [int(duration * sample_rate), nb_channels]
        """
        key = self.get_key(frequency_id)
        check_valid_time_frequency(duration)
        num_frames = key.audio.parameters.seconds_to_frames(duration)
        return self._frames_for(key, num_frames)

    def play(self, frequency_id: int, duration: float) -> np.ndarray:
        """
        Render a note with the instrument's envelope applied.

        The note lasts `duration`; an envelope with a release time adds a
        tail shaped by after_sustain(). Without an envelope this is
        gen_sound().
        """
        if self.envelope is None:
            return self.gen_sound(frequency_id, duration)

        key = self.get_key(frequency_id)
        check_valid_time_frequency(duration)
        sample_rate = key.audio.parameters.sample_rate
        held = key.audio.parameters.seconds_to_frames(duration)
        tail = key.audio.parameters.seconds_to_frames(max(0.0, self.envelope.release))

        frames = self._frames_for(key, held + tail)
        gain = np.empty(held + tail, dtype=np.float64)
        gain[:held] = _evaluate(self.envelope, self.envelope.before_during_sustain, np.arange(held) / sample_rate)
        gain[held:] = _evaluate(self.envelope, self.envelope.after_sustain, np.arange(tail) / sample_rate)
        return frames * gain[:, np.newaxis]

    def _frames_for(self, key: Key, num_frames: int) -> np.ndarray:
        frames = _as_float(key.audio.frames)
        if num_frames == 0:
            return frames[:0]
        if frames.shape[0] == 0:
            # nothing to loop or hold
            raise InvalidTimeOrFrequencyError(key.audio.duration)
        return _extend_frames(frames, num_frames, self.loopable)


class InstrumentTable:
    """Instruments used by the sequencer, by instrument id."""

    def __init__(self, instruments: Optional[Dict[int, Instrument]] = None):
        self.instruments: Dict[int, Instrument] = dict(instruments or {})

    def get(self, instrument_id: int) -> Instrument:
        try:
            return self.instruments[instrument_id]
        except KeyError:
            raise UnknownInstrumentIdError(instrument_id) from None

    def add(self, instrument_id: int, instrument: Instrument) -> Instrument:
        self.instruments[instrument_id] = instrument
        logger.debug("Registered instrument %s", instrument_id)
        return instrument

    def __contains__(self, instrument_id: object) -> bool:
        return instrument_id in self.instruments

    def __len__(self) -> int:
        return len(self.instruments)

    def __iter__(self):
        return iter(self.instruments.items())
