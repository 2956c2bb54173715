"""
Loudness envelopes for instruments.

An envelope maps the time elapsed in a note to an amplitude multiplier in
[0, 1], in two phases: before_during_sustain() while the key is held, and
after_sustain() from the moment the key is released. Times are in seconds.
"""

from __future__ import annotations

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

TimeLike = Union[float, np.ndarray]


def _validate_times(**times: float) -> None:
    """Validate envelope stage times."""
    for name, value in times.items():
        if not np.isfinite(value) or value < 0:
            raise ValueError(f"{name} must be a non-negative time, got {value}")


class Envelope(ABC):
    """
    Defines how the loudness of an instrument behaves with time.

    Attributes:
        release: Length of the release tail in seconds. The renderer keeps
            the note sounding this long after its end, shaped by
            after_sustain().
        vectorized: Whether both stages accept a numpy array of times. When
            False, the renderer calls them once per frame with a float.
    """

    release: float = 0.0
    vectorized: bool = False

    @abstractmethod
    def before_during_sustain(self, time: TimeLike) -> TimeLike:
        """Amplitude from note start up to and including sustain."""

    @abstractmethod
    def after_sustain(self, time: TimeLike) -> TimeLike:
        """Amplitude after release, with time measured from the release."""


@dataclass
class ADSREnvelope(Envelope):
    """
    Attack, Decay, Sustain, Release envelope.

    Args:
        attack: Attack time in seconds (>= 0)
        decay: Decay time in seconds (>= 0)
        sustain_level: Sustain level (0.0 to 1.0)
        release: Release time in seconds (>= 0)

    Example:
        >>> env = ADSREnvelope(attack=0.1, decay=0.1, sustain_level=0.5, release=0.2)
        >>> float(env.before_during_sustain(0.05))
        0.5
        >>> float(env.after_sustain(0.1))
        0.25
    """
    attack: float = 0.01
    decay: float = 0.1
    sustain_level: float = 0.7
    release: float = 0.1
    vectorized = True

    def __post_init__(self):
        _validate_times(attack=self.attack, decay=self.decay, release=self.release)
        if not (0.0 <= self.sustain_level <= 1.0):
            raise ValueError(f"Sustain level must be between 0.0 and 1.0, got {self.sustain_level}")

    def before_during_sustain(self, time: TimeLike) -> TimeLike:
        t = np.asarray(time, dtype=np.float64)
        level = np.full(t.shape, self.sustain_level)

        if self.decay > 0:
            in_decay = (t >= self.attack) & (t < self.attack + self.decay)
            progress = (t - self.attack) / self.decay
            level = np.where(in_decay, 1.0 - (1.0 - self.sustain_level) * progress, level)
        if self.attack > 0:
            level = np.where(t < self.attack, t / self.attack, level)

        level = np.clip(level, 0.0, 1.0)
        return level if level.ndim else float(level)

    def after_sustain(self, time: TimeLike) -> TimeLike:
        t = np.asarray(time, dtype=np.float64)
        if self.release > 0:
            level = self.sustain_level * np.clip(1.0 - t / self.release, 0.0, 1.0)
        else:
            level = np.zeros(t.shape)
        return level if level.ndim else float(level)


@dataclass
class PercussiveEnvelope(Envelope):
    """
    Fast attack/decay envelope for one-shot sounds.

    Ramps linearly to 1.0 over the attack, then back to silence over the
    decay, whether or not the key is still held. There is no release tail.

    Args:
        attack_ms: Attack time in milliseconds (>= 0)
        decay_ms: Decay time in milliseconds (>= 0)
    """
    attack_ms: float = 5.0
    decay_ms: float = 200.0
    vectorized = True

    def __post_init__(self):
        _validate_times(attack_ms=self.attack_ms, decay_ms=self.decay_ms)

    def before_during_sustain(self, time: TimeLike) -> TimeLike:
        t = np.asarray(time, dtype=np.float64)
        attack = self.attack_ms / 1000.0
        decay = self.decay_ms / 1000.0

        if decay > 0:
            level = np.clip(1.0 - (t - attack) / decay, 0.0, 1.0)
        else:
            level = np.where(t <= attack, 1.0, 0.0)
        if attack > 0:
            level = np.where(t < attack, t / attack, level)
        return level if level.ndim else float(level)

    def after_sustain(self, time: TimeLike) -> TimeLike:
        level = np.zeros(np.shape(time))
        return level if level.ndim else float(level)
