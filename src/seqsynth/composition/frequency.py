"""
Frequency lookup table and the validity check shared by times and frequencies.
"""

from __future__ import annotations

import math
import sys
from typing import Dict, Iterable, List, Optional

from ..errors import InvalidTimeOrFrequencyError, UnknownFrequencyIdError


def is_valid_time_frequency(value: float) -> bool:
    """
    Check that a value is usable as a time or a frequency.

    A valid value is finite, normal (neither zero nor subnormal) and strictly
    positive.

    Example:
        >>> is_valid_time_frequency(440.0)
        True
        >>> is_valid_time_frequency(0.0)
        False
        >>> is_valid_time_frequency(float("inf"))
        False
    """
    try:
        value = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value >= sys.float_info.min


def check_valid_time_frequency(value: float) -> None:
    """Raise InvalidTimeOrFrequencyError unless the value is valid."""
    if not is_valid_time_frequency(value):
        raise InvalidTimeOrFrequencyError(value)


class FrequencyLookupTable:
    """
    Maps small integer frequency ids to frequencies in Hz.

    Values are checked when inserted through insert() and again on every
    get(), so a table built from a raw mapping still fails on use if it holds
    a bad value.

    Example:
        >>> lut = FrequencyLookupTable.from_frequencies([440.0, 880.0])
        >>> lut.get(1)
        880.0
    """

    def __init__(self, lut: Optional[Dict[int, float]] = None):
        self.lut: Dict[int, float] = dict(lut or {})

    @classmethod
    def from_frequencies(cls, frequencies: Iterable[float]) -> "FrequencyLookupTable":
        """Build a table whose ids are the positions in the given list."""
        table = cls()
        for frequency_id, frequency in enumerate(frequencies):
            table.insert(frequency_id, frequency)
        return table

    def get(self, frequency_id: int) -> float:
        if frequency_id not in self.lut:
            raise UnknownFrequencyIdError(frequency_id)
        value = self.lut[frequency_id]
        check_valid_time_frequency(value)
        return float(value)

    def insert(self, frequency_id: int, frequency: float) -> None:
        check_valid_time_frequency(frequency)
        self.lut[int(frequency_id)] = float(frequency)

    def ids(self) -> List[int]:
        return list(self.lut)

    def copy(self) -> "FrequencyLookupTable":
        return FrequencyLookupTable(self.lut)

    def __contains__(self, frequency_id: object) -> bool:
        return frequency_id in self.lut

    def __len__(self) -> int:
        return len(self.lut)

    def __repr__(self) -> str:
        return f"FrequencyLookupTable({self.lut!r})"
