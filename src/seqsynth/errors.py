"""
Error types raised by the sequencer.

Every error derives from SequencerError and from the builtin exception that
describes it, so callers can catch either the whole family or, say, a plain
LookupError.
"""

from typing import Optional


class SequencerError(Exception):
    """Base class for every error raised by seqsynth."""


class InvalidTimeOrFrequencyError(SequencerError, ValueError):
    """A time or frequency is not a positive, finite, normal number."""

    def __init__(self, value: float):
        self.value = value
        super().__init__(f"Impossible value for a time or a frequency: {value}")


class UnknownFrequencyIdError(SequencerError, LookupError):
    """No frequency is assigned to this id in the frequency lookup table."""

    def __init__(self, frequency_id: int):
        self.frequency_id = frequency_id
        super().__init__(f"Unassigned frequency id: {frequency_id}")


class UnknownInstrumentIdError(SequencerError, LookupError):
    """No instrument is registered under this id."""

    def __init__(self, instrument_id: int):
        self.instrument_id = instrument_id
        super().__init__(f"Unassigned instrument id: {instrument_id}")


class UnknownKeyIdError(SequencerError, LookupError):
    """The instrument holds no generated key for this frequency id."""

    def __init__(self, frequency_id: int):
        self.frequency_id = frequency_id
        super().__init__(f"No key generated for frequency id: {frequency_id}")


class NoDefaultKeyError(SequencerError, LookupError):
    """No key generator and no existing key to change the pitch of."""

    def __init__(self):
        super().__init__("No key generator and no default key to change the pitch of")


class UnsupportedError(SequencerError, NotImplementedError):
    """A sample format or generation strategy is not implemented."""

    def __init__(self, what: str):
        self.what = what
        super().__init__(f"Unsupported: {what}")


class ChannelMismatchError(SequencerError, ValueError):
    """A rendered sound does not have as many channels as the output."""

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Sound has {got} channel(s), output expects {expected}")


class SampleRateMismatchError(SequencerError, ValueError):
    """A key was made at a different sample rate than the output."""

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Key sampled at {got}Hz, output expects {expected}Hz")


class InvalidNoteError(SequencerError, ValueError):
    """A note has inconsistent or non-finite timing or velocity."""


class InvalidLoopError(SequencerError, ValueError):
    """A loop region does not end after it starts."""


class HelperModeError(SequencerError, TypeError):
    """A sequence helper method does not match how the helper was built."""

    def __init__(self, method: str, hint: Optional[str] = None):
        message = f"{method} cannot be used on this helper"
        if hint:
            message = f"{message}; use {hint} instead"
        super().__init__(message)
