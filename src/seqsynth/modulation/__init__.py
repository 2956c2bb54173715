"""Modulation module: loudness envelopes for instruments."""

from .envelopes import Envelope, ADSREnvelope, PercussiveEnvelope

__all__ = [
    "Envelope",
    "ADSREnvelope",
    "PercussiveEnvelope",
]
