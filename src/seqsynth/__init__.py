"""
seqsynth - render a musical sequence to PCM.

Give it a sequence and instruments to play with and it outputs PCM. Times
are in seconds and frequencies in Hz; samples are processed as double
precision floats and converted to the requested sample format at the end.

Architecture:
- The MusicSequencer uses a Sequence and Instruments to play.
- A Sequence is made of Notes: when and how to make a sound.
- An Instrument holds Keys, one per frequency it plays.
"""

from .errors import SequencerError
from .pcm import PCM, PCMParameters, SampleFormat
from .composition import (
    FrequencyLookupTable,
    Note,
    LoopInfo,
    Sequence,
    Key,
    KeyGenerator,
    Instrument,
    InstrumentTable,
    MusicSequencer,
)

__version__ = "0.1.0"

__all__ = [
    "SequencerError",
    "PCM",
    "PCMParameters",
    "SampleFormat",
    "FrequencyLookupTable",
    "Note",
    "LoopInfo",
    "Sequence",
    "Key",
    "KeyGenerator",
    "Instrument",
    "InstrumentTable",
    "MusicSequencer",
]
