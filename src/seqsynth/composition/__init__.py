"""Composition module: sequences, instruments and the music sequencer."""

from .frequency import FrequencyLookupTable, is_valid_time_frequency, check_valid_time_frequency
from .sequence import Note, LoopInfo, Sequence
from .instruments import Key, KeyGenerator, KeyPitchChanger, Instrument, InstrumentTable
from .sequencer import MusicSequencer
from .helpers import HardwareSequenceHelper, SoftwareSequenceHelper

__all__ = [
    # Frequencies
    'FrequencyLookupTable',
    'is_valid_time_frequency',
    'check_valid_time_frequency',

    # Sequence
    'Note',
    'LoopInfo',
    'Sequence',

    # Instruments
    'Key',
    'KeyGenerator',
    'KeyPitchChanger',
    'Instrument',
    'InstrumentTable',

    # Rendering
    'MusicSequencer',

    # Sequence building helpers
    'HardwareSequenceHelper',
    'SoftwareSequenceHelper',
]
