import math

import numpy as np
import pytest

from conftest import ConstantGenerator, make_key
from seqsynth.audio import SquareWaveGenerator
from seqsynth.composition import FrequencyLookupTable, Instrument, InstrumentTable, Key
from seqsynth.errors import (
    InvalidTimeOrFrequencyError,
    NoDefaultKeyError,
    UnknownFrequencyIdError,
    UnknownInstrumentIdError,
    UnknownKeyIdError,
    UnsupportedError,
)
from seqsynth.modulation import ADSREnvelope, Envelope
from seqsynth.pcm import PCM, PCMParameters


def test_loopable_key_cycles() -> None:
    instrument = Instrument(loopable=True, keys={0: make_key([0, 1, 2, 3, 4])})

    sound = instrument.gen_sound(0, 1.5)

    assert sound.shape == (15, 1)
    assert list(sound[:, 0]) == [k % 5 for k in range(15)]


def test_non_loopable_key_holds_last_frame() -> None:
    instrument = Instrument(loopable=False, keys={0: make_key([0, 1, 2, 3, 4])})

    sound = instrument.gen_sound(0, 1.0)

    assert list(sound[:, 0]) == [0, 1, 2, 3, 4, 4, 4, 4, 4, 4]


def test_shorter_request_truncates_key() -> None:
    for loopable in (True, False):
        instrument = Instrument(loopable=loopable, keys={0: make_key([0, 1, 2, 3, 4, 5, 6, 7])})
        assert list(instrument.gen_sound(0, 0.5)[:, 0]) == [0, 1, 2, 3, 4]


def test_gen_sound_errors() -> None:
    instrument = Instrument(keys={0: make_key([1.0])})
    with pytest.raises(UnknownKeyIdError):
        instrument.gen_sound(1, 1.0)
    for bad in (0.0, -1.0, float("nan")):
        with pytest.raises(InvalidTimeOrFrequencyError):
            instrument.gen_sound(0, bad)


def test_empty_key_cannot_fill_a_note() -> None:
    instrument = Instrument(keys={0: make_key([])})
    with pytest.raises(InvalidTimeOrFrequencyError):
        instrument.gen_sound(0, 1.0)


def test_gen_keys_with_generator_overwrites_cache() -> None:
    params = PCMParameters(sample_rate=100)
    lut = FrequencyLookupTable.from_frequencies([5.0, 10.0])
    stale = make_key([9.0], sample_rate=100)
    instrument = Instrument(key_generator=ConstantGenerator(0.5), keys={0: stale})

    instrument.gen_keys([(0, 0.2), (1, 0.1)], lut, params)

    assert instrument.keys[0] is not stale
    assert len(instrument.keys[0].audio) == 20
    assert instrument.keys[1].frequency == 10.0
    assert np.all(instrument.keys[1].audio.frames == 0.5)


def test_gen_keys_resolves_frequencies() -> None:
    instrument = Instrument(key_generator=SquareWaveGenerator())
    with pytest.raises(UnknownFrequencyIdError):
        instrument.gen_keys([(3, 1.0)], FrequencyLookupTable(), PCMParameters())


def test_gen_keys_without_generator_needs_a_key() -> None:
    instrument = Instrument()
    with pytest.raises(NoDefaultKeyError):
        instrument.get_any_key()
    with pytest.raises(NoDefaultKeyError):
        instrument.gen_keys([(0, 1.0)], FrequencyLookupTable({0: 440.0}), PCMParameters())


def test_gen_keys_without_generator_keeps_given_keys() -> None:
    sample = make_key([0.1, 0.2], frequency=440.0)
    instrument = Instrument(loopable=False, keys={0: sample})

    instrument.gen_keys([(0, 1.0)], FrequencyLookupTable({0: 440.0}), PCMParameters())

    assert instrument.keys[0] is sample
    assert instrument.get_any_key() is sample


def test_pitch_change_fallback_is_unsupported() -> None:
    instrument = Instrument(keys={0: make_key([0.1, 0.2], frequency=440.0)})
    lut = FrequencyLookupTable({0: 440.0, 1: 880.0})

    with pytest.raises(UnsupportedError):
        instrument.gen_keys([(1, 1.0)], lut, PCMParameters())
    assert 1 not in instrument.keys


def test_play_without_envelope_matches_gen_sound() -> None:
    instrument = Instrument(keys={0: make_key([0.0, 1.0, 0.0, -1.0])})
    np.testing.assert_array_equal(instrument.play(0, 1.0), instrument.gen_sound(0, 1.0))


def test_play_applies_envelope_and_release_tail() -> None:
    envelope = ADSREnvelope(attack=0.2, decay=0.0, sustain_level=1.0, release=0.4)
    instrument = Instrument(envelope=envelope, keys={0: make_key([1.0])})

    sound = instrument.play(0, 1.0)[:, 0]

    assert len(sound) == 14
    np.testing.assert_allclose(sound[:3], [0.0, 0.5, 1.0])
    np.testing.assert_allclose(sound[3:10], 1.0)
    np.testing.assert_allclose(sound[10:], [1.0, 0.75, 0.5, 0.25])


def test_instrument_table_lookup() -> None:
    table = InstrumentTable()
    lead = table.add(2, Instrument())
    assert table.get(2) is lead
    assert 2 in table and len(table) == 1
    with pytest.raises(UnknownInstrumentIdError) as excinfo:
        table.get(0)
    assert excinfo.value.instrument_id == 0


def test_gen_keys_with_generator_drops_unused_keys() -> None:
    params = PCMParameters(sample_rate=100)
    lut = FrequencyLookupTable.from_frequencies([5.0, 10.0])
    instrument = Instrument(key_generator=ConstantGenerator())

    instrument.gen_keys([(0, 0.1), (1, 0.1)], lut, params)
    instrument.gen_keys([(1, 0.1)], lut, params)

    assert list(instrument.keys) == [1]


def test_integer_key_is_scaled_to_unit_range() -> None:
    params = PCMParameters(sample_rate=10)
    frames = np.array([0, 16384, -32767], dtype=np.int16)
    instrument = Instrument(keys={0: Key(audio=PCM(parameters=params, frames=frames), frequency=1.0)})

    sound = instrument.gen_sound(0, 0.3)[:, 0]

    assert sound.dtype == np.float64
    np.testing.assert_allclose(sound, [0.0, 16384 / 32767, -1.0])


class _ScalarEnvelope(Envelope):
    """Written for one time value at a time."""

    def before_during_sustain(self, time):
        if time < 0.5:
            return math.exp(-time)
        return 0.5

    def after_sustain(self, time):
        return 0.0


def test_play_evaluates_scalar_envelope_per_frame() -> None:
    instrument = Instrument(envelope=_ScalarEnvelope(), keys={0: make_key([1.0])})

    sound = instrument.play(0, 1.0)[:, 0]

    assert len(sound) == 10
    np.testing.assert_allclose(sound[:5], np.exp(-np.arange(5) / 10))
    np.testing.assert_allclose(sound[5:], 0.5)
