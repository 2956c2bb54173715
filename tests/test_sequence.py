import math

import pytest

from seqsynth.composition import LoopInfo, Note, Sequence
from seqsynth.errors import InvalidLoopError, InvalidNoteError


def _note(start: float, duration: float, frequency_id: int = 0, instrument_id: int = 0) -> Note:
    return Note(start_at=start, duration=duration, frequency_id=frequency_id, instrument_id=instrument_id)


def test_note_derives_end() -> None:
    note = _note(1.5, 0.5)
    assert note.end_at == 2.0


def test_note_accepts_consistent_end() -> None:
    note = Note(0.1, 0.2, frequency_id=0, instrument_id=0, end_at=0.30000000000000004)
    assert note.end_at == pytest.approx(0.3)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(start_at=math.nan, duration=1.0),
        dict(start_at=0.0, duration=-1.0),
        dict(start_at=-0.5, duration=1.0),
        dict(start_at=0.0, duration=math.inf),
        dict(start_at=0.0, duration=1.0, end_at=2.0),
        dict(start_at=0.0, duration=1.0, on_velocity=math.nan),
        dict(start_at=0.0, duration=1.0, off_velocity=-0.1),
    ],
)
def test_note_rejects_malformed_timing(kwargs) -> None:
    with pytest.raises(InvalidNoteError):
        Note(frequency_id=0, instrument_id=0, **kwargs)


def test_sort_by_time_is_stable() -> None:
    first = _note(1.0, 1.0, frequency_id=1)
    second = _note(1.0, 1.0, frequency_id=2)
    early = _note(0.0, 1.0, frequency_id=3)
    seq = Sequence(notes=[first, second, early])
    seq.sort_by_time()
    assert [n.frequency_id for n in seq.notes] == [3, 1, 2]


def test_empty_sequence() -> None:
    seq = Sequence()
    assert seq.calc_max_notes_at_once() == 0
    assert seq.calc_music_duration() == 0.0
    assert seq.list_frequencies_for_instruments() == {}


def test_non_overlapping_notes_count_one() -> None:
    seq = Sequence(notes=[_note(float(i), 0.5) for i in range(5)])
    assert seq.calc_max_notes_at_once() == 1


def test_touching_notes_do_not_overlap() -> None:
    seq = Sequence(notes=[_note(0.0, 1.0), _note(1.0, 1.0), _note(2.0, 1.0)])
    assert seq.calc_max_notes_at_once() == 1


@pytest.mark.parametrize("count", [1, 2, 7])
def test_identical_notes_all_count(count) -> None:
    seq = Sequence(notes=[_note(0.25, 1.0, instrument_id=i) for i in range(count)])
    assert seq.calc_max_notes_at_once() == count


def test_overlap_chain_drops_finished_notes() -> None:
    seq = Sequence(notes=[_note(1.0, 1.0), _note(0.5, 1.0), _note(0.0, 1.0)])
    assert seq.calc_max_notes_at_once() == 2
    assert [n.start_at for n in seq.notes] == [0.0, 0.5, 1.0]


def test_music_duration_is_last_end() -> None:
    seq = Sequence(notes=[_note(0.0, 3.0), _note(1.0, 0.5), _note(2.5, 0.25)])
    assert seq.calc_music_duration() == 3.0


def test_frequencies_for_instruments_keep_longest_duration() -> None:
    seq = Sequence()
    seq.add_note(_note(0.0, 0.5, frequency_id=3, instrument_id=0))
    seq.add_note(_note(1.0, 2.0, frequency_id=1, instrument_id=0))
    seq.add_note(_note(2.0, 1.5, frequency_id=3, instrument_id=0))
    seq.add_note(_note(0.0, 0.1, frequency_id=3, instrument_id=4))

    needed = seq.list_frequencies_for_instruments()

    assert needed == {0: [(3, 1.5), (1, 2.0)], 4: [(3, 0.1)]}


def test_loop_info_validation_and_frames() -> None:
    loop = LoopInfo(loop_start=0.5, loop_end=1.5)
    assert loop.to_frames(8000) == (4000, 12000)
    with pytest.raises(InvalidLoopError):
        LoopInfo(loop_start=1.0, loop_end=1.0)
    with pytest.raises(InvalidLoopError):
        LoopInfo(loop_start=-1.0, loop_end=1.0)


def test_sequence_carries_loops() -> None:
    seq = Sequence()
    seq.add_loop(LoopInfo(0.0, 2.0))
    copy = seq.copy()
    assert copy.loop_info == [LoopInfo(0.0, 2.0)]


def test_max_notes_at_once_with_release() -> None:
    seq = Sequence(notes=[_note(0.0, 0.2), _note(0.2, 0.2), _note(1.0, 0.1)])

    assert seq.calc_max_notes_at_once() == 1
    assert seq.calc_max_notes_at_once(release=lambda note: 0.5) == 2
    assert seq.calc_max_notes_at_once(release=lambda note: 0.0) == 1
