"""
Music Sequencer Demo

Builds a few sequences with the sequence helpers, renders them with the
reference key generators and writes the results to WAV files.
"""

import logging
from pathlib import Path

# Add src to path for development
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from seqsynth.audio import SineWaveGenerator, SquareWaveGenerator, write_pcm
from seqsynth.composition import (
    HardwareSequenceHelper,
    Instrument,
    InstrumentTable,
    MusicSequencer,
    SoftwareSequenceHelper,
)
from seqsynth.modulation import ADSREnvelope, PercussiveEnvelope
from seqsynth.pcm import PCMParameters


def midi_to_hz(midi_note: int) -> float:
    return 440.0 * 2.0 ** ((midi_note - 69) / 12.0)


def demo_melody(output_dir: Path, params: PCMParameters):
    """Render an arpeggio on a square lead."""
    print("Rendering square arpeggio...")

    helper = SoftwareSequenceHelper()
    for midi_note, duration in [(60, 0.4), (64, 0.4), (67, 0.4), (72, 0.8)]:
        helper.new_note(midi_to_hz(midi_note), duration, 0.8, 0.8, instrument_id=0)
        helper.time_forward(duration)

    lead = Instrument(
        key_generator=SquareWaveGenerator(),
        loopable=True,
        envelope=ADSREnvelope(attack=0.01, decay=0.1, sustain_level=0.6, release=0.15),
    )
    sequencer = MusicSequencer(
        pcm_parameters=params,
        sequence=helper.get_sequence(),
        instruments=InstrumentTable({0: lead}),
        frequency_lut=helper.get_frequency_lut(),
    )

    pcm = sequencer.render()
    output_path = write_pcm(pcm, output_dir / "square_arpeggio.wav")
    print(f"  ✓ Arpeggio: {output_path} ({pcm.duration:.2f}s)")


def demo_chord(output_dir: Path, params: PCMParameters):
    """Play a chord from note-on / note-off events on two instruments."""
    print("\nRendering layered chord...")

    helper = HardwareSequenceHelper()
    chord = [60, 64, 67]
    for midi_note in chord:
        helper.start_note(midi_to_hz(midi_note), on_velocity=0.7, instrument_id=0)
    helper.start_note(midi_to_hz(36), on_velocity=1.0, instrument_id=1)
    helper.time_forward(2.0)
    for midi_note in chord:
        helper.stop_note(midi_to_hz(midi_note), off_velocity=0.5, instrument_id=0)
    helper.stop_note(midi_to_hz(36), off_velocity=0.5, instrument_id=1)

    instruments = InstrumentTable({
        0: Instrument(key_generator=SineWaveGenerator(), envelope=ADSREnvelope(0.3, 0.5, 0.7, 0.8)),
        1: Instrument(key_generator=SquareWaveGenerator(), envelope=PercussiveEnvelope(5.0, 400.0)),
    })
    sequencer = MusicSequencer(
        pcm_parameters=params,
        sequence=helper.get_sequence(),
        instruments=instruments,
        frequency_lut=helper.get_frequency_lut(),
    )

    pcm = sequencer.render()
    output_path = write_pcm(pcm, output_dir / "layered_chord.wav")
    print(f"  ✓ Chord: {output_path} ({len(sequencer.sequence)} notes, "
          f"{sequencer.sequence.calc_max_notes_at_once()} at once)")


def main():
    """Run all demos."""
    logging.basicConfig(level=logging.INFO)
    print("=" * 50)
    print("Music Sequencer Demo")
    print("=" * 50)

    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    params = PCMParameters(sample_rate=44100, nb_channels=2)

    demo_melody(output_dir, params)
    demo_chord(output_dir, params)

    print("\n" + "=" * 50)
    print(f"All demos complete! Output in: {output_dir}")
    print("=" * 50)


if __name__ == "__main__":
    main()
