"""
Music sequencer: turns a Sequence and its instruments into one PCM buffer.
"""

from __future__ import annotations

import logging
import warnings
import numpy as np
from dataclasses import dataclass, field

from ..errors import ChannelMismatchError, SampleRateMismatchError
from ..pcm import PCM, PCMParameters
from .frequency import FrequencyLookupTable
from .instruments import InstrumentTable
from .sequence import Note, Sequence

logger = logging.getLogger(__name__)


@dataclass
class MusicSequencer:
    """
    Renders a sequence with a set of instruments.

    The sequencer owns its sequence, instruments and frequency table for the
    duration of a render. Every note is mixed additively, scaled by its on
    velocity and by 1 / (largest number of notes sounding at once), so the
    busiest moment of the sequence cannot clip. A note counts as sounding
    until the end of its envelope release tail.

    Example:
        >>> from seqsynth.audio import SquareWaveGenerator
        >>> from seqsynth.composition import Instrument, Note
        >>> seq = MusicSequencer(pcm_parameters=PCMParameters(sample_rate=8000))
        >>> seq.frequency_lut.insert(0, 440.0)
        >>> _ = seq.instruments.add(0, Instrument(key_generator=SquareWaveGenerator()))
        >>> seq.sequence.add_note(Note(0.0, 0.01, frequency_id=0, instrument_id=0))
        >>> len(seq.render())
        80
    """
    pcm_parameters: PCMParameters = field(default_factory=PCMParameters)
    sequence: Sequence = field(default_factory=Sequence)
    instruments: InstrumentTable = field(default_factory=InstrumentTable)
    frequency_lut: FrequencyLookupTable = field(default_factory=FrequencyLookupTable)

    def gen_instrument_keys(self) -> None:
        """Generate every key the sequence needs, instrument by instrument."""
        for instrument_id, frequencies in self.sequence.list_frequencies_for_instruments().items():
            instrument = self.instruments.get(instrument_id)
            logger.debug("Generating %d key(s) for instrument %s", len(frequencies), instrument_id)
            instrument.gen_keys(frequencies, self.frequency_lut, self.pcm_parameters)

    def render(self) -> PCM:
        """
        Render the whole sequence.

        Returns:
            PCM: Frames of shape [n_frames, nb_channels] in the configured
            sample format. n_frames covers the end of the last note, plus any
            envelope release tail.

        Raises:
            SequencerError: Any failure aborts the render
        """
        params = self.pcm_parameters
        self.gen_instrument_keys()

        amplitude = 1.0 / max(1, self.sequence.calc_max_notes_at_once(release=self._release_of))
        num_frames = params.seconds_to_frames(self.sequence.calc_music_duration())
        num_frames = max(num_frames, self._release_end())
        logger.debug("Rendering %d note(s) into %d frame(s), amplitude %.4f",
                     len(self.sequence), num_frames, amplitude)

        mix = np.zeros((num_frames, params.nb_channels), dtype=np.float64)

        for note in self.sequence.notes:
            instrument = self.instruments.get(note.instrument_id)
            key_rate = instrument.get_key(note.frequency_id).audio.parameters.sample_rate
            if key_rate != params.sample_rate:
                raise SampleRateMismatchError(params.sample_rate, key_rate)
            sound = instrument.play(note.frequency_id, note.duration)
            if sound.ndim != 2 or sound.shape[1] != params.nb_channels:
                raise ChannelMismatchError(params.nb_channels, sound.shape[1] if sound.ndim == 2 else 1)

            start_frame = int(round(note.start_at * params.sample_rate))
            if start_frame >= num_frames:
                if len(sound):
                    warnings.warn(f"Note at {note.start_at}s starts after the end of the render and is silent.")
                continue

            frames_to_copy = min(len(sound), num_frames - start_frame)
            gain = amplitude * note.on_velocity
            mix[start_frame:start_frame + frames_to_copy] += sound[:frames_to_copy] * gain

        return PCM(parameters=params, frames=_to_sample_format(mix, params))

    def _release_of(self, note: Note) -> float:
        envelope = self.instruments.get(note.instrument_id).envelope
        return max(0.0, envelope.release) if envelope is not None else 0.0

    def _release_end(self) -> int:
        """Frame at which the last envelope release tail ends."""
        end = 0
        for note in self.sequence.notes:
            instrument = self.instruments.get(note.instrument_id)
            if instrument.envelope is None or instrument.envelope.release <= 0:
                continue
            start_frame = int(round(note.start_at * self.pcm_parameters.sample_rate))
            held = self.pcm_parameters.seconds_to_frames(note.duration)
            tail = self.pcm_parameters.seconds_to_frames(instrument.envelope.release)
            end = max(end, start_frame + held + tail)
        return end


def _to_sample_format(mix: np.ndarray, params: PCMParameters) -> np.ndarray:
    """Convert a float mix to the sample format of the render parameters."""
    sample_format = params.sample_format
    if sample_format.is_float:
        return mix.astype(sample_format.dtype)
    full_scale = np.iinfo(sample_format.dtype).max
    return np.round(np.clip(mix, -1.0, 1.0) * full_scale).astype(sample_format.dtype)
