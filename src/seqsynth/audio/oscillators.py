"""
Reference key generators built on basic waveforms.
"""

import numpy as np

from ..composition.frequency import check_valid_time_frequency
from ..composition.instruments import Key, KeyGenerator
from ..errors import UnsupportedError
from ..pcm import PCM, PCMParameters


def _validate_params(frequency: float, parameters: PCMParameters) -> None:
    """Validate common parameters for waveform generators."""
    check_valid_time_frequency(frequency)
    if not parameters.sample_format.is_float:
        raise UnsupportedError(
            f"generating {parameters.sample_format.value} samples, only float formats are supported"
        )


def _to_key(mono: np.ndarray, frequency: float, parameters: PCMParameters) -> Key:
    """Duplicate a mono waveform across channels and wrap it in a Key."""
    frames = np.repeat(mono[:, np.newaxis], parameters.nb_channels, axis=1)
    frames = frames.astype(parameters.sample_format.dtype)
    return Key(audio=PCM(parameters=parameters, frames=frames), frequency=frequency)


class SquareWaveGenerator(KeyGenerator):
    """
    Square wave: +1.0 for the first half of each period, -1.0 for the second.

    Produces round(sample_rate * duration) frames.

    Example:
        >>> params = PCMParameters(sample_rate=8000)
        >>> key = SquareWaveGenerator().key_gen(440.0, params, 0.01)
        >>> len(key.audio)
        80
    """

    def key_gen(self, frequency: float, parameters: PCMParameters, duration: float) -> Key:
        _validate_params(frequency, parameters)
        if not np.isfinite(duration) or duration < 0:
            raise ValueError(f"Duration must be non-negative, got {duration}")

        num_samples = int(round(parameters.sample_rate * duration))
        t = np.arange(num_samples) / parameters.sample_rate
        period = 1.0 / frequency

        square = np.where(np.mod(t, period) < period / 2.0, 1.0, -1.0)
        return _to_key(square, frequency, parameters)


class SineWaveGenerator(KeyGenerator):
    """
    Sine wave, exactly one period long whatever the requested duration.

    One period is round(sample_rate / frequency) frames. Longer notes rely on
    the instrument looping the key.

    Example:
        >>> params = PCMParameters(sample_rate=8000)
        >>> key = SineWaveGenerator().key_gen(100.0, params, 1.0)
        >>> len(key.audio)
        80
    """

    def key_gen(self, frequency: float, parameters: PCMParameters, duration: float) -> Key:
        _validate_params(frequency, parameters)

        num_samples = max(1, int(round(parameters.sample_rate / frequency)))
        phase = np.arange(num_samples) / num_samples

        sine = np.sin(2 * np.pi * phase)
        return _to_key(sine, frequency, parameters)
