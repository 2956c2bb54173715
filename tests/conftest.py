import numpy as np
import pytest

from seqsynth.composition import Key, KeyGenerator
from seqsynth.pcm import PCM, PCMParameters


class ConstantGenerator(KeyGenerator):
    """Key generator emitting a constant level, handy to inspect gains."""

    def __init__(self, level: float = 1.0):
        self.level = level

    def key_gen(self, frequency, parameters, duration):
        num_frames = max(1, int(round(parameters.sample_rate * duration)))
        frames = np.full((num_frames, parameters.nb_channels), self.level)
        return Key(audio=PCM(parameters=parameters, frames=frames), frequency=frequency)


def make_key(samples, sample_rate: int = 10, frequency: float = 1.0) -> Key:
    params = PCMParameters(sample_rate=sample_rate)
    return Key(audio=PCM(parameters=params, frames=np.asarray(samples, dtype=np.float64)), frequency=frequency)


@pytest.fixture
def params_8k() -> PCMParameters:
    return PCMParameters(sample_rate=8000, nb_channels=1)
