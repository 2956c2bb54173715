"""
PCM data model: render parameters and sample buffers.

A PCM buffer is a 2-D numpy array of shape [n_frames, nb_channels] tagged
with the parameters it was produced for.
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class SampleFormat(Enum):
    """Sample representation of a PCM buffer."""

    FLOAT32 = "float32"
    FLOAT64 = "float64"
    INT16 = "int16"
    INT32 = "int32"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def is_float(self) -> bool:
        return self in (SampleFormat.FLOAT32, SampleFormat.FLOAT64)

    @property
    def subtype(self) -> str:
        """soundfile subtype used when writing this format."""
        return _SUBTYPES[self]


_SUBTYPES = {
    SampleFormat.FLOAT32: "FLOAT",
    SampleFormat.FLOAT64: "DOUBLE",
    SampleFormat.INT16: "PCM_16",
    SampleFormat.INT32: "PCM_32",
}


@dataclass
class PCMParameters:
    """
    Render parameters shared by keys and the final mix.

    Attributes:
        sample_rate: Sample rate in Hz (positive integer)
        nb_channels: Number of channels per frame (positive integer)
        sample_format: SampleFormat member, or its name (e.g. "int16")
    """
    sample_rate: int = 44100
    nb_channels: int = 1
    sample_format: Union[SampleFormat, str] = SampleFormat.FLOAT32

    def __post_init__(self):
        if isinstance(self.sample_rate, bool) or not isinstance(self.sample_rate, (int, np.integer)):
            raise ValueError(f"Sample rate must be an integer, got {self.sample_rate!r}")
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")
        if isinstance(self.nb_channels, bool) or not isinstance(self.nb_channels, (int, np.integer)):
            raise ValueError(f"Channel count must be an integer, got {self.nb_channels!r}")
        if self.nb_channels <= 0:
            raise ValueError(f"Channel count must be positive, got {self.nb_channels}")
        if isinstance(self.sample_format, str):
            try:
                self.sample_format = SampleFormat(self.sample_format.lower())
            except ValueError:
                raise ValueError(f"Unknown sample format '{self.sample_format}'") from None
        elif not isinstance(self.sample_format, SampleFormat):
            raise ValueError(f"Sample format must be a SampleFormat, got {self.sample_format!r}")
        self.sample_rate = int(self.sample_rate)
        self.nb_channels = int(self.nb_channels)

    def seconds_to_frames(self, seconds: float) -> int:
        """Convert seconds to a frame count, truncating."""
        return int(seconds * self.sample_rate)


@dataclass
class PCM:
    """
    A block of audio.

    Attributes:
        parameters: Parameters the frames were produced for
        frames: Array of shape [n_frames, nb_channels]
        loop_info: Optional (start_frame, end_frame) loop region, carried for
            a downstream player and never applied by the renderer
    """
    parameters: PCMParameters
    frames: np.ndarray
    loop_info: Optional[Tuple[int, int]] = field(default=None)

    def __post_init__(self):
        frames = np.asarray(self.frames)
        if frames.ndim == 1:
            frames = frames[:, np.newaxis]
        if frames.ndim != 2:
            raise ValueError(f"Frames must be 1D or 2D, got shape {frames.shape}")
        self.frames = frames

    def __len__(self) -> int:
        return self.frames.shape[0]

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return len(self) / self.parameters.sample_rate
