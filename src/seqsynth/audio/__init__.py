"""Audio module: reference key generators and PCM export."""

from .oscillators import (
    SquareWaveGenerator,
    SineWaveGenerator
)

from .export import write_pcm

__all__ = [
    # Key generators
    "SquareWaveGenerator",
    "SineWaveGenerator",

    # Export
    "write_pcm"
]
