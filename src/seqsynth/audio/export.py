"""
Writing rendered PCM to audio files.
"""

from pathlib import Path
from typing import Union

import soundfile as sf

from ..pcm import PCM

_FORMATS = ("WAV", "FLAC", "AIFF")


def write_pcm(pcm: PCM, path: Union[str, Path], format: str = "WAV") -> Path:
    """
    Write a PCM buffer to an audio file.

    The file subtype follows the buffer's sample format (float32 -> FLOAT,
    int16 -> PCM_16, ...). FLAC has no float or 32-bit subtype; those
    buffers are written as PCM_24.

    Args:
        pcm: Buffer to write
        path: Output path
        format: Container format ('WAV', 'FLAC', 'AIFF')

    Returns:
        Path: The written path
    """
    format = format.upper()
    if format not in _FORMATS:
        raise ValueError(f"Format must be one of {', '.join(_FORMATS)}, got '{format}'")
    if len(pcm) == 0:
        raise ValueError("Cannot write an empty buffer")

    subtype = pcm.parameters.sample_format.subtype
    if format == "FLAC" and subtype not in ("PCM_16", "PCM_24"):
        subtype = "PCM_24"

    path = Path(path)
    sf.write(str(path), pcm.frames, pcm.parameters.sample_rate, subtype=subtype, format=format)
    return path
