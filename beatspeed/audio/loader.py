"""Audio file decoding.

The engine only needs raw PCM frames, a channel count and a sample rate.
libsndfile (through ``soundfile``) handles WAV/FLAC/OGG/MP3 and streams
the file block by block. Containers it cannot open fall back to
``librosa.load`` at the native sample rate.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import librosa
import numpy as np
import soundfile as sf

from beatspeed.config import settings
from beatspeed.errors import DecodeError

logger = logging.getLogger(__name__)


@dataclass
class DecodedAudio:
    """Decoder output: lazily produced ``(frames, channels)`` blocks."""
    blocks: Iterable[np.ndarray]
    channels: int
    sample_rate: int


def _iter_soundfile_blocks(path: str, block_size: int) -> Iterator[np.ndarray]:
    try:
        for block in sf.blocks(path, blocksize=block_size, dtype="float32", always_2d=True):
            yield block
    except sf.LibsndfileError as exc:
        raise DecodeError(f"Corrupt audio stream in '{path}': {exc}") from exc


def _decode_with_librosa(path: str) -> DecodedAudio:
    try:
        audio, sample_rate = librosa.load(path, sr=None, mono=False)
    except Exception as exc:
        raise DecodeError(f"Unsupported or corrupt audio file '{path}': {exc}") from exc

    # librosa returns (samples,) for mono and (channels, samples) otherwise
    frames = np.atleast_2d(audio).T
    return DecodedAudio(
        blocks=[frames],
        channels=frames.shape[1],
        sample_rate=int(sample_rate),
    )


def decode(
    file_path: Union[str, Path],
    block_size: int | None = None,
) -> DecodedAudio:
    """Open an audio file for decoding.

    Parameters
    ----------
    file_path:
        Path to the audio file.
    block_size:
        Frames per decoded block. Defaults to ``settings.decode_block_size``.

    Returns
    -------
    DecodedAudio
        Channel count and sample rate from the stream header, plus a lazy
        iterator of float32 blocks shaped ``(frames, channels)``.

    Raises
    ------
    DecodeError
        If neither libsndfile nor librosa can decode the file.
    """
    path = str(file_path)
    block_size = block_size or settings.decode_block_size

    try:
        info = sf.info(path)
    except sf.LibsndfileError as exc:
        logger.warning(f"libsndfile cannot open '{path}' ({exc}); falling back to librosa")
        return _decode_with_librosa(path)

    if info.channels <= 0 or info.samplerate <= 0:
        raise DecodeError(
            f"Invalid stream header in '{path}': "
            f"{info.channels} channels at {info.samplerate} Hz"
        )

    return DecodedAudio(
        blocks=_iter_soundfile_blocks(path, block_size),
        channels=info.channels,
        sample_rate=info.samplerate,
    )
