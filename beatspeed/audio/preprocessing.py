"""Audio preprocessing utilities."""

from __future__ import annotations

import numpy as np

from beatspeed.analysis.models import PcmBuffer
from beatspeed.audio.loader import DecodedAudio
from beatspeed.errors import DecodeError


def to_mono(block: np.ndarray, channels: int) -> np.ndarray:
    """Collapse a ``(frames, channels)`` block to one float64 sample per frame.

    Multi-channel frames are averaged with float64 accumulation so that
    wide integer input cannot overflow.
    """
    block = np.asarray(block)
    if block.ndim == 1:
        block = block[:, np.newaxis]
    if block.shape[1] != channels:
        raise DecodeError(
            f"Decoded block has {block.shape[1]} channels, stream declared {channels}"
        )

    if channels == 1:
        return block[:, 0].astype(np.float64)
    return block.mean(axis=1, dtype=np.float64)


def load_pcm(decoded: DecodedAudio) -> PcmBuffer:
    """Drain the decoder into a read-only mono buffer."""
    parts = [to_mono(block, decoded.channels) for block in decoded.blocks]
    samples = np.concatenate(parts) if parts else np.zeros(0, dtype=np.float64)
    samples.flags.writeable = False
    return PcmBuffer(samples=samples, sample_rate=decoded.sample_rate)
