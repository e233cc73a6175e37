# voice_energy/audio_io.py
"""Decoding of uploaded recordings into mono waveforms."""

import base64
import logging
import os
import tempfile
from typing import Tuple

import librosa
import numpy as np

from .exceptions import AudioDecodeError

logger = logging.getLogger(__name__)


def decode_audio(data: bytes, suffix: str = ".wav") -> Tuple[np.ndarray, int]:
    """
    Decode an encoded recording into a mono float32 waveform at its native
    sample rate.

    The bytes are spooled to a temporary file so that librosa can fall back
    to audioread for containers soundfile does not understand.

    Args:
        data: Raw file bytes (wav, flac, ogg, webm, mp3...)
        suffix: File extension hint for the decoder

    Returns:
        A tuple of (audio_array, sample_rate)
    """
    if not data:
        raise AudioDecodeError("Empty audio file")

    fd, tmp_path = tempfile.mkstemp(suffix=suffix or ".wav")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        try:
            y, sr = librosa.load(tmp_path, sr=None, mono=True)
        except Exception as e:
            raise AudioDecodeError(f"Could not decode audio: {e}") from e
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

    logger.debug(f"Audio decoded: {len(y) / sr:.2f}s at {sr}Hz")
    return y.astype(np.float32, copy=False), int(sr)


def encode_audio_payload(data: bytes) -> str:
    """Base64 payload handed to the external transcription service."""
    return base64.b64encode(data).decode("ascii")
