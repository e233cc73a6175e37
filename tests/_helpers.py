"""Synthetic waveforms for the voice energy tests.

Every signal uses a carrier tiled from one 80-sample sine period (200 Hz at
16 kHz), so every 20 ms analysis window holds the same sample sequence and
constant-amplitude stretches produce exactly equal window levels.
"""

import io

import numpy as np
import soundfile as sf

SR = 16000
CARRIER_PERIOD = 80
BURST_LEN_WINDOWS = 5
PEAK_WINDOW = 320


def n_samples(duration: float, sr: int = SR) -> int:
    return int(round(duration * sr))


def carrier(n: int) -> np.ndarray:
    period = np.sin(2 * np.pi * np.arange(CARRIER_PERIOD) / CARRIER_PERIOD)
    return np.tile(period, n // CARRIER_PERIOD + 1)[:n]


def silence(duration: float, sr: int = SR) -> np.ndarray:
    return np.zeros(n_samples(duration, sr), dtype=np.float32)


def tone(duration: float, amplitude: float = 0.5, sr: int = SR) -> np.ndarray:
    return (amplitude * carrier(n_samples(duration, sr))).astype(np.float32)


def burst_train(
    duration: float,
    amplitude: float = 0.9,
    base: float = 0.0,
    period: float = 0.2,
    first_center: float = 0.11,
    sr: int = SR,
) -> np.ndarray:
    """
    Syllable-like Hann bursts, each centered on one 20 ms window.

    With the defaults a 3 s buffer holds 15 bursts (one every 200 ms), i.e.
    5 syllables per second or 180 words per minute. `base` keeps a constant
    floor between bursts (envelope = base + (1 - base) * hann).
    """
    n = n_samples(duration, sr)
    hann = np.hanning(BURST_LEN_WINDOWS * PEAK_WINDOW)
    env = np.full(n, base, dtype=np.float64)
    first_start = n_samples(first_center, sr) - len(hann) // 2
    for start in range(first_start, n - len(hann) + 1, n_samples(period, sr)):
        env[start:start + len(hann)] += (1.0 - base) * hann
    return (amplitude * env * carrier(n)).astype(np.float32)


def concat(*parts: np.ndarray) -> np.ndarray:
    return np.concatenate(parts).astype(np.float32)


def wav_bytes(y: np.ndarray, sr: int = SR) -> bytes:
    buf = io.BytesIO()
    sf.write(buf, y, sr, format="WAV", subtype="PCM_16")
    return buf.getvalue()
