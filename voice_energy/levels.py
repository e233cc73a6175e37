"""
Level estimation for the voice energy engine.

RMS energy of a sample window converted to decibels, either for a single
window or for a framed series over a whole buffer. Every other estimator
builds on these helpers.
"""

import logging

import librosa
import numpy as np

from . import constants
from .exceptions import InvalidWaveformError
from .models import EnergyConfig, MetricId, VolumeResult
from .scoring import score_metric

logger = logging.getLogger(__name__)


def seconds_to_samples(seconds: float, sr: int) -> int:
    """Window length in samples, never shorter than one sample."""
    return max(1, int(round(seconds * sr)))


def rms_db(window: np.ndarray) -> float:
    """
    Average energy of a sample window in dB.

    Args:
        window: Non-empty sample window

    Returns:
        20*log10(max(rms, 1e-5)); pure silence is -100 dB
    """
    window = np.asarray(window)
    if window.size == 0:
        raise InvalidWaveformError("Cannot compute the level of an empty window")
    rms = float(np.sqrt(np.mean(np.square(window), dtype=np.float64)))
    return float(20.0 * np.log10(max(rms, constants.RMS_FLOOR)))


def frame_levels_db(y: np.ndarray, frame_length: int, hop_length: int) -> np.ndarray:
    """
    Level in dB of every full window of `frame_length` samples, one window
    starting every `hop_length` samples.

    Args:
        y: Audio signal as numpy array
        frame_length: Window length in samples
        hop_length: Distance between window starts in samples

    Returns:
        1-D array of window levels; empty if the buffer is shorter than one window
    """
    if y.size < frame_length:
        return np.empty(0, dtype=np.float32)
    rms = librosa.feature.rms(y=y, frame_length=frame_length, hop_length=hop_length, center=False)[0]
    return librosa.amplitude_to_db(rms, ref=1.0, amin=constants.RMS_FLOOR, top_db=None)


def analyze_volume(y: np.ndarray, config: EnergyConfig) -> VolumeResult:
    """Overall loudness of the recording and its volume score."""
    average_db = rms_db(y)
    score = score_metric(MetricId.VOLUME, average_db, config)
    logger.debug(f"volume: average_db={average_db:.2f} score={score}")
    return VolumeResult(average_db=round(average_db, 2), score=score)
