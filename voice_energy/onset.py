"""
Onset detection ("response time").

Scans forward from the start of the recording for the first window whose
level crosses the silence threshold.
"""

import logging
from typing import Optional

import numpy as np

from . import constants
from .levels import frame_levels_db, seconds_to_samples
from .models import EnergyConfig, MetricId, ResponseTimeResult
from .scoring import round_half_up, score_metric

logger = logging.getLogger(__name__)


def detect_onset(y: np.ndarray, sr: int) -> Optional[float]:
    """
    Return the start time (seconds) of the first non-silent window, or None
    if the recording never rises above the silence threshold.
    """
    window = seconds_to_samples(constants.ONSET_WINDOW_SEC, sr)
    step = seconds_to_samples(constants.ONSET_STEP_SEC, sr)
    levels = frame_levels_db(y, window, step)
    voiced = np.flatnonzero(levels > constants.ONSET_SILENCE_DB)
    if voiced.size == 0:
        return None
    return float(voiced[0] * step / sr)


def analyze_response_time(y: np.ndarray, sr: int, config: EnergyConfig) -> ResponseTimeResult:
    """
    Time until speech starts, scored against the configured latency band.
    A recording without speech counts as the latest possible onset.
    """
    onset = detect_onset(y, sr)
    speech_detected = onset is not None
    first_speech_sec = onset if speech_detected else y.size / sr
    response_time_ms = first_speech_sec * 1000.0

    score = score_metric(MetricId.RESPONSE_TIME, response_time_ms, config)
    logger.debug(
        f"response_time: onset_ms={response_time_ms:.0f} speech_detected={speech_detected} score={score}"
    )
    return ResponseTimeResult(
        response_time_ms=round_half_up(response_time_ms),
        speech_detected=speech_detected,
        score=score,
    )
