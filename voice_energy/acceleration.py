"""
Acceleration analysis: does the speaker get louder and faster?

The recording is split at its midpoint and each half is measured with the
level estimator and the local tempo strategy.
"""

import logging
from typing import Tuple

import numpy as np

from . import constants
from .models import AccelerationResult, EnergyConfig, MetricId
from .scoring import SegmentComparison, round_half_up, score_metric
from .tempo import measure_local_tempo

logger = logging.getLogger(__name__)


def split_halves(y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Two equal-length read-only views; an odd trailing sample is dropped."""
    mid = y.size // 2
    return y[:mid], y[mid:2 * mid]


def analyze_acceleration(y: np.ndarray, sr: int, config: EnergyConfig) -> AccelerationResult:
    """
    Compare level and tempo of the second half against the first half.

    Halves shorter than MIN_SEGMENT_SEC give the neutral score with zero
    deltas.
    """
    first, second = split_halves(y)
    if first.size < constants.MIN_SEGMENT_SEC * sr:
        logger.debug(f"acceleration: halves too short ({first.size / sr:.2f}s), neutral score")
        return AccelerationResult(score=constants.NEUTRAL_ACCELERATION_SCORE)

    first_tempo = measure_local_tempo(first, sr)
    second_tempo = measure_local_tempo(second, sr)
    comparison = SegmentComparison(
        first_db=first_tempo.volume_db,
        second_db=second_tempo.volume_db,
        first_wpm=first_tempo.words_per_minute,
        second_wpm=second_tempo.words_per_minute,
    )
    score = score_metric(MetricId.ACCELERATION, comparison, config)

    first_wpm = round_half_up(first_tempo.words_per_minute)
    second_wpm = round_half_up(second_tempo.words_per_minute)
    logger.debug(
        f"acceleration: db {comparison.first_db:.1f}->{comparison.second_db:.1f} "
        f"wpm {first_wpm}->{second_wpm} accelerating={comparison.is_accelerating} score={score}"
    )
    return AccelerationResult(
        first_half_db=round(comparison.first_db, 2),
        second_half_db=round(comparison.second_db, 2),
        first_half_wpm=first_wpm,
        second_half_wpm=second_wpm,
        volume_delta_db=round(comparison.second_db - comparison.first_db, 2),
        wpm_delta=second_wpm - first_wpm,
        is_accelerating=comparison.is_accelerating,
        score=score,
    )
