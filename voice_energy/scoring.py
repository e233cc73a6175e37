"""
Scoring curves for the voice energy metrics.

Converts raw measurements into 0-100 integer scores. All metrics share the
min / ideal / max threshold triple but read it differently:
- volume: below min -> 0, at or above ideal -> 100 (linear in between)
- speechRate: at or above ideal -> 100 with no penalty for going faster
- responseTime: inverted, at or below ideal -> 100, at or above min -> 0
- pauseManagement: min is the pause-count ceiling, max the duration ceiling
- acceleration: gated on half-vs-half changes, targets come from the
  volume and speechRate ideals

The curve for each metric is selected through SCORERS, keyed by MetricId.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Sequence

from . import constants
from .exceptions import ConfigurationError
from .models import EmotionalFeedback, EnergyConfig, MetricId, Thresholds


def _clamp(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    """Clamp value between lo and hi; NaN/inf collapse to lo."""
    x = float(x)
    if not math.isfinite(x):
        return lo
    return max(lo, min(hi, x))


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def clamp_score(x: float) -> int:
    """Final exit point of every score: clamp to [0, 100] and round."""
    return round_half_up(_clamp(x))


# --------------------------
# Normalizers (0-100)
# --------------------------
def score_volume(average_db: float, thresholds: Thresholds) -> int:
    """
    min -> 0 ; ideal -> 100 ; linear in between.
    """
    lo, ideal = thresholds.min, thresholds.ideal
    if average_db >= ideal:
        return 100
    if average_db < lo or ideal <= lo:
        return 0
    return clamp_score((average_db - lo) / (ideal - lo) * 100)


def score_speech_rate(wpm: float, thresholds: Thresholds) -> int:
    """
    >= ideal -> 100 (faster is never penalized).
    Below min: 0..50 proportional to wpm / min.
    Between min and ideal: 50..100.
    """
    lo, ideal = thresholds.min, thresholds.ideal
    if wpm >= ideal:
        return 100
    if wpm < lo:
        if lo <= 0:
            return 0
        return clamp_score(wpm / lo * 50)
    # lo <= wpm < ideal, so ideal > lo here
    return clamp_score(50 + (wpm - lo) / (ideal - lo) * 50)


def score_response_time(response_time_ms: float, thresholds: Thresholds) -> int:
    """
    <= ideal -> 100 ; >= min (poor-latency ceiling) -> 0 ; linear in between.
    """
    ceiling, ideal = thresholds.min, thresholds.ideal
    if response_time_ms <= ideal:
        return 100
    if response_time_ms >= ceiling:
        return 0
    return clamp_score(100 - (response_time_ms - ideal) / (ceiling - ideal) * 100)


def score_pauses(durations: Sequence[float], thresholds: Thresholds) -> int:
    """
    No pauses -> 100. Any pause longer than the duration ceiling, or more
    pauses than the count ceiling -> 0. Otherwise 100 minus penalties for
    the pause count, the longest pause and each pause over half the ceiling.
    """
    if not durations:
        return 100

    max_count = thresholds.min
    max_duration = thresholds.max
    count = len(durations)
    longest = max(durations)

    if max_duration <= 0 or longest > max_duration:
        return 0
    if max_count <= 0 or count > max_count:
        return 0

    long_pauses = sum(1 for d in durations if d > max_duration / 2)
    score = (
        100.0
        - constants.PAUSE_COUNT_PENALTY * count / max_count
        - constants.PAUSE_LENGTH_PENALTY * longest / max_duration
        - constants.LONG_PAUSE_PENALTY * long_pauses
    )
    return clamp_score(score)


@dataclass(frozen=True)
class SegmentComparison:
    """Level and tempo of the two halves of a recording."""
    first_db: float
    second_db: float
    first_wpm: float
    second_wpm: float

    @property
    def level_improved(self) -> bool:
        return self.second_db > self.first_db

    @property
    def tempo_improved(self) -> bool:
        return self.second_wpm > self.first_wpm

    @property
    def is_accelerating(self) -> bool:
        return self.level_improved and self.tempo_improved


def score_acceleration(comparison: SegmentComparison, level_target_db: float, tempo_target_wpm: float) -> int:
    """
    Accelerating (louder AND faster) -> 50 + up to 25 for reaching the level
    target + up to 25 for reaching the tempo target.
    Only one of the two improved -> 30. Flat or declining -> 10.
    """
    if not comparison.is_accelerating:
        if comparison.level_improved or comparison.tempo_improved:
            return clamp_score(constants.PARTIAL_IMPROVEMENT_SCORE)
        return clamp_score(constants.FLAT_SCORE)

    floor = constants.LEVEL_BONUS_FLOOR_DB
    if comparison.second_db >= level_target_db:
        level_bonus = constants.LEVEL_BONUS_MAX
    elif level_target_db > floor:
        progress = (comparison.second_db - floor) / (level_target_db - floor)
        level_bonus = max(0.0, progress) * constants.LEVEL_BONUS_MAX
    else:
        level_bonus = 0.0

    if tempo_target_wpm <= 0:
        tempo_bonus = constants.TEMPO_BONUS_MAX
    else:
        tempo_bonus = min(1.0, comparison.second_wpm / tempo_target_wpm) * constants.TEMPO_BONUS_MAX

    return clamp_score(constants.ACCELERATING_BASE_SCORE + level_bonus + tempo_bonus)


# --------------------------
# Strategy table
# --------------------------
def _volume(measurement: float, config: EnergyConfig) -> int:
    return score_volume(measurement, config.thresholds(MetricId.VOLUME))


def _speech_rate(measurement: float, config: EnergyConfig) -> int:
    return score_speech_rate(measurement, config.thresholds(MetricId.SPEECH_RATE))


def _acceleration(measurement: SegmentComparison, config: EnergyConfig) -> int:
    return score_acceleration(
        measurement,
        level_target_db=config.thresholds(MetricId.VOLUME).ideal,
        tempo_target_wpm=config.thresholds(MetricId.SPEECH_RATE).ideal,
    )


def _response_time(measurement: float, config: EnergyConfig) -> int:
    return score_response_time(measurement, config.thresholds(MetricId.RESPONSE_TIME))


def _pauses(measurement: Sequence[float], config: EnergyConfig) -> int:
    return score_pauses(measurement, config.thresholds(MetricId.PAUSE_MANAGEMENT))


SCORERS: Dict[MetricId, Callable[[Any, EnergyConfig], int]] = {
    MetricId.VOLUME: _volume,
    MetricId.SPEECH_RATE: _speech_rate,
    MetricId.ACCELERATION: _acceleration,
    MetricId.RESPONSE_TIME: _response_time,
    MetricId.PAUSE_MANAGEMENT: _pauses,
}


def score_metric(metric_id: MetricId, measurement: Any, config: EnergyConfig) -> int:
    """Score a raw measurement with the curve registered for `metric_id`."""
    return SCORERS[metric_id](measurement, config)


# --------------------------
# Score aggregation
# --------------------------
def aggregate(scores: Mapping[MetricId, int], config: EnergyConfig) -> int:
    """
    Weighted mean of the five sub-scores. Weights are normalized by their
    sum, so they act as relative weights even when they do not add to 100.
    """
    total = config.total_weight
    if total <= 0:
        raise ConfigurationError("Metric weights must not all be zero")
    weighted = sum(scores[m.id] * m.weight for m in config.metrics)
    return clamp_score(weighted / total)


def classify(overall_score: int) -> EmotionalFeedback:
    if overall_score >= constants.EXCELLENT_MIN_SCORE:
        return EmotionalFeedback.EXCELLENT
    if overall_score >= constants.GOOD_MIN_SCORE:
        return EmotionalFeedback.GOOD
    return EmotionalFeedback.POOR
