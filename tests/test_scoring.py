import math

import pytest

from voice_energy.models import EmotionalFeedback, EnergyConfig, MetricId, Thresholds
from voice_energy.scoring import (
    SCORERS,
    aggregate,
    classify,
    clamp_score,
    round_half_up,
    score_pauses,
    score_response_time,
    score_speech_rate,
    score_volume,
)

VOLUME = Thresholds(min=-40, ideal=-10, max=0)
SPEECH_RATE = Thresholds(min=80, ideal=160, max=220)
RESPONSE_TIME = Thresholds(min=2000, ideal=200, max=0)
PAUSES = Thresholds(min=3, ideal=0, max=2.71)


def test_round_half_up():
    assert round_half_up(6.5) == 7
    assert round_half_up(0.5) == 1
    assert round_half_up(91.66) == 92
    assert round_half_up(49.49) == 49


def test_clamp_score_handles_non_finite():
    assert clamp_score(float("nan")) == 0
    assert clamp_score(float("inf")) == 0
    assert clamp_score(-5) == 0
    assert clamp_score(140) == 100


def test_volume_curve():
    assert score_volume(-50, VOLUME) == 0
    assert score_volume(-40, VOLUME) == 0
    assert score_volume(-25, VOLUME) == 50
    assert score_volume(-10, VOLUME) == 100
    assert score_volume(-3, VOLUME) == 100


def test_volume_is_monotonic():
    scores = [score_volume(db, VOLUME) for db in range(-60, 1)]
    assert scores == sorted(scores)


def test_speech_rate_curve():
    assert score_speech_rate(0, SPEECH_RATE) == 0
    assert score_speech_rate(40, SPEECH_RATE) == 25
    assert score_speech_rate(80, SPEECH_RATE) == 50
    assert score_speech_rate(120, SPEECH_RATE) == 75
    assert score_speech_rate(160, SPEECH_RATE) == 100


def test_speech_rate_never_penalizes_fast_speech():
    for wpm in (160, 220, 300, 1000):
        assert score_speech_rate(wpm, SPEECH_RATE) == 100


def test_response_time_curve():
    assert score_response_time(0, RESPONSE_TIME) == 100
    assert score_response_time(200, RESPONSE_TIME) == 100
    assert score_response_time(350, RESPONSE_TIME) == 92
    assert score_response_time(1100, RESPONSE_TIME) == 50
    assert score_response_time(2000, RESPONSE_TIME) == 0
    assert score_response_time(5000, RESPONSE_TIME) == 0


def test_response_time_is_non_increasing():
    scores = [score_response_time(ms, RESPONSE_TIME) for ms in range(0, 3000, 50)]
    assert scores == sorted(scores, reverse=True)


def test_pause_curve():
    assert score_pauses([], PAUSES) == 100
    assert score_pauses([0.5, 1.0], PAUSES) == 65
    # 100 - 10 - 40 * 2 / 2.71 - 10 = 50.48
    assert score_pauses([2.0], PAUSES) == 50
    assert score_pauses([3.0], PAUSES) == 0
    assert score_pauses([0.2, 0.2, 0.2, 0.2], PAUSES) == 0


def test_every_metric_has_a_scorer():
    assert set(SCORERS) == set(MetricId)


def test_all_scores_stay_in_range():
    for value in (-1e9, -100, 0, 0.5, 100, 1e9, math.nan):
        for score in (
            score_volume(value, VOLUME),
            score_speech_rate(value, SPEECH_RATE),
            score_response_time(value, RESPONSE_TIME),
        ):
            assert 0 <= score <= 100


def test_aggregate_weighted_mean(default_config):
    scores = {
        MetricId.VOLUME: 0,
        MetricId.SPEECH_RATE: 0,
        MetricId.ACCELERATION: 10,
        MetricId.RESPONSE_TIME: 0,
        MetricId.PAUSE_MANAGEMENT: 100,
    }
    # (10 * 15 + 100 * 5) / 100 = 6.5
    assert aggregate(scores, default_config) == 7


def test_aggregate_normalizes_weights(default_config):
    scores = {
        MetricId.VOLUME: 80,
        MetricId.SPEECH_RATE: 60,
        MetricId.ACCELERATION: 30,
        MetricId.RESPONSE_TIME: 92,
        MetricId.PAUSE_MANAGEMENT: 65,
    }
    halved = EnergyConfig(
        metrics=tuple(m.model_copy(update={"weight": m.weight / 2}) for m in default_config.metrics)
    )
    assert aggregate(scores, halved) == aggregate(scores, default_config)


def test_aggregate_of_equal_scores():
    config = EnergyConfig.from_metrics(
        [{"id": m.value, "weight": 7, "thresholds": {"min": 0, "ideal": 1, "max": 2}} for m in MetricId]
    )
    assert aggregate({m: 42 for m in MetricId}, config) == 42


@pytest.mark.parametrize(
    "overall, expected",
    [
        (100, EmotionalFeedback.EXCELLENT),
        (71, EmotionalFeedback.EXCELLENT),
        (70, EmotionalFeedback.GOOD),
        (41, EmotionalFeedback.GOOD),
        (40, EmotionalFeedback.POOR),
        (0, EmotionalFeedback.POOR),
    ],
)
def test_classify(overall, expected):
    assert classify(overall) == expected
