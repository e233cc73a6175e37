import pytest

from voice_energy.pauses import analyze_pauses, detect_pauses

from _helpers import SR, concat, silence, tone


def test_leading_and_trailing_silence_are_not_pauses():
    y = concat(silence(1.0), tone(1.0), silence(1.0))
    assert detect_pauses(y, SR) == []


def test_short_gaps_are_ignored():
    y = concat(tone(1.0), silence(0.1), tone(1.0), silence(0.5), tone(1.0), silence(1.0))
    pauses = detect_pauses(y, SR)
    assert len(pauses) == 1
    assert pauses[0].start == pytest.approx(2.1)
    assert pauses[0].duration == pytest.approx(0.5)


def test_minimum_pause_is_inclusive():
    y = concat(tone(1.0), silence(0.15), tone(1.0))
    pauses = detect_pauses(y, SR)
    assert [p.duration for p in pauses] == [pytest.approx(0.15)]


def test_analyze_pauses_scores(default_config):
    y = concat(tone(1.0), silence(0.5), tone(1.0), silence(1.0), tone(1.0))
    result = analyze_pauses(y, SR, default_config)
    assert result.pause_count == 2
    assert result.avg_pause_duration == 0.75
    assert result.max_pause_duration == 1.0
    assert result.score == 65
    assert result.tag.value == "FLUIDITY"


def test_long_pause_scores_zero(default_config):
    y = concat(tone(1.0), silence(3.0), tone(1.0))
    result = analyze_pauses(y, SR, default_config)
    assert result.pause_count == 1
    assert result.max_pause_duration == 3.0
    assert result.score == 0


def test_silence_only_has_no_pauses(default_config):
    result = analyze_pauses(silence(3.0), SR, default_config)
    assert result.pause_count == 0
    assert result.avg_pause_duration == 0.0
    assert result.score == 100
