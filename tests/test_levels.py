import numpy as np
import pytest

from voice_energy.exceptions import InvalidWaveformError
from voice_energy.levels import analyze_volume, frame_levels_db, rms_db, seconds_to_samples

from _helpers import SR, silence, tone


def test_rms_db_of_silence_is_floor():
    assert rms_db(np.zeros(100)) == pytest.approx(-100.0)


def test_rms_db_of_full_scale_sine():
    # rms of a full-scale sine is 1/sqrt(2) -> about -3.01 dB
    assert rms_db(tone(0.5, amplitude=1.0)) == pytest.approx(-3.0103, abs=1e-3)


def test_rms_db_empty_window_raises():
    with pytest.raises(InvalidWaveformError):
        rms_db(np.array([]))


def test_seconds_to_samples_never_zero():
    assert seconds_to_samples(0.02, SR) == 320
    assert seconds_to_samples(0.0, SR) == 1


def test_frame_levels_only_full_windows():
    y = tone(1.01)  # 16160 samples -> 50 full windows of 320, remainder dropped
    levels = frame_levels_db(y, 320, 320)
    assert levels.shape == (50,)
    assert np.allclose(levels, levels[0])


def test_frame_levels_shorter_than_window_is_empty():
    assert frame_levels_db(silence(0.01), 3200, 800).size == 0


def test_analyze_volume_scores(default_config):
    loud = analyze_volume(tone(1.0, amplitude=1.0), default_config)
    assert loud.average_db == pytest.approx(-3.01, abs=0.01)
    assert loud.score == 100
    assert loud.tag.value == "ENERGY"

    quiet = analyze_volume(tone(1.0, amplitude=0.01), default_config)
    assert quiet.score == 0

    assert analyze_volume(silence(1.0), default_config).score == 0
