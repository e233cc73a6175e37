"""
Pause management: silence-run segmentation after speech onset.

Silence before the first voiced window belongs to the onset detector and is
never counted here. Silence still running when the recording ends is
trailing silence, not a pause.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from . import constants
from .levels import frame_levels_db, seconds_to_samples
from .models import EnergyConfig, MetricId, PauseManagementResult
from .scoring import score_metric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pause:
    """A silent run inside speech (seconds)."""
    start: float
    duration: float


def detect_pauses(y: np.ndarray, sr: int) -> List[Pause]:
    """
    Return silent runs of at least MIN_PAUSE_SEC that occur after speech onset.

    Args:
        y: Audio signal as numpy array
        sr: Sample rate

    Returns:
        Pauses in chronological order
    """
    window = seconds_to_samples(constants.PAUSE_WINDOW_SEC, sr)
    silent = frame_levels_db(y, window, window) < constants.PAUSE_SILENCE_DB

    pauses: List[Pause] = []
    speech_started = False
    pause_start: Optional[int] = None
    for i, is_silent in enumerate(silent):
        if not is_silent:
            speech_started = True
            if pause_start is not None:
                duration = (i - pause_start) * window / sr
                if duration >= constants.MIN_PAUSE_SEC:
                    pauses.append(Pause(start=pause_start * window / sr, duration=duration))
                pause_start = None
        elif speech_started and pause_start is None:
            pause_start = i
    return pauses


def analyze_pauses(y: np.ndarray, sr: int, config: EnergyConfig) -> PauseManagementResult:
    """Pause count and durations scored against the configured ceilings."""
    pauses = detect_pauses(y, sr)
    durations = [p.duration for p in pauses]
    score = score_metric(MetricId.PAUSE_MANAGEMENT, durations, config)

    avg_duration = sum(durations) / len(durations) if durations else 0.0
    max_duration = max(durations) if durations else 0.0
    logger.debug(
        f"pauses: count={len(pauses)} avg={avg_duration:.2f}s max={max_duration:.2f}s score={score}"
    )
    return PauseManagementResult(
        pause_count=len(pauses),
        avg_pause_duration=round(avg_duration, 2),
        max_pause_duration=round(max_duration, 2),
        score=score,
    )
