"""
Tempo estimation ("speech rate").

Local strategy: syllable-like energy peaks are counted on 20 ms windows with
a threshold that adapts to the overall loudness of the buffer, then converted
to words per minute. The external strategy turns a transcription result into
the same SpeechRateResult shape.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from . import constants
from .levels import frame_levels_db, rms_db, seconds_to_samples
from .models import EnergyConfig, MetricId, SpeechRateMethod, SpeechRateResult
from .scoring import round_half_up, score_metric
from .transcription import TranscriptionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalTempo:
    """Raw outcome of local peak detection."""
    peak_count: int
    syllables_per_second: float
    words_per_minute: float
    volume_db: float
    threshold_db: float


def adaptive_peak_threshold(volume_db: float) -> float:
    """
    Peak threshold (dB) for a buffer whose overall level is `volume_db`.

    Normal loudness uses the fixed threshold. Below the normal band the
    threshold relative to the buffer level rises linearly until the very
    quiet band, where peaks must stand QUIET_PEAK_OFFSET_DB above the level.
    Across that band the threshold rises relative to the buffer level while
    its absolute value still drops (-30 dB at -25, -34 dB at -40).
    """
    if volume_db >= constants.NORMAL_VOLUME_DB:
        return constants.PEAK_THRESHOLD_DB
    if volume_db <= constants.VERY_QUIET_VOLUME_DB:
        return volume_db + constants.QUIET_PEAK_OFFSET_DB

    normal_offset = constants.PEAK_THRESHOLD_DB - constants.NORMAL_VOLUME_DB
    t = (constants.NORMAL_VOLUME_DB - volume_db) / (
        constants.NORMAL_VOLUME_DB - constants.VERY_QUIET_VOLUME_DB
    )
    offset = normal_offset + t * (constants.QUIET_PEAK_OFFSET_DB - normal_offset)
    return volume_db + offset


def detect_energy_peaks(y: np.ndarray, sr: int, threshold_db: float) -> np.ndarray:
    """
    Indices of the 20 ms windows holding syllable-like energy peaks.

    A peak is an interior window that is a strict local maximum, lies above
    `threshold_db` and comes at least PEAK_MIN_DISTANCE_SEC after the
    previously accepted peak.
    """
    window = seconds_to_samples(constants.PEAK_WINDOW_SEC, sr)
    min_distance = max(1, int(constants.PEAK_MIN_DISTANCE_SEC * sr / window + 1e-9))
    levels = frame_levels_db(y, window, window)
    if levels.size < 3:
        return np.empty(0, dtype=int)

    mid = levels[1:-1]
    candidates = np.flatnonzero(
        (mid > threshold_db) & (mid > levels[:-2]) & (mid > levels[2:])
    ) + 1

    peaks = []
    last_peak = -min_distance
    for idx in candidates:
        if idx - last_peak >= min_distance:
            peaks.append(int(idx))
            last_peak = idx
    return np.asarray(peaks, dtype=int)


def measure_local_tempo(y: np.ndarray, sr: int) -> LocalTempo:
    """Count energy peaks and convert them to syllables/s and words/min."""
    volume_db = rms_db(y)
    threshold_db = adaptive_peak_threshold(volume_db)
    peaks = detect_energy_peaks(y, sr, threshold_db)

    duration_sec = y.size / sr
    syllables_per_second = len(peaks) / max(duration_sec, constants.MIN_TEMPO_DURATION_SEC)
    words_per_minute = syllables_per_second * 60.0 * constants.SYLLABLES_TO_WORDS
    return LocalTempo(
        peak_count=len(peaks),
        syllables_per_second=syllables_per_second,
        words_per_minute=words_per_minute,
        volume_db=volume_db,
        threshold_db=threshold_db,
    )


def analyze_speech_rate(
    y: np.ndarray,
    sr: int,
    config: EnergyConfig,
    fallback_reason: Optional[str] = None,
) -> SpeechRateResult:
    """Speech rate measured with local peak detection."""
    tempo = measure_local_tempo(y, sr)
    score = score_metric(MetricId.SPEECH_RATE, tempo.words_per_minute, config)
    logger.debug(
        f"speech_rate: peaks={tempo.peak_count} threshold_db={tempo.threshold_db:.1f} "
        f"wpm={tempo.words_per_minute:.1f} score={score}"
    )
    return SpeechRateResult(
        words_per_minute=round_half_up(tempo.words_per_minute),
        syllables_per_second=round(tempo.syllables_per_second, 1),
        peak_count=tempo.peak_count,
        method=SpeechRateMethod.ENERGY_PEAKS,
        fallback_reason=fallback_reason,
        score=score,
    )


def speech_rate_from_transcription(
    transcription: TranscriptionResult, config: EnergyConfig
) -> SpeechRateResult:
    """Speech rate measured by the external transcription service."""
    score = score_metric(MetricId.SPEECH_RATE, transcription.words_per_minute, config)
    return SpeechRateResult(
        words_per_minute=round_half_up(transcription.words_per_minute),
        method=SpeechRateMethod.EXTERNAL_STT,
        transcript=transcription.transcript,
        score=score,
    )
