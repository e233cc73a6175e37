"""
Voice energy analysis entry points.

`analyze` scores a mono waveform with the five local estimators and
aggregates them into the overall energy score. `analyze_async` does the same
without blocking the event loop and, when the configuration asks for it,
measures the speech rate with an external transcription service instead of
local peak detection.
"""

import asyncio
import functools
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import numpy as np
from pydantic import ValidationError

from utils.logging import log_execution_time

from . import constants
from .acceleration import analyze_acceleration
from .exceptions import (
    ConfigurationError,
    InvalidWaveformError,
    TranscriptionError,
    TranscriptionTimeoutError,
)
from .levels import analyze_volume
from .models import AnalysisResult, EnergyConfig, MetricConfig, MetricId, SpeechRateMethod
from .onset import analyze_response_time
from .pauses import analyze_pauses
from .scoring import aggregate, classify
from .tempo import analyze_speech_rate, speech_rate_from_transcription
from .transcription import Transcriber

logger = logging.getLogger(__name__)

ConfigInput = Union[EnergyConfig, Iterable[Union[MetricConfig, Mapping[str, Any]]], None]


# --------------------------
# Tempo strategies
# --------------------------
@dataclass(frozen=True)
class LocalPeaks:
    """Speech rate from energy peaks of the waveform itself."""
    fallback_reason: Optional[str] = None


@dataclass(frozen=True)
class ExternalTranscription:
    """Speech rate from an external transcription of the encoded recording."""
    encoded_audio: str
    transcriber: Transcriber
    mimetype: Optional[str] = None


TempoStrategy = Union[LocalPeaks, ExternalTranscription]


def _new_analysis_id() -> str:
    return uuid.uuid4().hex[:8]


def _validate_waveform(waveform: Any, sample_rate: Any, analysis_id: str) -> np.ndarray:
    """Return the waveform as a float32 vector or raise InvalidWaveformError."""
    if isinstance(sample_rate, (bool, np.bool_)):
        raise InvalidWaveformError(f"Invalid sample rate: {sample_rate!r}", analysis_id)
    try:
        sr = int(sample_rate)
    except (TypeError, ValueError, OverflowError):
        raise InvalidWaveformError(f"Invalid sample rate: {sample_rate!r}", analysis_id)
    if sr <= 0 or sr != sample_rate:
        raise InvalidWaveformError(f"Sample rate must be a positive integer, got {sample_rate!r}", analysis_id)

    try:
        y = np.asarray(waveform, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise InvalidWaveformError(f"Waveform is not numeric: {e}", analysis_id) from e
    if y.ndim != 1:
        raise InvalidWaveformError(f"Waveform must be mono (1-D), got shape {y.shape}", analysis_id)
    if y.size == 0:
        raise InvalidWaveformError("Waveform is empty", analysis_id)
    if not np.all(np.isfinite(y)):
        raise InvalidWaveformError("Waveform contains NaN or infinite samples", analysis_id)
    return y


def _coerce_config(config: ConfigInput, analysis_id: str) -> EnergyConfig:
    if config is None:
        return EnergyConfig.default()
    if isinstance(config, EnergyConfig):
        return config
    if isinstance(config, (str, bytes, Mapping)):
        raise ConfigurationError("Configuration must be a list of metric configurations", analysis_id)
    try:
        return EnergyConfig.from_metrics(config)
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid metric configuration: {e}", analysis_id) from e


def _run_local_metrics(
    y: np.ndarray,
    sr: int,
    config: EnergyConfig,
    include_tempo: bool,
    max_workers: int,
) -> Dict[MetricId, Any]:
    """Run the local estimators in a thread pool and wait for all of them."""
    jobs = {
        MetricId.VOLUME: functools.partial(analyze_volume, y, config),
        MetricId.ACCELERATION: functools.partial(analyze_acceleration, y, sr, config),
        MetricId.RESPONSE_TIME: functools.partial(analyze_response_time, y, sr, config),
        MetricId.PAUSE_MANAGEMENT: functools.partial(analyze_pauses, y, sr, config),
    }
    if include_tempo:
        jobs[MetricId.SPEECH_RATE] = functools.partial(analyze_speech_rate, y, sr, config)

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as ex:
        futures = {metric_id: ex.submit(job) for metric_id, job in jobs.items()}
        return {metric_id: fut.result() for metric_id, fut in futures.items()}


def _build_result(
    metrics: Dict[MetricId, Any],
    config: EnergyConfig,
    y: np.ndarray,
    sr: int,
    analysis_id: str,
) -> AnalysisResult:
    scores = {metric_id: result.score for metric_id, result in metrics.items()}
    overall = aggregate(scores, config)
    feedback = classify(overall)
    logger.info(
        f"[{analysis_id}] overall={overall} feedback={feedback.value} "
        + " ".join(f"{m.value}={s}" for m, s in scores.items())
    )
    return AnalysisResult(
        volume=metrics[MetricId.VOLUME],
        speech_rate=metrics[MetricId.SPEECH_RATE],
        acceleration=metrics[MetricId.ACCELERATION],
        response_time=metrics[MetricId.RESPONSE_TIME],
        pause_management=metrics[MetricId.PAUSE_MANAGEMENT],
        overall_score=overall,
        emotional_feedback=feedback,
        duration_sec=round(y.size / sr, 3),
        sample_rate=sr,
    )


@log_execution_time(logger, level=logging.DEBUG)
def analyze(
    waveform: Any,
    sample_rate: int,
    config: ConfigInput = None,
    *,
    max_workers: int = constants.DEFAULT_MAX_WORKERS,
) -> AnalysisResult:
    """
    Score a mono waveform on volume, speech rate, acceleration, response time
    and pause management, then aggregate the overall energy score.

    The speech rate is always measured locally here, whatever method the
    configuration names.

    Args:
        waveform: 1-D sequence of samples, nominally in [-1, 1]
        sample_rate: Samples per second
        config: EnergyConfig, list of metric configuration dicts or None for defaults
        max_workers: Thread pool size for the sub-analyses

    Returns:
        AnalysisResult

    Raises:
        InvalidWaveformError: empty, non-mono or non-finite waveform, bad sample rate
        ConfigurationError: malformed configuration
    """
    analysis_id = _new_analysis_id()
    y = _validate_waveform(waveform, sample_rate, analysis_id)
    sr = int(sample_rate)
    energy_config = _coerce_config(config, analysis_id)
    logger.info(f"[{analysis_id}] Analyzing {y.size / sr:.2f}s of audio at {sr}Hz")

    metrics = _run_local_metrics(y, sr, energy_config, include_tempo=True, max_workers=max_workers)
    return _build_result(metrics, energy_config, y, sr, analysis_id)


def _select_strategy(
    config: EnergyConfig,
    encoded_audio: Optional[str],
    transcriber: Optional[Transcriber],
    mimetype: Optional[str],
    analysis_id: str,
) -> TempoStrategy:
    if config.speech_rate_method != SpeechRateMethod.EXTERNAL_STT:
        return LocalPeaks()
    if transcriber is None:
        logger.warning(f"[{analysis_id}] External transcription requested without a transcriber; using energy peaks")
        return LocalPeaks(fallback_reason="Transcription service not configured")
    if not encoded_audio:
        logger.warning(f"[{analysis_id}] External transcription requested without audio payload; using energy peaks")
        return LocalPeaks(fallback_reason="No encoded audio supplied for transcription")
    return ExternalTranscription(encoded_audio=encoded_audio, transcriber=transcriber, mimetype=mimetype)


async def analyze_async(
    waveform: Any,
    sample_rate: int,
    config: ConfigInput = None,
    encoded_audio: Optional[str] = None,
    *,
    transcriber: Optional[Transcriber] = None,
    timeout: float = constants.STT_TIMEOUT_SEC,
    fallback_to_local: bool = True,
    mimetype: Optional[str] = None,
    max_workers: int = constants.DEFAULT_MAX_WORKERS,
) -> AnalysisResult:
    """
    Asynchronous analysis. With the external-stt method, an encoded payload
    and a transcriber, the transcription runs concurrently with the local
    estimators.

    When the transcription fails or exceeds `timeout`, the speech rate falls
    back to local peak detection (recording why in `fallback_reason`) unless
    `fallback_to_local` is False, in which case the TranscriptionError is
    raised.
    """
    analysis_id = _new_analysis_id()
    y = _validate_waveform(waveform, sample_rate, analysis_id)
    sr = int(sample_rate)
    energy_config = _coerce_config(config, analysis_id)
    strategy = _select_strategy(energy_config, encoded_audio, transcriber, mimetype, analysis_id)
    logger.info(
        f"[{analysis_id}] Analyzing {y.size / sr:.2f}s of audio at {sr}Hz "
        f"(tempo strategy: {type(strategy).__name__})"
    )

    loop = asyncio.get_running_loop()
    external = isinstance(strategy, ExternalTranscription)
    local_future = loop.run_in_executor(
        None,
        functools.partial(
            _run_local_metrics, y, sr, energy_config,
            include_tempo=not external, max_workers=max_workers,
        ),
    )

    if isinstance(strategy, LocalPeaks):
        metrics = await local_future
        if strategy.fallback_reason:
            metrics[MetricId.SPEECH_RATE] = metrics[MetricId.SPEECH_RATE].model_copy(
                update={"fallback_reason": strategy.fallback_reason}
            )
        return _build_result(metrics, energy_config, y, sr, analysis_id)

    fallback_reason: Optional[str] = None
    speech_rate = None
    try:
        transcription = await asyncio.wait_for(
            strategy.transcriber.transcribe(strategy.encoded_audio, strategy.mimetype),
            timeout=timeout,
        )
        speech_rate = speech_rate_from_transcription(transcription, energy_config)
    except asyncio.TimeoutError:
        if not fallback_to_local:
            local_future.cancel()
            raise TranscriptionTimeoutError(f"Transcription timed out after {timeout}s", analysis_id)
        fallback_reason = f"Transcription timed out after {timeout}s"
    except TranscriptionError as e:
        if not fallback_to_local:
            local_future.cancel()
            raise
        fallback_reason = e.message

    metrics = await local_future
    if speech_rate is None:
        logger.warning(f"[{analysis_id}] {fallback_reason}; falling back to energy peaks")
        speech_rate = await loop.run_in_executor(
            None,
            functools.partial(analyze_speech_rate, y, sr, energy_config, fallback_reason),
        )
    metrics[MetricId.SPEECH_RATE] = speech_rate
    return _build_result(metrics, energy_config, y, sr, analysis_id)
