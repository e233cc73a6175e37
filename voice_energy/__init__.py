"""Voice energy scoring engine.

This module exports the main analysis components:
- analyze / analyze_async: Score a mono waveform (primary entry points)
- EnergyConfig / MetricConfig: Metric weight and threshold snapshots
- AnalysisResult: Per-metric results plus the overall energy score
- DeepgramTranscriber: External transcription for the speech rate metric
"""

from .analyzer import analyze, analyze_async
from .audio_io import decode_audio, encode_audio_payload
from .exceptions import (
    AudioDecodeError,
    ConfigurationError,
    InvalidWaveformError,
    TranscriptionError,
    TranscriptionTimeoutError,
    VoiceEnergyError,
)
from .models import (
    AnalysisResult,
    EmotionalFeedback,
    EnergyConfig,
    MetricConfig,
    MetricId,
    SpeechRateMethod,
    Thresholds,
)
from .transcription import DeepgramTranscriber, Transcriber, TranscriptionResult

__all__ = [
    "analyze",
    "analyze_async",
    "decode_audio",
    "encode_audio_payload",
    # Configuration and results
    "AnalysisResult",
    "EmotionalFeedback",
    "EnergyConfig",
    "MetricConfig",
    "MetricId",
    "SpeechRateMethod",
    "Thresholds",
    # Transcription
    "DeepgramTranscriber",
    "Transcriber",
    "TranscriptionResult",
    # Errors
    "VoiceEnergyError",
    "InvalidWaveformError",
    "ConfigurationError",
    "AudioDecodeError",
    "TranscriptionError",
    "TranscriptionTimeoutError",
]
