"""
Pydantic models for metric configuration snapshots and analysis results.

The five metrics share one threshold shape (min / ideal / max) and interpret it
differently; the interpretation lives in voice_energy.scoring, keyed by MetricId.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MetricId(str, Enum):
    """Identifier of a scored metric (values match the configuration store)."""
    VOLUME = "volume"
    SPEECH_RATE = "speechRate"
    ACCELERATION = "acceleration"
    RESPONSE_TIME = "responseTime"
    PAUSE_MANAGEMENT = "pauseManagement"


class SpeechRateMethod(str, Enum):
    """Measurement strategy for the speech rate metric."""
    ENERGY_PEAKS = "energy-peaks"
    EXTERNAL_STT = "external-stt"


# Values written by older versions of the configuration store
_METHOD_ALIASES = {"deepgram-stt": SpeechRateMethod.EXTERNAL_STT.value}


class MetricTag(str, Enum):
    ENERGY = "ENERGY"
    FLUENCY = "FLUENCY"
    DYNAMICS = "DYNAMICS"
    READINESS = "READINESS"
    FLUIDITY = "FLUIDITY"


class EmotionalFeedback(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    POOR = "poor"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class Thresholds(BaseModel):
    """Metric-specific threshold triple."""
    min: float
    ideal: float
    max: float

    model_config = ConfigDict(frozen=True)


class MetricConfig(BaseModel):
    """Weight and thresholds of a single metric."""
    id: MetricId
    weight: float = Field(..., ge=0.0, le=100.0, description="Relative weight (percent)")
    thresholds: Thresholds
    method: Optional[SpeechRateMethod] = Field(None, description="speechRate only")

    # The configuration store also keeps display fields (name, icon, labels...)
    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _METHOD_ALIASES.get(v, v)
        return v


DEFAULT_METRICS: Tuple[MetricConfig, ...] = (
    MetricConfig(
        id=MetricId.VOLUME,
        weight=35,
        thresholds=Thresholds(min=-40, ideal=-10, max=0),
    ),
    MetricConfig(
        id=MetricId.SPEECH_RATE,
        weight=35,
        thresholds=Thresholds(min=80, ideal=160, max=220),
        method=SpeechRateMethod.ENERGY_PEAKS,
    ),
    MetricConfig(
        id=MetricId.ACCELERATION,
        weight=15,
        thresholds=Thresholds(min=0, ideal=50, max=100),
    ),
    MetricConfig(
        id=MetricId.RESPONSE_TIME,
        weight=10,
        thresholds=Thresholds(min=2000, ideal=200, max=0),
    ),
    MetricConfig(
        id=MetricId.PAUSE_MANAGEMENT,
        weight=5,
        # min = max pause count, max = max pause duration (seconds)
        thresholds=Thresholds(min=3, ideal=0, max=2.71),
    ),
)


class EnergyConfig(BaseModel):
    """Immutable snapshot of the five metric configurations for one analysis."""
    metrics: Tuple[MetricConfig, ...]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_metrics(self) -> "EnergyConfig":
        ids = [m.id for m in self.metrics]
        if len(ids) != len(set(ids)):
            raise ValueError("Each metric may only be configured once")
        missing = [m.value for m in MetricId if m not in ids]
        if missing:
            raise ValueError(f"Missing metric configuration for: {', '.join(missing)}")
        if self.total_weight <= 0:
            raise ValueError("Metric weights must not all be zero")
        return self

    @classmethod
    def default(cls) -> "EnergyConfig":
        return cls(metrics=DEFAULT_METRICS)

    @classmethod
    def from_metrics(
        cls, metrics: Iterable[Union[MetricConfig, Mapping[str, Any]]]
    ) -> "EnergyConfig":
        """
        Build a snapshot from configuration store records.

        Metrics absent from `metrics` keep their default configuration.
        """
        by_id: Dict[MetricId, MetricConfig] = {m.id: m for m in DEFAULT_METRICS}
        for item in metrics:
            metric = item if isinstance(item, MetricConfig) else MetricConfig.model_validate(item)
            by_id[metric.id] = metric
        return cls(metrics=tuple(by_id[metric_id] for metric_id in MetricId))

    def metric(self, metric_id: MetricId) -> MetricConfig:
        for m in self.metrics:
            if m.id == metric_id:
                return m
        raise KeyError(metric_id)

    def thresholds(self, metric_id: MetricId) -> Thresholds:
        return self.metric(metric_id).thresholds

    def weight(self, metric_id: MetricId) -> float:
        return self.metric(metric_id).weight

    @property
    def total_weight(self) -> float:
        return float(sum(m.weight for m in self.metrics))

    @property
    def speech_rate_method(self) -> SpeechRateMethod:
        return self.metric(MetricId.SPEECH_RATE).method or SpeechRateMethod.ENERGY_PEAKS


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class VolumeResult(BaseModel):
    average_db: float
    score: int = Field(..., ge=0, le=100)
    tag: MetricTag = MetricTag.ENERGY

    model_config = ConfigDict(frozen=True)


class SpeechRateResult(BaseModel):
    words_per_minute: int = Field(..., ge=0)
    syllables_per_second: Optional[float] = Field(None, ge=0.0)
    peak_count: Optional[int] = Field(None, ge=0)
    method: SpeechRateMethod = SpeechRateMethod.ENERGY_PEAKS
    transcript: Optional[str] = None
    fallback_reason: Optional[str] = Field(
        None, description="Why the external transcription was replaced by local detection"
    )
    score: int = Field(..., ge=0, le=100)
    tag: MetricTag = MetricTag.FLUENCY

    model_config = ConfigDict(frozen=True)


class AccelerationResult(BaseModel):
    first_half_db: float = 0.0
    second_half_db: float = 0.0
    first_half_wpm: int = Field(0, ge=0)
    second_half_wpm: int = Field(0, ge=0)
    volume_delta_db: float = 0.0
    wpm_delta: int = 0
    is_accelerating: bool = False
    score: int = Field(..., ge=0, le=100)
    tag: MetricTag = MetricTag.DYNAMICS

    model_config = ConfigDict(frozen=True)


class ResponseTimeResult(BaseModel):
    response_time_ms: int = Field(..., ge=0)
    speech_detected: bool
    score: int = Field(..., ge=0, le=100)
    tag: MetricTag = MetricTag.READINESS

    model_config = ConfigDict(frozen=True)


class PauseManagementResult(BaseModel):
    pause_count: int = Field(..., ge=0)
    avg_pause_duration: float = Field(..., ge=0.0, description="Seconds")
    max_pause_duration: float = Field(..., ge=0.0, description="Seconds")
    score: int = Field(..., ge=0, le=100)
    tag: MetricTag = MetricTag.FLUIDITY

    model_config = ConfigDict(frozen=True)


class AnalysisResult(BaseModel):
    """Complete outcome of one analysis call."""
    volume: VolumeResult
    speech_rate: SpeechRateResult
    acceleration: AccelerationResult
    response_time: ResponseTimeResult
    pause_management: PauseManagementResult
    overall_score: int = Field(..., ge=0, le=100)
    emotional_feedback: EmotionalFeedback
    duration_sec: float = Field(..., ge=0.0)
    sample_rate: int = Field(..., gt=0)

    model_config = ConfigDict(frozen=True)

    def scores(self) -> Dict[MetricId, int]:
        return {
            MetricId.VOLUME: self.volume.score,
            MetricId.SPEECH_RATE: self.speech_rate.score,
            MetricId.ACCELERATION: self.acceleration.score,
            MetricId.RESPONSE_TIME: self.response_time.score,
            MetricId.PAUSE_MANAGEMENT: self.pause_management.score,
        }
