"""API routers for voice energy scoring endpoints."""
import json
import os
import time
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError

from config import AppSettings, settings
from utils.logging import get_logger
from voice_energy import analyze_async
from voice_energy.audio_io import decode_audio, encode_audio_payload
from voice_energy.exceptions import ConfigurationError
from voice_energy.models import EnergyConfig, SpeechRateMethod
from voice_energy.transcription import DeepgramTranscriber

logger = get_logger(__name__)
router = APIRouter(tags=["Voice Energy"])


def get_settings() -> AppSettings:
    return settings


def parse_config(raw: Optional[str]) -> EnergyConfig:
    """Parse the optional `config` form field (JSON list of metric configs)."""
    if raw is None or not raw.strip():
        return EnergyConfig.default()
    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config is not valid JSON: {e.msg}") from e
    if isinstance(data, dict) and "metrics" in data:
        data = data["metrics"]
    if not isinstance(data, list):
        raise ConfigurationError("Config must be a JSON list of metric configurations")
    try:
        return EnergyConfig.from_metrics(data)
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid metric configuration: {e}") from e


def build_transcriber(config: EnergyConfig, app_settings: AppSettings) -> Optional[DeepgramTranscriber]:
    """Transcriber for the external-stt method, or None when it is not usable."""
    if config.speech_rate_method != SpeechRateMethod.EXTERNAL_STT:
        return None
    if not app_settings.DEEPGRAM_API_KEY:
        logger.warning("external-stt requested but DEEPGRAM_API_KEY is not set")
        return None
    return DeepgramTranscriber(
        api_key=app_settings.DEEPGRAM_API_KEY,
        base_url=app_settings.DEEPGRAM_URL,
        model=app_settings.DEEPGRAM_MODEL,
        timeout=app_settings.STT_TIMEOUT_SEC,
    )


@router.get("/health")
async def health():
    return {"status": "healthy"}


@router.post("/v1/voice-energy")
async def voice_energy(
    audio_file: UploadFile = File(...),
    config: Optional[str] = Form(None),
    app_settings: AppSettings = Depends(get_settings),
):
    t0 = time.perf_counter()
    energy_config = parse_config(config)

    data = await audio_file.read()
    if not data:
        raise HTTPException(400, "Empty audio file")
    max_bytes = int(app_settings.MAX_UPLOAD_MB * 1024 * 1024)
    if len(data) > max_bytes:
        raise HTTPException(400, f"Audio file exceeds {app_settings.MAX_UPLOAD_MB:g} MB")

    suffix = os.path.splitext(audio_file.filename or "in.wav")[1] or ".wav"
    y, sr = decode_audio(data, suffix=suffix)

    transcriber = build_transcriber(energy_config, app_settings)
    result = await analyze_async(
        y,
        sr,
        energy_config,
        encode_audio_payload(data) if transcriber is not None else None,
        transcriber=transcriber,
        timeout=app_settings.STT_TIMEOUT_SEC,
        fallback_to_local=app_settings.STT_FALLBACK_TO_LOCAL,
        mimetype=audio_file.content_type,
        max_workers=app_settings.ENERGY_MAX_WORKERS,
    )

    elapsed_ms = int((time.perf_counter() - t0) * 1000)
    logger.info(
        f"voice-energy: file={audio_file.filename} overall={result.overall_score} "
        f"feedback={result.emotional_feedback.value} analysis_ms={elapsed_ms}"
    )
    payload = result.model_dump(mode="json")
    payload["analysis_ms"] = elapsed_ms
    return payload
