# config.py
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    # --- Metadata ---
    APP_NAME: str = "Voice Energy API"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "API for scoring the vocal energy of short spoken recordings"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    JSON_LOGS: bool = False

    # --- CORS ---
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # --- Transcription (speechRate external-stt method) ---
    DEEPGRAM_API_KEY: Optional[str] = None
    DEEPGRAM_URL: str = "https://api.deepgram.com/v1/listen"
    DEEPGRAM_MODEL: str = "nova-2"
    STT_TIMEOUT_SEC: float = Field(15.0, gt=0)
    STT_FALLBACK_TO_LOCAL: bool = True

    # --- Engine ---
    ENERGY_MAX_WORKERS: int = Field(4, ge=1)
    MAX_UPLOAD_MB: float = Field(10.0, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = AppSettings()
