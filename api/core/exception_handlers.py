# api/core/exception_handlers.py
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from voice_energy.exceptions import (
    AudioDecodeError,
    ConfigurationError,
    InvalidWaveformError,
    TranscriptionError,
    VoiceEnergyError,
)

logger = logging.getLogger("api.errors")


def _status_for(exc: VoiceEnergyError) -> int:
    if isinstance(exc, (InvalidWaveformError, AudioDecodeError)):
        return 400
    if isinstance(exc, ConfigurationError):
        return 422
    if isinstance(exc, TranscriptionError):
        return 502
    return 500


async def voice_energy_exception_handler(request: Request, exc: VoiceEnergyError) -> JSONResponse:
    """Map engine errors to client or upstream HTTP errors."""
    status_code = _status_for(exc)
    logger.warning(
        f"Analysis failed for request: {request.method} {request.url.path}: {exc}",
        extra={
            "path": str(request.url.path),
            "analysis_id": exc.analysis_id,
            "error_type": type(exc).__name__,
        }
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "detail": exc.message,
            "analysis_id": exc.analysis_id,
        }
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to catch unhandled exceptions.

    This ensures that any unexpected error returns a standardized 500
    response and is logged with a traceback.
    """
    logger.error(
        f"Unhandled exception for request: {request.method} {request.url.path}",
        exc_info=True,
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "error": str(exc)
        }
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred on the server."
        }
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Adds custom exception handlers to the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(VoiceEnergyError, voice_energy_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
