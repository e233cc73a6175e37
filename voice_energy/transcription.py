"""
External speech-to-text collaborator for the transcription tempo strategy.

The recording is posted to the Deepgram pre-recorded API; words per minute
are derived from the returned word count and the audio duration reported by
the service. No retries happen here.
"""

import base64
import binascii
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from . import constants
from .exceptions import TranscriptionError, TranscriptionTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranscriptionResult:
    words_per_minute: float
    transcript: str
    word_count: int
    duration_sec: float


class Transcriber(Protocol):
    """Anything able to turn an encoded recording into a TranscriptionResult."""

    async def transcribe(self, encoded_audio: str, mimetype: Optional[str] = None) -> TranscriptionResult:
        ...


def compute_wpm(word_count: int, duration_sec: float) -> float:
    """
    Compute words-per-minute from a word count and a duration.
    Returns 0.0 if the duration is not positive.
    """
    if duration_sec <= 0:
        return 0.0
    return word_count / duration_sec * 60.0


def decode_audio_payload(encoded_audio: str) -> bytes:
    """Decode a base64 payload, accepting `data:<mime>;base64,` URLs too."""
    if encoded_audio.startswith("data:") and "," in encoded_audio:
        encoded_audio = encoded_audio.split(",", 1)[1]
    try:
        data = base64.b64decode(encoded_audio, validate=True)
    except (binascii.Error, ValueError) as e:
        raise TranscriptionError(f"Invalid base64 audio payload: {e}") from e
    if not data:
        raise TranscriptionError("Empty audio payload")
    return data


class DeepgramTranscriber:
    """Transcriber backed by the Deepgram HTTP API."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = constants.DEEPGRAM_URL,
        model: str = constants.DEEPGRAM_MODEL,
        language: Optional[str] = None,
        timeout: float = constants.STT_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise TranscriptionError("Deepgram API key not configured")
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.language = language
        self.timeout = timeout
        self.transport = transport

    async def transcribe(self, encoded_audio: str, mimetype: Optional[str] = None) -> TranscriptionResult:
        """Send the recording to Deepgram and derive words per minute."""
        audio = decode_audio_payload(encoded_audio)
        headers = {
            "Authorization": f"Token {self.api_key}",
            "Content-Type": mimetype or constants.DEFAULT_AUDIO_MIMETYPE,
        }
        params = {"model": self.model, "smart_format": "true"}
        if self.language:
            params["language"] = self.language

        logger.info(f"Sending {len(audio)} bytes to transcription service (model={self.model})")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.base_url, params=params, headers=headers, content=audio)
        except httpx.TimeoutException as e:
            raise TranscriptionTimeoutError(f"Transcription request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise TranscriptionError(f"Transcription request failed: {e}") from e

        if response.status_code == 401:
            raise TranscriptionError("Invalid Deepgram API key")
        elif response.status_code == 429:
            raise TranscriptionError("Rate limit exceeded - please try again later")
        elif not response.is_success:
            error_text = response.text if response.content else "Unknown error"
            raise TranscriptionError(f"Transcription failed: {response.status_code} - {error_text}")

        try:
            payload = response.json()
        except ValueError as e:
            raise TranscriptionError("Transcription service returned invalid JSON") from e

        result = self.parse_response(payload)
        logger.info(
            f"Transcription completed: words={result.word_count} duration={result.duration_sec:.2f}s "
            f"wpm={result.words_per_minute:.1f}"
        )
        return result

    @staticmethod
    def parse_response(payload: Dict[str, Any]) -> TranscriptionResult:
        """Parse a Deepgram pre-recorded response into our format."""
        try:
            alternative = payload["results"]["channels"][0]["alternatives"][0]
            duration_sec = float(payload["metadata"]["duration"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise TranscriptionError(f"Unexpected transcription payload: {e!r}") from e
        if not math.isfinite(duration_sec) or duration_sec <= 0:
            raise TranscriptionError("Transcription service reported a non-positive duration")

        transcript = (alternative.get("transcript") or "").strip()
        words = alternative.get("words")
        word_count = len(words) if isinstance(words, list) else len(transcript.split())
        return TranscriptionResult(
            words_per_minute=compute_wpm(word_count, duration_sec),
            transcript=transcript,
            word_count=word_count,
            duration_sec=duration_sec,
        )
