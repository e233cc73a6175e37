import json

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.routers.energy import get_settings
from config import AppSettings

from _helpers import burst_train, concat, silence, tone, wav_bytes


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app)


def post_audio(client, data: bytes, config=None, filename="speech.wav"):
    form = {"config": json.dumps(config)} if config is not None else {}
    return client.post(
        "/v1/voice-energy",
        files={"audio_file": (filename, data, "audio/wav")},
        data=form,
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert len(response.headers["X-Request-ID"]) == 16
    assert float(response.headers["X-Process-Time-ms"]) >= 0


def test_voice_energy_scores_upload(client):
    response = post_audio(client, wav_bytes(concat(tone(1.0), silence(3.0), tone(1.0))))
    assert response.status_code == 200, response.text
    assert "X-Process-Time-ms" in response.headers

    data = response.json()
    for key in ["volume", "speech_rate", "acceleration", "response_time", "pause_management"]:
        assert 0 <= data[key]["score"] <= 100
    assert data["pause_management"]["pause_count"] == 1
    assert data["pause_management"]["score"] == 0
    assert data["response_time"]["tag"] == "READINESS"
    assert data["emotional_feedback"] in ("excellent", "good", "poor")
    assert data["sample_rate"] == 16000
    assert data["duration_sec"] == pytest.approx(5.0)
    assert data["analysis_ms"] >= 0


def test_voice_energy_with_custom_config(client):
    config = [
        {"id": "pauseManagement", "weight": 100, "thresholds": {"min": 3, "ideal": 0, "max": 2.71}},
        {"id": "volume", "weight": 0, "thresholds": {"min": -40, "ideal": -10, "max": 0}},
        {"id": "speechRate", "weight": 0, "thresholds": {"min": 80, "ideal": 160, "max": 220}},
        {"id": "acceleration", "weight": 0, "thresholds": {"min": 0, "ideal": 50, "max": 100}},
        {"id": "responseTime", "weight": 0, "thresholds": {"min": 2000, "ideal": 200, "max": 0}},
    ]
    response = post_audio(client, wav_bytes(tone(3.0)), config=config)
    assert response.status_code == 200, response.text
    assert response.json()["overall_score"] == 100


def test_external_method_without_api_key_falls_back(app, client):
    app.dependency_overrides[get_settings] = lambda: AppSettings(DEEPGRAM_API_KEY=None)
    config = [
        {"id": "speechRate", "weight": 35, "thresholds": {"min": 80, "ideal": 160, "max": 220},
         "method": "deepgram-stt"},
    ]
    response = post_audio(client, wav_bytes(burst_train(3.0)), config=config)
    assert response.status_code == 200, response.text
    speech_rate = response.json()["speech_rate"]
    assert speech_rate["method"] == "energy-peaks"
    assert speech_rate["fallback_reason"] == "Transcription service not configured"
    assert speech_rate["words_per_minute"] == 180


def test_malformed_config_is_422(client):
    response = post_audio(client, wav_bytes(tone(1.0)), config=[{"id": "volume", "weight": 500}])
    assert response.status_code == 422
    assert response.json()["error"] == "ConfigurationError"

    response = client.post(
        "/v1/voice-energy",
        files={"audio_file": ("speech.wav", wav_bytes(tone(1.0)), "audio/wav")},
        data={"config": "{not json"},
    )
    assert response.status_code == 422


def test_undecodable_audio_is_400(client):
    response = post_audio(client, b"this is not audio at all", filename="speech.wav")
    assert response.status_code == 400
    assert response.json()["error"] == "AudioDecodeError"


def test_empty_upload_is_400(client):
    response = post_audio(client, b"")
    assert response.status_code == 400


def test_oversized_upload_is_400(app, client):
    app.dependency_overrides[get_settings] = lambda: AppSettings(MAX_UPLOAD_MB=0.001)
    response = post_audio(client, wav_bytes(tone(1.0)))
    assert response.status_code == 400
    assert "exceeds" in response.json()["detail"]


def test_missing_file_is_422(client):
    response = client.post("/v1/voice-energy", data={})
    assert response.status_code == 422
