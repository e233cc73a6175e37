# voice_energy/constants.py
"""Centralized constants for the energy analysis modules."""

# --- Level estimation ---
# Amplitude floor; silence maps to 20*log10(1e-5) = -100 dB
RMS_FLOOR = 1e-5

# --- Onset (response time) ---
ONSET_WINDOW_SEC = 0.2
ONSET_STEP_SEC = 0.05
ONSET_SILENCE_DB = -45.0

# --- Tempo (speech rate) ---
PEAK_WINDOW_SEC = 0.02
PEAK_MIN_DISTANCE_SEC = 0.1
PEAK_THRESHOLD_DB = -30.0
NORMAL_VOLUME_DB = -25.0
VERY_QUIET_VOLUME_DB = -40.0
QUIET_PEAK_OFFSET_DB = 6.0
SYLLABLES_TO_WORDS = 0.6
MIN_TEMPO_DURATION_SEC = 0.1

# --- Acceleration ---
MIN_SEGMENT_SEC = 0.5
NEUTRAL_ACCELERATION_SCORE = 50
ACCELERATING_BASE_SCORE = 50
PARTIAL_IMPROVEMENT_SCORE = 30
FLAT_SCORE = 10
LEVEL_BONUS_MAX = 25.0
TEMPO_BONUS_MAX = 25.0
LEVEL_BONUS_FLOOR_DB = -40.0

# --- Pauses ---
PAUSE_WINDOW_SEC = 0.05
PAUSE_SILENCE_DB = -45.0
MIN_PAUSE_SEC = 0.15
PAUSE_COUNT_PENALTY = 30.0
PAUSE_LENGTH_PENALTY = 40.0
LONG_PAUSE_PENALTY = 10.0

# --- Aggregation ---
EXCELLENT_MIN_SCORE = 71
GOOD_MIN_SCORE = 41

# --- External transcription ---
DEEPGRAM_URL = "https://api.deepgram.com/v1/listen"
DEEPGRAM_MODEL = "nova-2"
STT_TIMEOUT_SEC = 15.0
DEFAULT_AUDIO_MIMETYPE = "audio/webm"

# --- Execution ---
DEFAULT_MAX_WORKERS = 4
