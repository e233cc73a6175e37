"""Custom exceptions for the voice energy scoring engine."""


class VoiceEnergyError(Exception):
    """Base exception for voice energy analysis failures."""

    def __init__(self, message: str, analysis_id: str = "N/A"):
        self.message = message
        self.analysis_id = analysis_id
        super().__init__(f"[AnalysisID: {analysis_id}] {message}")


class InvalidWaveformError(VoiceEnergyError):
    """Raised when the waveform or sample rate cannot be analysed."""
    pass


class ConfigurationError(VoiceEnergyError):
    """Raised when a metric configuration snapshot is invalid."""
    pass


class AudioDecodeError(VoiceEnergyError):
    """Raised when uploaded audio bytes cannot be decoded into a waveform."""
    pass


class TranscriptionError(VoiceEnergyError):
    """Raised when the external transcription service fails."""
    pass


class TranscriptionTimeoutError(TranscriptionError):
    """Raised when the external transcription service does not answer in time."""
    pass
