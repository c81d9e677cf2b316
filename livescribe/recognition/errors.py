"""Error kinds reported by recognition engines and the session exception types."""

from enum import Enum
from typing import Dict


class LiveScribeError(Exception):
    """Base class for LiveScribe errors."""


class UnsupportedEnvironmentError(LiveScribeError):
    """Raised when the host offers no speech recognition capability."""


class EngineAlreadyActiveError(LiveScribeError):
    """Raised by an engine asked to start while it is already listening."""


NO_SPEECH = "no-speech"
NETWORK = "network"
AUDIO_CAPTURE = "audio-capture"
NOT_ALLOWED = "not-allowed"
# Failures the engine could not attribute to a known cause
OTHER = "other"


class ErrorSeverity(Enum):
    """Whether an engine error is worth restarting the engine for."""
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


# Kinds that recur immediately on restart and need user action instead
FATAL_ERROR_KINDS = frozenset({AUDIO_CAPTURE, NOT_ALLOWED})

ERROR_MESSAGES: Dict[str, str] = {
    NO_SPEECH: "No speech detected, listening again.",
    NETWORK: "Network error while contacting the recognition service, retrying.",
    AUDIO_CAPTURE: "No microphone found. Please check your device.",
    NOT_ALLOWED: "Microphone access denied. Please allow microphone permissions.",
    OTHER: "Speech recognition failed unexpectedly, retrying.",
}


def classify_error(kind: str) -> ErrorSeverity:
    """Classify an engine error kind; unknown kinds are recoverable."""
    if kind in FATAL_ERROR_KINDS:
        return ErrorSeverity.FATAL
    return ErrorSeverity.RECOVERABLE


def describe_error(kind: str) -> str:
    """Return a user-facing message for an engine error kind."""
    return ERROR_MESSAGES.get(kind, f"Speech recognition error: {kind}")
