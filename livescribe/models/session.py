"""Session-related data models."""

from enum import Enum


class SessionState(Enum):
    """Lifecycle state of a live transcription session."""
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPED = "stopped"
