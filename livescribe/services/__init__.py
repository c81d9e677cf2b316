"""Services layer for LiveScribe session logic."""

from .restart_scheduler import RestartPolicy, RestartScheduler
from .live_session import LiveTranscriptionSession

__all__ = [
    "RestartPolicy",
    "RestartScheduler",
    "LiveTranscriptionSession",
]
