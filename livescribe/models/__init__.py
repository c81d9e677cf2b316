"""Data models for the LiveScribe session core."""

from .transcription import (
    AlternativeCandidate,
    FinalizedSegment,
    RecognitionResult,
    TranscriptSnapshot,
    TranscriptUpdate,
)
from .session import SessionState

__all__ = [
    "AlternativeCandidate",
    "FinalizedSegment",
    "RecognitionResult",
    "TranscriptSnapshot",
    "TranscriptUpdate",
    "SessionState",
]
