"""Transcription-related data models."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class AlternativeCandidate:
    """One candidate transcription for a single result index."""
    text: str
    confidence: float


@dataclass(frozen=True)
class FinalizedSegment:
    """Immutable chunk of transcribed text for one completed utterance."""
    text: str
    confidence: float


@dataclass
class RecognitionResult:
    """A single entry of a result batch emitted by a recognition engine."""
    text: str
    confidence: float = 0.0
    is_final: bool = False
    alternatives: List[AlternativeCandidate] = field(default_factory=list)


@dataclass(frozen=True)
class TranscriptSnapshot:
    """The three projections of the accumulated transcript."""
    final: str
    interim: str
    combined: str


@dataclass
class TranscriptUpdate:
    """Payload delivered to transcript-update callbacks."""
    final: str
    interim: str
    combined: str
    alternatives: List[AlternativeCandidate] = field(default_factory=list)
    # Segments appended while processing this batch
    new_segments: List[FinalizedSegment] = field(default_factory=list)
