"""Accumulation of finalized segments and the current interim hypothesis."""

import logging
from typing import List, Tuple

from ..models.transcription import FinalizedSegment, TranscriptSnapshot

logger = logging.getLogger(__name__)


class TranscriptAccumulator:
    """Owns the ordered finalized segments and the transient interim text."""

    def __init__(self):
        self._segments: List[FinalizedSegment] = []
        self._final_text = ""
        self._interim_text = ""

    def append_final(self, text: str, confidence: float = 0.0) -> FinalizedSegment:
        """Append a finalized segment followed by a single separating space."""
        segment = FinalizedSegment(text=text, confidence=confidence)
        self._segments.append(segment)
        self._final_text = "".join(f"{s.text} " for s in self._segments)
        logger.debug(f"Appended segment #{len(self._segments)}: '{text}' (confidence: {confidence:.2f})")
        return segment

    def set_interim(self, text: str) -> None:
        self._interim_text = text

    def clear(self) -> None:
        self._segments.clear()
        self._final_text = ""
        self._interim_text = ""

    def snapshot(self) -> TranscriptSnapshot:
        return TranscriptSnapshot(
            final=self._final_text,
            interim=self._interim_text,
            combined=self._final_text + self._interim_text,
        )

    @property
    def segments(self) -> Tuple[FinalizedSegment, ...]:
        return tuple(self._segments)

    @property
    def final_text(self) -> str:
        return self._final_text
