"""Transcript assembly for LiveScribe."""

from .selector import select_best_alternative
from .accumulator import TranscriptAccumulator
from .publisher import TranscriptPublisher

__all__ = [
    "select_best_alternative",
    "TranscriptAccumulator",
    "TranscriptPublisher",
]
