"""Confidence-based selection among alternative transcriptions."""

from typing import Optional, Sequence

from ..models.transcription import AlternativeCandidate


def select_best_alternative(alternatives: Sequence[AlternativeCandidate],
                            fallback: Optional[AlternativeCandidate] = None) -> AlternativeCandidate:
    """Pick the candidate with the strictly greatest confidence.

    Ties resolve to the earliest candidate. When the engine reported no
    alternative list, the fallback (the primary transcript) is returned.

    Args:
        alternatives: Candidates for one finalized result, in engine order
        fallback: Primary transcript and confidence of the result

    Returns:
        The winning candidate

    Raises:
        ValueError: If there are no alternatives and no fallback
    """
    if not alternatives:
        if fallback is None:
            raise ValueError("No alternatives and no fallback to select from")
        return fallback

    best = alternatives[0]
    for candidate in alternatives[1:]:
        if candidate.confidence > best.confidence:
            best = candidate
    return best
