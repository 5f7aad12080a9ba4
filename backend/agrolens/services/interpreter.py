from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from agrolens.core.exceptions import EmptyInputError, InvalidInputError, LabelMismatchError
from agrolens.schemas.diagnosis import (
    Diagnosis,
    InterpretationThresholds,
    RankedCandidate,
    Severity,
)

logger = logging.getLogger(__name__)

UNKNOWN_DISEASE = "Unknown Disease"
TOP_K = 3


def softmax(scores: Sequence[float]) -> np.ndarray:
    """Numerically stable softmax over a 1-D score vector."""
    logits = np.asarray(scores, dtype=np.float64)
    shifted = np.exp(logits - logits.max())
    return shifted / shifted.sum()


def severity_for(
    disease: str,
    confidence: float,
    thresholds: Optional[InterpretationThresholds] = None,
) -> Severity:
    """Bucket a confidence into a display severity tier."""
    thresholds = thresholds or InterpretationThresholds()
    if disease.lower() == UNKNOWN_DISEASE.lower():
        return Severity.UNKNOWN
    if confidence >= thresholds.high:
        return Severity.HIGH
    if confidence >= thresholds.moderate:
        return Severity.MODERATE
    return Severity.LOW


def _validate_scores(raw_scores: Sequence[float]) -> np.ndarray:
    if len(raw_scores) == 0:
        raise EmptyInputError("Model returned an empty score vector.")
    try:
        values = np.asarray(raw_scores)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Scores must be real numbers: {exc}") from exc
    # Integer, unsigned or floating only; rejects bools, strings and objects.
    if values.dtype.kind not in "iuf":
        raise InvalidInputError(f"Scores must be real numbers, got dtype {values.dtype}.")
    logits = values.astype(np.float64)
    if logits.ndim != 1:
        raise InvalidInputError(f"Expected a flat score vector, got shape {logits.shape}.")
    if not np.all(np.isfinite(logits)):
        raise InvalidInputError("Scores contain NaN or infinite values.")
    return logits


def _validate_labels(labels: Sequence[str]) -> None:
    if len(labels) == 0:
        raise InvalidInputError("At least one class label is required.")
    if len(set(labels)) != len(labels):
        raise InvalidInputError("Class labels must be unique.")


def rank_candidates(probabilities: Sequence[float], labels: Sequence[str]) -> List[RankedCandidate]:
    """Pair probabilities with labels and sort best first.

    Only the overlapping prefix of the two sequences is paired. ``sorted`` is
    stable, so equal probabilities keep the lower class index first.
    """
    count = min(len(probabilities), len(labels))
    paired = [
        RankedCandidate(label=labels[i], probability=float(probabilities[i]), class_index=i)
        for i in range(count)
    ]
    return sorted(paired, key=lambda candidate: candidate.probability, reverse=True)


def interpret(
    raw_scores: Sequence[float],
    labels: Sequence[str],
    thresholds: Optional[InterpretationThresholds] = None,
    *,
    strict: bool = True,
) -> Diagnosis:
    """Turn raw classifier logits into a ranked, thresholded diagnosis.

    Raises ``EmptyInputError`` for an empty vector, ``InvalidInputError`` for
    non-finite scores or bad labels and, when ``strict`` is set,
    ``LabelMismatchError`` if the score and label counts differ. With
    ``strict=False`` the mismatch is logged and only the overlapping prefix
    is ranked.
    """
    thresholds = thresholds or InterpretationThresholds()
    logits = _validate_scores(raw_scores)
    _validate_labels(labels)

    if len(logits) != len(labels):
        if strict:
            raise LabelMismatchError(len(logits), len(labels))
        logger.warning(
            "Score/label count mismatch (%d scores, %d labels); ranking the first %d classes only.",
            len(logits),
            len(labels),
            min(len(logits), len(labels)),
        )

    probabilities = softmax(logits)
    top3 = rank_candidates(probabilities, labels)[:TOP_K]

    best = top3[0]
    primary_disease = best.label
    confidence = best.probability
    if confidence < thresholds.unknown:
        primary_disease = UNKNOWN_DISEASE
        confidence = 0.0

    if logger.isEnabledFor(logging.DEBUG):
        for candidate in top3:
            logger.debug("%s: %.1f%%", candidate.label, candidate.probability * 100)

    return Diagnosis(
        primary_disease=primary_disease,
        confidence=confidence,
        severity=severity_for(primary_disease, confidence, thresholds),
        top3=top3,
        raw_primary_index=str(best.class_index),
    )
