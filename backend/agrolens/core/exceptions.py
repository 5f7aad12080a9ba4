"""Typed failures raised by the diagnosis pipeline.

Interpreter errors (``DiagnosisError``) mean the score vector itself is
unusable. Inference errors (``InferenceError``) happen before the
interpreter is reached and are never passed through it.
"""

from __future__ import annotations


class AgroLensError(Exception):
    """Base class; ``kind`` is the stable identifier exposed to clients."""

    kind = "AgroLensError"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class DiagnosisError(AgroLensError):
    kind = "DiagnosisError"


class EmptyInputError(DiagnosisError):
    kind = "EmptyInput"


class InvalidInputError(DiagnosisError):
    kind = "InvalidInput"


class LabelMismatchError(DiagnosisError):
    kind = "LabelMismatch"

    def __init__(self, num_scores: int, num_labels: int) -> None:
        super().__init__(
            f"Model returned {num_scores} scores but {num_labels} class labels are configured."
        )
        self.num_scores = num_scores
        self.num_labels = num_labels


class InferenceError(AgroLensError):
    kind = "InferenceError"


class ModelUnavailableError(InferenceError):
    kind = "ModelUnavailable"


class InferenceFailedError(InferenceError):
    kind = "InferenceFailed"


class ImageUnreadableError(InferenceError):
    kind = "ImageUnreadable"
