from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Severity(str, Enum):
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"
    UNKNOWN = "Unknown"


class InterpretationThresholds(BaseModel):
    """Policy constants used when turning probabilities into a diagnosis."""

    model_config = ConfigDict(frozen=True)

    unknown: float = Field(0.70, ge=0.0, le=1.0, description="Below this the diagnosis is 'Unknown Disease'.")
    high: float = Field(0.80, ge=0.0, le=1.0, description="Inclusive lower bound for High severity.")
    moderate: float = Field(0.60, ge=0.0, le=1.0, description="Inclusive lower bound for Moderate severity.")

    @model_validator(mode="after")
    def _check_order(self) -> "InterpretationThresholds":
        if self.moderate > self.high:
            raise ValueError("moderate threshold must not exceed high threshold")
        return self


class RankedCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Disease class label.")
    probability: float = Field(..., ge=0.0, le=1.0, description="Softmax probability in [0, 1].")
    class_index: int = Field(..., ge=0, description="Index of the class in the model output.")


class Diagnosis(BaseModel):
    """Interpreted model output for one image."""

    model_config = ConfigDict(frozen=True)

    primary_disease: str = Field(..., description="Top-1 disease, or 'Unknown Disease' below the threshold.")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Probability of the primary disease (0 when unknown).")
    severity: Severity
    top3: List[RankedCandidate] = Field(..., max_length=3, description="Up to three candidates, best first.")
    raw_primary_index: str = Field(
        ...,
        description="Class index of the true top-ranked prediction, before any unknown-disease override.",
    )


class ScoresRequest(BaseModel):
    scores: List[float] = Field(..., description="Raw model logits, one per class.")
    labels: Optional[List[str]] = Field(
        None,
        description="Class labels in model output order. Defaults to the configured rice disease labels.",
    )


class DiseaseInfo(BaseModel):
    disease: str
    description: str
    recommendations: List[str] = Field(default_factory=list)
    display_category: str = Field(..., description="One of 'disease', 'unknown', 'error' or 'other'.")


class DiagnosisReport(BaseModel):
    diagnosis: Diagnosis
    description: str
    recommendations: List[str] = Field(default_factory=list)
    display_category: str
    disclaimer: str = Field(
        ...,
        description="Reminder that the classifier is a field aid and not a substitute for an agronomist.",
    )


class LabelsResponse(BaseModel):
    labels: List[str]
    thresholds: InterpretationThresholds


class ErrorResponse(BaseModel):
    kind: str = Field(..., description="Stable error identifier, e.g. 'EmptyInput' or 'ModelUnavailable'.")
    detail: str
