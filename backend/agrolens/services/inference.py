from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import torch
from PIL import Image, UnidentifiedImageError

from agrolens.core.config import Settings
from agrolens.core.exceptions import ImageUnreadableError, InferenceFailedError
from agrolens.models.classifier import IMAGENET_MEAN, IMAGENET_STD, build_transform, load_classifier
from agrolens.schemas.diagnosis import Diagnosis, DiagnosisReport, InterpretationThresholds
from agrolens.services.disease_info import (
    get_disease_description,
    get_display_category,
    get_recommendations,
)
from agrolens.services.interpreter import interpret

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

DISCLAIMER = (
    "Automated field aid only. Confirm the diagnosis with a local agricultural expert "
    "before applying any treatment."
)


class RiceLeafClassifier:
    """Owns the on-device classifier and turns one image into raw scores.

    The model is loaded lazily on first use. Pass ``model`` to inject an
    already built module (or any callable mapping a batch tensor to logits).
    """

    def __init__(
        self,
        model_path: Path | str,
        num_classes: int,
        input_size: int = 224,
        mean: Sequence[float] = IMAGENET_MEAN,
        std: Sequence[float] = IMAGENET_STD,
        device: torch.device | str = "cpu",
        model: Optional[Callable[[torch.Tensor], torch.Tensor]] = None,
    ) -> None:
        model_path = Path(model_path)
        if not model_path.is_absolute():
            model_path = _PROJECT_ROOT / model_path
        self.model_path = model_path
        self.num_classes = num_classes
        self.device = torch.device(device)
        self._transform = build_transform(input_size, mean, std)
        self._model = model

    def is_ready(self) -> bool:
        return self._model is not None

    def load(self) -> None:
        """Load the model if needed; raises ``ModelUnavailableError`` on failure."""
        if self._model is not None:
            return
        self._model = load_classifier(self.model_path, self.num_classes, device=self.device)
        logger.info("Classifier ready (%d classes)", self.num_classes)

    def dispose(self) -> None:
        self._model = None
        logger.info("Classifier disposed")

    def _load_image(self, data: bytes) -> Image.Image:
        try:
            with BytesIO(data) as buf:
                img = Image.open(buf)
                return img.convert("RGB")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise ImageUnreadableError(f"Could not read the image: {exc}") from exc

    def predict_scores(self, image_bytes: bytes) -> List[float]:
        """Run single-image inference and return the flat logit vector."""
        self.load()
        image = self._load_image(image_bytes)
        tensor = self._transform(image).unsqueeze(0).to(self.device)

        try:
            with torch.no_grad():
                logits = self._model(tensor)
        except Exception as exc:
            logger.exception("Classifier forward pass failed")
            raise InferenceFailedError(f"Prediction failed: {exc}") from exc

        if not isinstance(logits, torch.Tensor):
            raise InferenceFailedError(f"Classifier returned {type(logits).__name__}, expected a tensor.")
        return [float(v) for v in logits.detach().reshape(-1).cpu().tolist()]

    def predict_file(self, image_path: Path | str) -> List[float]:
        image_path = Path(image_path)
        if not image_path.is_file():
            raise ImageUnreadableError(f"Image file does not exist: {image_path}")
        return self.predict_scores(image_path.read_bytes())


class DiagnosisService:
    """Classifier, interpreter and disease catalogue wired together."""

    def __init__(
        self,
        classifier: RiceLeafClassifier,
        labels: Sequence[str],
        thresholds: Optional[InterpretationThresholds] = None,
        strict: bool = True,
    ) -> None:
        self.classifier = classifier
        self.labels = list(labels)
        self.thresholds = thresholds or InterpretationThresholds()
        self.strict = strict

    def diagnose_scores(self, scores: Sequence[float], labels: Optional[Sequence[str]] = None) -> Diagnosis:
        return interpret(
            scores,
            self.labels if labels is None else labels,
            self.thresholds,
            strict=self.strict,
        )

    def diagnose_image(self, image_bytes: bytes) -> Diagnosis:
        scores = self.classifier.predict_scores(image_bytes)
        return self.diagnose_scores(scores)

    def diagnose_file(self, image_path: Path | str) -> Diagnosis:
        scores = self.classifier.predict_file(image_path)
        return self.diagnose_scores(scores)

    @staticmethod
    def build_report(diagnosis: Diagnosis) -> DiagnosisReport:
        disease = diagnosis.primary_disease
        return DiagnosisReport(
            diagnosis=diagnosis,
            description=get_disease_description(disease),
            recommendations=get_recommendations(disease),
            display_category=get_display_category(disease),
            disclaimer=DISCLAIMER,
        )


def build_diagnosis_service(settings: Settings) -> DiagnosisService:
    classifier = RiceLeafClassifier(
        model_path=settings.model_path,
        num_classes=len(settings.disease_labels),
        input_size=settings.input_size,
        mean=settings.normalize_mean,
        std=settings.normalize_std,
    )
    thresholds = InterpretationThresholds(
        unknown=settings.unknown_threshold,
        high=settings.high_severity_threshold,
        moderate=settings.moderate_severity_threshold,
    )
    return DiagnosisService(
        classifier,
        settings.disease_labels,
        thresholds=thresholds,
        strict=settings.strict_label_count,
    )
