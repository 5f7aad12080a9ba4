from io import BytesIO

import pytest
import torch
from fastapi.testclient import TestClient
from PIL import Image

from agrolens.api.diagnosis import get_diagnosis_service
from agrolens.core.config import DEFAULT_DISEASE_LABELS, Settings
from agrolens.main import create_app
from agrolens.services.inference import DiagnosisService, RiceLeafClassifier

BROWN_SPOT_LOGITS = [1.0, 5.0, 0.5, 0.2, 0.1]
NEAR_UNIFORM_LOGITS = [0.1, 0.15, 0.12, 0.11, 0.13]


class FixedLogitsModel:
    """Stands in for the TorchScript classifier; returns the same logits for any image."""

    def __init__(self, logits):
        self.logits = torch.tensor([logits], dtype=torch.float32)
        self.calls = 0

    def __call__(self, batch: torch.Tensor) -> torch.Tensor:
        assert batch.shape == (1, 3, 224, 224)
        self.calls += 1
        return self.logits


@pytest.fixture
def labels():
    return list(DEFAULT_DISEASE_LABELS)


@pytest.fixture
def leaf_png() -> bytes:
    buf = BytesIO()
    Image.new("RGB", (320, 240), color=(60, 140, 40)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, model_path=str(tmp_path / "missing.ptl"))


def make_service(labels, model=None, model_path="missing.ptl") -> DiagnosisService:
    classifier = RiceLeafClassifier(model_path=model_path, num_classes=len(labels), model=model)
    return DiagnosisService(classifier, labels)


@pytest.fixture
def make_client(settings):
    def _make(service: DiagnosisService) -> TestClient:
        application = create_app(settings)
        application.dependency_overrides[get_diagnosis_service] = lambda: service
        return TestClient(application)

    return _make
