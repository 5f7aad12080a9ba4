from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Sequence

import torch
from torch import nn
from torchvision import models, transforms

from agrolens.core.exceptions import ModelUnavailableError

logger = logging.getLogger(__name__)

IMAGENET_MEAN = (0.485, 0.456, 0.406)
IMAGENET_STD = (0.229, 0.224, 0.225)


def create_mobilenet_model(num_classes: int, dropout: float = 0.2) -> nn.Module:
    """Build a torchvision MobileNetV2 with a classification head for our classes."""
    model = models.mobilenet_v2(weights=None)
    in_features = model.classifier[-1].in_features
    model.classifier = nn.Sequential(
        nn.Dropout(dropout),
        nn.Linear(in_features, num_classes),
    )
    return model


def build_transform(
    input_size: int = 224,
    mean: Sequence[float] = IMAGENET_MEAN,
    std: Sequence[float] = IMAGENET_STD,
) -> Callable:
    """Resize to a square input and normalise the way the model was trained."""
    return transforms.Compose(
        [
            transforms.Resize((input_size, input_size)),
            transforms.ToTensor(),
            transforms.Normalize(mean=tuple(mean), std=tuple(std)),
        ]
    )


def load_classifier(
    model_path: Path,
    num_classes: int,
    device: torch.device | str = "cpu",
) -> Callable[[torch.Tensor], torch.Tensor]:
    """Load the rice disease classifier from disk for inference.

    Supported artifacts:
    - ``.ptl``: TorchScript exported for the PyTorch mobile lite interpreter.
    - any other suffix: TorchScript module, or a plain checkpoint dict with a
      ``model_state`` entry for :func:`create_mobilenet_model`.
    """
    model_path = Path(model_path)
    if not model_path.exists():
        raise ModelUnavailableError(f"Model artifact not found at {model_path}.")

    logger.info("Loading classifier from %s", model_path)
    try:
        if model_path.suffix == ".ptl":
            from torch.jit.mobile import _load_for_lite_interpreter

            return _load_for_lite_interpreter(str(model_path), map_location=device)

        try:
            module = torch.jit.load(str(model_path), map_location=device)
        except RuntimeError:
            # Not TorchScript; fall back to a state-dict checkpoint.
            ckpt = torch.load(model_path, map_location=device)
            state = ckpt.get("model_state", ckpt) if isinstance(ckpt, dict) else ckpt
            module = create_mobilenet_model(num_classes=num_classes)
            module.load_state_dict(state)
            module.to(device)
    except Exception as exc:
        raise ModelUnavailableError(f"Failed to load classifier from {model_path}: {exc}") from exc

    module.eval()
    return module
