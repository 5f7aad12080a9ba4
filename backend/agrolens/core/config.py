from functools import lru_cache
from typing import List, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Order matters: index i of the model output is label i.
DEFAULT_DISEASE_LABELS = [
    "Bacterial Leaf Blight",
    "Brown Spot",
    "Leaf Blast",
    "Sheath Blight",
    "Tungro",
]


class Settings(BaseSettings):
    app_name: str = "AgroLens Rice Diagnosis API"
    api_prefix: str = "/api"
    cors_origins: List[str] = ["*"]  # For demo only; restrict in production.
    log_level: str = "INFO"

    disease_labels: List[str] = Field(default_factory=lambda: list(DEFAULT_DISEASE_LABELS))
    model_path: str = "trained_models/MobileNetV2_mobile_finalV1.ptl"
    input_size: int = Field(224, gt=0)
    normalize_mean: Tuple[float, float, float] = (0.485, 0.456, 0.406)
    normalize_std: Tuple[float, float, float] = (0.229, 0.224, 0.225)

    unknown_threshold: float = Field(0.70, ge=0.0, le=1.0)
    high_severity_threshold: float = Field(0.80, ge=0.0, le=1.0)
    moderate_severity_threshold: float = Field(0.60, ge=0.0, le=1.0)
    strict_label_count: bool = True

    # Perceived-effort pause before answering an upload; applied by the API only.
    analysis_delay_seconds: float = Field(0.0, ge=0.0)

    model_config = SettingsConfigDict(env_prefix="AGROLENS_", env_file=".env", protected_namespaces=())

    @field_validator("disease_labels")
    @classmethod
    def _labels_unique(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("disease_labels must not be empty")
        if len(set(value)) != len(value):
            raise ValueError("disease_labels must be unique")
        return value

    @model_validator(mode="after")
    def _severity_order(self) -> "Settings":
        if self.moderate_severity_threshold > self.high_severity_threshold:
            raise ValueError("moderate_severity_threshold must not exceed high_severity_threshold")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
