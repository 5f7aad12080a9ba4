import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agrolens.api.diagnosis import router as diagnosis_router
from agrolens.core.config import Settings, get_settings
from agrolens.core.exceptions import (
    AgroLensError,
    DiagnosisError,
    ImageUnreadableError,
    InferenceFailedError,
    ModelUnavailableError,
)
from agrolens.services.inference import build_diagnosis_service

logger = logging.getLogger(__name__)

# Checked in order, most specific first.
_STATUS_BY_ERROR = (
    (DiagnosisError, 422),
    (ImageUnreadableError, 400),
    (ModelUnavailableError, 503),
    (InferenceFailedError, 500),
)


def _status_for(exc: AgroLensError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def agrolens_error_handler(request: Request, exc: AgroLensError) -> JSONResponse:
    status_code = _status_for(exc)
    logger.warning("%s on %s: %s", exc.kind, request.url.path, exc.detail)
    return JSONResponse(status_code=status_code, content={"kind": exc.kind, "detail": exc.detail})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Application factory.

    Tests pass their own ``Settings`` or override ``get_diagnosis_service``
    to run without model weights.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        description=(
            "Rice leaf disease diagnosis: classifies a leaf photo and interprets the scores into a "
            "disease, confidence, severity and top-3 candidates.\n\n"
            "Results are a field aid and must be confirmed by an agricultural expert."
        ),
    )

    # For a real deployment you should replace "*" with the concrete frontend URL(s).
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.state.settings = settings
    application.state.diagnosis_service = build_diagnosis_service(settings)
    application.add_exception_handler(AgroLensError, agrolens_error_handler)

    application.include_router(diagnosis_router, prefix=settings.api_prefix)

    @application.get("/", tags=["health"])
    async def health_check() -> dict:
        """Simple health-check endpoint used by the frontend and tests."""
        return {
            "status": "ok",
            "message": "AgroLens backend is running.",
            "model_loaded": application.state.diagnosis_service.classifier.is_ready(),
        }

    return application


app = create_app()
