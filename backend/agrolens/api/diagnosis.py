import asyncio

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi import status as http_status
from fastapi.concurrency import run_in_threadpool

from agrolens.schemas.diagnosis import (
    DiagnosisReport,
    DiseaseInfo,
    ErrorResponse,
    LabelsResponse,
    ScoresRequest,
)
from agrolens.services.disease_info import get_disease_info
from agrolens.services.inference import DiagnosisService

router = APIRouter(prefix="/diagnosis", tags=["diagnosis"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def get_diagnosis_service(request: Request) -> DiagnosisService:
    return request.app.state.diagnosis_service


@router.get("/labels", response_model=LabelsResponse)
async def list_labels(service: DiagnosisService = Depends(get_diagnosis_service)) -> LabelsResponse:
    """Class labels in model output order, plus the active thresholds."""
    return LabelsResponse(labels=service.labels, thresholds=service.thresholds)


@router.post(
    "/interpret",
    response_model=DiagnosisReport,
    responses=_ERROR_RESPONSES,
    summary="Interpret raw classifier scores",
)
async def interpret_scores(
    payload: ScoresRequest,
    service: DiagnosisService = Depends(get_diagnosis_service),
) -> DiagnosisReport:
    diagnosis = service.diagnose_scores(payload.scores, payload.labels)
    return service.build_report(diagnosis)


@router.post(
    "/rice-leaf",
    response_model=DiagnosisReport,
    status_code=http_status.HTTP_200_OK,
    responses=_ERROR_RESPONSES,
    summary="Diagnose a rice leaf photo",
)
async def diagnose_rice_leaf(
    request: Request,
    file: UploadFile = File(..., description="Photo of a single rice leaf."),
    service: DiagnosisService = Depends(get_diagnosis_service),
) -> DiagnosisReport:
    """Classify an uploaded photo and return the interpreted diagnosis.

    Model loading, unreadable images and inference failures are reported
    through the error handlers registered in ``create_app``.
    """
    image_bytes = await file.read()
    # Torch inference is blocking; keep it off the event loop.
    diagnosis = await run_in_threadpool(service.diagnose_image, image_bytes)

    delay = request.app.state.settings.analysis_delay_seconds
    if delay > 0:
        await asyncio.sleep(delay)
    return service.build_report(diagnosis)


@router.get("/diseases/{name}", response_model=DiseaseInfo)
async def disease_details(name: str) -> DiseaseInfo:
    return get_disease_info(name)
