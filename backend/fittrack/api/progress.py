"""Progress metrics endpoints."""

from fastapi import APIRouter, Depends, status

from fittrack.api.deps import get_progress_service
from fittrack.schemas.progress import ProgressMetricsCreate, ProgressMetricsResponse
from fittrack.services.progress import ProgressService

router = APIRouter(prefix="/progress-metrics", tags=["progress"])


@router.get("/{user_id}", response_model=list[ProgressMetricsResponse])
async def list_progress_metrics(
    user_id: int,
    service: ProgressService = Depends(get_progress_service),
) -> list[ProgressMetricsResponse]:
    return service.list_for_user(user_id)


@router.post("", response_model=ProgressMetricsResponse, status_code=status.HTTP_201_CREATED)
async def add_progress_metrics(
    data: ProgressMetricsCreate,
    service: ProgressService = Depends(get_progress_service),
) -> ProgressMetricsResponse:
    return service.create(data)
