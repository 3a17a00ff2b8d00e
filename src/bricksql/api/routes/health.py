from fastapi import APIRouter, Depends
from typing import Annotated

from bricksql.api.models.response import HealthResponse
from bricksql.api.dependencies import get_health_service
from bricksql.api.services import HealthService

router = APIRouter()

HealthSvc = Annotated[HealthService, Depends(get_health_service)]


@router.get("/health", response_model=HealthResponse)
def health_check(
    service: HealthSvc,
):
    return service.check_health()
