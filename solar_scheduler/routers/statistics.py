from fastapi import APIRouter, Depends

from solar_scheduler.deps.auth import get_request_context
from solar_scheduler.schemas.statistics import (
    CustomerStatisticsResponse,
    EquipmentStatisticsResponse,
    InstallationStatisticsResponse,
    JobStatisticsResponse,
)
from solar_scheduler.services import statistics_service
from solar_scheduler.services.context import RequestContext

router = APIRouter(prefix="/statistics", tags=["Statistics"])


@router.get("/jobs", response_model=JobStatisticsResponse)
def job_statistics(ctx: RequestContext = Depends(get_request_context)):
    return statistics_service.job_statistics(ctx)


@router.get("/equipment", response_model=EquipmentStatisticsResponse)
def equipment_statistics(ctx: RequestContext = Depends(get_request_context)):
    return statistics_service.equipment_statistics(ctx)


@router.get("/installations", response_model=InstallationStatisticsResponse)
def installation_statistics(ctx: RequestContext = Depends(get_request_context)):
    return statistics_service.installation_statistics(ctx)


@router.get("/customers", response_model=CustomerStatisticsResponse)
def customer_statistics(ctx: RequestContext = Depends(get_request_context)):
    return statistics_service.customer_statistics(ctx)
