from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends

from solar_scheduler.core.authorization import Role, require_role
from solar_scheduler.deps.auth import get_request_context
from solar_scheduler.schemas.common import DeleteResponse, TransitionRequest
from solar_scheduler.schemas.installation import (
    CompleteInstallationRequest,
    InstallationCreate,
    InstallationResponse,
    InstallationUpdate,
    ProgressRequest,
    RescheduleRequest,
)
from solar_scheduler.services import repository
from solar_scheduler.services.context import RequestContext

router = APIRouter(prefix="/installations", tags=["Installations"])


@router.post("", response_model=InstallationResponse)
def create_installation(payload: InstallationCreate, ctx: RequestContext = Depends(get_request_context)):
    return repository.create_installation(ctx, **payload.model_dump(exclude_none=True))


@router.get("", response_model=List[InstallationResponse])
def list_installations(
    status: Optional[str] = None,
    job_id: Optional[int] = None,
    vendor_id: Optional[int] = None,
    scheduled_from: Optional[datetime] = None,
    scheduled_to: Optional[datetime] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    ascending: Optional[bool] = None,
    limit: Optional[int] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.fetch_installations(
        ctx,
        status=status,
        job_id=job_id,
        vendor_id=vendor_id,
        scheduled_from=scheduled_from,
        scheduled_to=scheduled_to,
        search=search,
        sort_by=sort_by,
        ascending=ascending,
        limit=limit,
    )


@router.get("/{installation_id}", response_model=InstallationResponse)
def get_installation(installation_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.get_installation(ctx, installation_id)


@router.patch("/{installation_id}", response_model=InstallationResponse)
def update_installation(
    installation_id: int,
    payload: InstallationUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.update_installation(ctx, installation_id, **payload.model_dump(exclude_unset=True))


@router.post("/{installation_id}/start", response_model=InstallationResponse)
def start_installation(installation_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.start_installation(ctx, installation_id)


@router.post("/{installation_id}/complete", response_model=InstallationResponse)
def complete_installation(
    installation_id: int,
    payload: Optional[CompleteInstallationRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    notes = payload.notes if payload is not None else None
    return repository.complete_installation(ctx, installation_id, notes=notes)


@router.post("/{installation_id}/progress", response_model=InstallationResponse)
def update_progress(
    installation_id: int,
    payload: ProgressRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.update_installation_progress(ctx, installation_id, payload.percentage)


@router.post("/{installation_id}/reschedule", response_model=InstallationResponse)
def reschedule_installation(
    installation_id: int,
    payload: RescheduleRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.reschedule_installation(ctx, installation_id, payload.scheduled_date)


@router.post("/{installation_id}/transition", response_model=InstallationResponse)
def transition_installation(
    installation_id: int,
    payload: TransitionRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.transition_installation(ctx, installation_id, payload.status)


@router.delete("/{installation_id}", response_model=DeleteResponse)
def delete_installation(installation_id: int, ctx: RequestContext = Depends(require_role(Role.MANAGER))):
    return repository.delete_installation(ctx, installation_id).to_dict()
