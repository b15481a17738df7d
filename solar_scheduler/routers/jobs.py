from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends

from solar_scheduler.core.authorization import Role, require_role
from solar_scheduler.deps.auth import get_request_context
from solar_scheduler.schemas.common import DeleteResponse, TransitionRequest
from solar_scheduler.schemas.job import JobCreate, JobResponse, JobUpdate
from solar_scheduler.services import repository
from solar_scheduler.services.context import RequestContext

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", response_model=JobResponse)
def create_job(payload: JobCreate, ctx: RequestContext = Depends(get_request_context)):
    return repository.create_job(ctx, **payload.model_dump(exclude_none=True))


@router.get("", response_model=List[JobResponse])
def list_jobs(
    status: Optional[str] = None,
    customer_id: Optional[int] = None,
    scheduled_from: Optional[datetime] = None,
    scheduled_to: Optional[datetime] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    ascending: Optional[bool] = None,
    limit: Optional[int] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.fetch_jobs(
        ctx,
        status=status,
        customer_id=customer_id,
        scheduled_from=scheduled_from,
        scheduled_to=scheduled_to,
        search=search,
        sort_by=sort_by,
        ascending=ascending,
        limit=limit,
    )


@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.get_job(ctx, job_id)


@router.patch("/{job_id}", response_model=JobResponse)
def update_job(job_id: int, payload: JobUpdate, ctx: RequestContext = Depends(get_request_context)):
    return repository.update_job(ctx, job_id, **payload.model_dump(exclude_unset=True))


@router.post("/{job_id}/transition", response_model=JobResponse)
def transition_job(
    job_id: int,
    payload: TransitionRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.transition_job(ctx, job_id, payload.status)


@router.delete("/{job_id}", response_model=DeleteResponse)
def delete_job(job_id: int, ctx: RequestContext = Depends(require_role(Role.MANAGER))):
    return repository.delete_job(ctx, job_id).to_dict()
