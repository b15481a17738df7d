from typing import List, Optional

from fastapi import APIRouter, Depends

from solar_scheduler.core.authorization import Role, require_role
from solar_scheduler.deps.auth import get_request_context
from solar_scheduler.schemas.common import DeleteResponse, TransitionRequest
from solar_scheduler.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from solar_scheduler.schemas.statistics import CustomerSummaryResponse
from solar_scheduler.services import repository, statistics_service
from solar_scheduler.services.context import RequestContext

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post("", response_model=CustomerResponse)
def create_customer(payload: CustomerCreate, ctx: RequestContext = Depends(get_request_context)):
    return repository.create_customer(ctx, **payload.model_dump(exclude_none=True))


@router.get("", response_model=List[CustomerResponse])
def list_customers(
    lead_status: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    ascending: Optional[bool] = None,
    limit: Optional[int] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.fetch_customers(
        ctx,
        lead_status=lead_status,
        search=search,
        sort_by=sort_by,
        ascending=ascending,
        limit=limit,
    )


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.get_customer(ctx, customer_id)


@router.get("/{customer_id}/summary", response_model=CustomerSummaryResponse)
def customer_summary(customer_id: int, ctx: RequestContext = Depends(get_request_context)):
    return statistics_service.customer_summary(ctx, customer_id)


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.update_customer(ctx, customer_id, **payload.model_dump(exclude_unset=True))


@router.post("/{customer_id}/transition", response_model=CustomerResponse)
def transition_customer(
    customer_id: int,
    payload: TransitionRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.transition_customer(ctx, customer_id, payload.status)


@router.delete("/{customer_id}", response_model=DeleteResponse)
def delete_customer(customer_id: int, ctx: RequestContext = Depends(require_role(Role.MANAGER))):
    return repository.delete_customer(ctx, customer_id).to_dict()
