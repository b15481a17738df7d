from typing import List, Optional

from fastapi import APIRouter, Depends

from solar_scheduler.core.authorization import Role, require_role
from solar_scheduler.deps.auth import get_request_context
from solar_scheduler.schemas.common import DeleteResponse, TransitionRequest
from solar_scheduler.schemas.contract import (
    ContractCreate,
    ContractResponse,
    ContractUpdate,
    PaymentRequest,
)
from solar_scheduler.services import repository
from solar_scheduler.services.context import RequestContext

router = APIRouter(prefix="/contracts", tags=["Contracts"])


@router.post("", response_model=ContractResponse)
def create_contract(payload: ContractCreate, ctx: RequestContext = Depends(get_request_context)):
    return repository.create_contract(ctx, **payload.model_dump(exclude_none=True))


@router.get("", response_model=List[ContractResponse])
def list_contracts(
    status: Optional[str] = None,
    customer_id: Optional[int] = None,
    job_id: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    ascending: Optional[bool] = None,
    limit: Optional[int] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.fetch_contracts(
        ctx,
        status=status,
        customer_id=customer_id,
        job_id=job_id,
        search=search,
        sort_by=sort_by,
        ascending=ascending,
        limit=limit,
    )


@router.get("/{contract_id}", response_model=ContractResponse)
def get_contract(contract_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.get_contract(ctx, contract_id)


@router.patch("/{contract_id}", response_model=ContractResponse)
def update_contract(
    contract_id: int,
    payload: ContractUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.update_contract(ctx, contract_id, **payload.model_dump(exclude_unset=True))


@router.post("/{contract_id}/sign", response_model=ContractResponse)
def sign_contract(contract_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.sign_contract(ctx, contract_id)


@router.post("/{contract_id}/activate", response_model=ContractResponse)
def activate_contract(contract_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.activate_contract(ctx, contract_id)


@router.post("/{contract_id}/complete", response_model=ContractResponse)
def complete_contract(contract_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.complete_contract(ctx, contract_id)


@router.post("/{contract_id}/cancel", response_model=ContractResponse)
def cancel_contract(contract_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.cancel_contract(ctx, contract_id)


@router.post("/{contract_id}/payments", response_model=ContractResponse)
def add_payment(contract_id: int, payload: PaymentRequest, ctx: RequestContext = Depends(get_request_context)):
    return repository.add_contract_payment(ctx, contract_id, payload.amount)


@router.post("/{contract_id}/transition", response_model=ContractResponse)
def transition_contract(
    contract_id: int,
    payload: TransitionRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.transition_contract(ctx, contract_id, payload.status)


@router.delete("/{contract_id}", response_model=DeleteResponse)
def delete_contract(contract_id: int, ctx: RequestContext = Depends(require_role(Role.MANAGER))):
    return repository.delete_contract(ctx, contract_id).to_dict()
