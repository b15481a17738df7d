from typing import List, Optional

from fastapi import APIRouter, Depends

from solar_scheduler.core.authorization import Role, require_role
from solar_scheduler.deps.auth import get_request_context
from solar_scheduler.schemas.common import DeleteResponse
from solar_scheduler.schemas.equipment import (
    EquipmentCreate,
    EquipmentResponse,
    EquipmentUpdate,
    QuantityRequest,
    ReorderRequest,
    StockAdjustment,
)
from solar_scheduler.services import repository
from solar_scheduler.services.context import RequestContext

router = APIRouter(prefix="/equipment", tags=["Equipment"])


@router.post("", response_model=EquipmentResponse)
def create_equipment(payload: EquipmentCreate, ctx: RequestContext = Depends(get_request_context)):
    return repository.create_equipment(ctx, **payload.model_dump(exclude_none=True))


@router.get("", response_model=List[EquipmentResponse])
def list_equipment(
    category: Optional[str] = None,
    low_stock_only: bool = False,
    active_only: bool = False,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    ascending: Optional[bool] = None,
    limit: Optional[int] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.fetch_equipment(
        ctx,
        category=category,
        low_stock_only=low_stock_only,
        active_only=active_only,
        search=search,
        sort_by=sort_by,
        ascending=ascending,
        limit=limit,
    )


@router.get("/{equipment_id}", response_model=EquipmentResponse)
def get_equipment(equipment_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.get_equipment(ctx, equipment_id)


@router.patch("/{equipment_id}", response_model=EquipmentResponse)
def update_equipment(
    equipment_id: int,
    payload: EquipmentUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.update_equipment(ctx, equipment_id, **payload.model_dump(exclude_unset=True))


@router.post("/{equipment_id}/adjust_stock", response_model=EquipmentResponse)
def adjust_stock(
    equipment_id: int,
    payload: StockAdjustment,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.adjust_stock(ctx, equipment_id, payload.delta)


@router.post("/{equipment_id}/quantity", response_model=EquipmentResponse)
def update_quantity(
    equipment_id: int,
    payload: QuantityRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.update_equipment_quantity(ctx, equipment_id, payload.quantity)


@router.post("/{equipment_id}/reorder", response_model=EquipmentResponse)
def reorder_equipment(
    equipment_id: int,
    payload: Optional[ReorderRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    quantity = payload.quantity if payload is not None else 0
    return repository.reorder_equipment(ctx, equipment_id, quantity)


@router.delete("/{equipment_id}", response_model=DeleteResponse)
def delete_equipment(equipment_id: int, ctx: RequestContext = Depends(require_role(Role.MANAGER))):
    return repository.delete_equipment(ctx, equipment_id).to_dict()
