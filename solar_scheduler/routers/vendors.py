from typing import List, Optional

from fastapi import APIRouter, Depends

from solar_scheduler.core.authorization import Role, require_role
from solar_scheduler.deps.auth import get_request_context
from solar_scheduler.schemas.common import DeleteResponse
from solar_scheduler.schemas.vendor import (
    RatingRequest,
    SpecialtyRequest,
    VendorCreate,
    VendorResponse,
    VendorUpdate,
)
from solar_scheduler.services import repository
from solar_scheduler.services.context import RequestContext

router = APIRouter(prefix="/vendors", tags=["Vendors"])


@router.post("", response_model=VendorResponse)
def create_vendor(payload: VendorCreate, ctx: RequestContext = Depends(get_request_context)):
    return repository.create_vendor(ctx, **payload.model_dump(exclude_none=True))


@router.get("", response_model=List[VendorResponse])
def list_vendors(
    specialty: Optional[str] = None,
    min_rating: Optional[float] = None,
    active_only: bool = False,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    ascending: Optional[bool] = None,
    limit: Optional[int] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return repository.fetch_vendors(
        ctx,
        specialty=specialty,
        min_rating=min_rating,
        active_only=active_only,
        search=search,
        sort_by=sort_by,
        ascending=ascending,
        limit=limit,
    )


@router.get("/{vendor_id}", response_model=VendorResponse)
def get_vendor(vendor_id: int, ctx: RequestContext = Depends(get_request_context)):
    return repository.get_vendor(ctx, vendor_id)


@router.patch("/{vendor_id}", response_model=VendorResponse)
def update_vendor(vendor_id: int, payload: VendorUpdate, ctx: RequestContext = Depends(get_request_context)):
    return repository.update_vendor(ctx, vendor_id, **payload.model_dump(exclude_unset=True))


@router.post("/{vendor_id}/rating", response_model=VendorResponse)
def update_rating(vendor_id: int, payload: RatingRequest, ctx: RequestContext = Depends(get_request_context)):
    return repository.update_vendor_rating(ctx, vendor_id, payload.rating)


@router.post("/{vendor_id}/specialties", response_model=VendorResponse)
def add_specialty(vendor_id: int, payload: SpecialtyRequest, ctx: RequestContext = Depends(get_request_context)):
    return repository.add_vendor_specialty(ctx, vendor_id, payload.specialty)


@router.delete("/{vendor_id}/specialties/{specialty}", response_model=VendorResponse)
def remove_specialty(vendor_id: int, specialty: str, ctx: RequestContext = Depends(get_request_context)):
    return repository.remove_vendor_specialty(ctx, vendor_id, specialty)


@router.delete("/{vendor_id}", response_model=DeleteResponse)
def delete_vendor(vendor_id: int, ctx: RequestContext = Depends(require_role(Role.MANAGER))):
    return repository.delete_vendor(ctx, vendor_id).to_dict()
