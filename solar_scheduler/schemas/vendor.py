from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from solar_scheduler.models.status import VendorSpecialty


class VendorCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    specialties: Optional[List[str]] = None
    rating: Optional[float] = None
    notes: Optional[str] = None
    website: Optional[str] = None
    emergency_contact: Optional[str] = None
    insurance_details: Optional[str] = None
    license_number: Optional[str] = None
    is_active: Optional[bool] = None


class VendorUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    specialties: Optional[List[str]] = None
    notes: Optional[str] = None
    website: Optional[str] = None
    emergency_contact: Optional[str] = None
    insurance_details: Optional[str] = None
    license_number: Optional[str] = None
    is_active: Optional[bool] = None


class RatingRequest(BaseModel):
    rating: float


class SpecialtyRequest(BaseModel):
    specialty: str


class VendorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    name: str
    contact_email: str
    contact_phone: str
    address: str
    specialties: List[VendorSpecialty]
    rating: float
    notes: str
    website: str
    emergency_contact: str
    insurance_details: str
    license_number: str
    is_active: bool
    created_at: datetime
