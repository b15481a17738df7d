from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from solar_scheduler.models.status import ContactMethod, LeadStatus


class CustomerCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    email: str
    phone: str
    address: str
    preferred_contact_method: Optional[str] = None
    notes: Optional[str] = None


class CustomerUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    preferred_contact_method: Optional[str] = None
    notes: Optional[str] = None


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    name: str
    email: str
    phone: str
    address: str
    lead_status: LeadStatus
    preferred_contact_method: ContactMethod
    last_contact_date: Optional[datetime]
    notes: str
    created_at: datetime
