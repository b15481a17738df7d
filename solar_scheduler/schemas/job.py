from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from solar_scheduler.models.status import JobStatus


class JobCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    customer_id: Optional[int] = None
    # copied from the customer when omitted
    customer_name: Optional[str] = None
    address: Optional[str] = None
    system_size: float
    scheduled_date: Optional[datetime] = None
    estimated_revenue: Optional[float] = None
    notes: Optional[str] = None


class JobUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    address: Optional[str] = None
    system_size: Optional[float] = None
    scheduled_date: Optional[datetime] = None
    estimated_revenue: Optional[float] = None
    notes: Optional[str] = None


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    customer_id: Optional[int]
    customer_name: str
    address: str
    system_size: float
    status: JobStatus
    scheduled_date: Optional[datetime]
    estimated_revenue: float
    notes: str
    created_at: datetime
