from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from solar_scheduler.models.status import InstallationStatus


class InstallationCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    job_id: Optional[int] = None
    vendor_id: Optional[int] = None
    scheduled_date: datetime
    crew_members: Optional[str] = None
    crew_size: Optional[int] = None
    notes: Optional[str] = None
    weather_conditions: Optional[str] = None
    quality_check_passed: Optional[bool] = None


class InstallationUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    job_id: Optional[int] = None
    vendor_id: Optional[int] = None
    scheduled_date: Optional[datetime] = None
    crew_members: Optional[str] = None
    crew_size: Optional[int] = None
    notes: Optional[str] = None
    weather_conditions: Optional[str] = None
    quality_check_passed: Optional[bool] = None


class RescheduleRequest(BaseModel):
    scheduled_date: datetime


class CompleteInstallationRequest(BaseModel):
    notes: Optional[str] = None


class ProgressRequest(BaseModel):
    percentage: int


class InstallationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    job_id: Optional[int]
    vendor_id: Optional[int]
    scheduled_date: datetime
    status: InstallationStatus
    crew_members: str
    crew_size: int
    notes: str
    weather_conditions: str
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    completion_percentage: int
    quality_check_passed: bool
    duration_seconds: Optional[float]
    is_overdue: bool
    created_at: datetime
