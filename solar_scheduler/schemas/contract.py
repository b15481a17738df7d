from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from solar_scheduler.models.status import ContractStatus


class ContractCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    customer_id: int
    job_id: Optional[int] = None
    contract_number: str
    title: str
    description: Optional[str] = None
    terms: Optional[str] = None
    payment_schedule: Optional[str] = None
    total_amount: float
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None


class ContractUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    job_id: Optional[int] = None
    contract_number: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    terms: Optional[str] = None
    payment_schedule: Optional[str] = None
    total_amount: Optional[float] = None
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None


class PaymentRequest(BaseModel):
    amount: float


class ContractResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    customer_id: int
    job_id: Optional[int]
    contract_number: str
    title: str
    description: str
    terms: str
    payment_schedule: str
    total_amount: float
    paid_amount: float
    remaining_amount: float
    payment_progress: float
    status: ContractStatus
    is_active: bool
    is_overdue: bool
    signed_date: Optional[datetime]
    start_date: Optional[datetime]
    completion_date: Optional[datetime]
    created_at: datetime
