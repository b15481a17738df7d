from typing import Dict, List

from pydantic import BaseModel, ConfigDict

from solar_scheduler.schemas.equipment import EquipmentResponse


class JobStatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_jobs: int
    active_jobs: int
    completed_jobs: int
    cancelled_jobs: int
    total_revenue: float
    pending_revenue: float
    average_system_size: float
    completion_rate: float
    revenue_by_status: Dict[str, float]
    jobs_by_status: Dict[str, int]


class EquipmentStatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_items: int
    total_value: float
    low_stock_count: int
    out_of_stock_count: int
    low_stock_items: List[EquipmentResponse]
    items_by_category: Dict[str, int]
    value_by_category: Dict[str, float]


class InstallationStatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_installations: int
    scheduled_installations: int
    in_progress_installations: int
    completed_installations: int
    cancelled_installations: int
    overdue_installations: int
    completion_rate: float


class CustomerSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_id: int
    name: str
    total_jobs: int
    active_jobs: int
    total_revenue: float


class CustomerStatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_customers: int
    new_leads: int
    qualified_leads: int
    proposal_sent: int
    closed_won: int
    closed_lost: int
    conversion_rate: float
    customers_by_lead_status: Dict[str, int]
    top_customers_by_revenue: List[CustomerSummaryResponse]
