from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from solar_scheduler.models.status import EquipmentCategory


class EquipmentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    category: str
    brand: str
    model: str
    description: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = None
    low_stock_threshold: Optional[int] = None
    warranty_period_months: Optional[int] = None
    supplier: Optional[str] = None
    is_active: Optional[bool] = None


class EquipmentUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    description: Optional[str] = None
    unit_price: Optional[float] = None
    low_stock_threshold: Optional[int] = None
    warranty_period_months: Optional[int] = None
    supplier: Optional[str] = None
    is_active: Optional[bool] = None


class StockAdjustment(BaseModel):
    delta: int


class QuantityRequest(BaseModel):
    quantity: int


class ReorderRequest(BaseModel):
    quantity: int = 0


class EquipmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: int
    company_id: int
    name: str
    category: EquipmentCategory
    brand: str
    model: str
    description: str
    quantity: int
    unit_price: float
    low_stock_threshold: int
    warranty_period_months: int
    supplier: str
    is_active: bool
    is_low_stock: bool
    is_out_of_stock: bool
    total_value: float
    last_updated: datetime
    created_at: datetime
