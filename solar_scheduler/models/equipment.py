import math

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import validates

from solar_scheduler.database import Base
from solar_scheduler.models.mixins import CompanyRecordMixin, utc_now
from solar_scheduler.models.status import EquipmentCategory, enum_column_type, parse_status
from solar_scheduler.services.errors import ValidationFailure


class Equipment(CompanyRecordMixin, Base):
    __tablename__ = "equipment"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_equipment_quantity_nonnegative"),
        CheckConstraint("unit_price >= 0", name="ck_equipment_unit_price_nonnegative"),
        CheckConstraint("low_stock_threshold >= 0", name="ck_equipment_low_stock_threshold_nonnegative"),
    )

    name = Column(String(255), nullable=False, index=True)
    category = Column(enum_column_type(EquipmentCategory, "equipment_category"), nullable=False, index=True)
    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")

    quantity = Column(Integer, nullable=False, default=0)
    unit_price = Column(Float, nullable=False, default=0.0)
    low_stock_threshold = Column(Integer, nullable=False, default=5)
    warranty_period_months = Column(Integer, nullable=False, default=12)
    supplier = Column(String(255), nullable=False, default="")

    is_active = Column(Boolean, nullable=False, default=True)
    last_updated = Column(DateTime, nullable=False, default=utc_now)

    def __init__(self, **kwargs):
        kwargs.setdefault("quantity", 0)
        kwargs.setdefault("unit_price", 0.0)
        kwargs.setdefault("low_stock_threshold", 5)
        kwargs.setdefault("warranty_period_months", 12)
        kwargs.setdefault("supplier", "")
        kwargs.setdefault("description", "")
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("last_updated", utc_now())
        super().__init__(**kwargs)

    @validates("category")
    def _validate_category(self, key, value):
        return parse_status(EquipmentCategory, value, field=key)

    @validates("quantity", "low_stock_threshold")
    def _validate_counts(self, key, value):
        value = int(value)
        if value < 0:
            raise ValidationFailure.for_field(key, f"{key} cannot be negative")
        return value

    @validates("unit_price")
    def _validate_unit_price(self, key, value):
        value = float(value)
        if not math.isfinite(value) or value < 0:
            raise ValidationFailure.for_field(key, "Unit price must be a non-negative number")
        return value

    def update_quantity(self, new_quantity: int) -> None:
        self.quantity = new_quantity
        self.last_updated = utc_now()

    def adjust_stock(self, delta: int) -> None:
        self.quantity = max(0, self.quantity + int(delta))
        self.last_updated = utc_now()

    def reorder(self, quantity: int = 0) -> int:
        """Add stock; with no quantity, order twice the low-stock threshold."""
        quantity = int(quantity)
        if quantity < 0:
            raise ValidationFailure.for_field("quantity", "Reorder quantity cannot be negative")
        ordered = quantity if quantity > 0 else self.low_stock_threshold * 2
        self.update_quantity(self.quantity + ordered)
        return ordered

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity == 0

    @property
    def total_value(self) -> float:
        value = float(self.quantity) * float(self.unit_price)
        return value if math.isfinite(value) else 0.0

    def __repr__(self):
        return f"<Equipment {self.id} {self.name} qty={self.quantity}>"
