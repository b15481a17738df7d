import math

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from solar_scheduler.database import Base
from solar_scheduler.models.mixins import CompanyRecordMixin, StatusTransitionMixin, naive_utc, utc_now
from solar_scheduler.models.status import (
    CONTRACT_TRANSITIONS,
    ContractStatus,
    enum_column_type,
    parse_status,
)
from solar_scheduler.services.errors import ConstraintViolation, ValidationFailure


def _money(key: str, value) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise ValidationFailure.for_field(key, f"{key} must be a non-negative number")
    return value


class Contract(CompanyRecordMixin, StatusTransitionMixin, Base):
    __tablename__ = "contracts"

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_contracts_total_amount_nonnegative"),
        CheckConstraint("paid_amount >= 0", name="ck_contracts_paid_amount_nonnegative"),
        CheckConstraint("paid_amount <= total_amount", name="ck_contracts_paid_within_total"),
    )

    status_enum = ContractStatus
    allowed_transitions = CONTRACT_TRANSITIONS

    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("solar_jobs.id", ondelete="SET NULL"), nullable=True, index=True)

    contract_number = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    terms = Column(Text, nullable=False, default="")
    payment_schedule = Column(Text, nullable=False, default="")

    total_amount = Column(Float, nullable=False)
    paid_amount = Column(Float, nullable=False, default=0.0)
    status = Column(enum_column_type(ContractStatus, "contract_status"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    signed_date = Column(DateTime, nullable=True)
    start_date = Column(DateTime, nullable=True)
    completion_date = Column(DateTime, nullable=True)

    customer = relationship("Customer", back_populates="contracts")
    job = relationship("SolarJob", back_populates="contracts")

    def __init__(self, **kwargs):
        kwargs.setdefault("status", ContractStatus.DRAFT)
        kwargs.setdefault("description", "")
        kwargs.setdefault("terms", "")
        kwargs.setdefault("payment_schedule", "")
        kwargs.setdefault("is_active", True)
        # total before paid so the paid validator can compare against it
        total_amount = kwargs.pop("total_amount", None)
        paid_amount = kwargs.pop("paid_amount", 0.0)
        super().__init__(**kwargs)
        if total_amount is not None:
            self.total_amount = total_amount
        self.paid_amount = paid_amount

    @validates("status")
    def _validate_status(self, key, value):
        return parse_status(ContractStatus, value, field=key)

    @validates("signed_date", "start_date", "completion_date")
    def _validate_dates(self, key, value):
        return naive_utc(value)

    @validates("total_amount")
    def _validate_total_amount(self, key, value):
        value = _money(key, value)
        if self.paid_amount is not None and self.paid_amount > value:
            raise ConstraintViolation("Total amount cannot be less than the amount already paid")
        self._settle(total=value)
        return value

    @validates("paid_amount")
    def _validate_paid_amount(self, key, value):
        value = _money(key, value)
        if self.total_amount is not None and value > self.total_amount:
            raise ConstraintViolation("Paid amount cannot exceed the contract total")
        self._settle(paid=value)
        return value

    def _settle(self, total=None, paid=None) -> None:
        # Validators run before assignment, so the incoming value is passed in.
        total = self.total_amount if total is None else total
        paid = self.paid_amount if paid is None else paid
        if total is None or not paid:
            return
        if self.status in (ContractStatus.COMPLETED, ContractStatus.CANCELLED):
            return
        if paid >= total:
            self.complete()

    def add_payment(self, amount: float) -> None:
        amount = float(amount)
        if not math.isfinite(amount) or amount < 0:
            raise ValidationFailure.for_field("amount", "Payment amount must be a non-negative number")
        if self.status == ContractStatus.CANCELLED:
            raise ConstraintViolation("Cannot record a payment on a cancelled contract")

        # reaching the total completes the contract, see _settle
        self.paid_amount = min(self.total_amount, self.paid_amount + amount)

    def sign(self) -> None:
        self.status = ContractStatus.SIGNED
        self.signed_date = utc_now()

    def activate(self) -> None:
        if self.status != ContractStatus.SIGNED:
            return
        self.status = ContractStatus.ACTIVE
        self.start_date = utc_now()

    def complete(self) -> None:
        self.status = ContractStatus.COMPLETED
        self.completion_date = utc_now()

    def cancel(self) -> None:
        self.status = ContractStatus.CANCELLED
        self.is_active = False

    def _enter_status(self, target) -> None:
        # Resuming from on_hold keeps the original signed/start stamps.
        if target == ContractStatus.SIGNED:
            self.status = target
            self.signed_date = self.signed_date or utc_now()
        elif target == ContractStatus.ACTIVE:
            self.status = target
            self.start_date = self.start_date or utc_now()
        elif target == ContractStatus.COMPLETED:
            self.complete()
        elif target == ContractStatus.CANCELLED:
            self.cancel()
        else:
            self.status = target

    @property
    def remaining_amount(self) -> float:
        return self.total_amount - self.paid_amount

    @property
    def payment_progress(self) -> float:
        if not self.total_amount:
            return 0.0
        return self.paid_amount / self.total_amount

    @property
    def is_overdue(self) -> bool:
        if self.completion_date is None:
            return False
        return self.status != ContractStatus.COMPLETED and utc_now() > self.completion_date

    def __repr__(self):
        return f"<Contract {self.contract_number} ({self.status}) {self.paid_amount}/{self.total_amount}>"
