from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship, validates

from solar_scheduler.database import Base
from solar_scheduler.models.mixins import CompanyRecordMixin, StatusTransitionMixin, naive_utc, utc_now
from solar_scheduler.models.status import (
    LEAD_TRANSITIONS,
    ContactMethod,
    LeadStatus,
    enum_column_type,
    parse_status,
)


class Customer(CompanyRecordMixin, StatusTransitionMixin, Base):
    __tablename__ = "customers"

    status_field = "lead_status"
    status_enum = LeadStatus
    allowed_transitions = LEAD_TRANSITIONS

    name = Column(String(100), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    address = Column(String(200), nullable=False)
    lead_status = Column(enum_column_type(LeadStatus, "lead_status"), nullable=False, index=True)
    preferred_contact_method = Column(
        enum_column_type(ContactMethod, "contact_method"),
        nullable=False,
    )
    last_contact_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=False, default="")

    # Jobs and contracts are owned: removing the customer removes them.
    jobs = relationship(
        "SolarJob",
        back_populates="customer",
        cascade="all",
        order_by="SolarJob.id",
    )
    contracts = relationship(
        "Contract",
        back_populates="customer",
        cascade="all",
        order_by="Contract.id",
    )

    def __init__(self, **kwargs):
        kwargs.setdefault("lead_status", LeadStatus.NEW_LEAD)
        kwargs.setdefault("preferred_contact_method", ContactMethod.EMAIL)
        kwargs.setdefault("notes", "")
        super().__init__(**kwargs)

    @validates("lead_status")
    def _validate_lead_status(self, key, value):
        return parse_status(LeadStatus, value, field=key)

    @validates("preferred_contact_method")
    def _validate_contact_method(self, key, value):
        return parse_status(ContactMethod, value, field=key)

    @validates("last_contact_date")
    def _validate_last_contact_date(self, key, value):
        return naive_utc(value)

    def _enter_status(self, target) -> None:
        self.lead_status = target
        self.last_contact_date = utc_now()

    def __repr__(self):
        return f"<Customer {self.id} {self.name} ({self.lead_status})>"
