from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from solar_scheduler.database import Base
from solar_scheduler.models.mixins import CompanyRecordMixin, StatusTransitionMixin, naive_utc
from solar_scheduler.models.status import JOB_TRANSITIONS, JobStatus, enum_column_type, parse_status


class SolarJob(CompanyRecordMixin, StatusTransitionMixin, Base):
    __tablename__ = "solar_jobs"

    __table_args__ = (
        CheckConstraint("system_size >= 0", name="ck_solar_jobs_system_size_nonnegative"),
        CheckConstraint("estimated_revenue >= 0", name="ck_solar_jobs_estimated_revenue_nonnegative"),
    )

    status_enum = JobStatus
    allowed_transitions = JOB_TRANSITIONS

    customer_id = Column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Denormalized from the customer at creation time.
    customer_name = Column(String(100), nullable=False, index=True)
    address = Column(String(200), nullable=False)

    system_size = Column(Float, nullable=False)  # kWp
    status = Column(enum_column_type(JobStatus, "job_status"), nullable=False, index=True)
    scheduled_date = Column(DateTime, nullable=True, index=True)
    estimated_revenue = Column(Float, nullable=False, default=0.0)
    notes = Column(Text, nullable=False, default="")

    customer = relationship("Customer", back_populates="jobs")
    installations = relationship(
        "Installation",
        back_populates="job",
        cascade="all",
        order_by="Installation.id",
    )
    contracts = relationship("Contract", back_populates="job", order_by="Contract.id")

    def __init__(self, **kwargs):
        kwargs.setdefault("status", JobStatus.PENDING)
        kwargs.setdefault("estimated_revenue", 0.0)
        kwargs.setdefault("notes", "")
        super().__init__(**kwargs)

    @validates("status")
    def _validate_status(self, key, value):
        return parse_status(JobStatus, value, field=key)

    @validates("scheduled_date")
    def _validate_scheduled_date(self, key, value):
        return naive_utc(value)

    @property
    def is_open(self) -> bool:
        return self.status not in (JobStatus.COMPLETED, JobStatus.CANCELLED)

    def __repr__(self):
        return f"<SolarJob {self.id} {self.customer_name} {self.system_size}kWp ({self.status})>"
