from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from solar_scheduler.database import Base
from solar_scheduler.models.mixins import CompanyRecordMixin, StatusTransitionMixin, naive_utc, utc_now
from solar_scheduler.models.status import (
    INSTALLATION_TRANSITIONS,
    InstallationStatus,
    enum_column_type,
    parse_status,
)
from solar_scheduler.services.errors import ValidationFailure


class Installation(CompanyRecordMixin, StatusTransitionMixin, Base):
    __tablename__ = "installations"

    __table_args__ = (
        CheckConstraint(
            "completion_percentage >= 0 AND completion_percentage <= 100",
            name="ck_installations_completion_percentage_range",
        ),
        CheckConstraint(
            "crew_size >= 1 AND crew_size <= 20",
            name="ck_installations_crew_size_range",
        ),
    )

    status_enum = InstallationStatus
    allowed_transitions = INSTALLATION_TRANSITIONS

    job_id = Column(Integer, ForeignKey("solar_jobs.id", ondelete="CASCADE"), nullable=True, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True, index=True)

    scheduled_date = Column(DateTime, nullable=False, index=True)
    status = Column(
        enum_column_type(InstallationStatus, "installation_status"),
        nullable=False,
        index=True,
    )
    crew_members = Column(String(255), nullable=False, default="")
    crew_size = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=False, default="")
    weather_conditions = Column(String(255), nullable=False, default="")

    # Only start()/complete() write these.
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)

    completion_percentage = Column(Integer, nullable=False, default=0)
    quality_check_passed = Column(Boolean, nullable=False, default=False)

    job = relationship("SolarJob", back_populates="installations")
    vendor = relationship("Vendor", back_populates="installations")

    def __init__(self, **kwargs):
        kwargs.setdefault("status", InstallationStatus.SCHEDULED)
        kwargs.setdefault("crew_members", "")
        kwargs.setdefault("crew_size", 1)
        kwargs.setdefault("notes", "")
        kwargs.setdefault("weather_conditions", "")
        kwargs.setdefault("completion_percentage", 0)
        kwargs.setdefault("quality_check_passed", False)
        super().__init__(**kwargs)

    @validates("status")
    def _validate_status(self, key, value):
        return parse_status(InstallationStatus, value, field=key)

    @validates("scheduled_date", "start_time", "end_time")
    def _validate_timestamps(self, key, value):
        if key == "scheduled_date" and value is None:
            raise ValidationFailure.for_field(key, "Scheduled date is required")
        return naive_utc(value)

    @validates("completion_percentage")
    def _validate_completion_percentage(self, key, value):
        value = int(value)
        if value < 0 or value > 100:
            raise ValidationFailure.for_field(key, "Completion percentage must be between 0 and 100")
        return value

    @validates("crew_size")
    def _validate_crew_size(self, key, value):
        value = int(value)
        if value < 1:
            raise ValidationFailure.for_field(key, "Crew size must be at least 1")
        if value > 20:
            raise ValidationFailure.for_field(key, "Crew size cannot exceed 20")
        return value

    def start(self) -> None:
        # Calling twice restamps start_time.
        self.status = InstallationStatus.IN_PROGRESS
        self.start_time = utc_now()

    def complete(self, notes: Optional[str] = None) -> None:
        self.status = InstallationStatus.COMPLETED
        self.end_time = utc_now()
        self.completion_percentage = 100
        if notes:
            self.notes = notes

    def reschedule(self, new_date) -> None:
        # Moves back to scheduled only along an allowed edge.
        if self.status != InstallationStatus.SCHEDULED:
            self.transition(InstallationStatus.SCHEDULED)
        self.scheduled_date = new_date

    def update_progress(self, percentage: int) -> None:
        self.completion_percentage = min(100, max(0, int(percentage)))
        if self.completion_percentage == 100 and self.status == InstallationStatus.IN_PROGRESS:
            self.complete()

    def _enter_status(self, target) -> None:
        # Resuming after a side exit keeps the first start_time.
        if target == InstallationStatus.IN_PROGRESS and self.start_time is None:
            self.start()
        elif target == InstallationStatus.COMPLETED:
            self.complete()
        else:
            self.status = target

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.start_time is None or self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    @property
    def is_overdue(self) -> bool:
        if self.scheduled_date is None:
            return False
        return self.status != InstallationStatus.COMPLETED and utc_now() > self.scheduled_date

    def __repr__(self):
        return f"<Installation {self.id} job={self.job_id} ({self.status})>"
