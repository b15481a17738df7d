import math

from sqlalchemy import JSON, Boolean, CheckConstraint, Column, Float, String, Text
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import relationship, validates

from solar_scheduler.database import Base
from solar_scheduler.models.mixins import CompanyRecordMixin
from solar_scheduler.models.status import InstallationStatus, VendorSpecialty, parse_status
from solar_scheduler.services.errors import ValidationFailure

MIN_RATING = 0.0
MAX_RATING = 5.0


def clamp_rating(value) -> float:
    value = float(value)
    if math.isnan(value):
        raise ValidationFailure.for_field("rating", "Rating must be a number")
    return max(MIN_RATING, min(MAX_RATING, value))


class Vendor(CompanyRecordMixin, Base):
    __tablename__ = "vendors"

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_vendors_rating_range"),
    )

    name = Column(String(255), nullable=False, index=True)
    contact_email = Column(String(255), nullable=False, default="")
    contact_phone = Column(String(32), nullable=False, default="")
    address = Column(String(255), nullable=False, default="")

    # Specialty values, no duplicates, in the order they were added.
    specialties = Column(MutableList.as_mutable(JSON), nullable=False, default=list)

    rating = Column(Float, nullable=False, default=0.0)
    notes = Column(Text, nullable=False, default="")
    website = Column(String(255), nullable=False, default="")
    emergency_contact = Column(String(255), nullable=False, default="")
    insurance_details = Column(Text, nullable=False, default="")
    license_number = Column(String(100), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)

    # Installations outlive their vendor; the reference is cleared instead.
    installations = relationship("Installation", back_populates="vendor", order_by="Installation.id")

    def __init__(self, **kwargs):
        for field in ("contact_email", "contact_phone", "address", "notes", "website",
                      "emergency_contact", "insurance_details", "license_number"):
            kwargs.setdefault(field, "")
        kwargs.setdefault("specialties", [])
        kwargs.setdefault("rating", MIN_RATING)
        kwargs.setdefault("is_active", True)
        super().__init__(**kwargs)

    @validates("rating")
    def _validate_rating(self, key, value):
        return clamp_rating(value)

    @validates("specialties")
    def _validate_specialties(self, key, value):
        unique = []
        for raw in value or []:
            specialty = parse_status(VendorSpecialty, raw, field="specialties").value
            if specialty not in unique:
                unique.append(specialty)
        return unique

    def update_rating(self, new_rating: float) -> None:
        self.rating = new_rating

    def add_specialty(self, specialty) -> None:
        value = parse_status(VendorSpecialty, specialty, field="specialties").value
        if value not in self.specialties:
            # reassign so the set goes through validation and change tracking
            self.specialties = list(self.specialties) + [value]

    def remove_specialty(self, specialty) -> None:
        value = parse_status(VendorSpecialty, specialty, field="specialties").value
        if value in self.specialties:
            self.specialties = [v for v in self.specialties if v != value]

    @property
    def specialty_set(self) -> frozenset:
        return frozenset(VendorSpecialty(v) for v in self.specialties or [])

    @property
    def completed_installations(self) -> int:
        return sum(1 for i in self.installations if i.status == InstallationStatus.COMPLETED)

    def __repr__(self):
        return f"<Vendor {self.id} {self.name} rating={self.rating}>"
