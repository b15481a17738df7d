"""
Closed enumerations used by the record models, the allowed status edges for
each lifecycle, and the parser that turns stored or legacy strings back into
enum members.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, FrozenSet, Optional, Type, TypeVar

import sqlalchemy as sa

from solar_scheduler.services.errors import ValidationFailure


class LeadStatus(str, Enum):
    NEW_LEAD = "new_lead"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"


class ContactMethod(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    TEXT = "text"
    IN_PERSON = "in_person"


class JobStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


class InstallationStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"
    REQUIRES_FOLLOW_UP = "requires_follow_up"


class ContractStatus(str, Enum):
    DRAFT = "draft"
    PENDING_SIGNATURE = "pending_signature"
    SIGNED = "signed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


class EquipmentCategory(str, Enum):
    SOLAR_PANELS = "solar_panels"
    INVERTERS = "inverters"
    MOUNTING = "mounting"
    ELECTRICAL = "electrical"
    BATTERIES = "batteries"
    MONITORING = "monitoring"
    TOOLS = "tools"
    SAFETY = "safety"


class VendorSpecialty(str, Enum):
    INSTALLATION = "installation"
    MAINTENANCE = "maintenance"
    ELECTRICAL = "electrical"
    ROOFING = "roofing"
    PERMITTING = "permitting"
    INSPECTION = "inspection"
    CLEANUP = "cleanup"
    EMERGENCY = "emergency"


# Display labels from older records that do not reduce to the member value.
_LEGACY_ALIASES: Dict[type, Dict[str, Enum]] = {
    LeadStatus: {"proposal_sent": LeadStatus.PROPOSAL},
    EquipmentCategory: {
        "panels": EquipmentCategory.SOLAR_PANELS,
        "mounting_systems": EquipmentCategory.MOUNTING,
        "electrical_components": EquipmentCategory.ELECTRICAL,
        "battery_storage": EquipmentCategory.BATTERIES,
        "monitoring_systems": EquipmentCategory.MONITORING,
        "installation_tools": EquipmentCategory.TOOLS,
        "safety_equipment": EquipmentCategory.SAFETY,
    },
    VendorSpecialty: {
        "electrical_work": VendorSpecialty.ELECTRICAL,
        "site_cleanup": VendorSpecialty.CLEANUP,
        "emergency_repairs": VendorSpecialty.EMERGENCY,
    },
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\s\-]+")

E = TypeVar("E", bound=Enum)


def _normalize_token(raw: str) -> str:
    token = _CAMEL_BOUNDARY.sub(r"_\1", raw.strip())
    return _SEPARATORS.sub("_", token).lower()


def parse_status(enum_cls: Type[E], raw, field: Optional[str] = None) -> E:
    """
    Accepts a member, its value ("in_progress"), a camelCase name
    ("inProgress") or a legacy display label ("In Progress").
    Anything else is a ValidationFailure; there is no silent default.
    """
    field_name = field or "status"

    if isinstance(raw, enum_cls):
        return raw

    if not isinstance(raw, str) or not raw.strip():
        raise ValidationFailure.for_field(field_name, f"Invalid {field_name}: {raw!r}")

    token = _normalize_token(raw)
    try:
        return enum_cls(token)
    except ValueError:
        pass

    alias = _LEGACY_ALIASES.get(enum_cls, {}).get(token)
    if alias is not None:
        return alias

    raise ValidationFailure.for_field(field_name, f"Invalid {field_name}: {raw!r}")


def declared_order(enum_cls: Type[Enum]) -> Dict[Enum, int]:
    return {member: index for index, member in enumerate(enum_cls)}


def enum_column_type(enum_cls: Type[Enum], name: str) -> sa.Enum:
    # Stored as the member value in a VARCHAR with a CHECK constraint.
    return sa.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


Edges = Dict[Enum, FrozenSet[Enum]]


JOB_TRANSITIONS: Edges = {
    JobStatus.PENDING: frozenset({JobStatus.APPROVED, JobStatus.ON_HOLD, JobStatus.CANCELLED}),
    JobStatus.APPROVED: frozenset({JobStatus.IN_PROGRESS, JobStatus.ON_HOLD, JobStatus.CANCELLED}),
    JobStatus.IN_PROGRESS: frozenset({JobStatus.COMPLETED, JobStatus.ON_HOLD, JobStatus.CANCELLED}),
    JobStatus.ON_HOLD: frozenset({JobStatus.APPROVED, JobStatus.IN_PROGRESS, JobStatus.CANCELLED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
}

_INSTALLATION_SIDE_EXITS = frozenset(
    {
        InstallationStatus.POSTPONED,
        InstallationStatus.CANCELLED,
        InstallationStatus.ON_HOLD,
        InstallationStatus.REQUIRES_FOLLOW_UP,
    }
)
_INSTALLATION_RESUME = frozenset(
    {
        InstallationStatus.SCHEDULED,
        InstallationStatus.CONFIRMED,
        InstallationStatus.IN_PROGRESS,
    }
)

INSTALLATION_TRANSITIONS: Edges = {
    InstallationStatus.SCHEDULED: _INSTALLATION_SIDE_EXITS
    | {InstallationStatus.CONFIRMED, InstallationStatus.IN_PROGRESS},
    InstallationStatus.CONFIRMED: _INSTALLATION_SIDE_EXITS | {InstallationStatus.IN_PROGRESS},
    InstallationStatus.IN_PROGRESS: _INSTALLATION_SIDE_EXITS | {InstallationStatus.COMPLETED},
    InstallationStatus.POSTPONED: (_INSTALLATION_SIDE_EXITS | _INSTALLATION_RESUME)
    - {InstallationStatus.POSTPONED},
    InstallationStatus.ON_HOLD: (_INSTALLATION_SIDE_EXITS | _INSTALLATION_RESUME)
    - {InstallationStatus.ON_HOLD},
    # follow-up work can close out the installation directly
    InstallationStatus.REQUIRES_FOLLOW_UP: (
        _INSTALLATION_SIDE_EXITS | _INSTALLATION_RESUME | {InstallationStatus.COMPLETED}
    )
    - {InstallationStatus.REQUIRES_FOLLOW_UP},
    InstallationStatus.COMPLETED: frozenset(),
    InstallationStatus.CANCELLED: frozenset(),
}

CONTRACT_TRANSITIONS: Edges = {
    ContractStatus.DRAFT: frozenset(
        {
            ContractStatus.PENDING_SIGNATURE,
            ContractStatus.SIGNED,
            ContractStatus.CANCELLED,
            ContractStatus.ON_HOLD,
        }
    ),
    ContractStatus.PENDING_SIGNATURE: frozenset(
        {ContractStatus.SIGNED, ContractStatus.CANCELLED, ContractStatus.ON_HOLD}
    ),
    ContractStatus.SIGNED: frozenset(
        {
            ContractStatus.ACTIVE,
            ContractStatus.COMPLETED,
            ContractStatus.CANCELLED,
            ContractStatus.ON_HOLD,
        }
    ),
    ContractStatus.ACTIVE: frozenset(
        {ContractStatus.COMPLETED, ContractStatus.CANCELLED, ContractStatus.ON_HOLD}
    ),
    ContractStatus.ON_HOLD: frozenset(
        {
            ContractStatus.DRAFT,
            ContractStatus.PENDING_SIGNATURE,
            ContractStatus.SIGNED,
            ContractStatus.ACTIVE,
            ContractStatus.CANCELLED,
        }
    ),
    ContractStatus.COMPLETED: frozenset(),
    ContractStatus.CANCELLED: frozenset(),
}

LEAD_TRANSITIONS: Edges = {
    LeadStatus.NEW_LEAD: frozenset({LeadStatus.CONTACTED, LeadStatus.LOST}),
    LeadStatus.CONTACTED: frozenset({LeadStatus.QUALIFIED, LeadStatus.LOST}),
    LeadStatus.QUALIFIED: frozenset({LeadStatus.PROPOSAL, LeadStatus.LOST}),
    LeadStatus.PROPOSAL: frozenset({LeadStatus.NEGOTIATION, LeadStatus.LOST}),
    LeadStatus.NEGOTIATION: frozenset({LeadStatus.WON, LeadStatus.LOST}),
    LeadStatus.WON: frozenset(),
    LeadStatus.LOST: frozenset(),
}
