"""
Fetch descriptors for each record type.

A query is a plain dataclass: filters are AND'ed, ``search`` is a
case-insensitive substring match over the entity's search fields (any field
may match), and results are ordered by the chosen sort key with ``id`` as the
final tie-break so equal keys always come back in creation order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

from sqlalchemy import String, case, cast, or_
from sqlalchemy.orm import Session

from solar_scheduler.models import Contract, Customer, Equipment, Installation, SolarJob, Vendor
from solar_scheduler.models.mixins import naive_utc
from solar_scheduler.models.status import (
    ContractStatus,
    EquipmentCategory,
    InstallationStatus,
    JobStatus,
    LeadStatus,
    VendorSpecialty,
    declared_order,
    parse_status,
)
from solar_scheduler.services.errors import ValidationFailure


class JobSort(str, Enum):
    CREATED_AT = "created_at"
    CUSTOMER_NAME = "customer_name"
    REVENUE = "revenue"
    SYSTEM_SIZE = "system_size"


class CustomerSort(str, Enum):
    NAME = "name"
    CREATED_AT = "created_at"
    LEAD_STATUS = "lead_status"


class EquipmentSort(str, Enum):
    NAME = "name"
    QUANTITY = "quantity"
    UNIT_PRICE = "unit_price"
    CATEGORY = "category"


class InstallationSort(str, Enum):
    SCHEDULED_DATE = "scheduled_date"
    STATUS = "status"
    CREW_SIZE = "crew_size"
    CREATED_AT = "created_at"


class VendorSort(str, Enum):
    NAME = "name"
    RATING = "rating"
    CREATED_AT = "created_at"


class ContractSort(str, Enum):
    CREATED_AT = "created_at"
    TOTAL_AMOUNT = "total_amount"
    CONTRACT_NUMBER = "contract_number"


# sort key -> (column attribute, ascending by default, enum whose declared order applies)
SortColumns = Dict[Enum, Tuple[str, bool, Optional[Type[Enum]]]]


@dataclass
class FetchQuery:
    search: Optional[str] = None
    sort_by: Any = None
    ascending: Optional[bool] = None
    limit: Optional[int] = None

    model: ClassVar[type]
    search_fields: ClassVar[Tuple[str, ...]] = ()
    sort_enum: ClassVar[Type[Enum]]
    sort_columns: ClassVar[SortColumns] = {}

    def __post_init__(self):
        if self.sort_by is None:
            self.sort_by = next(iter(self.sort_enum))
        else:
            self.sort_by = parse_status(self.sort_enum, self.sort_by, field="sort_by")

        if self.limit is not None:
            if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
                raise ValidationFailure.for_field("limit", "Limit must be a positive integer")

    def criteria(self) -> List[Any]:
        return []

    def _search_clause(self):
        term = (self.search or "").strip()
        if not term:
            return None
        return or_(
            *[getattr(self.model, name).icontains(term, autoescape=True) for name in self.search_fields]
        )

    def _order_by(self):
        attr, default_ascending, order_enum = self.sort_columns[self.sort_by]
        column = getattr(self.model, attr)
        if order_enum is not None:
            column = case(declared_order(order_enum), value=column, else_=len(order_enum))

        ascending = default_ascending if self.ascending is None else self.ascending
        return column.asc() if ascending else column.desc()

    def run(self, db: Session, company_id: int) -> list:
        model = self.model
        q = db.query(model).filter(model.company_id == int(company_id))

        criteria = self.criteria()
        if criteria:
            q = q.filter(*criteria)

        search = self._search_clause()
        if search is not None:
            q = q.filter(search)

        q = q.order_by(self._order_by(), model.id.asc())

        if self.limit is not None:
            q = q.limit(self.limit)

        return q.all()


def _date_range(column, start: Optional[datetime], end: Optional[datetime]) -> List[Any]:
    # inclusive on both ends
    out = []
    if start is not None:
        out.append(column >= naive_utc(start))
    if end is not None:
        out.append(column <= naive_utc(end))
    return out


@dataclass
class JobQuery(FetchQuery):
    status: Any = None
    customer_id: Optional[int] = None
    scheduled_from: Optional[datetime] = None
    scheduled_to: Optional[datetime] = None

    model = SolarJob
    search_fields = ("customer_name", "address", "notes")
    sort_enum = JobSort
    sort_columns = {
        JobSort.CREATED_AT: ("created_at", False, None),
        JobSort.CUSTOMER_NAME: ("customer_name", True, None),
        JobSort.REVENUE: ("estimated_revenue", False, None),
        JobSort.SYSTEM_SIZE: ("system_size", False, None),
    }

    def __post_init__(self):
        super().__post_init__()
        if self.status is not None:
            self.status = parse_status(JobStatus, self.status)

    def criteria(self):
        out = []
        if self.status is not None:
            out.append(SolarJob.status == self.status)
        if self.customer_id is not None:
            out.append(SolarJob.customer_id == int(self.customer_id))
        out.extend(_date_range(SolarJob.scheduled_date, self.scheduled_from, self.scheduled_to))
        return out


@dataclass
class CustomerQuery(FetchQuery):
    lead_status: Any = None

    model = Customer
    search_fields = ("name", "email", "phone")
    sort_enum = CustomerSort
    sort_columns = {
        CustomerSort.NAME: ("name", True, None),
        CustomerSort.CREATED_AT: ("created_at", False, None),
        CustomerSort.LEAD_STATUS: ("lead_status", True, LeadStatus),
    }

    def __post_init__(self):
        super().__post_init__()
        if self.lead_status is not None:
            self.lead_status = parse_status(LeadStatus, self.lead_status, field="lead_status")

    def criteria(self):
        if self.lead_status is None:
            return []
        return [Customer.lead_status == self.lead_status]


@dataclass
class EquipmentQuery(FetchQuery):
    category: Any = None
    low_stock_only: bool = False
    active_only: bool = False

    model = Equipment
    search_fields = ("name", "brand", "model", "supplier")
    sort_enum = EquipmentSort
    sort_columns = {
        EquipmentSort.NAME: ("name", True, None),
        EquipmentSort.QUANTITY: ("quantity", True, None),
        EquipmentSort.UNIT_PRICE: ("unit_price", False, None),
        EquipmentSort.CATEGORY: ("category", True, EquipmentCategory),
    }

    def __post_init__(self):
        super().__post_init__()
        if self.category is not None:
            self.category = parse_status(EquipmentCategory, self.category, field="category")

    def criteria(self):
        out = []
        if self.category is not None:
            out.append(Equipment.category == self.category)
        if self.low_stock_only:
            out.append(Equipment.quantity <= Equipment.low_stock_threshold)
        if self.active_only:
            out.append(Equipment.is_active.is_(True))
        return out


@dataclass
class InstallationQuery(FetchQuery):
    status: Any = None
    job_id: Optional[int] = None
    vendor_id: Optional[int] = None
    scheduled_from: Optional[datetime] = None
    scheduled_to: Optional[datetime] = None

    model = Installation
    search_fields = ("crew_members", "notes")
    sort_enum = InstallationSort
    sort_columns = {
        # upcoming work first
        InstallationSort.SCHEDULED_DATE: ("scheduled_date", True, None),
        InstallationSort.STATUS: ("status", True, InstallationStatus),
        InstallationSort.CREW_SIZE: ("crew_size", True, None),
        InstallationSort.CREATED_AT: ("created_at", False, None),
    }

    def __post_init__(self):
        super().__post_init__()
        if self.status is not None:
            self.status = parse_status(InstallationStatus, self.status)

    def criteria(self):
        out = []
        if self.status is not None:
            out.append(Installation.status == self.status)
        if self.job_id is not None:
            out.append(Installation.job_id == int(self.job_id))
        if self.vendor_id is not None:
            out.append(Installation.vendor_id == int(self.vendor_id))
        out.extend(_date_range(Installation.scheduled_date, self.scheduled_from, self.scheduled_to))
        return out


@dataclass
class VendorQuery(FetchQuery):
    specialty: Any = None
    min_rating: Optional[float] = None
    active_only: bool = False

    model = Vendor
    search_fields = ("name", "contact_email", "address")
    sort_enum = VendorSort
    sort_columns = {
        VendorSort.NAME: ("name", True, None),
        VendorSort.RATING: ("rating", False, None),
        VendorSort.CREATED_AT: ("created_at", False, None),
    }

    def __post_init__(self):
        super().__post_init__()
        if self.specialty is not None:
            self.specialty = parse_status(VendorSpecialty, self.specialty, field="specialty")

    def criteria(self):
        out = []
        if self.specialty is not None:
            # specialties is a JSON list of values; match the quoted member
            out.append(cast(Vendor.specialties, String).contains(f'"{self.specialty.value}"'))
        if self.min_rating is not None:
            out.append(Vendor.rating >= float(self.min_rating))
        if self.active_only:
            out.append(Vendor.is_active.is_(True))
        return out


@dataclass
class ContractQuery(FetchQuery):
    status: Any = None
    customer_id: Optional[int] = None
    job_id: Optional[int] = None

    model = Contract
    search_fields = ("contract_number", "title")
    sort_enum = ContractSort
    sort_columns = {
        ContractSort.CREATED_AT: ("created_at", False, None),
        ContractSort.TOTAL_AMOUNT: ("total_amount", False, None),
        ContractSort.CONTRACT_NUMBER: ("contract_number", True, None),
    }

    def __post_init__(self):
        super().__post_init__()
        if self.status is not None:
            self.status = parse_status(ContractStatus, self.status)

    def criteria(self):
        out = []
        if self.status is not None:
            out.append(Contract.status == self.status)
        if self.customer_id is not None:
            out.append(Contract.customer_id == int(self.customer_id))
        if self.job_id is not None:
            out.append(Contract.job_id == int(self.job_id))
        return out


QUERIES: Dict[type, Type[FetchQuery]] = {
    SolarJob: JobQuery,
    Customer: CustomerQuery,
    Equipment: EquipmentQuery,
    Installation: InstallationQuery,
    Vendor: VendorQuery,
    Contract: ContractQuery,
}
