from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from solar_scheduler.models import Customer, Equipment, Installation, SolarJob
from solar_scheduler.models.status import EquipmentCategory, InstallationStatus, JobStatus, LeadStatus
from solar_scheduler.services import repository
from solar_scheduler.services.context import RequestContext
from solar_scheduler.services.queries import CustomerQuery, EquipmentQuery, InstallationQuery, JobQuery


@dataclass(frozen=True)
class JobStatistics:
    total_jobs: int
    active_jobs: int
    completed_jobs: int
    cancelled_jobs: int
    total_revenue: float
    pending_revenue: float
    average_system_size: float
    completion_rate: float
    revenue_by_status: Dict[str, float] = field(default_factory=dict)
    jobs_by_status: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class EquipmentStatistics:
    total_items: int
    total_value: float
    low_stock_count: int
    out_of_stock_count: int
    low_stock_items: List[Equipment] = field(default_factory=list)
    items_by_category: Dict[str, int] = field(default_factory=dict)
    value_by_category: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class InstallationStatistics:
    total_installations: int
    scheduled_installations: int
    in_progress_installations: int
    completed_installations: int
    cancelled_installations: int
    overdue_installations: int
    completion_rate: float


@dataclass(frozen=True)
class CustomerSummary:
    customer_id: int
    name: str
    total_jobs: int
    active_jobs: int
    total_revenue: float


@dataclass(frozen=True)
class CustomerStatistics:
    total_customers: int
    new_leads: int
    qualified_leads: int
    proposal_sent: int
    closed_won: int
    closed_lost: int
    conversion_rate: float
    customers_by_lead_status: Dict[str, int] = field(default_factory=dict)
    top_customers_by_revenue: List[CustomerSummary] = field(default_factory=list)


def compute_job_statistics(jobs: Iterable[SolarJob]) -> JobStatistics:
    jobs = list(jobs)
    total = len(jobs)

    completed = [j for j in jobs if j.status == JobStatus.COMPLETED]
    cancelled = [j for j in jobs if j.status == JobStatus.CANCELLED]
    open_jobs = [j for j in jobs if j.status not in (JobStatus.COMPLETED, JobStatus.CANCELLED)]

    revenue_by_status = {status.value: 0.0 for status in JobStatus}
    jobs_by_status = {status.value: 0 for status in JobStatus}
    for job in jobs:
        revenue_by_status[job.status.value] += job.estimated_revenue
        jobs_by_status[job.status.value] += 1

    return JobStatistics(
        total_jobs=total,
        active_jobs=sum(1 for j in jobs if j.status == JobStatus.IN_PROGRESS),
        completed_jobs=len(completed),
        cancelled_jobs=len(cancelled),
        total_revenue=sum(j.estimated_revenue for j in completed),
        pending_revenue=sum(j.estimated_revenue for j in open_jobs),
        average_system_size=(sum(j.system_size for j in jobs) / total) if total else 0.0,
        completion_rate=(len(completed) / total) if total else 0.0,
        revenue_by_status=revenue_by_status,
        jobs_by_status=jobs_by_status,
    )


def compute_equipment_statistics(items: Iterable[Equipment]) -> EquipmentStatistics:
    items = list(items)

    low_stock = sorted((e for e in items if e.is_low_stock), key=lambda e: (e.name, e.id or 0))

    items_by_category = {category.value: 0 for category in EquipmentCategory}
    value_by_category = {category.value: 0.0 for category in EquipmentCategory}
    for item in items:
        items_by_category[item.category.value] += 1
        value_by_category[item.category.value] += item.total_value

    return EquipmentStatistics(
        total_items=len(items),
        total_value=sum(e.total_value for e in items),
        low_stock_count=len(low_stock),
        out_of_stock_count=sum(1 for e in items if e.is_out_of_stock),
        low_stock_items=low_stock,
        items_by_category=items_by_category,
        value_by_category=value_by_category,
    )


def compute_installation_statistics(installations: Iterable[Installation]) -> InstallationStatistics:
    installations = list(installations)
    total = len(installations)

    def count(status: InstallationStatus) -> int:
        return sum(1 for i in installations if i.status == status)

    completed = count(InstallationStatus.COMPLETED)

    return InstallationStatistics(
        total_installations=total,
        scheduled_installations=count(InstallationStatus.SCHEDULED),
        in_progress_installations=count(InstallationStatus.IN_PROGRESS),
        completed_installations=completed,
        cancelled_installations=count(InstallationStatus.CANCELLED),
        overdue_installations=sum(1 for i in installations if i.is_overdue),
        completion_rate=(completed / total) if total else 0.0,
    )


def job_statistics(ctx: RequestContext, *, db: Optional[Session] = None) -> JobStatistics:
    return compute_job_statistics(repository.fetch(ctx, JobQuery(), db=db))


def equipment_statistics(ctx: RequestContext, *, db: Optional[Session] = None) -> EquipmentStatistics:
    return compute_equipment_statistics(repository.fetch(ctx, EquipmentQuery(), db=db))


def installation_statistics(ctx: RequestContext, *, db: Optional[Session] = None) -> InstallationStatistics:
    return compute_installation_statistics(repository.fetch(ctx, InstallationQuery(), db=db))


# pending work counts as active for a customer, unlike the job-level figure
_CUSTOMER_ACTIVE_JOB_STATUSES = (JobStatus.PENDING, JobStatus.IN_PROGRESS)


def summarize_customer(customer: Customer, jobs: Iterable[SolarJob]) -> CustomerSummary:
    """Job count and revenue for one customer; ``jobs`` must already be that customer's."""
    jobs = list(jobs)
    return CustomerSummary(
        customer_id=customer.id,
        name=customer.name,
        total_jobs=len(jobs),
        active_jobs=sum(1 for j in jobs if j.status in _CUSTOMER_ACTIVE_JOB_STATUSES),
        total_revenue=sum(j.estimated_revenue for j in jobs),
    )


def compute_customer_statistics(
    customers: Iterable[Customer],
    jobs: Iterable[SolarJob] = (),
) -> CustomerStatistics:
    customers = list(customers)
    total = len(customers)

    customers_by_lead_status = {status.value: 0 for status in LeadStatus}
    for customer in customers:
        customers_by_lead_status[customer.lead_status.value] += 1

    jobs_by_customer: Dict[int, List[SolarJob]] = {}
    for job in jobs:
        if job.customer_id is not None:
            jobs_by_customer.setdefault(job.customer_id, []).append(job)

    summaries = [summarize_customer(c, jobs_by_customer.get(c.id, [])) for c in customers]
    top = sorted(
        (s for s in summaries if s.total_revenue > 0),
        key=lambda s: (-s.total_revenue, s.customer_id or 0),
    )

    won = customers_by_lead_status[LeadStatus.WON.value]

    return CustomerStatistics(
        total_customers=total,
        new_leads=customers_by_lead_status[LeadStatus.NEW_LEAD.value],
        qualified_leads=customers_by_lead_status[LeadStatus.QUALIFIED.value],
        proposal_sent=customers_by_lead_status[LeadStatus.PROPOSAL.value],
        closed_won=won,
        closed_lost=customers_by_lead_status[LeadStatus.LOST.value],
        conversion_rate=(won / total) if total else 0.0,
        customers_by_lead_status=customers_by_lead_status,
        top_customers_by_revenue=top,
    )


def customer_statistics(ctx: RequestContext, *, db: Optional[Session] = None) -> CustomerStatistics:
    return compute_customer_statistics(
        repository.fetch(ctx, CustomerQuery(), db=db),
        repository.fetch(ctx, JobQuery(), db=db),
    )


def customer_summary(ctx: RequestContext, customer_id: int, *, db: Optional[Session] = None) -> CustomerSummary:
    customer = repository.get(ctx, Customer, customer_id, db=db)
    return summarize_customer(customer, repository.fetch(ctx, JobQuery(customer_id=customer.id), db=db))
