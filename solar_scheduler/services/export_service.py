"""
Export of jobs, customers and equipment, plus a one-page business report.

Each export reads through the repository, so it only ever sees the caller's
company, and renders as csv, json or txt. Nothing is written to disk; the
caller gets an ExportResult with the rendered text and a suggested filename.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from solar_scheduler.models import Customer, Equipment, SolarJob
from solar_scheduler.models.mixins import utc_now
from solar_scheduler.models.status import JobStatus, parse_status
from solar_scheduler.services import repository
from solar_scheduler.services.context import RequestContext
from solar_scheduler.services.queries import CustomerQuery, EquipmentQuery, InstallationQuery, JobQuery
from solar_scheduler.services.statistics_service import (
    compute_equipment_statistics,
    compute_job_statistics,
    summarize_customer,
)

logger = logging.getLogger(__name__)

_RECORD_RULE = "=" * 80
_ENTRY_RULE = "-" * 40


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    TXT = "txt"

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]


_MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.JSON: "application/json",
    ExportFormat.TXT: "text/plain",
}


@dataclass(frozen=True)
class ExportResult:
    filename: str
    format: ExportFormat
    content: str
    record_count: int

    @property
    def media_type(self) -> str:
        return self.format.media_type


def parse_format(raw) -> ExportFormat:
    return parse_status(ExportFormat, raw, field="format")


def _filename(stem: str, fmt: ExportFormat, now: datetime) -> str:
    return f"{stem}_{now.date().isoformat()}.{fmt.value}"


def _day(value: Optional[datetime]) -> str:
    return value.date().isoformat() if value is not None else ""


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _money(value: float) -> str:
    return f"${value:.2f}"


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _csv(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(header)
    writer.writerows(rows)
    return output.getvalue()


def _json(payload) -> str:
    return json.dumps(payload, indent=2)


def _txt(title: str, now: datetime, count_label: str, entries: List[List[str]]) -> str:
    lines = [
        title,
        f"Generated: {now.isoformat(timespec='minutes')}",
        f"{count_label}: {len(entries)}",
        "",
        _RECORD_RULE,
        "",
    ]
    for entry in entries:
        lines.extend(entry)
        lines.extend(["", _ENTRY_RULE, ""])
    return "\n".join(lines) + "\n"


def _render(
    fmt: ExportFormat,
    *,
    csv_fn: Callable[[], str],
    json_fn: Callable[[], str],
    txt_fn: Callable[[], str],
) -> str:
    if fmt == ExportFormat.CSV:
        return csv_fn()
    if fmt == ExportFormat.JSON:
        return json_fn()
    return txt_fn()


def _done(stem: str, fmt: ExportFormat, now: datetime, content: str, count: int, ctx: RequestContext) -> ExportResult:
    result = ExportResult(filename=_filename(stem, fmt, now), format=fmt, content=content, record_count=count)
    logger.info(
        "Export rendered",
        extra={"export": stem, "format": fmt.value, "records": count, "company_id": ctx.company_id},
    )
    return result


# --- renderers over already-loaded records ---------------------------------


def render_jobs(jobs: Sequence[SolarJob], fmt, *, include_details: bool = True, now: Optional[datetime] = None) -> str:
    fmt = parse_format(fmt)
    now = now or utc_now()

    def as_csv():
        return _csv(
            [
                "Customer Name", "Address", "System Size (kW)", "Status",
                "Created Date", "Scheduled Date", "Estimated Revenue", "Notes",
            ],
            (
                [
                    j.customer_name,
                    j.address,
                    j.system_size,
                    j.status.value,
                    _day(j.created_at),
                    _day(j.scheduled_date),
                    j.estimated_revenue,
                    j.notes if include_details else "",
                ]
                for j in jobs
            ),
        )

    def as_json():
        out = []
        for j in jobs:
            data = {
                "id": j.id,
                "customer_id": j.customer_id,
                "customer_name": j.customer_name,
                "address": j.address,
                "system_size": j.system_size,
                "status": j.status.value,
                "created_at": _iso(j.created_at),
                "estimated_revenue": j.estimated_revenue,
            }
            if j.scheduled_date is not None:
                data["scheduled_date"] = _iso(j.scheduled_date)
            if include_details and j.notes:
                data["notes"] = j.notes
            out.append(data)
        return _json(out)

    def as_txt():
        entries = []
        for j in jobs:
            entry = [
                f"Customer: {j.customer_name}",
                f"Address: {j.address}",
                f"System Size: {j.system_size} kW",
                f"Status: {j.status.value}",
                f"Created: {_day(j.created_at)}",
            ]
            if j.scheduled_date is not None:
                entry.append(f"Scheduled: {_day(j.scheduled_date)}")
            entry.append(f"Estimated Revenue: {_money(j.estimated_revenue)}")
            if include_details and j.notes:
                entry.append(f"Notes: {j.notes}")
            entries.append(entry)
        return _txt("SOLAR JOBS REPORT", now, "Total Jobs", entries)

    return _render(fmt, csv_fn=as_csv, json_fn=as_json, txt_fn=as_txt)


def render_customers(
    customers: Sequence[Customer],
    jobs: Iterable[SolarJob],
    fmt,
    *,
    include_job_history: bool = True,
    now: Optional[datetime] = None,
) -> str:
    fmt = parse_format(fmt)
    now = now or utc_now()

    jobs_by_customer: Dict[int, List[SolarJob]] = {}
    for job in jobs:
        if job.customer_id is not None:
            jobs_by_customer.setdefault(job.customer_id, []).append(job)
    summaries = {c.id: summarize_customer(c, jobs_by_customer.get(c.id, [])) for c in customers}

    def as_csv():
        return _csv(
            ["Name", "Email", "Phone", "Address", "Lead Status", "Created Date", "Total Jobs", "Total Revenue"],
            (
                [
                    c.name,
                    c.email,
                    c.phone,
                    c.address,
                    c.lead_status.value,
                    _day(c.created_at),
                    summaries[c.id].total_jobs,
                    summaries[c.id].total_revenue,
                ]
                for c in customers
            ),
        )

    def as_json():
        out = []
        for c in customers:
            data = {
                "id": c.id,
                "name": c.name,
                "email": c.email,
                "phone": c.phone,
                "address": c.address,
                "lead_status": c.lead_status.value,
                "created_at": _iso(c.created_at),
            }
            if include_job_history:
                data["total_jobs"] = summaries[c.id].total_jobs
                data["active_jobs"] = summaries[c.id].active_jobs
                data["total_revenue"] = summaries[c.id].total_revenue
            out.append(data)
        return _json(out)

    def as_txt():
        entries = []
        for c in customers:
            entry = [
                f"Name: {c.name}",
                f"Email: {c.email}",
                f"Phone: {c.phone}",
                f"Address: {c.address}",
                f"Lead Status: {c.lead_status.value}",
                f"Created: {_day(c.created_at)}",
            ]
            if include_job_history:
                entry.append(f"Total Jobs: {summaries[c.id].total_jobs}")
                entry.append(f"Total Revenue: {_money(summaries[c.id].total_revenue)}")
            entries.append(entry)
        return _txt("CUSTOMERS REPORT", now, "Total Customers", entries)

    return _render(fmt, csv_fn=as_csv, json_fn=as_json, txt_fn=as_txt)


def render_equipment(items: Sequence[Equipment], fmt, *, now: Optional[datetime] = None) -> str:
    fmt = parse_format(fmt)
    now = now or utc_now()

    def as_csv():
        return _csv(
            ["Name", "Category", "Brand", "Model", "Quantity", "Unit Price", "Low Stock Threshold", "Total Value", "Low Stock"],
            (
                [
                    e.name,
                    e.category.value,
                    e.brand,
                    e.model,
                    e.quantity,
                    e.unit_price,
                    e.low_stock_threshold,
                    e.total_value,
                    _yes_no(e.is_low_stock),
                ]
                for e in items
            ),
        )

    def as_json():
        return _json(
            [
                {
                    "id": e.id,
                    "name": e.name,
                    "category": e.category.value,
                    "brand": e.brand,
                    "model": e.model,
                    "quantity": e.quantity,
                    "unit_price": e.unit_price,
                    "low_stock_threshold": e.low_stock_threshold,
                    "total_value": e.total_value,
                    "is_low_stock": e.is_low_stock,
                }
                for e in items
            ]
        )

    def as_txt():
        entries = [
            [
                f"Name: {e.name}",
                f"Category: {e.category.value}",
                f"Brand: {e.brand}",
                f"Model: {e.model}",
                f"Quantity: {e.quantity}",
                f"Unit Price: {_money(e.unit_price)}",
                f"Low Stock Threshold: {e.low_stock_threshold}",
                f"Total Value: {_money(e.total_value)}",
                f"Low Stock: {_yes_no(e.is_low_stock)}",
            ]
            for e in items
        ]
        return _txt("EQUIPMENT INVENTORY REPORT", now, "Total Items", entries)

    return _render(fmt, csv_fn=as_csv, json_fn=as_json, txt_fn=as_txt)


def build_business_report(jobs, customers, equipment, installations, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    jobs = list(jobs)
    job_stats = compute_job_statistics(jobs)
    equipment_stats = compute_equipment_statistics(equipment)

    return {
        "generated_at": (now or utc_now()).isoformat(),
        "summary": {
            "total_jobs": job_stats.total_jobs,
            "total_customers": len(list(customers)),
            "total_equipment_items": equipment_stats.total_items,
            "total_installations": len(list(installations)),
        },
        "job_statistics": {
            "completed_jobs": job_stats.completed_jobs,
            "active_jobs": job_stats.active_jobs,
            "pending_jobs": job_stats.jobs_by_status[JobStatus.PENDING.value],
            "total_revenue": job_stats.total_revenue,
            "pending_revenue": job_stats.pending_revenue,
        },
        "equipment_statistics": {
            "total_value": equipment_stats.total_value,
            "low_stock_items": equipment_stats.low_stock_count,
            "out_of_stock_items": equipment_stats.out_of_stock_count,
        },
    }


def render_business_report(report: Dict[str, Any], fmt) -> str:
    fmt = parse_format(fmt)
    summary = report["summary"]
    job_stats = report["job_statistics"]
    equipment_stats = report["equipment_statistics"]

    def as_csv():
        return _csv(
            ["Metric", "Value"],
            [
                ["Generated Date", report["generated_at"]],
                ["Total Jobs", summary["total_jobs"]],
                ["Total Customers", summary["total_customers"]],
                ["Total Equipment Items", summary["total_equipment_items"]],
                ["Total Installations", summary["total_installations"]],
                ["Completed Jobs", job_stats["completed_jobs"]],
                ["Active Jobs", job_stats["active_jobs"]],
                ["Pending Jobs", job_stats["pending_jobs"]],
                ["Total Revenue", job_stats["total_revenue"]],
                ["Pending Revenue", job_stats["pending_revenue"]],
                ["Total Equipment Value", equipment_stats["total_value"]],
                ["Low Stock Items", equipment_stats["low_stock_items"]],
                ["Out of Stock Items", equipment_stats["out_of_stock_items"]],
            ],
        )

    def as_txt():
        lines = [
            "BUSINESS REPORT",
            f"Generated: {report['generated_at']}",
            "",
            _RECORD_RULE,
            "",
            "SUMMARY",
            f"Total Jobs: {summary['total_jobs']}",
            f"Total Customers: {summary['total_customers']}",
            f"Total Equipment Items: {summary['total_equipment_items']}",
            f"Total Installations: {summary['total_installations']}",
            "",
            "JOB STATISTICS",
            f"Completed Jobs: {job_stats['completed_jobs']}",
            f"Active Jobs: {job_stats['active_jobs']}",
            f"Pending Jobs: {job_stats['pending_jobs']}",
            f"Total Revenue: {_money(job_stats['total_revenue'])}",
            f"Pending Revenue: {_money(job_stats['pending_revenue'])}",
            "",
            "EQUIPMENT STATISTICS",
            f"Total Equipment Value: {_money(equipment_stats['total_value'])}",
            f"Low Stock Items: {equipment_stats['low_stock_items']}",
            f"Out of Stock Items: {equipment_stats['out_of_stock_items']}",
        ]
        return "\n".join(lines) + "\n"

    return _render(fmt, csv_fn=as_csv, json_fn=lambda: _json(report), txt_fn=as_txt)


# --- company-scoped exports ------------------------------------------------


def export_jobs(
    ctx: RequestContext,
    fmt,
    *,
    include_details: bool = True,
    db: Optional[Session] = None,
) -> ExportResult:
    fmt = parse_format(fmt)
    now = utc_now()
    jobs = repository.fetch(ctx, JobQuery(), db=db)
    content = render_jobs(jobs, fmt, include_details=include_details, now=now)
    return _done("solar_jobs", fmt, now, content, len(jobs), ctx)


def export_customers(
    ctx: RequestContext,
    fmt,
    *,
    include_job_history: bool = True,
    db: Optional[Session] = None,
) -> ExportResult:
    fmt = parse_format(fmt)
    now = utc_now()
    customers = repository.fetch(ctx, CustomerQuery(), db=db)
    jobs = repository.fetch(ctx, JobQuery(), db=db) if include_job_history else []
    content = render_customers(customers, jobs, fmt, include_job_history=include_job_history, now=now)
    return _done("customers", fmt, now, content, len(customers), ctx)


def export_equipment(ctx: RequestContext, fmt, *, db: Optional[Session] = None) -> ExportResult:
    fmt = parse_format(fmt)
    now = utc_now()
    items = repository.fetch(ctx, EquipmentQuery(), db=db)
    content = render_equipment(items, fmt, now=now)
    return _done("equipment_inventory", fmt, now, content, len(items), ctx)


def export_business_report(ctx: RequestContext, fmt, *, db: Optional[Session] = None) -> ExportResult:
    fmt = parse_format(fmt)
    now = utc_now()
    report = build_business_report(
        repository.fetch(ctx, JobQuery(), db=db),
        repository.fetch(ctx, CustomerQuery(), db=db),
        repository.fetch(ctx, EquipmentQuery(), db=db),
        repository.fetch(ctx, InstallationQuery(), db=db),
        now=now,
    )
    content = render_business_report(report, fmt)
    return _done("business_report", fmt, now, content, report["summary"]["total_jobs"], ctx)
