"""
Create / read / update / delete for every record type.

Every call takes a RequestContext and is scoped to its company. Each write
runs in one session transaction under a process-wide lock, so a status change
and the timestamps it stamps commit together or not at all.

As elsewhere in the services: if ``db`` is provided the function will NOT
commit/close, the caller owns the transaction. If ``db`` is None the function
manages its own session + commit.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from solar_scheduler.database import SessionLocal
from solar_scheduler.models import Contract, Customer, Equipment, Installation, SolarJob, Vendor
from solar_scheduler.services.context import RequestContext
from solar_scheduler.services.errors import (
    ConstraintViolation,
    NotFound,
    PersistenceFailure,
    ValidationFailure,
)
from solar_scheduler.services.integrity import DeleteResult, apply_delete
from solar_scheduler.services.queries import (
    QUERIES,
    ContractQuery,
    CustomerQuery,
    EquipmentQuery,
    FetchQuery,
    InstallationQuery,
    JobQuery,
    VendorQuery,
)
from solar_scheduler.services.validation import validate_fields

logger = logging.getLogger(__name__)

_write_lock = threading.RLock()

Mutator = Callable[[Any], None]

RESOURCE_NAMES: Dict[type, str] = {
    Customer: "Customer",
    SolarJob: "Job",
    Installation: "Installation",
    Equipment: "Equipment",
    Vendor: "Vendor",
    Contract: "Contract",
}

# foreign key column -> referenced model
_REFERENCES: Dict[str, type] = {
    "customer_id": Customer,
    "job_id": SolarJob,
    "vendor_id": Vendor,
}

_READ_ONLY_FIELDS = frozenset({"id", "company_id", "created_at"})

# Written only by the named mutators.
_MUTATOR_OWNED_FIELDS = frozenset(
    {
        "last_updated",
        "last_contact_date",
        "start_time",
        "end_time",
        "signed_date",
        "paid_amount",
        "completion_percentage",
    }
)


def _resource(model_cls) -> str:
    return RESOURCE_NAMES.get(model_cls, model_cls.__name__)


def _log_extra(ctx: RequestContext, model_cls, record_id) -> Dict[str, Any]:
    return {
        "table": model_cls.__tablename__,
        "record_id": record_id,
        "company_id": ctx.company_id,
        "user_id": ctx.user_id,
    }


@contextmanager
def _read_session(db: Optional[Session]) -> Iterator[Session]:
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        yield db
    except SQLAlchemyError as exc:
        logger.exception("Read failed")
        raise PersistenceFailure("Could not read from the database") from exc
    finally:
        if owns_db:
            db.close()


@contextmanager
def _write_session(db: Optional[Session]) -> Iterator[Session]:
    owns_db = db is None

    with _write_lock:
        if owns_db:
            db = SessionLocal()

        try:
            yield db
            if owns_db:
                db.commit()
        except SQLAlchemyError as exc:
            if owns_db:
                db.rollback()
            logger.exception("Write failed; transaction rolled back")
            raise PersistenceFailure("Could not save changes to the database") from exc
        except Exception:
            if owns_db:
                db.rollback()
            raise
        finally:
            if owns_db:
                db.close()


def _load(db: Session, ctx: RequestContext, model_cls, record_id):
    try:
        record_id = int(record_id)
    except (TypeError, ValueError):
        raise NotFound(_resource(model_cls), record_id) from None

    row = (
        db.query(model_cls)
        .filter(
            model_cls.id == record_id,
            model_cls.company_id == ctx.company_id,
        )
        .first()
    )
    if row is None:
        raise NotFound(_resource(model_cls), record_id)
    return row


def _resolve_references(db: Session, ctx: RequestContext, values: Mapping[str, Any]) -> Dict[str, Any]:
    resolved = {}
    for key, target_cls in _REFERENCES.items():
        value = values.get(key)
        if value is not None:
            resolved[key] = _load(db, ctx, target_cls, value)
    return resolved


def _check_field_names(model_cls, fields: Mapping[str, Any]) -> None:
    columns = set(model_cls.__table__.columns.keys())
    unknown = sorted(k for k in fields if k not in columns)
    if unknown:
        raise ValidationFailure(
            f"Unknown {_resource(model_cls)} field(s): {', '.join(unknown)}",
            errors=[{"field": k, "message": "Unknown field"} for k in unknown],
        )


# --- generic operations ----------------------------------------------------


def create(ctx: RequestContext, model_cls, fields: Mapping[str, Any], *, db: Optional[Session] = None):
    fields = dict(fields)

    # records start in their initial status with no lifecycle stamps
    status_field = getattr(model_cls, "status_field", None)
    refused = sorted(
        k
        for k in fields
        if k in _READ_ONLY_FIELDS or k in _MUTATOR_OWNED_FIELDS or k == status_field
    )
    if refused:
        raise ConstraintViolation(f"Cannot set {', '.join(refused)} on create")
    _check_field_names(model_cls, fields)

    with _write_session(db) as session:
        refs = _resolve_references(session, ctx, fields)

        customer = refs.get("customer_id")
        if model_cls is SolarJob and customer is not None:
            # denormalized copy, used when the caller did not supply one
            if not (fields.get("customer_name") or "").strip():
                fields["customer_name"] = customer.name
            if not (fields.get("address") or "").strip():
                fields["address"] = customer.address

        validate_fields(model_cls.__tablename__, fields)

        row = model_cls(company_id=ctx.company_id, **fields)
        session.add(row)
        session.flush()
        session.refresh(row)

    logger.info("Record created", extra=_log_extra(ctx, model_cls, row.id))
    return row


def get(ctx: RequestContext, model_cls, record_id, *, db: Optional[Session] = None):
    with _read_session(db) as session:
        return _load(session, ctx, model_cls, record_id)


def fetch(ctx: RequestContext, query: FetchQuery, *, db: Optional[Session] = None) -> list:
    with _read_session(db) as session:
        return query.run(session, ctx.company_id)


def fetch_all(ctx: RequestContext, model_cls, *, db: Optional[Session] = None) -> list:
    return fetch(ctx, QUERIES[model_cls](), db=db)


def update(ctx: RequestContext, model_cls, record_id, mutator: Mutator, *, db: Optional[Session] = None):
    """
    Load the record, apply ``mutator`` (a named transition or set_fields(...))
    and commit. Any error rolls the whole change back.
    """
    with _write_session(db) as session:
        row = _load(session, ctx, model_cls, record_id)

        before = {key: getattr(row, key) for key in _REFERENCES if hasattr(row, key)}
        mutator(row)

        # a reassigned reference must point at a record of the same company
        changed = {
            key: getattr(row, key)
            for key, old in before.items()
            if getattr(row, key) != old
        }
        _resolve_references(session, ctx, changed)

        session.flush()
        session.refresh(row)

    logger.info("Record updated", extra=_log_extra(ctx, model_cls, row.id))
    return row


def set_fields(**fields) -> Mutator:
    """
    Build a raw-field mutator. Status columns change only through transitions;
    identity, tenancy and mutator-owned fields cannot be set directly.
    """
    refused = sorted(k for k in fields if k in _READ_ONLY_FIELDS or k in _MUTATOR_OWNED_FIELDS)
    if refused:
        raise ConstraintViolation(f"Field(s) cannot be set directly: {', '.join(refused)}")

    def mutator(row) -> None:
        status_field = getattr(row, "status_field", None)
        if status_field is not None and status_field in fields:
            raise ConstraintViolation(
                f"{status_field} can only change through a status transition"
            )

        _check_field_names(type(row), fields)
        validate_fields(row.__tablename__, fields, partial=True)

        for key, value in fields.items():
            setattr(row, key, value)

    return mutator


def delete(ctx: RequestContext, model_cls, record_id, *, db: Optional[Session] = None) -> DeleteResult:
    with _write_session(db) as session:
        row = _load(session, ctx, model_cls, record_id)
        result = apply_delete(session, row)

    logger.info(
        "Record deleted",
        extra={**_log_extra(ctx, model_cls, result.id), "deleted": result.deleted, "detached": result.detached},
    )
    return result


# --- customers -------------------------------------------------------------


def create_customer(ctx: RequestContext, **fields) -> Customer:
    return create(ctx, Customer, fields)


def get_customer(ctx: RequestContext, customer_id: int) -> Customer:
    return get(ctx, Customer, customer_id)


def fetch_customers(ctx: RequestContext, **criteria) -> List[Customer]:
    return fetch(ctx, CustomerQuery(**criteria))


def update_customer(ctx: RequestContext, customer_id: int, **fields) -> Customer:
    return update(ctx, Customer, customer_id, set_fields(**fields))


def transition_customer(ctx: RequestContext, customer_id: int, to) -> Customer:
    return update(ctx, Customer, customer_id, lambda c: c.transition(to))


def delete_customer(ctx: RequestContext, customer_id: int) -> DeleteResult:
    return delete(ctx, Customer, customer_id)


# --- jobs ------------------------------------------------------------------


def create_job(ctx: RequestContext, **fields) -> SolarJob:
    return create(ctx, SolarJob, fields)


def get_job(ctx: RequestContext, job_id: int) -> SolarJob:
    return get(ctx, SolarJob, job_id)


def fetch_jobs(ctx: RequestContext, **criteria) -> List[SolarJob]:
    return fetch(ctx, JobQuery(**criteria))


def update_job(ctx: RequestContext, job_id: int, **fields) -> SolarJob:
    return update(ctx, SolarJob, job_id, set_fields(**fields))


def transition_job(ctx: RequestContext, job_id: int, to) -> SolarJob:
    return update(ctx, SolarJob, job_id, lambda j: j.transition(to))


def delete_job(ctx: RequestContext, job_id: int) -> DeleteResult:
    return delete(ctx, SolarJob, job_id)


# --- installations ---------------------------------------------------------


def create_installation(ctx: RequestContext, **fields) -> Installation:
    return create(ctx, Installation, fields)


def get_installation(ctx: RequestContext, installation_id: int) -> Installation:
    return get(ctx, Installation, installation_id)


def fetch_installations(ctx: RequestContext, **criteria) -> List[Installation]:
    return fetch(ctx, InstallationQuery(**criteria))


def update_installation(ctx: RequestContext, installation_id: int, **fields) -> Installation:
    return update(ctx, Installation, installation_id, set_fields(**fields))


def start_installation(ctx: RequestContext, installation_id: int) -> Installation:
    return update(ctx, Installation, installation_id, lambda i: i.start())


def complete_installation(ctx: RequestContext, installation_id: int, notes: Optional[str] = None) -> Installation:
    return update(ctx, Installation, installation_id, lambda i: i.complete(notes))


def update_installation_progress(ctx: RequestContext, installation_id: int, percentage: int) -> Installation:
    return update(ctx, Installation, installation_id, lambda i: i.update_progress(percentage))


def reschedule_installation(ctx: RequestContext, installation_id: int, new_date) -> Installation:
    return update(ctx, Installation, installation_id, lambda i: i.reschedule(new_date))


def transition_installation(ctx: RequestContext, installation_id: int, to) -> Installation:
    return update(ctx, Installation, installation_id, lambda i: i.transition(to))


def delete_installation(ctx: RequestContext, installation_id: int) -> DeleteResult:
    return delete(ctx, Installation, installation_id)


# --- equipment -------------------------------------------------------------


def create_equipment(ctx: RequestContext, **fields) -> Equipment:
    return create(ctx, Equipment, fields)


def get_equipment(ctx: RequestContext, equipment_id: int) -> Equipment:
    return get(ctx, Equipment, equipment_id)


def fetch_equipment(ctx: RequestContext, **criteria) -> List[Equipment]:
    return fetch(ctx, EquipmentQuery(**criteria))


def update_equipment(ctx: RequestContext, equipment_id: int, **fields) -> Equipment:
    return update(ctx, Equipment, equipment_id, set_fields(**fields))


def update_equipment_quantity(ctx: RequestContext, equipment_id: int, quantity: int) -> Equipment:
    return update(ctx, Equipment, equipment_id, lambda e: e.update_quantity(quantity))


def adjust_stock(ctx: RequestContext, equipment_id: int, delta: int) -> Equipment:
    return update(ctx, Equipment, equipment_id, lambda e: e.adjust_stock(delta))


def reorder_equipment(ctx: RequestContext, equipment_id: int, quantity: int = 0) -> Equipment:
    return update(ctx, Equipment, equipment_id, lambda e: e.reorder(quantity))


def delete_equipment(ctx: RequestContext, equipment_id: int) -> DeleteResult:
    return delete(ctx, Equipment, equipment_id)


# --- vendors ---------------------------------------------------------------


def create_vendor(ctx: RequestContext, **fields) -> Vendor:
    return create(ctx, Vendor, fields)


def get_vendor(ctx: RequestContext, vendor_id: int) -> Vendor:
    return get(ctx, Vendor, vendor_id)


def fetch_vendors(ctx: RequestContext, **criteria) -> List[Vendor]:
    return fetch(ctx, VendorQuery(**criteria))


def update_vendor(ctx: RequestContext, vendor_id: int, **fields) -> Vendor:
    return update(ctx, Vendor, vendor_id, set_fields(**fields))


def update_vendor_rating(ctx: RequestContext, vendor_id: int, rating: float) -> Vendor:
    return update(ctx, Vendor, vendor_id, lambda v: v.update_rating(rating))


def add_vendor_specialty(ctx: RequestContext, vendor_id: int, specialty) -> Vendor:
    return update(ctx, Vendor, vendor_id, lambda v: v.add_specialty(specialty))


def remove_vendor_specialty(ctx: RequestContext, vendor_id: int, specialty) -> Vendor:
    return update(ctx, Vendor, vendor_id, lambda v: v.remove_specialty(specialty))


def delete_vendor(ctx: RequestContext, vendor_id: int) -> DeleteResult:
    return delete(ctx, Vendor, vendor_id)


# --- contracts -------------------------------------------------------------


def create_contract(ctx: RequestContext, **fields) -> Contract:
    return create(ctx, Contract, fields)


def get_contract(ctx: RequestContext, contract_id: int) -> Contract:
    return get(ctx, Contract, contract_id)


def fetch_contracts(ctx: RequestContext, **criteria) -> List[Contract]:
    return fetch(ctx, ContractQuery(**criteria))


def update_contract(ctx: RequestContext, contract_id: int, **fields) -> Contract:
    return update(ctx, Contract, contract_id, set_fields(**fields))


def sign_contract(ctx: RequestContext, contract_id: int) -> Contract:
    return update(ctx, Contract, contract_id, lambda c: c.sign())


def activate_contract(ctx: RequestContext, contract_id: int) -> Contract:
    return update(ctx, Contract, contract_id, lambda c: c.activate())


def complete_contract(ctx: RequestContext, contract_id: int) -> Contract:
    return update(ctx, Contract, contract_id, lambda c: c.complete())


def cancel_contract(ctx: RequestContext, contract_id: int) -> Contract:
    return update(ctx, Contract, contract_id, lambda c: c.cancel())


def add_contract_payment(ctx: RequestContext, contract_id: int, amount: float) -> Contract:
    return update(ctx, Contract, contract_id, lambda c: c.add_payment(amount))


def transition_contract(ctx: RequestContext, contract_id: int, to) -> Contract:
    return update(ctx, Contract, contract_id, lambda c: c.transition(to))


def delete_contract(ctx: RequestContext, contract_id: int) -> DeleteResult:
    return delete(ctx, Contract, contract_id)


