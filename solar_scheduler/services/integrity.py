from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from sqlalchemy.orm import Session

from solar_scheduler.models import Contract, Customer, Installation, SolarJob, Vendor


@dataclass
class DeleteResult:
    """Rows removed and rows whose reference was cleared, counted per table."""

    table: str
    id: int
    deleted: Dict[str, int] = field(default_factory=dict)
    detached: Dict[str, int] = field(default_factory=dict)

    def _bump(self, bucket: Dict[str, int], table: str, n: int = 1) -> None:
        if n:
            bucket[table] = bucket.get(table, 0) + n

    def to_dict(self) -> Dict[str, object]:
        return {
            "table": self.table,
            "id": self.id,
            "deleted": dict(self.deleted),
            "detached": dict(self.detached),
        }


def plan_delete(db: Session, entity) -> DeleteResult:
    """
    Work out what deleting ``entity`` will touch, before the session deletes it.

    The delete itself is done by the relationship cascades on the models:
    owned children go with their parent, optional references are set to NULL.
    """
    result = DeleteResult(table=entity.__tablename__, id=entity.id)
    result._bump(result.deleted, entity.__tablename__)

    if isinstance(entity, Customer):
        job_ids = {job.id for job in entity.jobs}
        result._bump(result.deleted, SolarJob.__tablename__, len(job_ids))
        result._bump(
            result.deleted,
            Installation.__tablename__,
            sum(len(job.installations) for job in entity.jobs),
        )
        result._bump(result.deleted, Contract.__tablename__, len(entity.contracts))

        # contracts owned by someone else but pointing at one of these jobs
        if job_ids:
            foreign = (
                db.query(Contract)
                .filter(
                    Contract.job_id.in_(job_ids),
                    Contract.customer_id != entity.id,
                )
                .count()
            )
            result._bump(result.detached, Contract.__tablename__, foreign)

    elif isinstance(entity, SolarJob):
        result._bump(result.deleted, Installation.__tablename__, len(entity.installations))
        result._bump(result.detached, Contract.__tablename__, len(entity.contracts))

    elif isinstance(entity, Vendor):
        result._bump(result.detached, Installation.__tablename__, len(entity.installations))

    return result


def apply_delete(db: Session, entity) -> DeleteResult:
    result = plan_delete(db, entity)

    if isinstance(entity, Customer):
        removed_jobs = list(entity.jobs)
    elif isinstance(entity, SolarJob):
        removed_jobs = [entity]
    else:
        removed_jobs = []

    # Unlink contracts from the jobs going away first; contracts the customer
    # owns are then deleted by the customer cascade, the rest survive unlinked.
    for job in removed_jobs:
        for contract in list(job.contracts):
            contract.job = None

    db.delete(entity)
    db.flush()
    return result
