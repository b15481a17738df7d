from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Integer

from solar_scheduler.models.status import Edges, parse_status
from solar_scheduler.services.errors import InvalidTransition


def utc_now() -> datetime:
    # Stored naive; every timestamp in the schema is UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class CompanyRecordMixin:
    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)


class StatusTransitionMixin:
    """
    Uniform transition interface for status-bearing records.

    Subclasses set ``status_field``, ``status_enum`` and ``allowed_transitions``
    and may override ``_enter_status`` to stamp timestamps or run side effects.
    """

    status_field = "status"
    status_enum = None
    allowed_transitions: Edges = {}

    @property
    def current_status(self):
        return getattr(self, self.status_field)

    def can_transition(self, to) -> bool:
        target = parse_status(self.status_enum, to, field=self.status_field)
        return target in self.allowed_transitions.get(self.current_status, frozenset())

    def transition(self, to) -> None:
        target = parse_status(self.status_enum, to, field=self.status_field)
        current = self.current_status

        if target == current:
            return

        if target not in self.allowed_transitions.get(current, frozenset()):
            raise InvalidTransition(type(self).__name__, current, target)

        self._enter_status(target)

    def _enter_status(self, target) -> None:
        setattr(self, self.status_field, target)
