"""
Typed errors raised by the record-keeping core.

Every error subclasses ``ValueError`` so callers that only know the
"invalid input -> ValueError" convention keep working, and carries a
machine-readable ``code`` for the HTTP layer.

    RecordError
    +-- ValidationFailure     malformed or out-of-range input
    +-- NotFound              id does not exist for this company
    +-- ConstraintViolation   write would break a model invariant
    |   +-- InvalidTransition status edge not in the allowed-edges table
    +-- PersistenceFailure    the store could not commit
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class RecordError(ValueError):
    code = "RECORD_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class ValidationFailure(RecordError):
    code = "VALIDATION_FAILURE"

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailure":
        return cls(message, errors=[{"field": field, "message": message}])

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["errors"] = list(self.errors)
        return payload


class NotFound(RecordError):
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(f"{resource} with ID {resource_id} was not found")
        self.resource = resource
        self.resource_id = resource_id


class ConstraintViolation(RecordError):
    code = "CONSTRAINT_VIOLATION"


class InvalidTransition(ConstraintViolation):
    code = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: Any, requested: Any):
        current_value = getattr(current, "value", current)
        requested_value = getattr(requested, "value", requested)
        super().__init__(f"Cannot change {entity} status from {current_value} to {requested_value}")
        self.entity = entity
        self.current = current
        self.requested = requested


class PersistenceFailure(RecordError):
    code = "PERSISTENCE_FAILURE"
