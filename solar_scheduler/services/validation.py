"""
Field rules checked before a record is created or raw fields are written.

Each validator collects every problem in the payload and raises a single
ValidationFailure carrying per-field errors. With ``partial=True`` only the
keys present in ``fields`` are checked (raw updates).
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Dict, List, Mapping

from solar_scheduler.services.errors import ValidationFailure

_EMAIL = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

MAX_SYSTEM_SIZE_KW = 1000.0
MIN_SYSTEM_SIZE_KW = 0.1
MAX_ESTIMATED_REVENUE = 1_000_000.0
MAX_EQUIPMENT_QUANTITY = 10_000
MAX_UNIT_PRICE = 100_000.0
MIN_CREW_SIZE = 1
MAX_CREW_SIZE = 20


class _Errors:
    def __init__(self, fields: Mapping[str, Any], partial: bool):
        self.fields = fields
        self.partial = partial
        self.items: List[Dict[str, str]] = []

    def checks(self, key: str) -> bool:
        return key in self.fields or not self.partial

    def add(self, field: str, message: str) -> None:
        self.items.append({"field": field, "message": message})

    def raise_if_any(self, entity: str) -> None:
        if self.items:
            summary = "; ".join(e["message"] for e in self.items)
            raise ValidationFailure(f"Invalid {entity}: {summary}", errors=self.items)


def _text(fields: Mapping[str, Any], key: str) -> str:
    value = fields.get(key)
    return "" if value is None else str(value).strip()


def _number(errors: _Errors, key: str, label: str):
    value = errors.fields.get(key)
    if value is None:
        errors.add(key, f"{label} is required")
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors.add(key, f"{label} must be a number")
        return None
    if not math.isfinite(number):
        errors.add(key, f"{label} must be a finite number")
        return None
    return number


def _required_text(errors: _Errors, key: str, label: str, min_len: int = 1, max_len: int = 0) -> None:
    if not errors.checks(key):
        return
    value = _text(errors.fields, key)
    if not value:
        errors.add(key, f"{label} is required")
    elif len(value) < min_len:
        errors.add(key, f"{label} must be at least {min_len} characters")
    elif max_len and len(value) > max_len:
        errors.add(key, f"{label} cannot exceed {max_len} characters")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL.match(email))


def is_valid_phone(phone: str) -> bool:
    digits = re.sub(r"\D", "", phone)
    return 10 <= len(digits) <= 15


def validate_job(fields: Mapping[str, Any], partial: bool = False) -> None:
    errors = _Errors(fields, partial)

    _required_text(errors, "customer_name", "Customer name", min_len=2, max_len=100)
    _required_text(errors, "address", "Address", min_len=10, max_len=200)

    if errors.checks("system_size"):
        size = _number(errors, "system_size", "System size")
        if size is not None:
            if size <= 0:
                errors.add("system_size", "System size must be greater than 0")
            elif size < MIN_SYSTEM_SIZE_KW:
                errors.add("system_size", "System size must be at least 0.1 kW")
            elif size > MAX_SYSTEM_SIZE_KW:
                errors.add("system_size", "System size cannot exceed 1000 kW")

    if "estimated_revenue" in fields:
        revenue = _number(errors, "estimated_revenue", "Estimated revenue")
        if revenue is not None:
            if revenue < 0:
                errors.add("estimated_revenue", "Estimated revenue cannot be negative")
            elif revenue > MAX_ESTIMATED_REVENUE:
                errors.add("estimated_revenue", "Estimated revenue cannot exceed $1,000,000")

    errors.raise_if_any("job")


def validate_customer(fields: Mapping[str, Any], partial: bool = False) -> None:
    errors = _Errors(fields, partial)

    _required_text(errors, "name", "Name", min_len=2, max_len=100)

    if errors.checks("email"):
        email = _text(fields, "email")
        if not email:
            errors.add("email", "Email is required")
        elif not is_valid_email(email):
            errors.add("email", "Please enter a valid email address")

    if errors.checks("phone"):
        phone = _text(fields, "phone")
        if not phone:
            errors.add("phone", "Phone number is required")
        elif not is_valid_phone(phone):
            errors.add("phone", "Please enter a valid phone number")

    _required_text(errors, "address", "Address", min_len=10)

    errors.raise_if_any("customer")


def validate_equipment(fields: Mapping[str, Any], partial: bool = False) -> None:
    errors = _Errors(fields, partial)

    _required_text(errors, "name", "Equipment name", min_len=2)
    _required_text(errors, "brand", "Brand")
    _required_text(errors, "model", "Model")

    if "quantity" in fields:
        quantity = _number(errors, "quantity", "Quantity")
        if quantity is not None:
            if quantity < 0:
                errors.add("quantity", "Quantity cannot be negative")
            elif quantity > MAX_EQUIPMENT_QUANTITY:
                errors.add("quantity", "Quantity cannot exceed 10,000")

    if "unit_price" in fields:
        price = _number(errors, "unit_price", "Unit price")
        if price is not None:
            if price < 0:
                errors.add("unit_price", "Unit price cannot be negative")
            elif price > MAX_UNIT_PRICE:
                errors.add("unit_price", "Unit price cannot exceed $100,000")

    if "low_stock_threshold" in fields:
        threshold = _number(errors, "low_stock_threshold", "Low stock threshold")
        if threshold is not None and threshold < 0:
            errors.add("low_stock_threshold", "Low stock threshold cannot be negative")

    errors.raise_if_any("equipment")


def validate_vendor(fields: Mapping[str, Any], partial: bool = False) -> None:
    errors = _Errors(fields, partial)

    _required_text(errors, "name", "Vendor name")

    email = _text(fields, "contact_email")
    if email and not is_valid_email(email):
        errors.add("contact_email", "Please enter a valid email address")

    errors.raise_if_any("vendor")


def validate_contract(fields: Mapping[str, Any], partial: bool = False) -> None:
    errors = _Errors(fields, partial)

    _required_text(errors, "contract_number", "Contract number")
    _required_text(errors, "title", "Title")

    if errors.checks("customer_id") and fields.get("customer_id") is None:
        errors.add("customer_id", "Contract must belong to a customer")

    if errors.checks("total_amount"):
        total = _number(errors, "total_amount", "Total amount")
        if total is not None and total < 0:
            errors.add("total_amount", "Total amount cannot be negative")

    errors.raise_if_any("contract")


def validate_installation(fields: Mapping[str, Any], partial: bool = False) -> None:
    errors = _Errors(fields, partial)

    if errors.checks("scheduled_date") and fields.get("scheduled_date") is None:
        errors.add("scheduled_date", "Scheduled date is required")

    if "crew_size" in fields:
        crew = _number(errors, "crew_size", "Crew size")
        if crew is not None:
            if crew < MIN_CREW_SIZE:
                errors.add("crew_size", "Crew size must be at least 1")
            elif crew > MAX_CREW_SIZE:
                errors.add("crew_size", "Crew size cannot exceed 20")

    errors.raise_if_any("installation")


VALIDATORS: Dict[str, Callable[..., None]] = {
    "customers": validate_customer,
    "solar_jobs": validate_job,
    "installations": validate_installation,
    "equipment": validate_equipment,
    "vendors": validate_vendor,
    "contracts": validate_contract,
}


def validate_fields(table_name: str, fields: Mapping[str, Any], partial: bool = False) -> None:
    validator = VALIDATORS.get(table_name)
    if validator is not None:
        validator(fields, partial=partial)
