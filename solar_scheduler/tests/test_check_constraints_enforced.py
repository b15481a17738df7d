import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from solar_scheduler.database import SessionLocal


def _assert_rejected(statement: str, params: dict) -> None:
    db = SessionLocal()
    try:
        with pytest.raises(IntegrityError):
            db.execute(text(statement), params)
            db.commit()
        db.rollback()
    finally:
        db.close()


def test_check_constraint_blocks_negative_equipment_quantity(make_equipment):
    item = make_equipment()

    # bypasses the model validators on purpose
    _assert_rejected("UPDATE equipment SET quantity = -1 WHERE id = :id", {"id": item.id})


def test_check_constraint_blocks_paid_amount_above_total(make_customer, make_contract):
    customer = make_customer()
    contract = make_contract(customer_id=customer.id, total_amount=500.0)

    _assert_rejected("UPDATE contracts SET paid_amount = 600 WHERE id = :id", {"id": contract.id})


def test_check_constraint_blocks_unknown_status_value(make_job):
    job = make_job()

    _assert_rejected("UPDATE solar_jobs SET status = 'archived' WHERE id = :id", {"id": job.id})


def test_check_constraint_blocks_rating_out_of_range(make_vendor):
    vendor = make_vendor()

    _assert_rejected("UPDATE vendors SET rating = 9 WHERE id = :id", {"id": vendor.id})


def test_check_constraint_blocks_crew_size_out_of_range(make_installation):
    installation = make_installation()

    _assert_rejected("UPDATE installations SET crew_size = 21 WHERE id = :id", {"id": installation.id})
    _assert_rejected("UPDATE installations SET crew_size = 0 WHERE id = :id", {"id": installation.id})


def test_foreign_key_blocks_dangling_customer_reference(make_customer, make_contract):
    customer = make_customer()
    contract = make_contract(customer_id=customer.id)

    _assert_rejected("UPDATE contracts SET customer_id = 987654 WHERE id = :id", {"id": contract.id})
