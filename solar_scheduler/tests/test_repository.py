from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from solar_scheduler.models import Customer, Installation, SolarJob
from solar_scheduler.models.status import JobStatus, LeadStatus
from solar_scheduler.services import repository
from solar_scheduler.services.errors import (
    ConstraintViolation,
    InvalidTransition,
    NotFound,
    PersistenceFailure,
    ValidationFailure,
)


def test_create_assigns_id_company_and_created_at(ctx, make_customer):
    customer = make_customer()

    assert customer.id is not None
    assert customer.company_id == ctx.company_id
    assert customer.created_at is not None
    assert customer.lead_status == LeadStatus.NEW_LEAD


def test_ids_follow_creation_order(make_job):
    first = make_job()
    second = make_job()
    assert second.id > first.id


def test_get_missing_record_is_not_found(ctx):
    with pytest.raises(NotFound) as exc:
        repository.get_job(ctx, 999)
    assert exc.value.code == "NOT_FOUND"


def test_records_are_scoped_to_company(ctx, other_ctx, make_customer):
    customer = make_customer()

    with pytest.raises(NotFound):
        repository.get_customer(other_ctx, customer.id)
    assert repository.fetch_customers(other_ctx) == []


def test_create_collects_every_validation_error(ctx):
    with pytest.raises(ValidationFailure) as exc:
        repository.create_customer(ctx, name="X", email="not-an-email", phone="12", address="short")

    fields = {e["field"] for e in exc.value.errors}
    assert fields == {"name", "email", "phone", "address"}


def test_create_rejects_unknown_fields(ctx):
    with pytest.raises(ValidationFailure):
        repository.create_vendor(ctx, name="Acme", favourite_colour="blue")


def test_create_rejects_identity_fields(ctx):
    with pytest.raises(ConstraintViolation):
        repository.create_vendor(ctx, name="Acme", company_id=99)


@pytest.mark.parametrize(
    "field,value",
    [
        ("last_updated", datetime(2030, 1, 1)),
        ("last_contact_date", datetime(2030, 1, 1)),
        ("start_time", datetime(2030, 1, 1)),
        ("end_time", datetime(2030, 1, 1)),
        ("signed_date", datetime(2030, 1, 1)),
        ("paid_amount", 100.0),
        ("completion_percentage", 40),
    ],
)
def test_create_refuses_mutator_owned_fields(ctx, field, value):
    with pytest.raises(ConstraintViolation):
        repository.create(ctx, Installation, {"scheduled_date": datetime(2030, 5, 1), field: value})


def test_create_refuses_status_columns(make_job, make_customer, make_installation):
    with pytest.raises(ConstraintViolation):
        make_job(status="completed")
    with pytest.raises(ConstraintViolation):
        make_customer(lead_status="won")
    with pytest.raises(ConstraintViolation):
        make_installation(status="completed", completion_percentage=40, end_time=datetime(2030, 5, 2))


def test_contract_cannot_be_created_already_paid(ctx, make_customer, make_contract):
    customer = make_customer()

    with pytest.raises(ConstraintViolation):
        make_contract(customer_id=customer.id, total_amount=100.0, paid_amount=100.0)
    assert repository.fetch_contracts(ctx) == []


def test_job_copies_customer_name_and_address(make_customer, make_job):
    customer = make_customer(name="Priya Raman", address="88 Canyon View Road, Mesa AZ")

    job = make_job(customer_id=customer.id, customer_name=None, address=None)

    assert job.customer_id == customer.id
    assert job.customer_name == "Priya Raman"
    assert job.address == "88 Canyon View Road, Mesa AZ"


def test_reference_to_other_company_is_not_found(other_ctx, make_customer, make_job):
    foreign = make_customer(context=other_ctx)

    with pytest.raises(NotFound):
        make_job(customer_id=foreign.id)


def test_job_system_size_rules(make_job):
    with pytest.raises(ValidationFailure):
        make_job(system_size=0)
    with pytest.raises(ValidationFailure):
        make_job(system_size=1500)


def test_transition_commits_status(ctx, make_job):
    job = make_job()

    repository.transition_job(ctx, job.id, "approved")

    assert repository.get_job(ctx, job.id).status == JobStatus.APPROVED


def test_invalid_transition_leaves_record_unchanged(ctx, make_job):
    job = make_job()

    with pytest.raises(InvalidTransition):
        repository.transition_job(ctx, job.id, "completed")

    assert repository.get_job(ctx, job.id).status == JobStatus.PENDING


def test_set_fields_updates_and_validates(ctx, make_job):
    job = make_job()

    updated = repository.update_job(ctx, job.id, notes="Needs main panel upgrade", system_size=9.2)
    assert updated.notes == "Needs main panel upgrade"
    assert updated.system_size == 9.2

    with pytest.raises(ValidationFailure):
        repository.update_job(ctx, job.id, system_size=-1)
    assert repository.get_job(ctx, job.id).system_size == 9.2


def test_set_fields_refuses_status_columns(ctx, make_job, make_customer):
    job = make_job()
    customer = make_customer()

    with pytest.raises(ConstraintViolation):
        repository.update_job(ctx, job.id, status="completed")
    with pytest.raises(ConstraintViolation):
        repository.update_customer(ctx, customer.id, lead_status="won")

    assert repository.get_job(ctx, job.id).status == JobStatus.PENDING


def test_set_fields_refuses_mutator_owned_fields(ctx, make_contract, make_customer):
    customer = make_customer()
    contract = make_contract(customer_id=customer.id)

    with pytest.raises(ConstraintViolation):
        repository.update_contract(ctx, contract.id, paid_amount=10.0)


def test_update_missing_record_is_not_found(ctx):
    with pytest.raises(NotFound):
        repository.update_vendor(ctx, 4242, name="Ghost")


def test_stock_adjustment_is_persisted(ctx, make_equipment):
    item = make_equipment(quantity=4)

    repository.adjust_stock(ctx, item.id, -10)

    assert repository.get_equipment(ctx, item.id).quantity == 0


def test_contract_payment_reaching_total_completes(ctx, make_customer, make_contract):
    customer = make_customer()
    contract = make_contract(customer_id=customer.id, total_amount=2500.0)

    repository.sign_contract(ctx, contract.id)
    repository.add_contract_payment(ctx, contract.id, 1000.0)
    done = repository.add_contract_payment(ctx, contract.id, 2000.0)

    assert done.paid_amount == 2500.0
    assert done.status.value == "completed"


def test_installation_progress_round_trip(ctx, make_installation):
    installation = make_installation()

    repository.start_installation(ctx, installation.id)
    finished = repository.update_installation_progress(ctx, installation.id, 100)

    assert finished.status.value == "completed"
    assert finished.end_time is not None


def test_aware_datetimes_are_stored_as_utc(ctx, make_installation):
    installation = make_installation(scheduled_date=datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc))
    assert repository.get_installation(ctx, installation.id).scheduled_date == datetime(2030, 6, 1, 12, 0)


def test_failed_commit_rolls_back_and_raises_persistence_failure(ctx, monkeypatch):
    real_factory = repository.SessionLocal

    def failing_session():
        session = real_factory()

        def boom():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        session.commit = boom
        return session

    monkeypatch.setattr(repository, "SessionLocal", failing_session)

    with pytest.raises(PersistenceFailure) as exc:
        repository.create_customer(
            ctx,
            name="Rollback Case",
            email="rollback@example.com",
            phone="5550109999",
            address="1 Failure Street, Phoenix",
        )
    assert isinstance(exc.value.__cause__, OperationalError)

    monkeypatch.undo()
    assert repository.fetch_customers(ctx) == []


def test_generic_operations_accept_model_classes(ctx):
    customer = repository.create(
        ctx,
        Customer,
        {
            "name": "Generic Path",
            "email": "generic@example.com",
            "phone": "5550107777",
            "address": "500 Generic Avenue, Tempe",
        },
    )
    job = repository.create(ctx, SolarJob, {"customer_id": customer.id, "system_size": 4.0})

    assert repository.fetch_all(ctx, SolarJob)[0].id == job.id
    repository.update(ctx, SolarJob, job.id, repository.set_fields(notes="generic"))
    assert repository.get(ctx, SolarJob, job.id).notes == "generic"


def test_contract_total_lowered_to_paid_is_persisted_as_completed(ctx, make_customer, make_contract):
    customer = make_customer()
    contract = make_contract(customer_id=customer.id, total_amount=100.0)
    repository.add_contract_payment(ctx, contract.id, 50.0)

    repository.update_contract(ctx, contract.id, total_amount=50.0)

    stored = repository.get_contract(ctx, contract.id)
    assert stored.status.value == "completed"
    assert stored.completion_date is not None


def test_reschedule_installation_is_persisted(ctx, make_installation):
    installation = make_installation()
    repository.transition_installation(ctx, installation.id, "on_hold")

    repository.reschedule_installation(ctx, installation.id, datetime(2030, 7, 4, 9, 0))

    stored = repository.get_installation(ctx, installation.id)
    assert stored.status.value == "scheduled"
    assert stored.scheduled_date == datetime(2030, 7, 4, 9, 0)


def test_reschedule_of_completed_installation_leaves_it_unchanged(ctx, make_installation):
    installation = make_installation()
    repository.complete_installation(ctx, installation.id)

    with pytest.raises(InvalidTransition):
        repository.reschedule_installation(ctx, installation.id, datetime(2031, 1, 1))

    stored = repository.get_installation(ctx, installation.id)
    assert stored.status.value == "completed"
    assert stored.scheduled_date == datetime(2030, 5, 1, 8, 0)


def test_reorder_equipment_is_persisted(ctx, make_equipment):
    item = make_equipment(quantity=3, low_stock_threshold=10)

    repository.reorder_equipment(ctx, item.id)
    assert repository.get_equipment(ctx, item.id).quantity == 23

    repository.reorder_equipment(ctx, item.id, 7)
    assert repository.get_equipment(ctx, item.id).quantity == 30


def test_reorder_equipment_of_other_company_is_not_found(other_ctx, make_equipment):
    item = make_equipment()
    with pytest.raises(NotFound):
        repository.reorder_equipment(other_ctx, item.id, 5)
