import pytest

from solar_scheduler.services import repository
from solar_scheduler.services.errors import NotFound


def test_deleting_customer_cascades_to_jobs_installations_and_contracts(
    ctx, make_customer, make_job, make_installation, make_contract
):
    customer = make_customer()
    job_a = make_job(customer_id=customer.id)
    job_b = make_job(customer_id=customer.id)
    installation = make_installation(job_id=job_a.id)
    contract = make_contract(customer_id=customer.id, job_id=job_b.id)

    result = repository.delete_customer(ctx, customer.id)

    assert result.deleted == {"customers": 1, "solar_jobs": 2, "installations": 1, "contracts": 1}
    assert result.detached == {}
    for getter, record_id in (
        (repository.get_customer, customer.id),
        (repository.get_job, job_a.id),
        (repository.get_job, job_b.id),
        (repository.get_installation, installation.id),
        (repository.get_contract, contract.id),
    ):
        with pytest.raises(NotFound):
            getter(ctx, record_id)


def test_deleting_customer_detaches_other_customers_contracts(
    ctx, make_customer, make_job, make_contract
):
    owner = make_customer(name="Owner Person")
    other = make_customer(name="Other Person")
    job = make_job(customer_id=owner.id)
    foreign_contract = make_contract(customer_id=other.id, job_id=job.id)

    result = repository.delete_customer(ctx, owner.id)

    assert result.detached == {"contracts": 1}
    survivor = repository.get_contract(ctx, foreign_contract.id)
    assert survivor.job_id is None
    assert survivor.customer_id == other.id


def test_deleting_job_removes_installations_and_detaches_contracts(
    ctx, make_customer, make_job, make_installation, make_contract
):
    customer = make_customer()
    job = make_job(customer_id=customer.id)
    installation = make_installation(job_id=job.id)
    contract = make_contract(customer_id=customer.id, job_id=job.id)

    result = repository.delete_job(ctx, job.id)

    assert result.deleted == {"solar_jobs": 1, "installations": 1}
    assert result.detached == {"contracts": 1}
    with pytest.raises(NotFound):
        repository.get_installation(ctx, installation.id)
    assert repository.get_contract(ctx, contract.id).job_id is None
    assert repository.get_customer(ctx, customer.id).id == customer.id


def test_deleting_vendor_only_nullifies_installations(ctx, make_vendor, make_installation):
    vendor = make_vendor()
    first = make_installation(vendor_id=vendor.id)
    second = make_installation(vendor_id=vendor.id)

    result = repository.delete_vendor(ctx, vendor.id)

    assert result.deleted == {"vendors": 1}
    assert result.detached == {"installations": 2}
    for installation in (first, second):
        assert repository.get_installation(ctx, installation.id).vendor_id is None


def test_independent_records_delete_alone(ctx, make_equipment):
    keep = make_equipment(name="Keep me")
    drop = make_equipment(name="Drop me")

    result = repository.delete_equipment(ctx, drop.id)

    assert result.to_dict() == {"table": "equipment", "id": drop.id, "deleted": {"equipment": 1}, "detached": {}}
    assert [e.id for e in repository.fetch_equipment(ctx)] == [keep.id]


def test_delete_missing_record_is_not_found(ctx):
    with pytest.raises(NotFound):
        repository.delete_contract(ctx, 31337)


def test_delete_cannot_reach_another_company(ctx, other_ctx, make_vendor):
    vendor = make_vendor()

    with pytest.raises(NotFound):
        repository.delete_vendor(other_ctx, vendor.id)
    assert repository.get_vendor(ctx, vendor.id).id == vendor.id
