from datetime import datetime

import pytest

from solar_scheduler.models import Contract, Customer, Installation, SolarJob
from solar_scheduler.models.status import (
    ContractStatus,
    InstallationStatus,
    JobStatus,
    LeadStatus,
)
from solar_scheduler.services.errors import ConstraintViolation, InvalidTransition


def _job(status=JobStatus.PENDING) -> SolarJob:
    return SolarJob(
        company_id=1,
        customer_name="Dana Whitfield",
        address="12 Sunnyside Lane",
        system_size=6.0,
        status=status,
    )


def _installation(status=InstallationStatus.SCHEDULED) -> Installation:
    return Installation(company_id=1, scheduled_date=datetime(2030, 1, 1), status=status)


def _contract(status=ContractStatus.DRAFT) -> Contract:
    return Contract(
        company_id=1,
        customer_id=1,
        contract_number="SC-1",
        title="Install",
        total_amount=500.0,
        status=status,
    )


def test_job_follows_the_happy_path():
    job = _job()
    for step in ("approved", "in_progress", "completed"):
        job.transition(step)
    assert job.status == JobStatus.COMPLETED


def test_job_cannot_skip_approval():
    job = _job()

    assert not job.can_transition(JobStatus.COMPLETED)
    with pytest.raises(InvalidTransition) as exc:
        job.transition(JobStatus.COMPLETED)

    assert isinstance(exc.value, ConstraintViolation)
    assert exc.value.code == "INVALID_TRANSITION"
    assert job.status == JobStatus.PENDING


@pytest.mark.parametrize("terminal", [JobStatus.COMPLETED, JobStatus.CANCELLED])
def test_job_terminal_states_have_no_exit(terminal):
    job = _job(status=terminal)
    for target in JobStatus:
        if target != terminal:
            assert not job.can_transition(target)


def test_job_resumes_from_hold():
    job = _job(status=JobStatus.IN_PROGRESS)
    job.transition("on_hold")
    job.transition("In Progress")
    assert job.status == JobStatus.IN_PROGRESS


def test_same_state_transition_is_a_no_op():
    job = _job(status=JobStatus.APPROVED)
    job.transition(JobStatus.APPROVED)
    assert job.status == JobStatus.APPROVED


def test_installation_transition_to_in_progress_stamps_start_time():
    installation = _installation()
    installation.transition("in_progress")

    assert installation.status == InstallationStatus.IN_PROGRESS
    assert installation.start_time is not None


def test_installation_resume_keeps_first_start_time():
    installation = _installation()
    installation.transition("in_progress")
    first_start = installation.start_time

    installation.transition("on_hold")
    installation.transition("in_progress")

    assert installation.start_time == first_start


def test_installation_transition_to_completed_runs_complete():
    installation = _installation(status=InstallationStatus.IN_PROGRESS)
    installation.transition("completed")

    assert installation.completion_percentage == 100
    assert installation.end_time is not None


def test_installation_cannot_complete_from_scheduled():
    installation = _installation()
    with pytest.raises(InvalidTransition):
        installation.transition("completed")
    assert installation.end_time is None


def test_follow_up_can_close_out_directly():
    installation = _installation(status=InstallationStatus.REQUIRES_FOLLOW_UP)
    assert installation.can_transition("completed")


def test_contract_signing_path_stamps_dates():
    contract = _contract()
    contract.transition("pending_signature")
    contract.transition("signed")
    contract.transition("active")

    assert contract.signed_date is not None
    assert contract.start_date is not None


def test_contract_cancel_via_transition_clears_active_flag():
    contract = _contract(status=ContractStatus.SIGNED)
    contract.transition("cancelled")

    assert contract.status == ContractStatus.CANCELLED
    assert contract.is_active is False
    with pytest.raises(InvalidTransition):
        contract.transition("active")


def test_lead_advances_one_stage_at_a_time_and_stamps_contact():
    customer = Customer(
        company_id=1,
        name="Dana",
        email="dana@example.com",
        phone="5550102000",
        address="12 Sunnyside Lane",
    )
    assert customer.lead_status == LeadStatus.NEW_LEAD
    assert customer.last_contact_date is None

    customer.transition("contacted")
    assert customer.last_contact_date is not None

    with pytest.raises(InvalidTransition):
        customer.transition("won")

    customer.transition("lost")
    assert customer.lead_status == LeadStatus.LOST
