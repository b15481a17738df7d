import os
_default_test_secret = "test-jwt-secret-for-pytest-only-0000000000000000"
if len(os.environ.get("JWT_SECRET", "")) < 32:
    os.environ["JWT_SECRET"] = _default_test_secret
os.environ.setdefault("ENV", "test")

import tempfile
from datetime import datetime

import pytest

_TEST_DB_DIR = tempfile.mkdtemp(prefix="solar_scheduler_tests_")
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}",
)
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from solar_scheduler import database
from solar_scheduler.services import repository
from solar_scheduler.services.context import RequestContext

COMPANY_ID = 1
OTHER_COMPANY_ID = 2


def _wipe_tables() -> None:
    with database.engine.begin() as conn:
        for table in reversed(database.Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="session", autouse=True)
def _prepare_test_database() -> None:
    database.configure_database()
    database.create_schema()


@pytest.fixture(scope="function", autouse=True)
def _wipe_tables_between_tests():
    _wipe_tables()
    yield
    _wipe_tables()


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(company_id=COMPANY_ID, user_id="test")


@pytest.fixture
def other_ctx() -> RequestContext:
    return RequestContext(company_id=OTHER_COMPANY_ID, user_id="other")


@pytest.fixture
def make_customer(ctx):
    def _make(context=None, **overrides):
        fields = {
            "name": "Dana Whitfield",
            "email": "dana@example.com",
            "phone": "(555) 010-2000",
            "address": "12 Sunnyside Lane, Tucson AZ",
        }
        fields.update(overrides)
        return repository.create_customer(context or ctx, **fields)

    return _make


@pytest.fixture
def make_job(ctx):
    def _make(context=None, **overrides):
        fields = {
            "customer_name": "Dana Whitfield",
            "address": "12 Sunnyside Lane, Tucson AZ",
            "system_size": 8.5,
            "estimated_revenue": 21000.0,
        }
        fields.update(overrides)
        return repository.create_job(context or ctx, **fields)

    return _make


@pytest.fixture
def make_installation(ctx):
    def _make(context=None, **overrides):
        fields = {
            "scheduled_date": datetime(2030, 5, 1, 8, 0),
            "crew_members": "Alvarez, Chen",
        }
        fields.update(overrides)
        return repository.create_installation(context or ctx, **fields)

    return _make


@pytest.fixture
def make_equipment(ctx):
    def _make(context=None, **overrides):
        fields = {
            "name": "Mono PERC 400W",
            "category": "solar_panels",
            "brand": "Helios",
            "model": "HP-400",
            "quantity": 40,
            "unit_price": 180.0,
            "low_stock_threshold": 10,
        }
        fields.update(overrides)
        return repository.create_equipment(context or ctx, **fields)

    return _make


@pytest.fixture
def make_vendor(ctx):
    def _make(context=None, **overrides):
        fields = {
            "name": "Ridgeline Roofing",
            "contact_email": "ops@ridgeline.example.com",
            "specialties": ["roofing"],
            "rating": 4.0,
        }
        fields.update(overrides)
        return repository.create_vendor(context or ctx, **fields)

    return _make


@pytest.fixture
def make_contract(ctx):
    def _make(context=None, **overrides):
        fields = {
            "contract_number": "SC-1001",
            "title": "Residential install",
            "total_amount": 1000.0,
        }
        fields.update(overrides)
        return repository.create_contract(context or ctx, **fields)

    return _make
