"""create solar record tables

Revision ID: 3c1f0a7d92b4
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1f0a7d92b4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


LEAD_STATUSES = ("new_lead", "contacted", "qualified", "proposal", "negotiation", "won", "lost")
CONTACT_METHODS = ("email", "phone", "text", "in_person")
JOB_STATUSES = ("pending", "approved", "in_progress", "completed", "cancelled", "on_hold")
INSTALLATION_STATUSES = (
    "scheduled", "confirmed", "in_progress", "completed",
    "postponed", "cancelled", "on_hold", "requires_follow_up",
)
CONTRACT_STATUSES = ("draft", "pending_signature", "signed", "active", "completed", "cancelled", "on_hold")
EQUIPMENT_CATEGORIES = (
    "solar_panels", "inverters", "mounting", "electrical",
    "batteries", "monitoring", "tools", "safety",
)


def _one_of(column: str, values: Sequence[str]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


def _record_columns():
    return [
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    ]


def _index(table: str, *columns: str) -> None:
    for column in columns:
        op.create_index(f"ix_{table}_{column}", table, [column], unique=False)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "customers",
        *_record_columns(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("address", sa.String(200), nullable=False),
        sa.Column("lead_status", sa.String(32), nullable=False),
        sa.Column("preferred_contact_method", sa.String(32), nullable=False),
        sa.Column("last_contact_date", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.CheckConstraint(_one_of("lead_status", LEAD_STATUSES), name="lead_status"),
        sa.CheckConstraint(_one_of("preferred_contact_method", CONTACT_METHODS), name="contact_method"),
    )
    _index("customers", "id", "company_id", "name", "lead_status")

    op.create_table(
        "solar_jobs",
        *_record_columns(),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.Column("customer_name", sa.String(100), nullable=False),
        sa.Column("address", sa.String(200), nullable=False),
        sa.Column("system_size", sa.Float(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("scheduled_date", sa.DateTime(), nullable=True),
        sa.Column("estimated_revenue", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        sa.CheckConstraint("system_size >= 0", name="ck_solar_jobs_system_size_nonnegative"),
        sa.CheckConstraint("estimated_revenue >= 0", name="ck_solar_jobs_estimated_revenue_nonnegative"),
        sa.CheckConstraint(_one_of("status", JOB_STATUSES), name="job_status"),
    )
    _index("solar_jobs", "id", "company_id", "customer_id", "customer_name", "status", "scheduled_date")

    op.create_table(
        "vendors",
        *_record_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("contact_phone", sa.String(32), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("specialties", sa.JSON(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("website", sa.String(255), nullable=False),
        sa.Column("emergency_contact", sa.String(255), nullable=False),
        sa.Column("insurance_details", sa.Text(), nullable=False),
        sa.Column("license_number", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="ck_vendors_rating_range"),
    )
    _index("vendors", "id", "company_id", "name")

    op.create_table(
        "installations",
        *_record_columns(),
        sa.Column("job_id", sa.Integer(), nullable=True),
        sa.Column("vendor_id", sa.Integer(), nullable=True),
        sa.Column("scheduled_date", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("crew_members", sa.String(255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("weather_conditions", sa.String(255), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=True),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("completion_percentage", sa.Integer(), nullable=False),
        sa.Column("quality_check_passed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["job_id"], ["solar_jobs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "completion_percentage >= 0 AND completion_percentage <= 100",
            name="ck_installations_completion_percentage_range",
        ),
        sa.CheckConstraint(_one_of("status", INSTALLATION_STATUSES), name="installation_status"),
    )
    _index("installations", "id", "company_id", "job_id", "vendor_id", "scheduled_date", "status")

    op.create_table(
        "equipment",
        *_record_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("brand", sa.String(100), nullable=False),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Float(), nullable=False),
        sa.Column("low_stock_threshold", sa.Integer(), nullable=False),
        sa.Column("warranty_period_months", sa.Integer(), nullable=False),
        sa.Column("supplier", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.CheckConstraint("quantity >= 0", name="ck_equipment_quantity_nonnegative"),
        sa.CheckConstraint("unit_price >= 0", name="ck_equipment_unit_price_nonnegative"),
        sa.CheckConstraint("low_stock_threshold >= 0", name="ck_equipment_low_stock_threshold_nonnegative"),
        sa.CheckConstraint(_one_of("category", EQUIPMENT_CATEGORIES), name="equipment_category"),
    )
    _index("equipment", "id", "company_id", "name", "category")

    op.create_table(
        "contracts",
        *_record_columns(),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=True),
        sa.Column("contract_number", sa.String(64), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("terms", sa.Text(), nullable=False),
        sa.Column("payment_schedule", sa.Text(), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("paid_amount", sa.Float(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("signed_date", sa.DateTime(), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("completion_date", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["job_id"], ["solar_jobs.id"], ondelete="SET NULL"),
        sa.CheckConstraint("total_amount >= 0", name="ck_contracts_total_amount_nonnegative"),
        sa.CheckConstraint("paid_amount >= 0", name="ck_contracts_paid_amount_nonnegative"),
        sa.CheckConstraint("paid_amount <= total_amount", name="ck_contracts_paid_within_total"),
        sa.CheckConstraint(_one_of("status", CONTRACT_STATUSES), name="contract_status"),
    )
    _index("contracts", "id", "company_id", "customer_id", "job_id", "contract_number", "status")


def downgrade() -> None:
    """Downgrade schema."""
    for table in ("contracts", "equipment", "installations", "vendors", "solar_jobs", "customers"):
        op.drop_table(table)
