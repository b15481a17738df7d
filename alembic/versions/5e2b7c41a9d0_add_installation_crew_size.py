"""add installation crew_size

Revision ID: 5e2b7c41a9d0
Revises: 3c1f0a7d92b4
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5e2b7c41a9d0"
down_revision: Union[str, Sequence[str], None] = "3c1f0a7d92b4"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # SQLite cannot add a check constraint in place, so go through a batch copy.
    with op.batch_alter_table("installations") as batch_op:
        batch_op.add_column(sa.Column("crew_size", sa.Integer(), nullable=False, server_default="1"))
        batch_op.create_check_constraint(
            "ck_installations_crew_size_range",
            "crew_size >= 1 AND crew_size <= 20",
        )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("installations") as batch_op:
        batch_op.drop_constraint("ck_installations_crew_size_range", type_="check")
        batch_op.drop_column("crew_size")
