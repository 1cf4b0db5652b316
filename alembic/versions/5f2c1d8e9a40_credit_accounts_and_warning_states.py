"""credit accounts and warning states

Revision ID: 5f2c1d8e9a40
Revises:
Create Date: 2026-10-17 10:12:44.318271

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5f2c1d8e9a40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "credit_accounts",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("tier", sa.String(), nullable=False),
        sa.Column("consumed", sa.JSON(), nullable=False),
        sa.Column("last_reset_date", sa.Date(), nullable=False),
        sa.Column("is_premium", sa.Boolean(), nullable=False),
        sa.Column("premium_since", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("grace_used", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(), nullable=True),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_index("ix_credit_accounts_last_reset_date", "credit_accounts", ["last_reset_date"])
    op.create_table(
        "warning_states",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("warning_date", sa.Date(), nullable=False),
        sa.Column("soft_shown", sa.Boolean(), nullable=False),
        sa.Column("hard_shown", sa.Boolean(), nullable=False),
        sa.Column("consecutive_limit_days", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(), nullable=True),
        sa.PrimaryKeyConstraint("user_id"),
    )


def downgrade() -> None:
    op.drop_table("warning_states")
    op.drop_index("ix_credit_accounts_last_reset_date", table_name="credit_accounts")
    op.drop_table("credit_accounts")
