"""Initial schema: organizations, ownership graph, properties, leases, users.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op
from property_portfolio.repositories.schema import TABLE_NAMES, all_statements

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    for statement in all_statements():
        op.execute(statement)


def downgrade() -> None:
    for table in reversed(TABLE_NAMES):
        op.execute(f"DROP TABLE IF EXISTS {table}")
