"""add reminder timestamp"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0002_add_reminder"
down_revision = "0001_create_todos"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("todos", sa.Column("reminder_at", sa.DateTime(timezone=True), nullable=True))
    op.create_index("ix_todos_reminder_at", "todos", ["reminder_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_todos_reminder_at", table_name="todos")
    op.drop_column("todos", "reminder_at")
