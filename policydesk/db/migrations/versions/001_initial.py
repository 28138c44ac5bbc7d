"""Initial schema - users, contracts, history, tasks

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # Contracts
    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("salesperson", sa.String(255), nullable=False),
        sa.Column("insurance_type", sa.String(255), nullable=False),
        sa.Column("policy_no", sa.String(100), nullable=False),
        sa.Column("valid_from", sa.Date, nullable=True),
        sa.Column("valid_until", sa.Date, nullable=False),
        sa.Column("registration_no", sa.String(100), nullable=False),
        sa.Column("yearly_premium", sa.Numeric(14, 2), nullable=False),
        sa.Column("payout", sa.Numeric(14, 2), nullable=False),
        sa.Column("notes", sa.JSON, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.Column("is_archived", sa.Boolean, nullable=False),
        sa.UniqueConstraint("policy_no", "registration_no", name="uq_contracts_business_key"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_contracts_policy_no", "contracts", ["policy_no"])
    op.create_index("ix_contracts_valid_until", "contracts", ["valid_until"])

    # History (no foreign key: entries outlive deleted contracts)
    op.create_table(
        "history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("contract_id", sa.Integer, nullable=False),
        sa.Column("user_id", sa.Integer, nullable=True),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column("timestamp", sa.DateTime, nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("details", sa.Text, nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_history_contract_id", "history", ["contract_id"])

    # Tasks
    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("assigned_to", sa.String(150), nullable=True),
        sa.Column("created_by", sa.String(150), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("due_date", sa.Date, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("comments", sa.JSON, nullable=False),
        sa.Column("completed_at", sa.DateTime, nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_tasks_assigned_to", "tasks", ["assigned_to"])


def downgrade() -> None:
    op.drop_table("tasks")
    op.drop_table("history")
    op.drop_table("contracts")
    op.drop_table("users")
