"""transactions and budgets

Revision ID: 202610171200
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "202610171200"
down_revision = None
branch_labels = None
depends_on = None

TRANSACTION_TYPES = ("income", "expense", "transfer")
PAYMENT_TYPES = ("transfer", "debit_card", "credit_card", "cash")
BUDGET_PERIODS = ("weekly", "monthly", "yearly")


def upgrade() -> None:
    op.create_table(
        "transactions",
        sa.Column("pk", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("external_id", sa.String(length=64), nullable=False),
        sa.Column(
            "type", sa.Enum(*TRANSACTION_TYPES, name="transactiontype"), nullable=False
        ),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("account", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("payment_type", sa.Enum(*PAYMENT_TYPES, name="paymenttype")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount_cents >= 0", name="ck_transactions_amount_positive"),
        sa.UniqueConstraint("user_id", "external_id", name="uq_transaction_user_id"),
    )
    op.create_index(
        "ix_transactions_user_occurred", "transactions", ["user_id", "occurred_at"]
    )

    op.create_table(
        "budgets",
        sa.Column("pk", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("external_id", sa.String(length=64), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=120)),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column(
            "period", sa.Enum(*BUDGET_PERIODS, name="budgetperiod"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount_cents > 0", name="ck_budgets_amount_positive"),
        sa.UniqueConstraint("user_id", "external_id", name="uq_budget_user_id"),
    )


def downgrade() -> None:
    op.drop_table("budgets")
    op.drop_index("ix_transactions_user_occurred", table_name="transactions")
    op.drop_table("transactions")
