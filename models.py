import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum as SAEnum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from database import Base
from records import Budget, BudgetPeriod, PaymentType, Transaction, TransactionType


def amount_to_cents(amount: float) -> int:
    if not math.isfinite(amount):
        raise ValueError(f"Amount must be a finite number, got {amount!r}")
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), ROUND_HALF_UP))


def cents_to_amount(cents: int) -> float:
    return cents / 100


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class TransactionRow(Base, TimestampMixin):
    __tablename__ = "transactions"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    external_id: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType), nullable=False
    )
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    account: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    payment_type: Mapped[Optional[PaymentType]] = mapped_column(SAEnum(PaymentType))

    __table_args__ = (
        UniqueConstraint("user_id", "external_id", name="uq_transaction_user_id"),
        Index("ix_transactions_user_occurred", "user_id", "occurred_at"),
        CheckConstraint("amount_cents >= 0", name="ck_transactions_amount_positive"),
    )

    def to_record(self) -> Transaction:
        return Transaction(
            id=self.external_id,
            type=self.type,
            amount=cents_to_amount(self.amount_cents),
            currency=self.currency,
            date=self.occurred_at,
            category=self.category,
            account=self.account,
            description=self.description or "",
            notes=self.notes or "",
            payment_type=self.payment_type,
        )


class BudgetRow(Base, TimestampMixin):
    __tablename__ = "budgets"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    external_id: Mapped[str] = mapped_column(String(64), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(120))
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    period: Mapped[BudgetPeriod] = mapped_column(SAEnum(BudgetPeriod), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "external_id", name="uq_budget_user_id"),
        CheckConstraint("amount_cents > 0", name="ck_budgets_amount_positive"),
    )

    def to_record(self) -> Budget:
        return Budget(
            id=self.external_id,
            category=self.category,
            amount=cents_to_amount(self.amount_cents),
            period=self.period,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
