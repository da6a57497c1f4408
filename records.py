from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    income = "Income"
    expense = "Expense"
    transfer = "Transfer"


class PaymentType(str, Enum):
    transfer = "TRANSFER"
    debit_card = "DEBIT_CARD"
    credit_card = "CREDIT_CARD"
    cash = "CASH"


class BudgetPeriod(str, Enum):
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TransactionType
    amount: float
    currency: str
    date: datetime
    category: str
    account: str
    description: str = ""
    notes: str = ""
    payment_type: Optional[PaymentType] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.amount):
            raise ValueError("Transaction amount must be a finite number")
        if self.amount < 0:
            raise ValueError("Transaction amount must not be negative")


@dataclass(frozen=True)
class Budget:
    id: str
    category: str
    amount: float
    period: BudgetPeriod
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.amount):
            raise ValueError("Budget amount must be a finite number")
        if self.amount <= 0:
            raise ValueError("Budget amount must be greater than zero")


@dataclass(frozen=True)
class BudgetSummary:
    budget: Budget
    spent: float
    remaining: float
    percentage: float


@dataclass(frozen=True)
class CategorySummary:
    category: str
    total: float
    percentage: float
    color: str


@dataclass(frozen=True)
class AccountSummary:
    account: str
    total: float
    percentage: float
    color: str


@dataclass(frozen=True)
class MonthlyData:
    month: str  # "YYYY-MM"
    income: float
    expense: float
    balance: float
    categories: tuple[CategorySummary, ...] = ()


@dataclass(frozen=True)
class DashboardStats:
    total_income: float = 0.0
    total_expense: float = 0.0
    balance: float = 0.0
    by_category: tuple[CategorySummary, ...] = ()
    by_account: tuple[AccountSummary, ...] = ()
    by_month: tuple[MonthlyData, ...] = ()
    recent_transactions: tuple[Transaction, ...] = ()


@dataclass(frozen=True)
class CashFlowPoint:
    period: str
    net_flow: float


@dataclass(frozen=True)
class ForecastPoint:
    period: str
    predicted_net_flow: float


@dataclass(frozen=True)
class CashFlowForecast:
    history: tuple[CashFlowPoint, ...] = field(default_factory=tuple)
    forecast: tuple[ForecastPoint, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CategoryGrowth:
    category: str
    growth: float


@dataclass(frozen=True)
class DashboardInsights:
    highest_expense: Optional[CategorySummary]
    growing_expense: Optional[CategoryGrowth]
    savings_rate: float
