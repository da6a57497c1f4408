from __future__ import annotations

import json
import logging
from datetime import datetime, time
from typing import Optional, Sequence
from uuid import uuid4

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from analytics import (
    compute_dashboard_stats,
    evaluate_budgets,
    find_duplicate_groups,
    forecast_cash_flow,
    get_insights,
)
from clock import Clock, SystemClock
from config import get_settings
from models import BudgetRow, TransactionRow, amount_to_cents
from periods import Period
from records import (
    Budget,
    BudgetSummary,
    CashFlowForecast,
    DashboardInsights,
    DashboardStats,
    Transaction,
)
from schemas import BudgetIn, TransactionIn

logger = logging.getLogger(__name__)


def get_current_user_id() -> int:
    return 1


def transaction_to_dict(txn: Transaction) -> dict[str, object]:
    return {
        "id": txn.id,
        "type": txn.type.value,
        "amount": txn.amount,
        "currency": txn.currency,
        "date": txn.date.isoformat(),
        "description": txn.description,
        "category": txn.category,
        "account": txn.account,
        "payment_type": txn.payment_type.value if txn.payment_type else None,
        "notes": txn.notes,
    }


class TransactionNotFound(ValueError):
    pass


class BudgetNotFound(ValueError):
    pass


class TransactionService:
    def __init__(self, session: Session, user_id: Optional[int] = None) -> None:
        self.session = session
        self.user_id = user_id or get_current_user_id()

    def _get_row(self, transaction_id: str) -> TransactionRow:
        row = self.session.scalar(
            select(TransactionRow).where(
                TransactionRow.user_id == self.user_id,
                TransactionRow.external_id == transaction_id,
            )
        )
        if not row:
            raise TransactionNotFound("Transaction not found")
        return row

    def _id_taken(self, transaction_id: str) -> bool:
        stmt = select(func.count(TransactionRow.pk)).where(
            TransactionRow.user_id == self.user_id,
            TransactionRow.external_id == transaction_id,
        )
        return (self.session.execute(stmt).scalar_one() or 0) > 0

    @staticmethod
    def _apply(row: TransactionRow, data: TransactionIn) -> None:
        row.type = data.type
        row.amount_cents = amount_to_cents(data.amount)
        row.currency = data.currency
        row.occurred_at = data.date
        row.category = data.category.strip()
        row.account = data.account.strip()
        row.description = data.description
        row.notes = data.notes
        row.payment_type = data.payment_type

    def list_all(self) -> list[Transaction]:
        stmt = (
            select(TransactionRow)
            .where(TransactionRow.user_id == self.user_id)
            .order_by(TransactionRow.pk.asc())
        )
        return [row.to_record() for row in self.session.scalars(stmt)]

    def list_for_period(self, period: Period) -> list[Transaction]:
        stmt = (
            select(TransactionRow)
            .where(
                TransactionRow.user_id == self.user_id,
                TransactionRow.occurred_at.between(
                    datetime.combine(period.start, time.min),
                    datetime.combine(period.end, time.max),
                ),
            )
            .order_by(TransactionRow.pk.asc())
        )
        return [row.to_record() for row in self.session.scalars(stmt)]

    def get(self, transaction_id: str) -> Transaction:
        return self._get_row(transaction_id).to_record()

    def create(self, data: TransactionIn) -> Transaction:
        transaction_id = data.id or str(uuid4())
        if self._id_taken(transaction_id):
            raise ValueError("Transaction id already exists")
        row = TransactionRow(user_id=self.user_id, external_id=transaction_id)
        self._apply(row, data)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row.to_record()

    def update(self, transaction_id: str, data: TransactionIn) -> Transaction:
        if data.id and data.id != transaction_id:
            raise ValueError("Transaction id cannot be changed")
        row = self._get_row(transaction_id)
        self._apply(row, data)
        self.session.commit()
        self.session.refresh(row)
        return row.to_record()

    def delete(self, transaction_id: str) -> None:
        row = self._get_row(transaction_id)
        self.session.delete(row)
        self.session.commit()
        logger.info(f"transaction_deleted: id={transaction_id}")

    def import_batch(self, items: Sequence[TransactionIn]) -> list[Transaction]:
        if not items:
            raise ValueError("No valid transactions found to import")
        limit = get_settings().import_limit
        batch = list(items)[:limit]

        rows: list[TransactionRow] = []
        seen: set[str] = set()
        for data in batch:
            transaction_id = data.id
            if not transaction_id or transaction_id in seen or self._id_taken(
                transaction_id
            ):
                transaction_id = str(uuid4())
            seen.add(transaction_id)
            row = TransactionRow(user_id=self.user_id, external_id=transaction_id)
            self._apply(row, data)
            rows.append(row)

        self.session.add_all(rows)
        self.session.commit()
        logger.info(
            f"transactions_imported: count={len(rows)} "
            f"skipped_over_limit={len(items) - len(rows)}"
        )
        return [row.to_record() for row in rows]

    def clear(self) -> int:
        result = self.session.execute(
            delete(TransactionRow).where(TransactionRow.user_id == self.user_id)
        )
        self.session.commit()
        logger.info(f"transactions_cleared: count={result.rowcount}")
        return int(result.rowcount or 0)

    def export_json(self) -> str:
        return json.dumps([transaction_to_dict(txn) for txn in self.list_all()])

    def import_json(self, content: str) -> list[Transaction]:
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON: {exc.msg}") from exc
        if not isinstance(payload, list):
            raise ValueError("Expected a JSON array of transactions")
        items = [TransactionIn.model_validate(item) for item in payload]
        return self.import_batch(items)


class BudgetService:
    def __init__(self, session: Session, user_id: Optional[int] = None) -> None:
        self.session = session
        self.user_id = user_id or get_current_user_id()

    def _find(self, **criteria: str) -> Optional[BudgetRow]:
        stmt = select(BudgetRow).where(BudgetRow.user_id == self.user_id)
        for column, value in criteria.items():
            stmt = stmt.where(getattr(BudgetRow, column) == value)
        return self.session.scalar(stmt.order_by(BudgetRow.pk.asc()).limit(1))

    def list_all(self) -> list[Budget]:
        stmt = (
            select(BudgetRow)
            .where(BudgetRow.user_id == self.user_id)
            .order_by(BudgetRow.pk.asc())
        )
        return [row.to_record() for row in self.session.scalars(stmt)]

    def get(self, budget_id: str) -> Budget:
        row = self._find(external_id=budget_id)
        if not row:
            raise BudgetNotFound("Budget not found")
        return row.to_record()

    def upsert(self, data: BudgetIn) -> Budget:
        """Create a budget, or replace the one with the same id or category."""
        category = data.category.strip()
        existing = None
        if data.id:
            existing = self._find(external_id=data.id)
        same_category = self._find(category=category)
        if existing is None:
            existing = same_category
        elif same_category is not None and same_category.pk != existing.pk:
            self.session.delete(same_category)
            self.session.flush()
            logger.info(
                f"budget_replaced: id={same_category.external_id} category={category}"
            )

        if existing is None:
            existing = BudgetRow(
                user_id=self.user_id, external_id=data.id or str(uuid4())
            )
            self.session.add(existing)
        elif data.id:
            existing.external_id = data.id

        existing.category = category
        existing.name = data.name
        existing.amount_cents = amount_to_cents(data.amount)
        existing.period = data.period
        self.session.commit()
        self.session.refresh(existing)
        return existing.to_record()

    def delete(self, budget_id: str) -> None:
        row = self._find(external_id=budget_id)
        if not row:
            raise BudgetNotFound("Budget not found")
        self.session.delete(row)
        self.session.commit()
        logger.info(f"budget_deleted: id={budget_id}")


class AnalyticsService:
    def __init__(
        self,
        session: Session,
        clock: Optional[Clock] = None,
        user_id: Optional[int] = None,
    ) -> None:
        self.session = session
        self.user_id = user_id or get_current_user_id()
        self.clock = clock or SystemClock()
        self.transactions = TransactionService(session, self.user_id)
        self.budgets = BudgetService(session, self.user_id)

    def _transactions(self, period: Optional[Period]) -> list[Transaction]:
        if period is None or period.slug == "all":
            return self.transactions.list_all()
        return self.transactions.list_for_period(period)

    def dashboard(self, period: Optional[Period] = None) -> DashboardStats:
        return compute_dashboard_stats(
            self._transactions(period), recent_limit=get_settings().recent_limit
        )

    def budget_summaries(self) -> list[BudgetSummary]:
        return evaluate_budgets(
            self.budgets.list_all(), self.transactions.list_all(), self.clock.now()
        )

    def duplicate_groups(self) -> list[list[Transaction]]:
        return find_duplicate_groups(self.transactions.list_all())

    def forecast(self, periods: Optional[int] = None) -> CashFlowForecast:
        if periods is None:
            periods = get_settings().forecast_periods
        return forecast_cash_flow(
            self.transactions.list_all(), periods, now=self.clock.now()
        )

    def insights(self, period: Optional[Period] = None) -> DashboardInsights:
        return get_insights(self.dashboard(period))
