"""Pure aggregation functions behind the dashboard, budgets and insights.

Every function here takes the full record collection and returns freshly
built derived records. Inputs are never mutated and nothing is cached, so a
caller can recompute on every change of the underlying collection.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence, TypeVar

from periods import add_months, budget_window, month_key
from records import (
    AccountSummary,
    Budget,
    BudgetSummary,
    CashFlowForecast,
    CashFlowPoint,
    CategoryGrowth,
    CategorySummary,
    DashboardInsights,
    DashboardStats,
    ForecastPoint,
    MonthlyData,
    Transaction,
    TransactionType,
)

T = TypeVar("T")

CATEGORY_COLORS = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#FFA726",
    "#66BB6A",
    "#7E57C2",
    "#EC407A",
    "#5C6BC0",
    "#26A69A",
    "#FFD54F",
    "#F06292",
    "#9CCC65",
)

RECENT_TRANSACTIONS_LIMIT = 5
FORECAST_WINDOW = 3
_CENT = Decimal("0.01")


def category_color(name: str) -> str:
    index = sum(ord(ch) for ch in name) % len(CATEGORY_COLORS)
    return CATEGORY_COLORS[index]


def _require_sequence(value: Optional[Iterable[T]], name: str) -> list[T]:
    if value is None:
        raise TypeError(f"{name} must be a sequence, not None")
    return list(value)


def _percentage(part: float, whole: float) -> float:
    if whole == 0:
        return 0.0
    return part / whole * 100


def _category_summaries(
    expenses: Iterable[Transaction], denominator: float
) -> tuple[CategorySummary, ...]:
    totals: dict[str, float] = {}
    for txn in expenses:
        totals[txn.category] = totals.get(txn.category, 0.0) + txn.amount
    rows = [
        CategorySummary(
            category=category,
            total=total,
            percentage=_percentage(total, denominator),
            color=category_color(category),
        )
        for category, total in totals.items()
    ]
    rows.sort(key=lambda row: row.total, reverse=True)
    return tuple(rows)


def _account_summaries(
    transactions: Iterable[Transaction],
) -> tuple[AccountSummary, ...]:
    nets: dict[str, float] = {}
    for txn in transactions:
        # Transfers leave the account they are booked on.
        signed = txn.amount if txn.type == TransactionType.income else -txn.amount
        nets[txn.account] = nets.get(txn.account, 0.0) + signed
    denominator = sum(abs(total) for total in nets.values())
    rows = [
        AccountSummary(
            account=account,
            total=total,
            percentage=_percentage(abs(total), denominator),
            color=category_color(account),
        )
        for account, total in nets.items()
    ]
    rows.sort(key=lambda row: abs(row.total), reverse=True)
    return tuple(rows)


def _monthly_data(transactions: Iterable[Transaction]) -> tuple[MonthlyData, ...]:
    income: dict[str, float] = {}
    expense: dict[str, float] = {}
    expenses_by_month: dict[str, list[Transaction]] = {}
    for txn in transactions:
        key = month_key(txn.date)
        income.setdefault(key, 0.0)
        expense.setdefault(key, 0.0)
        expenses_by_month.setdefault(key, [])
        if txn.type == TransactionType.income:
            income[key] += txn.amount
        elif txn.type == TransactionType.expense:
            expense[key] += txn.amount
            expenses_by_month[key].append(txn)

    return tuple(
        MonthlyData(
            month=key,
            income=income[key],
            expense=expense[key],
            balance=income[key] - expense[key],
            categories=_category_summaries(expenses_by_month[key], expense[key]),
        )
        for key in sorted(income)
    )


def compute_dashboard_stats(
    transactions: Sequence[Transaction],
    *,
    recent_limit: int = RECENT_TRANSACTIONS_LIMIT,
) -> DashboardStats:
    """Reduce a transaction list into the dashboard totals and breakdowns.

    Transfers count towards account balances but never towards income or
    expense totals. Category percentages are shares of total expense and
    account percentages are shares of the summed absolute account nets; both
    fall back to 0 when the denominator is 0.
    """
    txns = _require_sequence(transactions, "transactions")

    expenses = [t for t in txns if t.type == TransactionType.expense]
    total_income = sum(
        (t.amount for t in txns if t.type == TransactionType.income), 0.0
    )
    total_expense = sum((t.amount for t in expenses), 0.0)

    # sorted() is stable with reverse=True, so equal dates keep input order.
    recent = sorted(txns, key=lambda t: t.date, reverse=True)[: max(recent_limit, 0)]

    return DashboardStats(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        by_category=_category_summaries(expenses, total_expense),
        by_account=_account_summaries(txns),
        by_month=_monthly_data(txns),
        recent_transactions=tuple(recent),
    )


def evaluate_budgets(
    budgets: Sequence[Budget],
    transactions: Sequence[Transaction],
    now: datetime,
) -> list[BudgetSummary]:
    """Spending against each budget inside the period window around ``now``.

    The output follows the order of ``budgets``. ``percentage`` is not clamped
    so overspending stays visible (150.0 means 50% over budget).
    """
    budget_list = _require_sequence(budgets, "budgets")
    txns = _require_sequence(transactions, "transactions")
    if now is None:
        raise TypeError("now must be a datetime, not None")

    summaries: list[BudgetSummary] = []
    for budget in budget_list:
        start, end = budget_window(budget.period, now)
        spent = sum(
            (
                t.amount
                for t in txns
                if t.category == budget.category
                and t.type == TransactionType.expense
                and start <= t.date <= end
            ),
            0.0,
        )
        summaries.append(
            BudgetSummary(
                budget=budget,
                spent=spent,
                remaining=budget.amount - spent,
                percentage=spent / budget.amount * 100,
            )
        )
    return summaries


def _round_cents(amount: float) -> Decimal:
    return Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP)


def duplicate_key(txn: Transaction) -> tuple:
    return (
        txn.date.date(),
        txn.account.strip().lower(),
        txn.category.strip().lower(),
        _round_cents(txn.amount),
    )


def find_duplicate_groups(
    transactions: Sequence[Transaction],
) -> list[list[Transaction]]:
    groups: dict[tuple, list[Transaction]] = {}
    for txn in _require_sequence(transactions, "transactions"):
        groups.setdefault(duplicate_key(txn), []).append(txn)
    return [group for group in groups.values() if len(group) > 1]


def forecast_cash_flow(
    transactions: Sequence[Transaction],
    periods: int,
    *,
    now: Optional[datetime] = None,
    window: int = FORECAST_WINDOW,
) -> CashFlowForecast:
    """Monthly net-flow history plus a flat forecast of ``periods`` months.

    Each forecast month predicts the mean of the last ``window`` historical
    net flows. Without any history the forecast starts after the month of
    ``now`` and predicts 0.0; if ``now`` is not given either, it is empty.
    """
    txns = _require_sequence(transactions, "transactions")
    if periods < 0:
        raise ValueError("periods must not be negative")
    if window < 1:
        raise ValueError("window must be at least 1")

    net: dict[tuple[int, int], float] = {}
    for txn in txns:
        if txn.type == TransactionType.income:
            signed = txn.amount
        elif txn.type == TransactionType.expense:
            signed = -txn.amount
        else:
            continue
        key = (txn.date.year, txn.date.month)
        net[key] = net.get(key, 0.0) + signed

    months = sorted(net)
    history = tuple(
        CashFlowPoint(period=f"{year:04d}-{month:02d}", net_flow=net[(year, month)])
        for year, month in months
    )

    if history:
        recent = [point.net_flow for point in history[-window:]]
        predicted = sum(recent) / len(recent)
        anchor_year, anchor_month = months[-1]
    elif now is not None:
        predicted = 0.0
        anchor_year, anchor_month = now.year, now.month
    else:
        return CashFlowForecast(history=history, forecast=())

    forecast = []
    for offset in range(1, periods + 1):
        year, month = add_months(anchor_year, anchor_month, offset)
        forecast.append(
            ForecastPoint(
                period=f"{year:04d}-{month:02d}", predicted_net_flow=predicted
            )
        )
    return CashFlowForecast(history=history, forecast=tuple(forecast))


def highest_expense_category(stats: DashboardStats) -> Optional[CategorySummary]:
    return stats.by_category[0] if stats.by_category else None


def fastest_growing_category(stats: DashboardStats) -> Optional[CategoryGrowth]:
    if len(stats.by_month) < 3:
        return None
    previous = {row.category: row.total for row in stats.by_month[-2].categories}
    best: Optional[CategoryGrowth] = None
    for row in stats.by_month[-1].categories:
        prev_total = previous.get(row.category, 0.0)
        growth = (
            (row.total - prev_total) / prev_total * 100 if prev_total > 0 else 0.0
        )
        if best is None or growth > best.growth:
            best = CategoryGrowth(category=row.category, growth=growth)
    return best


def savings_rate(stats: DashboardStats) -> float:
    return _percentage(stats.total_income - stats.total_expense, stats.total_income)


def get_insights(stats: DashboardStats) -> DashboardInsights:
    return DashboardInsights(
        highest_expense=highest_expense_category(stats),
        growing_expense=fastest_growing_category(stats),
        savings_rate=savings_rate(stats),
    )
