from datetime import datetime

import pytest

from analytics import evaluate_budgets
from records import Budget, BudgetPeriod, Transaction, TransactionType

# Wednesday; the week started on Sunday 2025-03-16.
NOW = datetime(2025, 3, 19, 15, 0)


def _expense(txn_id: str, amount: float, when: datetime, category: str = "Food") -> Transaction:
    return Transaction(
        id=txn_id,
        type=TransactionType.expense,
        amount=amount,
        currency="USD",
        date=when,
        category=category,
        account="Bank",
    )


def _budget(period: BudgetPeriod, amount: float = 100, category: str = "Food") -> Budget:
    return Budget(id=f"b-{period.value}", category=category, amount=amount, period=period)


def test_no_budgets_gives_no_summaries() -> None:
    assert evaluate_budgets([], [], NOW) == []


def test_monthly_overage_is_reported_unclamped() -> None:
    txns = [
        _expense("1", 100, datetime(2025, 3, 1, 8, 0)),
        _expense("2", 50, datetime(2025, 3, 31, 23, 59)),
        _expense("3", 70, datetime(2025, 2, 28)),
        _expense("4", 70, datetime(2024, 3, 10)),
    ]
    (summary,) = evaluate_budgets([_budget(BudgetPeriod.monthly)], txns, NOW)
    assert summary.spent == 150
    assert summary.remaining == -50
    assert summary.percentage == 150


def test_weekly_window_starts_on_sunday_midnight_and_ends_now() -> None:
    txns = [
        _expense("sat", 10, datetime(2025, 3, 15, 23, 59)),
        _expense("sun", 20, datetime(2025, 3, 16, 0, 0)),
        _expense("today", 5, datetime(2025, 3, 19, 9, 0)),
        _expense("later", 40, datetime(2025, 3, 19, 18, 0)),
    ]
    (summary,) = evaluate_budgets([_budget(BudgetPeriod.weekly)], txns, NOW)
    assert summary.spent == 25
    assert summary.percentage == 25


def test_weekly_window_on_a_sunday_starts_that_morning() -> None:
    sunday = datetime(2025, 3, 16, 12, 0)
    txns = [
        _expense("sat", 10, datetime(2025, 3, 15, 12, 0)),
        _expense("sun", 20, datetime(2025, 3, 16, 1, 0)),
    ]
    (summary,) = evaluate_budgets([_budget(BudgetPeriod.weekly)], txns, sunday)
    assert summary.spent == 20


def test_yearly_window_covers_the_calendar_year() -> None:
    txns = [
        _expense("1", 300, datetime(2025, 1, 1)),
        _expense("2", 200, datetime(2025, 12, 31)),
        _expense("3", 999, datetime(2024, 12, 31)),
    ]
    (summary,) = evaluate_budgets([_budget(BudgetPeriod.yearly, amount=1000)], txns, NOW)
    assert summary.spent == 500
    assert summary.remaining == 500
    assert summary.percentage == 50


def test_only_expenses_of_the_budget_category_count() -> None:
    txns = [
        _expense("1", 30, datetime(2025, 3, 2)),
        _expense("2", 30, datetime(2025, 3, 2), category="Fuel"),
        Transaction(
            id="3",
            type=TransactionType.income,
            amount=500,
            currency="USD",
            date=datetime(2025, 3, 2),
            category="Food",
            account="Bank",
        ),
    ]
    (summary,) = evaluate_budgets([_budget(BudgetPeriod.monthly)], txns, NOW)
    assert summary.spent == 30


def test_output_follows_budget_order_and_duplicates_are_kept() -> None:
    budgets = [
        Budget(id="z", category="Fuel", amount=50, period=BudgetPeriod.monthly),
        Budget(id="a", category="Food", amount=100, period=BudgetPeriod.monthly),
        Budget(id="b", category="Food", amount=200, period=BudgetPeriod.yearly),
    ]
    txns = [_expense("1", 40, datetime(2025, 3, 2))]
    summaries = evaluate_budgets(budgets, txns, NOW)
    assert [s.budget.id for s in summaries] == ["z", "a", "b"]
    assert [s.spent for s in summaries] == [0, 40, 40]
    assert summaries[2].percentage == 20


def test_zero_budget_amount_is_rejected_at_creation() -> None:
    with pytest.raises(ValueError):
        Budget(id="x", category="Food", amount=0, period=BudgetPeriod.monthly)


def test_non_finite_budget_amount_is_rejected_at_creation() -> None:
    with pytest.raises(ValueError):
        Budget(id="x", category="Food", amount=float("nan"), period=BudgetPeriod.monthly)
    with pytest.raises(ValueError):
        Budget(id="x", category="Food", amount=float("inf"), period=BudgetPeriod.monthly)


def test_missing_inputs_raise_type_error() -> None:
    budget = _budget(BudgetPeriod.monthly)
    with pytest.raises(TypeError):
        evaluate_budgets(None, [], NOW)
    with pytest.raises(TypeError):
        evaluate_budgets([budget], None, NOW)
    with pytest.raises(TypeError):
        evaluate_budgets([budget], [], None)
