from datetime import datetime

import pytest

from analytics import forecast_cash_flow
from records import CashFlowPoint, ForecastPoint, Transaction, TransactionType


def _txn(txn_id: str, txn_type: TransactionType, amount: float, when: datetime) -> Transaction:
    return Transaction(
        id=txn_id,
        type=txn_type,
        amount=amount,
        currency="USD",
        date=when,
        category="General",
        account="Bank",
    )


def test_flat_forecast_rolls_over_the_year_boundary() -> None:
    txns = [
        _txn("1", TransactionType.income, 100, datetime(2024, 10, 3)),
        _txn("2", TransactionType.income, 300, datetime(2024, 11, 1)),
        _txn("3", TransactionType.expense, 100, datetime(2024, 11, 20)),
        _txn("4", TransactionType.income, 300, datetime(2024, 12, 24)),
        _txn("5", TransactionType.transfer, 5000, datetime(2024, 12, 25)),
    ]

    result = forecast_cash_flow(txns, 2)

    assert result.history == (
        CashFlowPoint("2024-10", 100),
        CashFlowPoint("2024-11", 200),
        CashFlowPoint("2024-12", 300),
    )
    assert result.forecast == (
        ForecastPoint("2025-01", 200),
        ForecastPoint("2025-02", 200),
    )


def test_forecast_uses_only_the_last_three_months() -> None:
    txns = [
        _txn("1", TransactionType.income, 9000, datetime(2025, 1, 5)),
        _txn("2", TransactionType.income, 30, datetime(2025, 2, 5)),
        _txn("3", TransactionType.expense, 30, datetime(2025, 3, 5)),
        _txn("4", TransactionType.income, 60, datetime(2025, 4, 5)),
    ]
    result = forecast_cash_flow(txns, 1)
    assert [p.period for p in result.history] == ["2025-01", "2025-02", "2025-03", "2025-04"]
    assert result.forecast == (ForecastPoint("2025-05", 20),)


def test_short_history_averages_what_exists() -> None:
    txns = [
        _txn("1", TransactionType.income, 50, datetime(2025, 6, 1)),
        _txn("2", TransactionType.expense, 150, datetime(2025, 7, 1)),
    ]
    result = forecast_cash_flow(txns, 3)
    assert [p.predicted_net_flow for p in result.forecast] == [-50, -50, -50]
    assert [p.period for p in result.forecast] == ["2025-08", "2025-09", "2025-10"]


def test_empty_history_forecasts_zero_from_now() -> None:
    result = forecast_cash_flow([], 2, now=datetime(2025, 11, 15))
    assert result.history == ()
    assert result.forecast == (
        ForecastPoint("2025-12", 0.0),
        ForecastPoint("2026-01", 0.0),
    )


def test_empty_history_without_now_has_no_forecast() -> None:
    result = forecast_cash_flow([], 4)
    assert result.history == ()
    assert result.forecast == ()


def test_zero_periods_keeps_history_only() -> None:
    result = forecast_cash_flow([_txn("1", TransactionType.income, 10, datetime(2025, 1, 1))], 0)
    assert len(result.history) == 1
    assert result.forecast == ()


def test_negative_periods_are_rejected() -> None:
    with pytest.raises(ValueError):
        forecast_cash_flow([], -1)
