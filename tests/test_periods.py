from datetime import date, datetime

import pytest

from periods import add_months, budget_window, month_key, resolve_period
from records import BudgetPeriod


def test_resolve_period_defaults_to_all_time() -> None:
    period = resolve_period(None, None, None, today=date(2025, 5, 20))
    assert period.slug == "all"
    assert period.contains(datetime(1999, 1, 1))


def test_resolve_this_and_last_month() -> None:
    today = date(2025, 3, 15)
    this_month = resolve_period("this_month", None, None, today=today)
    assert (this_month.start, this_month.end) == (date(2025, 3, 1), date(2025, 3, 31))
    last_month = resolve_period("last_month", None, None, today=today)
    assert (last_month.start, last_month.end) == (date(2025, 2, 1), date(2025, 2, 28))


def test_resolve_quarter_and_year() -> None:
    today = date(2025, 11, 2)
    quarter = resolve_period("quarter", None, None, today=today)
    assert (quarter.start, quarter.end) == (date(2025, 10, 1), date(2025, 12, 31))
    year = resolve_period("year", None, None, today=today)
    assert (year.start, year.end) == (date(2025, 1, 1), date(2025, 12, 31))


def test_custom_period_validation() -> None:
    period = resolve_period("custom", "2025-01-10", "2025-02-01")
    assert period.contains(datetime(2025, 2, 1, 23, 59))
    assert not period.contains(datetime(2025, 2, 2))
    with pytest.raises(ValueError):
        resolve_period("custom", "2025-01-10", None)
    with pytest.raises(ValueError):
        resolve_period("custom", "2025-03-01", "2025-02-01")
    with pytest.raises(ValueError):
        resolve_period("fortnight", None, None)


def test_month_helpers() -> None:
    assert add_months(2024, 12, 1) == (2025, 1)
    assert add_months(2025, 1, -1) == (2024, 12)
    assert month_key(datetime(2025, 7, 4)) == "2025-07"


def test_budget_windows() -> None:
    now = datetime(2024, 2, 14, 10, 30)  # Wednesday
    assert budget_window(BudgetPeriod.weekly, now) == (datetime(2024, 2, 11), now)
    start, end = budget_window(BudgetPeriod.monthly, now)
    assert start == datetime(2024, 2, 1)
    assert end == datetime(2024, 2, 29, 23, 59, 59, 999999)
    start, end = budget_window(BudgetPeriod.yearly, now)
    assert start == datetime(2024, 1, 1)
    assert end == datetime(2024, 12, 31, 23, 59, 59, 999999)
    with pytest.raises(ValueError):
        budget_window("daily", now)
