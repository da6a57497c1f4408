from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from records import BudgetPeriod


@dataclass(frozen=True)
class Period:
    slug: str
    start: date
    end: date

    def contains(self, value: datetime) -> bool:
        return self.start <= value.date() <= self.end


def add_months(year: int, month: int, count: int) -> tuple[int, int]:
    month_index = (year * 12) + (month - 1) + count
    return month_index // 12, (month_index % 12) + 1


def month_key(value: datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def _month_end(year: int, month: int) -> date:
    next_year, next_month = add_months(year, month, 1)
    return date(next_year, next_month, 1) - date.resolution


def resolve_period(
    period: Optional[str],
    start: Optional[str],
    end: Optional[str],
    *,
    today: Optional[date] = None,
) -> Period:
    today = today or date.today()
    if not period or period == "all":
        return Period("all", date.min, date.max)
    if period == "last_month":
        first_this = today.replace(day=1)
        last_month_end = first_this - date.resolution
        last_month_start = last_month_end.replace(day=1)
        return Period("last_month", last_month_start, last_month_end)
    if period == "quarter":
        first_month = ((today.month - 1) // 3) * 3 + 1
        last_year, last_month = add_months(today.year, first_month, 2)
        return Period(
            "quarter",
            date(today.year, first_month, 1),
            _month_end(last_year, last_month),
        )
    if period == "year":
        return Period("year", date(today.year, 1, 1), date(today.year, 12, 31))
    if period == "custom":
        if not start or not end:
            raise ValueError("Custom period requires start and end dates")
        start_date = date.fromisoformat(start)
        end_date = date.fromisoformat(end)
        if start_date > end_date:
            raise ValueError("Start date must be before end date")
        return Period("custom", start_date, end_date)
    if period != "this_month":
        raise ValueError(f"Unknown period: {period}")

    first = today.replace(day=1)
    return Period("this_month", first, _month_end(first.year, first.month))


def budget_window(period: BudgetPeriod, now: datetime) -> tuple[datetime, datetime]:
    """Inclusive datetime bounds of the budget period that contains ``now``.

    Weeks start on Sunday at midnight and end at ``now`` itself; months and
    years cover the whole calendar interval.
    """
    period = BudgetPeriod(period)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == BudgetPeriod.weekly:
        days_since_sunday = (now.weekday() + 1) % 7
        return midnight - timedelta(days=days_since_sunday), now
    if period == BudgetPeriod.monthly:
        start = midnight.replace(day=1)
        next_year, next_month = add_months(now.year, now.month, 1)
        end = datetime(next_year, next_month, 1) - datetime.resolution
        return start, end
    start = midnight.replace(month=1, day=1)
    return start, datetime(now.year + 1, 1, 1) - datetime.resolution
