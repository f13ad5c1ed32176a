"""
Report period ranges.

A period name turns into an inclusive `{from, to}` range ending today:

    day    today only
    week   the last 7 days, today included
    month  from the 1st of this month
    year   from January 1st

Dates are local calendar dates. The range is computed from `today`
so callers (and tests) can pin it.
"""

from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator


PERIODS = ("day", "week", "month", "year")

PERIOD_LABELS = {
    "day": "Day",
    "week": "Week",
    "month": "Month",
    "year": "Year",
}


class DateRange(BaseModel):
    """Inclusive date range sent as `?from=YYYY-MM-DD&to=YYYY-MM-DD`."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @model_validator(mode='after')
    def start_before_end(self) -> 'DateRange':
        if self.start > self.end:
            raise ValueError(f"Range start {self.start} is after its end {self.end}")
        return self

    def as_params(self) -> dict[str, str]:
        return {"from": self.start.isoformat(), "to": self.end.isoformat()}


def get_date_range(period: str, today: Optional[date] = None) -> DateRange:
    """
    Resolve a period name to its date range.

    Raises:
        ValueError: Unknown period
    """
    today = today or date.today()
    if period == "day":
        start = today
    elif period == "week":
        start = today - timedelta(days=6)
    elif period == "month":
        start = today.replace(day=1)
    elif period == "year":
        start = today.replace(month=1, day=1)
    else:
        raise ValueError(f"Unknown period {period!r}; expected one of {', '.join(PERIODS)}")
    return DateRange(start=start, end=today)
