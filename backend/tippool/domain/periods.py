# backend/tippool/domain/periods.py
from __future__ import annotations

import re
import uuid
from datetime import date, timedelta
from typing import Optional, Union

from tippool.domain.models import DayRecord, PayPeriod, TipRecord, normalize_date

DEFAULT_PERIOD_DAYS = 14

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class PeriodError(ValueError):
    """Raised when pay-period bounds are invalid."""


def _parse(value: Union[str, date]) -> date:
    try:
        return date.fromisoformat(normalize_date(value))
    except ValueError as e:
        raise PeriodError(str(e)) from e


def create_pay_period(
    start_date: Union[str, date],
    end_date: Optional[Union[str, date]] = None,
    *,
    length_days: int = DEFAULT_PERIOD_DAYS,
) -> PayPeriod:
    """
    Build an empty pay period with one day record per date, inclusive.

    Without end_date the period runs length_days days from start_date.
    Bounds given in the wrong order are swapped.
    """
    if not isinstance(length_days, int) or length_days < 1:
        raise PeriodError("length_days must be an int >= 1")

    start = _parse(start_date)
    if end_date is None:
        end = start + timedelta(days=length_days - 1)
    else:
        end = _parse(end_date)
    if end < start:
        start, end = end, start

    days = []
    current = start
    while current <= end:
        days.append(DayRecord(date=current.isoformat(), tips=TipRecord()))
        current += timedelta(days=1)

    return PayPeriod(
        id=str(uuid.uuid4()),
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        days=days,
    )


def format_date(iso_date: Union[str, date]) -> str:
    """
    "2025-01-15" -> "Jan 15, 2025"
    """
    d = _parse(iso_date)
    return f"{_MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_period_range(start_date: Union[str, date], end_date: Union[str, date]) -> str:
    """
    "Jan 1 – 15, 2025" within one month, otherwise both full dates.
    """
    start = _parse(start_date)
    end = _parse(end_date)
    if start.year == end.year and start.month == end.month:
        return f"{_MONTHS[start.month - 1]} {start.day} – {end.day}, {end.year}"
    return f"{format_date(start)} – {format_date(end)}"


def owner_key(username: Optional[str]) -> Optional[str]:
    """
    Normalise a username into the key that scopes a user's roster and periods.
    Returns None for a blank name.
    """
    if not isinstance(username, str) or not username.strip():
        return None
    return re.sub(r"\s+", "_", username.strip().lower())
