# backend/tippool/domain/aggregation.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Union

from tippool.domain.allocation import allocate
from tippool.domain.models import DayAllocation, DayRecord, PeriodTotals
from tippool.domain.money import cents_to_str, decimal_to_cents

logger = logging.getLogger(__name__)

DayLike = Union[DayRecord, Mapping[str, Any]]


def _as_day(day: DayLike) -> DayRecord:
    if isinstance(day, DayRecord):
        return day
    return DayRecord.from_mapping(day)


def add_shares_to_totals(totals_by_employee: Dict[str, int], shares_cents: Mapping[str, int]) -> Dict[str, int]:
    """
    Add one day's shares (cents) into a running totals dict.
    Mutates and also returns the dict for convenience.
    """
    for pid, cents in shares_cents.items():
        totals_by_employee[pid] = totals_by_employee.get(pid, 0) + cents
    return totals_by_employee


def aggregate(days: Iterable[DayLike]) -> PeriodTotals:
    """
    Allocate every day of a pay period and sum the results per employee.

    All accumulation is integer cents; dollars only appear through the
    PeriodTotals properties. Employees who end the period at 0 cents are left
    out of by_employee. If a date repeats, by_day keeps the last one but both
    days count toward by_employee.
    """
    totals: Dict[str, int] = {}
    by_day: Dict[str, Dict[str, int]] = {}
    allocations: Dict[str, DayAllocation] = {}

    for raw_day in days:
        day = _as_day(raw_day)
        alloc = allocate(day.tips, day.hours)

        # shares are already whole cents; re-rounding the dollar view keeps it that way
        day_cents = {pid: decimal_to_cents(share, max_abs_cents=None) for pid, share in alloc.shares.items()}

        by_day[day.date] = day_cents
        allocations[day.date] = alloc
        add_shares_to_totals(totals, day_cents)

        logger.debug(
            "aggregated %s: tips=%s across %d employees",
            day.date,
            cents_to_str(alloc.total_tips_cents),
            len(day_cents),
        )

    by_employee = {pid: cents for pid, cents in totals.items() if cents != 0}

    return PeriodTotals(
        by_employee_cents=by_employee,
        by_day_cents=by_day,
        days=allocations,
    )
