# backend/tippool/services/summary.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from tippool.domain.aggregation import aggregate
from tippool.domain.models import Employee, PayPeriod, PeriodTotals
from tippool.domain.periods import format_date, format_period_range

FORMER_EMPLOYEE = "Former employee"


@dataclass(frozen=True)
class SummaryRow:
    employee_id: str
    name: str
    day_cents: Tuple[int, ...]
    total_cents: int


@dataclass(frozen=True)
class PeriodSummary:
    label: str
    day_labels: Tuple[str, ...]
    rows: Tuple[SummaryRow, ...]
    totals: PeriodTotals

    @property
    def has_any_data(self) -> bool:
        return bool(self.rows)


def build_period_summary(period: PayPeriod, roster: Sequence[Employee]) -> PeriodSummary:
    """
    Pay-period table: one row per employee with per-day cents and a total.

    Covers everyone in the totals plus everyone on the roster, sorted by
    display name. Employees no longer on the roster show as "Former employee".
    Rows without any positive amount are dropped.
    """
    totals = aggregate(period.days)
    names: Dict[str, str] = {e.id: e.name for e in roster}

    employee_ids: List[str] = list(totals.by_employee_cents)
    for e in roster:
        if e.id not in totals.by_employee_cents:
            employee_ids.append(e.id)

    def display_name(pid: str) -> str:
        return names.get(pid, FORMER_EMPLOYEE)

    rows: List[SummaryRow] = []
    for pid in sorted(employee_ids, key=lambda pid: display_name(pid).casefold()):
        day_cents = tuple(totals.by_day_cents.get(d.date, {}).get(pid, 0) for d in period.days)
        total = totals.by_employee_cents.get(pid, 0)
        if total <= 0 and not any(c > 0 for c in day_cents):
            continue
        rows.append(SummaryRow(employee_id=pid, name=display_name(pid), day_cents=day_cents, total_cents=total))

    return PeriodSummary(
        label=format_period_range(period.start_date, period.end_date),
        day_labels=tuple(format_date(d.date) for d in period.days),
        rows=tuple(rows),
        totals=totals,
    )
