# backend/tippool/domain/allocation.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Dict, List, Tuple

from tippool.domain.models import DayAllocation, HoursEntry, HoursLike, TipsLike, tip_amounts
from tippool.domain.money import ZERO, coerce_amount, coerce_hours, safe_sum_cents

logger = logging.getLogger(__name__)

RECONCILE_TOLERANCE = Decimal("0.001")


@dataclass(frozen=True)
class _Portion:
    employee_id: str
    index: int
    floored_cents: int
    remainder: Fraction


def total_tips_cents(tips: TipsLike) -> int:
    """
    Sum every tip source (bad values count as 0) and round half-up to cents.
    """
    total = sum((Fraction(coerce_amount(v)) for v in tip_amounts(tips)), Fraction(0))
    return math.floor(total * 100 + Fraction(1, 2))


def allocate(tips: TipsLike, hours: HoursLike) -> DayAllocation:
    """
    Split one day's pooled tips by hours worked, to the exact cent.

    Largest-remainder method:
      - each worker's exact share in cents is hours / total_hours * total_cents
      - everybody gets the floor of that
      - the cents left over go one each to the largest fractional remainders,
        ties going to whoever appears first in `hours`

    Employees with blank or non-positive hours are left out of `shares`. If
    the day has no tips or no hours, everyone listed in `hours` gets 0.

    Never raises on malformed numbers; they count as 0.
    """
    entry = HoursEntry.of(hours)
    target_cents = total_tips_cents(tips)

    workers: List[Tuple[str, Decimal]] = []
    for employee_id, raw_hours in entry.pairs:
        hrs = coerce_hours(raw_hours)
        if hrs is not None and hrs > 0:
            workers.append((employee_id, hrs))

    # summed exactly; a Decimal sum rounds past 28 digits and breaks the remainders
    hours_total = sum((Fraction(hrs) for _pid, hrs in workers), Fraction(0))

    if hours_total == 0 or target_cents == 0:
        return DayAllocation(
            shares_cents={pid: 0 for pid in entry.employee_ids},
            total_tips_cents=target_cents,
            total_hours=ZERO,
            rate_per_hour=ZERO,
            reconciled=True,
        )

    total_hours = Decimal(hours_total.numerator) / Decimal(hours_total.denominator)
    rate_per_hour = (Decimal(target_cents) / Decimal(100)) / total_hours

    portions: List[_Portion] = []
    for idx, (employee_id, hrs) in enumerate(workers):
        exact = Fraction(hrs) / hours_total * target_cents
        floored = math.floor(exact)
        portions.append(
            _Portion(
                employee_id=employee_id,
                index=idx,
                floored_cents=floored,
                remainder=exact - floored,
            )
        )

    to_assign = target_cents - safe_sum_cents(*(p.floored_cents for p in portions))

    amounts = [p.floored_cents for p in portions]
    for p in sorted(portions, key=lambda p: (-p.remainder, p.index))[:to_assign]:
        amounts[p.index] += 1

    shares_cents: Dict[str, int] = {
        p.employee_id: cents for p, cents in zip(portions, amounts, strict=True)
    }

    distributed = Decimal(sum(shares_cents.values())) / Decimal(100)
    target = Decimal(target_cents) / Decimal(100)
    reconciled = abs(distributed - target) < RECONCILE_TOLERANCE
    if not reconciled:
        logger.error(
            "allocation does not reconcile: distributed=%s total=%s workers=%d",
            distributed,
            target,
            len(portions),
        )

    return DayAllocation(
        shares_cents=shares_cents,
        total_tips_cents=target_cents,
        total_hours=total_hours,
        rate_per_hour=rate_per_hour,
        reconciled=reconciled,
    )
