from __future__ import annotations

from typing import Any, List, Optional, Tuple
from uuid import UUID

from tippool.domain.models import (
    DayRecord,
    HoursEntry,
    ModelValidationError,
    TipsLike,
    normalize_date,
    tips_from_mapping,
)


class ApiValidationError(ValueError):
    """Raised when request payload validation fails."""


def is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except (ValueError, TypeError):
        return False
    return True


def parse_tips(raw_tips: object) -> TipsLike:
    if raw_tips is None:
        raw_tips = {}
    if not isinstance(raw_tips, dict):
        raise ApiValidationError("'tips' must be an object mapping source -> amount.")
    return tips_from_mapping(raw_tips)


def parse_hours(raw_hours: object) -> HoursEntry:
    """
    Accepts {"emp": 8, ...}, [["emp", 8], ...] or [{"employee_id": "emp", "hours": 8}, ...].
    Order is kept as sent.
    """
    if raw_hours is None:
        return HoursEntry()

    if isinstance(raw_hours, list):
        pairs: List[Tuple[Any, Any]] = []
        for idx, item in enumerate(raw_hours):
            if isinstance(item, dict):
                if "employee_id" not in item:
                    raise ApiValidationError(f"Hours entry at index {idx} must include 'employee_id'.")
                pairs.append((item["employee_id"], item.get("hours")))
            elif isinstance(item, list) and len(item) == 2:
                pairs.append((item[0], item[1]))
            else:
                raise ApiValidationError(
                    f"Hours entry at index {idx} must be [employee_id, hours] or an object."
                )
        raw_hours = pairs

    try:
        return HoursEntry.of(raw_hours)
    except ModelValidationError as e:
        raise ApiValidationError(str(e)) from e


def parse_date(raw_date: object, *, field: str = "date") -> str:
    if not isinstance(raw_date, str) or not raw_date.strip():
        raise ApiValidationError(f"'{field}' must be an ISO date string (YYYY-MM-DD).")
    try:
        return normalize_date(raw_date)
    except ModelValidationError as e:
        raise ApiValidationError(f"'{field}' must be an ISO date string (YYYY-MM-DD).") from e


def parse_day(raw_day: object, *, idx: Optional[int] = None, day_date: Optional[str] = None) -> DayRecord:
    where = f" at index {idx}" if idx is not None else ""
    if not isinstance(raw_day, dict):
        raise ApiValidationError(f"Day{where} must be an object.")

    date_value = day_date if day_date is not None else parse_date(raw_day.get("date"))
    return DayRecord(
        date=date_value,
        tips=parse_tips(raw_day.get("tips")),
        hours=parse_hours(raw_day.get("hours")),
    )


def parse_days(raw_days: object) -> List[DayRecord]:
    if not isinstance(raw_days, list):
        raise ApiValidationError("'days' must be a list.")
    return [parse_day(raw_day, idx=idx) for idx, raw_day in enumerate(raw_days)]


def parse_employee_name(raw_name: object) -> str:
    if not isinstance(raw_name, str) or not raw_name.strip():
        raise ApiValidationError("'name' must be a non-empty string.")
    return raw_name.strip()
