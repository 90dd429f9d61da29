# backend/tippool/domain/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from tippool.domain.money import ZERO, cents_to_dollars


class ModelValidationError(ValueError):
    """Raised when domain models are given inputs of the wrong shape."""


# JSON payloads from the web client use camelCase for the card source.
TIP_SOURCE_ALIASES = {"creditCard": "credit_card"}


@dataclass(frozen=True)
class TipRecord:
    """
    One day's tip sources, in dollars.

    Values stay untyped on purpose: they are coerced (bad -> 0) when the day
    is allocated, never here.
    """
    cash: Any = 0
    app: Any = 0
    credit_card: Any = 0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "TipRecord":
        if not isinstance(raw, Mapping):
            raise ModelValidationError("tips must be a mapping of source -> amount")
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            name = TIP_SOURCE_ALIASES.get(key, key)
            if name in ("cash", "app", "credit_card"):
                values[name] = value
        return cls(**values)

    def sources(self) -> Tuple[Tuple[str, Any], ...]:
        return (("cash", self.cash), ("app", self.app), ("credit_card", self.credit_card))

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.sources())


TipsLike = Union[TipRecord, Mapping[str, Any]]


def tips_from_mapping(raw: Mapping[str, Any]) -> TipsLike:
    """
    TipRecord when every key is a known source, otherwise a plain dict so
    extra sources still count toward the pool.
    """
    if not isinstance(raw, Mapping):
        raise ModelValidationError("tips must be a mapping of source -> amount")
    known = {"cash", "app", "credit_card"}
    if all(TIP_SOURCE_ALIASES.get(k, k) in known for k in raw):
        return TipRecord.from_mapping(raw)
    return dict(raw)


def tip_amounts(tips: TipsLike) -> List[Any]:
    """
    Raw amounts of every tip source, for any TipRecord or plain mapping.
    """
    if isinstance(tips, TipRecord):
        return [value for _name, value in tips.sources()]
    if isinstance(tips, Mapping):
        return list(tips.values())
    raise ModelValidationError("tips must be a TipRecord or a mapping")


@dataclass(frozen=True)
class HoursEntry:
    """
    Ordered (employee_id, hours) pairs for one day.

    Order is insertion order and decides who gets a contested cent.
    hours is None when it has not been entered yet.
    """
    pairs: Tuple[Tuple[str, Any], ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.pairs, tuple):
            raise ModelValidationError("HoursEntry.pairs must be a tuple")
        for pair in self.pairs:
            if not isinstance(pair, tuple) or len(pair) != 2:
                raise ModelValidationError("HoursEntry.pairs must hold (employee_id, hours) pairs")
            if not isinstance(pair[0], str) or not pair[0].strip():
                raise ModelValidationError("employee ids must be non-empty strings")

    @classmethod
    def of(cls, raw: "HoursLike") -> "HoursEntry":
        """
        Build from a mapping (iteration order kept) or any iterable of pairs.

        A repeated employee id keeps its first position and takes the last
        value, the way assigning into a mapping would. Non-string ids such as
        ints are converted with str().
        """
        if isinstance(raw, HoursEntry):
            return raw
        if isinstance(raw, Mapping):
            items: Iterable[Any] = raw.items()
        elif isinstance(raw, Iterable) and not isinstance(raw, (str, bytes)):
            items = raw
        else:
            raise ModelValidationError("hours must be a mapping or a sequence of (employee_id, hours) pairs")

        merged: Dict[str, Any] = {}
        for item in items:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise ModelValidationError("hours must be a mapping or a sequence of (employee_id, hours) pairs")
            employee_id, hours = item
            if employee_id is not None and not isinstance(employee_id, (str, bool)):
                employee_id = str(employee_id)
            if not isinstance(employee_id, str) or not employee_id.strip():
                raise ModelValidationError("employee ids must be non-empty strings")
            merged[employee_id] = hours
        return cls(pairs=tuple(merged.items()))

    @property
    def employee_ids(self) -> Tuple[str, ...]:
        return tuple(pid for pid, _hours in self.pairs)

    def to_list(self) -> List[List[Any]]:
        return [[pid, hours] for pid, hours in self.pairs]


HoursLike = Union[HoursEntry, Mapping[str, Any], Iterable[Tuple[str, Any]]]


def normalize_date(value: Union[str, date]) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ModelValidationError("date must be an ISO date string")
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError as e:
        raise ModelValidationError(f"invalid ISO date: {value}") from e


@dataclass(frozen=True)
class DayRecord:
    """
    Tips and hours entered for a single day of a pay period.
    """
    date: str
    tips: TipsLike = field(default_factory=TipRecord)
    hours: HoursEntry = field(default_factory=HoursEntry)

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", normalize_date(self.date))
        object.__setattr__(self, "hours", HoursEntry.of(self.hours))
        if not isinstance(self.tips, (TipRecord, Mapping)):
            raise ModelValidationError("DayRecord.tips must be a TipRecord or a mapping")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "DayRecord":
        if not isinstance(raw, Mapping):
            raise ModelValidationError("each day must be a mapping with date, tips and hours")
        if "date" not in raw:
            raise ModelValidationError("day is missing 'date'")
        tips = raw.get("tips") or {}
        if isinstance(tips, Mapping) and not isinstance(tips, TipRecord):
            tips = tips_from_mapping(tips)
        return cls(date=raw["date"], tips=tips, hours=raw.get("hours") or ())


@dataclass(frozen=True)
class DayAllocation:
    """
    One day's split. shares and shares_cents share the same key order.
    """
    shares_cents: Dict[str, int]
    total_tips_cents: int
    total_hours: Decimal = ZERO
    rate_per_hour: Decimal = ZERO
    reconciled: bool = True

    @property
    def shares(self) -> Dict[str, Decimal]:
        return {pid: cents_to_dollars(cents) for pid, cents in self.shares_cents.items()}

    @property
    def total_tips(self) -> Decimal:
        return cents_to_dollars(self.total_tips_cents)


@dataclass(frozen=True)
class PeriodTotals:
    """
    byEmployee/byDay view of a pay period, all accumulated in cents.
    """
    by_employee_cents: Dict[str, int]
    by_day_cents: Dict[str, Dict[str, int]]
    days: Dict[str, DayAllocation] = field(default_factory=dict)

    @property
    def by_employee(self) -> Dict[str, Decimal]:
        return {pid: cents_to_dollars(cents) for pid, cents in self.by_employee_cents.items()}

    @property
    def by_day(self) -> Dict[str, Dict[str, Decimal]]:
        return {
            day: {pid: cents_to_dollars(cents) for pid, cents in shares.items()}
            for day, shares in self.by_day_cents.items()
        }

    @property
    def grand_total_cents(self) -> int:
        return sum(self.by_employee_cents.values())


@dataclass(frozen=True)
class Employee:
    """
    A roster member. IDs come from storage or the client.
    """
    id: str
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ModelValidationError("Employee.id must be a non-empty string")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ModelValidationError("Employee.name must be a non-empty string")


@dataclass(frozen=True)
class PayPeriod:
    id: str
    start_date: str
    end_date: str
    days: List[DayRecord] = field(default_factory=list)
