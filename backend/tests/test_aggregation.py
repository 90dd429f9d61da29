# backend/tests/test_aggregation.py
from decimal import Decimal

import pytest

from tippool.domain.aggregation import add_shares_to_totals, aggregate
from tippool.domain.models import DayRecord, ModelValidationError, TipRecord


def _two_days():
    return [
        {"date": "2025-01-01", "tips": {"cash": 100, "app": 0, "creditCard": 0}, "hours": {"a": 8, "b": 8}},
        {"date": "2025-01-02", "tips": {"cash": 80, "app": 0, "creditCard": 0}, "hours": {"a": 6, "b": 2}},
    ]


def test_sums_daily_shares_into_period_totals():
    totals = aggregate(_two_days())

    assert totals.by_employee == {"a": Decimal("110.00"), "b": Decimal("70.00")}
    assert totals.by_day["2025-01-01"] == {"a": Decimal("50.00"), "b": Decimal("50.00")}
    assert totals.by_day["2025-01-02"] == {"a": Decimal("60.00"), "b": Decimal("20.00")}
    assert totals.grand_total_cents == 18000


def test_accepts_day_records():
    days = [
        DayRecord(date="2025-01-01", tips=TipRecord(cash=100), hours=[("a", 8), ("b", 8)]),
        DayRecord(date="2025-01-02", tips=TipRecord(cash=80), hours=[("a", 6), ("b", 2)]),
    ]
    assert aggregate(days).by_employee_cents == {"a": 11000, "b": 7000}


def test_keeps_per_day_allocations():
    totals = aggregate(_two_days())
    assert totals.days["2025-01-02"].rate_per_hour == Decimal("10")
    assert all(alloc.reconciled for alloc in totals.days.values())


def test_no_float_drift_over_many_days():
    # each day: 10 cents over 1h/2h => a=3, b=7
    days = [
        {"date": f"2025-{m:02d}-{d:02d}", "tips": {"cash": 0.1}, "hours": {"a": 1, "b": 2}}
        for m in range(1, 5)
        for d in range(1, 26)
    ]
    totals = aggregate(days)

    assert totals.by_employee_cents == {"a": 300, "b": 700}
    assert totals.by_employee == {"a": Decimal("3.00"), "b": Decimal("7.00")}
    assert totals.grand_total_cents == 1000


def test_period_totals_equal_integer_sum_of_daily_shares():
    days = [
        {"date": "2025-02-01", "tips": {"cash": "97.13"}, "hours": {"a": 3, "b": 3, "c": 1}},
        {"date": "2025-02-02", "tips": {"app": "41.01", "cash": "0.99"}, "hours": {"c": 5, "a": 2.5}},
        {"date": "2025-02-03", "tips": {"creditCard": "250"}, "hours": {"b": 7, "c": 7, "a": 7}},
    ]
    totals = aggregate(days)

    for pid, cents in totals.by_employee_cents.items():
        assert cents == sum(day.get(pid, 0) for day in totals.by_day_cents.values())
    assert totals.grand_total_cents == 9713 + 4200 + 25000


def test_employees_with_zero_period_total_are_omitted():
    days = [
        {"date": "2025-01-01", "tips": {"cash": 0}, "hours": {"a": 8, "b": 4}},
        {"date": "2025-01-02", "tips": {"cash": 20}, "hours": {"a": 4, "c": None}},
    ]
    totals = aggregate(days)

    assert totals.by_day_cents["2025-01-01"] == {"a": 0, "b": 0}
    assert totals.by_day_cents["2025-01-02"] == {"a": 2000}
    assert totals.by_employee_cents == {"a": 2000}


def test_employee_totals_do_not_depend_on_day_order():
    days = _two_days() + [
        {"date": "2025-01-03", "tips": {"cash": "10"}, "hours": {"b": 1, "a": 1, "c": 1}},
    ]
    forward = aggregate(days)
    backward = aggregate(list(reversed(days)))

    assert forward.by_employee_cents == backward.by_employee_cents
    assert forward.by_day_cents == backward.by_day_cents


def test_aggregate_is_pure_and_idempotent():
    days = _two_days()
    assert aggregate(days) == aggregate(days)
    assert days == _two_days()


def test_repeated_date_overwrites_day_but_counts_twice():
    days = [
        {"date": "2025-01-01", "tips": {"cash": 10}, "hours": {"a": 1}},
        {"date": "2025-01-01", "tips": {"cash": 5}, "hours": {"a": 1}},
    ]
    totals = aggregate(days)

    assert totals.by_day_cents == {"2025-01-01": {"a": 500}}
    assert totals.by_employee_cents == {"a": 1500}


def test_empty_period():
    totals = aggregate([])
    assert totals.by_employee_cents == {}
    assert totals.by_day_cents == {}
    assert totals.grand_total_cents == 0


def test_day_without_date_raises():
    with pytest.raises(ModelValidationError):
        aggregate([{"tips": {"cash": 10}, "hours": {"a": 1}}])


def test_add_shares_to_totals_accumulates():
    totals = {}
    add_shares_to_totals(totals, {"a": 26, "b": 25})
    add_shares_to_totals(totals, {"b": 2, "d": 1})
    assert totals == {"a": 26, "b": 27, "d": 1}
