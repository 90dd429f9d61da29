from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import psycopg
from psycopg.types.json import Jsonb

from tippool.domain.models import DayRecord, Employee, HoursEntry, PayPeriod, TipRecord, tips_from_mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayPeriodRecord:
    id: str
    start_date: str
    end_date: str


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _tips_json(day: DayRecord) -> Dict[str, Any]:
    raw = day.tips.to_dict() if isinstance(day.tips, TipRecord) else dict(day.tips)
    return {key: _jsonable(value) for key, value in raw.items()}


def _hours_json(day: DayRecord) -> List[List[Any]]:
    # pairs, not an object, so the tie-break order survives the round trip
    return [[pid, _jsonable(hours)] for pid, hours in day.hours.pairs]


class TipPoolRepository:
    def __init__(self, database_url: str):
        self.database_url = database_url.strip()

    @property
    def enabled(self) -> bool:
        return bool(self.database_url)

    def _connect(self):
        if not self.enabled:
            raise RuntimeError("DATABASE_URL not configured")
        return psycopg.connect(self.database_url)

    def list_employees(self, *, owner_id: str) -> list[Employee]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                SELECT id::text, name
                FROM employees
                WHERE owner_id = %s
                ORDER BY created_at ASC, name ASC
                """,
                (owner_id,),
            )
            return [Employee(id=row[0], name=row[1]) for row in cur.fetchall()]

    def create_employee(self, *, owner_id: str, name: str) -> Employee:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO employees (owner_id, name)
                VALUES (%s, %s)
                RETURNING id::text, name
                """,
                (owner_id, name),
            )
            row = cur.fetchone()
            conn.commit()
            return Employee(id=row[0], name=row[1])

    def rename_employee(self, *, owner_id: str, employee_id: str, name: str) -> Optional[Employee]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                UPDATE employees
                SET name = %s
                WHERE owner_id = %s AND id = %s
                RETURNING id::text, name
                """,
                (name, owner_id, employee_id),
            )
            row = cur.fetchone()
            conn.commit()
            if row is None:
                return None
            return Employee(id=row[0], name=row[1])

    def delete_employee(
self, *, owner_id: str, employee_id: str) -> bool:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                DELETE FROM employees
                WHERE owner_id = %s AND id = %s
                """,
                (owner_id, employee_id),
            )
            deleted = cur.rowcount > 0
            conn.commit()
            logger.debug("delete employee %s for %s: %s", employee_id, owner_id, deleted)
            return deleted

    def create_pay_period(self, *, owner_id: str, period: PayPeriod) -> PayPeriod:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO pay_periods (id, owner_id, start_date, end_date)
                VALUES (%s, %s, %s, %s)
                """,
                (period.id, owner_id, period.start_date, period.end_date),
            )
            for day in period.days:
                cur.execute(
                    """
                    INSERT INTO pay_period_days (period_id, day_date, tips, hours)
                    VALUES (%s, %s, %s, %s)
                    """,
                    (period.id, day.date, Jsonb(_tips_json(day)), Jsonb(_hours_json(day))),
                )
            conn.commit()
            return period

    def list_pay_periods(self, *, owner_id: str) -> list[PayPeriodRecord]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                SELECT id::text, start_date, end_date
                FROM pay_periods
                WHERE owner_id = %s
                ORDER BY start_date DESC, created_at DESC
                """,
                (owner_id,),
            )
            return [
                PayPeriodRecord(id=row[0], start_date=row[1].isoformat(), end_date=row[2].isoformat())
                for row in cur.fetchall()
            ]

    def get_pay_period(self, *, owner_id: str, period_id: str) -> Optional[PayPeriod]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                SELECT id::text, start_date, end_date
                FROM pay_periods
                WHERE owner_id = %s AND id = %s
                """,
                (owner_id, period_id),
            )
            row = cur.fetchone()
            if row is None:
                return None

            cur.execute(
                """
                SELECT day_date, tips, hours
                FROM pay_period_days
                WHERE period_id = %s
                ORDER BY day_date ASC
                """,
                (period_id,),
            )
            days = [
                DayRecord(
                    date=day_row[0],
                    tips=tips_from_mapping(day_row[1] or {}),
                    hours=HoursEntry.of(day_row[2] or []),
                )
                for day_row in cur.fetchall()
            ]
            return PayPeriod(
                id=row[0],
                start_date=row[1].isoformat(),
                end_date=row[2].isoformat(),
                days=days,
            )

    def delete_pay_period(self, *, owner_id: str, period_id: str) -> bool:
        # days go with it (ON DELETE CASCADE)
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                DELETE FROM pay_periods
                WHERE owner_id = %s AND id = %s
                """,
                (owner_id, period_id),
            )
            deleted = cur.rowcount > 0
            conn.commit()
            logger.debug("delete pay period %s for %s: %s", period_id, owner_id, deleted)
            return deleted

    def save_day(
self, *, owner_id: str, period_id: str, day: DayRecord) -> bool:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                UPDATE pay_period_days AS d
                SET tips = %s, hours = %s
                FROM pay_periods AS p
                WHERE p.id = d.period_id
                  AND p.owner_id = %s
                  AND d.period_id = %s
                  AND d.day_date = %s
                """,
                (Jsonb(_tips_json(day)), Jsonb(_hours_json(day)), owner_id, period_id, day.date),
            )
            updated = cur.rowcount > 0
            conn.commit()
            return updated
