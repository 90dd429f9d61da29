from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from tippool.api.validators import (
    ApiValidationError,
    is_uuid,
    parse_date,
    parse_day,
    parse_days,
    parse_employee_name,
    parse_hours,
    parse_tips,
)
from tippool.db.repository import TipPoolRepository
from tippool.domain.aggregation import aggregate
from tippool.domain.allocation import allocate
from tippool.domain.models import DayAllocation, PayPeriod, PeriodTotals, TipRecord
from tippool.domain.periods import (
    DEFAULT_PERIOD_DAYS,
    PeriodError,
    create_pay_period,
    format_period_range,
    owner_key,
)
from tippool.services.summary import build_period_summary

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _json_error(message: str, *, status: int = 400, code: str = "bad_request"):
    return jsonify({"error": {"code": code, "message": message}}), status


def _repo() -> TipPoolRepository:
    return TipPoolRepository(current_app.config.get("DATABASE_URL", ""))


def _owner() -> str:
    return owner_key(request.headers.get("X-User")) or current_app.config.get("DEFAULT_OWNER_ID", "default")


def _db_unavailable():
    return _json_error("Database is not configured.", status=503, code="db_unavailable")


def _allocation_json(alloc: DayAllocation) -> Dict[str, Any]:
    return {
        "shares_cents": alloc.shares_cents,
        "total_tips_cents": alloc.total_tips_cents,
        "total_hours": str(alloc.total_hours),
        "rate_per_hour": str(alloc.rate_per_hour),
        "reconciled": alloc.reconciled,
    }


def _totals_json(totals: PeriodTotals) -> Dict[str, Any]:
    return {
        "by_employee_cents": totals.by_employee_cents,
        "by_day_cents": totals.by_day_cents,
        "grand_total_cents": totals.grand_total_cents,
    }


def _period_json(period: PayPeriod) -> Dict[str, Any]:
    return {
        "id": period.id,
        "start_date": period.start_date,
        "end_date": period.end_date,
        "label": format_period_range(period.start_date, period.end_date),
        "days": [
            {
                "date": d.date,
                "tips": d.tips.to_dict() if isinstance(d.tips, TipRecord) else dict(d.tips),
                "hours": d.hours.to_list(),
            }
            for d in period.days
        ],
    }


@api_bp.get("/health")
def health():
    return jsonify({"status": "ok"}), 200


@api_bp.post("/allocate")
def allocate_endpoint():
    """
    JSON body:
      - tips: {cash, app, creditCard} (any numeric-like values)
      - hours: {employee_id: hours} or [[employee_id, hours], ...]
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Request body must be a JSON object.", status=400)

    try:
        tips = parse_tips(data.get("tips"))
        hours = parse_hours(data.get("hours"))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    return jsonify(_allocation_json(allocate(tips, hours))), 200


@api_bp.post("/totals")
def totals_endpoint():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Request body must be a JSON object.", status=400)

    try:
        days = parse_days(data.get("days"))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    return jsonify(_totals_json(aggregate(days))), 200


@api_bp.get("/employees")
def list_employees_endpoint():
    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        employees = repo.list_employees(owner_id=_owner())
    except Exception:
        logger.exception("failed to list employees")
        return _json_error("Failed to load employees.", status=500, code="db_error")

    return jsonify({"employees": [{"id": e.id, "name": e.name} for e in employees]}), 200


@api_bp.post("/employees")
def create_employee_endpoint():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Request body must be a JSON object.", status=400)

    try:
        name = parse_employee_name(data.get("name"))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        employee = repo.create_employee(owner_id=_owner(), name=name)
    except Exception:
        logger.exception("failed to create employee")
        return _json_error("Failed to persist employee.", status=500, code="db_error")

    return jsonify({"id": employee.id, "name": employee.name}), 201


@api_bp.patch("/employees/<employee_id>")
def rename_employee_endpoint(employee_id: str):
    if not is_uuid(employee_id):
        return _json_error("Employee id must be a valid UUID.", status=400)

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Request body must be a JSON object.", status=400)

    try:
        name = parse_employee_name(data.get("name"))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        employee = repo.rename_employee(owner_id=_owner(), employee_id=employee_id, name=name)
    except Exception:
        logger.exception("failed to rename employee %s", employee_id)
        return _json_error("Failed to persist employee.", status=500, code="db_error")

    if employee is None:
        return _json_error("Employee not found.", status=404, code="not_found")
    return jsonify({"id": employee.id, "name": employee.name}), 200


@api_bp.delete("/employees/<employee_id>")
def delete_employee_endpoint(employee_id: str):
    if not is_uuid(employee_id):
        return _json_error("Employee id must be a valid UUID.", status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        deleted = repo.delete_employee(owner_id=_owner(), employee_id=employee_id)
    except Exception:
        logger.exception("failed to delete employee %s", employee_id)
        return _json_error("Failed to delete employee.", status=500, code="db_error")

    if not deleted:
        return _json_error("Employee not found.", status=404, code="not_found")
    return "", 204


@api_bp.get("/periods")
def list_periods_endpoint():
    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        periods = repo.list_pay_periods(owner_id=_owner())
    except Exception:
        logger.exception("failed to list pay periods")
        return _json_error("Failed to load pay periods.", status=500, code="db_error")

    return jsonify(
        {
            "periods": [
                {
                    "id": p.id,
                    "start_date": p.start_date,
                    "end_date": p.end_date,
                    "label": format_period_range(p.start_date, p.end_date),
                }
                for p in periods
            ]
        }
    ), 200


@api_bp.post("/periods")
def create_period_endpoint():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Request body must be a JSON object.", status=400)

    try:
        start_date = parse_date(data.get("start_date"), field="start_date")
        end_date = None
        if data.get("end_date") is not None:
            end_date = parse_date(data.get("end_date"), field="end_date")
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    try:
        period = create_pay_period(
            start_date,
            end_date,
            length_days=current_app.config.get("PAY_PERIOD_DAYS", DEFAULT_PERIOD_DAYS),
        )
    except PeriodError as e:
        return _json_error(str(e), status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        repo.create_pay_period(owner_id=_owner(), period=period)
    except Exception:
        logger.exception("failed to create pay period starting %s", start_date)
        return _json_error("Failed to persist pay period.", status=500, code="db_error")

    return jsonify(_period_json(period)), 201


def _load_period(period_id: str):
    if not is_uuid(period_id):
        return None, _json_error("Pay period id must be a valid UUID.", status=400)

    repo = _repo()
    if not repo.enabled:
        return None, _db_unavailable()

    try:
        period = repo.get_pay_period(owner_id=_owner(), period_id=period_id)
    except Exception:
        logger.exception("failed to load pay period %s", period_id)
        return None, _json_error("Failed to load pay period.", status=500, code="db_error")

    if period is None:
        return None, _json_error("Pay period not found.", status=404, code="not_found")
    return period, None


@api_bp.get("/periods/<period_id>")
def get_period_endpoint(period_id: str):
    period, error = _load_period(period_id)
    if error is not None:
        return error
    return jsonify(_period_json(period)), 200


@api_bp.delete("/periods/<period_id>")
def delete_period_endpoint(period_id: str):
    if not is_uuid(period_id):
        return _json_error("Pay period id must be a valid UUID.", status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        deleted = repo.delete_pay_period(owner_id=_owner(), period_id=period_id)
    except Exception:
        logger.exception("failed to delete pay period %s", period_id)
        return _json_error("Failed to delete pay period.", status=500, code="db_error")

    if not deleted:
        return _json_error("Pay period not found.", status=404, code="not_found")
    return "", 204


@api_bp.put("/periods/<period_id>/days/<day_date>")
def save_day_endpoint(period_id: str, day_date: str):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Request body must be a JSON object.", status=400)

    try:
        day = parse_day(data, day_date=parse_date(day_date))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    if not is_uuid(period_id):
        return _json_error("Pay period id must be a valid UUID.", status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        saved = repo.save_day(owner_id=_owner(), period_id=period_id, day=day)
    except Exception:
        logger.exception("failed to save %s of pay period %s", day.date, period_id)
        return _json_error("Failed to persist day.", status=500, code="db_error")

    if not saved:
        return _json_error("Day not found in pay period.", status=404, code="not_found")

    return jsonify({"date": day.date, **_allocation_json(allocate(day.tips, day.hours))}), 200


@api_bp.get("/periods/<period_id>/summary")
def period_summary_endpoint(period_id: str):
    period, error = _load_period(period_id)
    if error is not None:
        return error

    try:
        roster = _repo().list_employees(owner_id=_owner())
    except Exception:
        logger.exception("failed to load roster for pay period %s", period_id)
        return _json_error("Failed to load employees.", status=500, code="db_error")

    summary = build_period_summary(period, roster)
    return jsonify(
        {
            "label": summary.label,
            "day_labels": list(summary.day_labels),
            "has_any_data": summary.has_any_data,
            "rows": [
                {
                    "employee_id": row.employee_id,
                    "name": row.name,
                    "day_cents": list(row.day_cents),
                    "total_cents": row.total_cents,
                }
                for row in summary.rows
            ],
            **_totals_json(summary.totals),
        }
    ), 200
