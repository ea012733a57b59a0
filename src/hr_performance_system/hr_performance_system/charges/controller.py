from __future__ import annotations

import hmac
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import error_response
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .service import ADMIN_ROLES


def register(app: Flask, container: Container) -> None:
    def job_token_required(view):
        """Scheduler-triggered endpoints authenticate with a shared token, not a session."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            expected = container.job_token
            supplied = request.headers.get("X-Job-Token", "")
            if not expected or not hmac.compare_digest(supplied, expected):
                return jsonify({"success": False, "error": "Invalid job token"}), 401
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "error": "Authentication required"}), 401
            if session.get("role") not in {r.value for r in ADMIN_ROLES}:
                return jsonify({"success": False, "error": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    def _current_role() -> Role:
        return Role(session.get("role"))

    @app.route("/api/jobs/daily-charges", methods=["POST"], endpoint="job_daily_charges")
    @job_token_required
    def job_daily_charges():
        try:
            data = request.get_json(silent=True) or {}
            raw_date = str(data.get("targetDate") or "").strip()
            try:
                target_date = parse_iso_date(raw_date) if raw_date else None
            except ValueError:
                raise ValidationError("targetDate must be YYYY-MM-DD")

            report = container.daily_scanner.run(target_date)
            return jsonify(report.as_dict())
        except Exception as e:
            return error_response(e, action="calculating daily charges")

    @app.route("/api/jobs/auto-clockout", methods=["POST"], endpoint="job_auto_clockout")
    @job_token_required
    def job_auto_clockout():
        try:
            report = container.auto_clockout.run()
            return jsonify(report.as_dict())
        except Exception as e:
            return error_response(e, action="running auto clock-out")

    @app.route("/api/charges/monthly", methods=["GET"], endpoint="monthly_charges")
    @admin_required
    def monthly_charges():
        try:
            try:
                year = int(request.args.get("year", ""))
                month = int(request.args.get("month", ""))
            except ValueError:
                raise ValidationError("year and month are required")

            charges = container.charge_service.monthly_report(current_role=_current_role(), year=year, month=month)
            return jsonify(
                {
                    "success": True,
                    "year": year,
                    "month": month,
                    "totalAmount": round(sum(c.charge_amount for c in charges), 2),
                    "charges": [c.as_dict() for c in charges],
                }
            )
        except Exception as e:
            return error_response(e, action="loading monthly charges")

    @app.route("/api/charges/<charge_id>/waive", methods=["POST"], endpoint="waive_charge")
    @admin_required
    def waive_charge(charge_id: str):
        try:
            data = request.get_json(silent=True) or {}
            container.charge_service.waive(
                current_role=_current_role(),
                charge_id=charge_id,
                hr_user_id=str(session["user_id"]),
                reason=data.get("reason", ""),
            )
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e, action="waiving the charge")

    @app.route("/api/charges/<charge_id>/resolve", methods=["POST"], endpoint="resolve_charge")
    @admin_required
    def resolve_charge(charge_id: str):
        try:
            data = request.get_json(silent=True) or {}
            container.charge_service.resolve(
                current_role=_current_role(),
                charge_id=charge_id,
                resolution=data.get("resolution", ""),
            )
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e, action="resolving the charge")

    @app.route("/api/escalation-rules", methods=["GET"], endpoint="list_escalation_rules")
    @admin_required
    def list_escalation_rules():
        try:
            rules = container.charge_service.list_rules(current_role=_current_role())
            return jsonify({"success": True, "rules": [r.as_dict() for r in rules]})
        except Exception as e:
            return error_response(e, action="loading escalation rules")

    @app.route("/api/escalation-rules", methods=["POST"], endpoint="create_escalation_rule")
    @admin_required
    def create_escalation_rule():
        try:
            rule = container.charge_service.create_rule(
                current_role=_current_role(),
                payload=request.get_json(silent=True) or {},
            )
            return jsonify({"success": True, "rule": rule.as_dict()}), 201
        except Exception as e:
            return error_response(e, action="creating the escalation rule")

    @app.route("/api/escalation-rules/<rule_id>", methods=["PUT"], endpoint="update_escalation_rule")
    @admin_required
    def update_escalation_rule(rule_id: str):
        try:
            rule = container.charge_service.update_rule(
                current_role=_current_role(),
                rule_id=rule_id,
                payload=request.get_json(silent=True) or {},
            )
            return jsonify({"success": True, "rule": rule.as_dict()})
        except Exception as e:
            return error_response(e, action="updating the escalation rule")

    @app.route("/api/escalation-rules/<rule_id>", methods=["DELETE"], endpoint="delete_escalation_rule")
    @admin_required
    def delete_escalation_rule(rule_id: str):
        try:
            container.charge_service.delete_rule(current_role=_current_role(), rule_id=rule_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e, action="deleting the escalation rule")
