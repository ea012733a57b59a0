from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, session

from ..common.http import error_response
from ..core.enums import Role
from ..container import Container
from .service import ADMIN_ROLES


def register(app: Flask, container: Container) -> None:
    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "error": "Authentication required"}), 401
            if session.get("role") not in {r.value for r in ADMIN_ROLES}:
                return jsonify({"success": False, "error": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    @app.route(
        "/api/performance/<employee_id>/<cycle_id>/calculate",
        methods=["POST"],
        endpoint="calculate_performance",
    )
    @admin_required
    def calculate_performance(employee_id: str, cycle_id: str):
        try:
            result = container.performance_service.calculate_and_save(
                current_role=Role(session.get("role")),
                employee_id=employee_id,
                cycle_id=cycle_id,
            )
            return jsonify({"success": True, "result": result.as_dict() if result else None})
        except Exception as e:
            return error_response(e, action="calculating the performance score")

    @app.route("/api/performance/<employee_id>/<cycle_id>", methods=["GET"], endpoint="performance_result")
    @admin_required
    def performance_result(employee_id: str, cycle_id: str):
        try:
            result = container.performance_service.get_saved_result(
                current_role=Role(session.get("role")),
                employee_id=employee_id,
                cycle_id=cycle_id,
            )
            if result is None:
                return jsonify({"success": False, "error": "No performance result for this cycle"}), 404
            return jsonify({"success": True, "result": result})
        except Exception as e:
            return error_response(e, action="loading the performance result")

    @app.route("/api/performance/recalculate", methods=["POST"], endpoint="recalculate_performance")
    @admin_required
    def recalculate_performance():
        try:
            report = container.performance_service.recalculate_all(current_role=Role(session.get("role")))
            return jsonify(report.as_dict())
        except Exception as e:
            return error_response(e, action="recalculating performance scores")
