from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import parse_clock_time
from ..core.constants import DEFAULT_WORK_END_TIME
from ..core.enums import LocationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, fetchall, fetchone
from .model import AttendanceLog, AttendanceRule
from .repository import AttendanceRepository, AttendanceRuleRepository

_LOG_COLUMNS = """
    log_id, employee_id, clock_in_time, clock_out_time, total_hours, is_late, late_by_minutes,
    location_type, overtime_approved, early_closure, auto_clocked_out
"""


def _to_log(r: dict) -> AttendanceLog:
    return AttendanceLog(
        log_id=str(r["log_id"]),
        employee_id=str(r["employee_id"]),
        clock_in_time=r["clock_in_time"],
        clock_out_time=r.get("clock_out_time"),
        total_hours=as_float(r.get("total_hours")),
        is_late=as_bool(r.get("is_late")),
        late_by_minutes=int(r["late_by_minutes"]) if r.get("late_by_minutes") is not None else None,
        location_type=LocationType(r.get("location_type") or LocationType.OFFICE.value),
        overtime_approved=as_bool(r.get("overtime_approved")),
        early_closure=as_bool(r.get("early_closure")),
        auto_clocked_out=as_bool(r.get("auto_clocked_out")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceLog]:
        start = datetime.combine(work_date, datetime.min.time())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LOG_COLUMNS}
                FROM attendance_logs
                WHERE employee_id=%s AND clock_in_time >= %s AND clock_in_time < %s
                ORDER BY clock_in_time DESC
                LIMIT 1
                """,
                (employee_id, start, start + timedelta(days=1)),
            )
            r = fetchone(cur)
            return _to_log(r) if r else None

    def list_open_office_sessions(self) -> Sequence[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LOG_COLUMNS}
                FROM attendance_logs
                WHERE clock_out_time IS NULL
                  AND location_type=%s
                  AND early_closure=0
                  AND (overtime_approved IS NULL OR overtime_approved=0)
                ORDER BY clock_in_time
                """,
                (LocationType.OFFICE.value,),
            )
            return [_to_log(r) for r in fetchall(cur)]

    def close_session(
        self,
        *,
        log_id: str,
        clock_out_time: datetime,
        total_hours: float,
        early_closure: bool,
        auto_clocked_out: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_logs
                SET clock_out_time=%s, total_hours=%s, early_closure=%s, auto_clocked_out=%s
                WHERE log_id=%s AND clock_out_time IS NULL
                """,
                (clock_out_time, total_hours, int(early_closure), int(auto_clocked_out), log_id),
            )
            return cur.rowcount > 0


class MySQLAttendanceRuleRepository(AttendanceRuleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self) -> Optional[AttendanceRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT rule_id, work_start_time, work_end_time, grace_period_minutes,
                       late_charge_amount, absence_charge_amount, early_closure_charge_amount, is_active
                FROM attendance_rules
                WHERE is_active=1
                LIMIT 1
                """
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendanceRule(
                rule_id=str(r["rule_id"]),
                work_start_time=parse_clock_time(r.get("work_start_time")),
                work_end_time=parse_clock_time(r.get("work_end_time") or DEFAULT_WORK_END_TIME),
                grace_period_minutes=int(r.get("grace_period_minutes") or 0),
                late_charge_amount=as_float(r.get("late_charge_amount"), 0.0),
                absence_charge_amount=as_float(r.get("absence_charge_amount"), 0.0),
                early_closure_charge_amount=as_float(r.get("early_closure_charge_amount"), 0.0),
                is_active=as_bool(r.get("is_active")),
            )
