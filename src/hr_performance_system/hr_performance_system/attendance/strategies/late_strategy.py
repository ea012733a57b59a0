from __future__ import annotations

from datetime import date
from typing import Optional

from ...core.enums import ChargeType
from ..model import AttendanceLog, AttendanceViolation
from .base import AttendanceStrategy


class LateStrategy(AttendanceStrategy):
    """Clocked in later than the grace period allows."""

    def classify(self, *, employee_id: str, work_date: date, log: Optional[AttendanceLog]) -> Optional[AttendanceViolation]:
        return AttendanceViolation(
            employee_id=employee_id,
            date=work_date,
            kind=ChargeType.LATE_ARRIVAL,
            late_by_minutes=log.late_by_minutes if log else None,
            attendance_log_id=log.log_id if log else None,
        )
