from __future__ import annotations

from datetime import date
from typing import Optional

from ...core.enums import ChargeType
from ..model import AttendanceLog, AttendanceViolation
from .base import AttendanceStrategy


class AbsentStrategy(AttendanceStrategy):
    """No attendance log for the day."""

    def classify(self, *, employee_id: str, work_date: date, log: Optional[AttendanceLog]) -> Optional[AttendanceViolation]:
        return AttendanceViolation(employee_id=employee_id, date=work_date, kind=ChargeType.ABSENCE)
