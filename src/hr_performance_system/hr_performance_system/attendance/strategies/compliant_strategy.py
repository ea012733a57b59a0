from __future__ import annotations

from datetime import date
from typing import Optional

from ..model import AttendanceLog, AttendanceViolation
from .base import AttendanceStrategy


class CompliantStrategy(AttendanceStrategy):
    """On time (or within grace); nothing to charge."""

    def classify(self, *, employee_id: str, work_date: date, log: Optional[AttendanceLog]) -> Optional[AttendanceViolation]:
        return None
