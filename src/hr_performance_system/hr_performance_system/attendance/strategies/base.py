from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from ..model import AttendanceLog, AttendanceViolation


class AttendanceStrategy(ABC):
    """Strategy Pattern: decide what a day's attendance log means for charging."""

    @abstractmethod
    def classify(
        self,
        *,
        employee_id: str,
        work_date: date,
        log: Optional[AttendanceLog],
    ) -> Optional[AttendanceViolation]:
        raise NotImplementedError
