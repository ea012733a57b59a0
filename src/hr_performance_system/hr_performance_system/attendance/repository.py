from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceLog, AttendanceRule


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceLog]:
        """Latest session clocked in on ``work_date``."""

        raise NotImplementedError

    def list_open_office_sessions(self) -> Sequence[AttendanceLog]:
        """Office sessions still open, excluding overtime-approved and early-closed ones."""

        raise NotImplementedError

    def close_session(
        self,
        *,
        log_id: str,
        clock_out_time: datetime,
        total_hours: float,
        early_closure: bool,
        auto_clocked_out: bool,
    ) -> bool:
        """Only closes a session that is still open; returns False otherwise."""

        raise NotImplementedError


class AttendanceRuleRepository(Protocol):
    def get_active(self) -> Optional[AttendanceRule]:
        raise NotImplementedError
