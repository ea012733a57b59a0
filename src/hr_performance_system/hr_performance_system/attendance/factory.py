from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .model import AttendanceLog
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.compliant_strategy import CompliantStrategy
from .strategies.late_strategy import LateStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_day(self, *, log: Optional[AttendanceLog], grace_minutes: int) -> AttendanceStrategy:
        if log is None:
            return AbsentStrategy()

        if int(log.late_by_minutes or 0) > int(grace_minutes):
            return LateStrategy()
        return CompliantStrategy()
