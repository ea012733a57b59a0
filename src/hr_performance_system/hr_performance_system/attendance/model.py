from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import ChargeType, LocationType


@dataclass(frozen=True)
class AttendanceLog:
    """Domain entity: one clock-in/clock-out session."""

    log_id: str
    employee_id: str
    clock_in_time: datetime
    clock_out_time: Optional[datetime] = None
    total_hours: Optional[float] = None
    is_late: bool = False
    late_by_minutes: Optional[int] = None
    location_type: LocationType = LocationType.OFFICE
    overtime_approved: bool = False
    early_closure: bool = False
    auto_clocked_out: bool = False

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None


@dataclass(frozen=True)
class AttendanceRule:
    """Organization-wide attendance configuration (one active row)."""

    rule_id: str
    work_end_time: time
    grace_period_minutes: int = 0
    late_charge_amount: float = 0.0
    absence_charge_amount: float = 0.0
    early_closure_charge_amount: float = 0.0
    work_start_time: Optional[time] = None
    is_active: bool = True

    def base_amount(self, charge_type: ChargeType) -> float:
        return {
            ChargeType.LATE_ARRIVAL: self.late_charge_amount,
            ChargeType.ABSENCE: self.absence_charge_amount,
            ChargeType.EARLY_CLOSURE: self.early_closure_charge_amount,
            ChargeType.EARLY_DEPARTURE: self.early_closure_charge_amount,
        }.get(charge_type, 0.0)


@dataclass(frozen=True)
class AttendanceViolation:
    """One day's chargeable outcome for one employee."""

    employee_id: str
    date: date
    kind: ChargeType
    late_by_minutes: Optional[int] = None
    attendance_log_id: Optional[str] = None
