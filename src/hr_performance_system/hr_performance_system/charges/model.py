from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import ChargeStatus, ChargeType, ViolationType


@dataclass(frozen=True)
class EscalationTier:
    occurrence_count: int
    multiplier: float

    def as_dict(self) -> dict:
        return {"occurrence_count": self.occurrence_count, "multiplier": self.multiplier}


@dataclass(frozen=True)
class EscalationRule:
    """Tiered multiplier table for repeated violations of one type."""

    rule_id: Optional[str]
    rule_name: str
    violation_type: ViolationType
    lookback_period_days: int
    tiers: tuple[EscalationTier, ...] = field(default_factory=tuple)
    reset_after_days: int = 0
    is_active: bool = True

    def as_dict(self) -> dict:
        return {
            "id": self.rule_id,
            "rule_name": self.rule_name,
            "violation_type": self.violation_type.value,
            "lookback_period_days": self.lookback_period_days,
            "escalation_tiers": [t.as_dict() for t in self.tiers],
            "reset_after_days": self.reset_after_days,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class ChargeRecord:
    employee_id: str
    charge_type: ChargeType
    charge_amount: float
    charge_date: date
    escalation_multiplier: float = 1.0
    is_escalated: bool = False
    status: ChargeStatus = ChargeStatus.PENDING
    attendance_log_id: Optional[str] = None
    charge_id: Optional[str] = None
    waived_by: Optional[str] = None
    waiver_reason: Optional[str] = None
    waived_at: Optional[datetime] = None
    dispute_resolution: Optional[str] = None
    resolved_at: Optional[datetime] = None

    def as_dict(self) -> dict:
        return {
            "id": self.charge_id,
            "employee_id": self.employee_id,
            "attendance_log_id": self.attendance_log_id,
            "charge_type": self.charge_type.value,
            "charge_amount": self.charge_amount,
            "charge_date": self.charge_date.strftime("%Y-%m-%d"),
            "escalation_multiplier": self.escalation_multiplier,
            "is_escalated": self.is_escalated,
            "status": self.status.value,
            "waiver_reason": self.waiver_reason,
            "dispute_resolution": self.dispute_resolution,
        }
