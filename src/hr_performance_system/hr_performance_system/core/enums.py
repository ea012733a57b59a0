from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Role resolved by the auth layer and stored in the session."""

    ADMIN = "admin"
    HR = "hr"
    STAFF = "staff"


class AppraisalStatus(str, Enum):
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    MANAGER_REVIEW = "manager_review"
    COMMITTEE_REVIEW = "committee_review"
    HR_REVIEW = "hr_review"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value) -> Optional["AppraisalStatus"]:
        try:
            return cls(value)
        except ValueError:
            return None


# Appraisals in these states have enough answers to be scored.
SCORABLE_APPRAISAL_STATUSES = frozenset(
    {
        AppraisalStatus.SUBMITTED,
        AppraisalStatus.MANAGER_REVIEW,
        AppraisalStatus.COMMITTEE_REVIEW,
        AppraisalStatus.COMPLETED,
    }
)


class PerformanceBand(str, Enum):
    EXCEPTIONAL = "Exceptional"
    EXCELLENT = "Excellent"
    VERY_GOOD = "Very Good"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class ViolationType(str, Enum):
    """Violation kinds an escalation rule can be configured for."""

    LATE_ARRIVAL = "late_arrival"
    ABSENCE = "absence"
    EARLY_DEPARTURE = "early_departure"
    BREAK_VIOLATION = "break_violation"


class ChargeType(str, Enum):
    LATE_ARRIVAL = "late_arrival"
    ABSENCE = "absence"
    EARLY_CLOSURE = "early_closure"
    EARLY_DEPARTURE = "early_departure"
    BREAK_VIOLATION = "break_violation"

    @property
    def violation_type(self) -> ViolationType:
        if self is ChargeType.EARLY_CLOSURE:
            return ViolationType.EARLY_DEPARTURE
        return ViolationType(self.value)

    @classmethod
    def for_violation(cls, violation_type: ViolationType) -> tuple["ChargeType", ...]:
        return tuple(c for c in cls if c.violation_type == violation_type)


class ChargeStatus(str, Enum):
    PENDING = "pending"
    WAIVED = "waived"
    RESOLVED = "resolved"


class SessionState(str, Enum):
    """Auto clock-out lifecycle of one open attendance session."""

    OPEN = "open"
    REMINDER_SENT = "reminder_sent"
    OVERDUE = "overdue"
    AUTO_CLOSED = "auto_closed"


class LocationType(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"
    FIELD = "field"
