"""Charge escalation.

Repeated violations of the same type inside a rule's lookback window cost more:
the current violation plus the prior charges found in the window give an
occurrence count, and the highest tier threshold not above that count supplies
the multiplier. Without an active rule, or when the history cannot be read,
the multiplier is 1.0 so a broken lookup never overcharges anyone.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from ..core.constants import DEFAULT_MULTIPLIER
from ..core.enums import ChargeStatus, ChargeType, ViolationType
from ..core.exceptions import ValidationError
from .model import ChargeRecord, EscalationRule, EscalationTier
from .repository import ChargeRepository, EscalationRuleRepository

logger = logging.getLogger(__name__)


def load_active_rule(rules: EscalationRuleRepository, violation_type: ViolationType) -> Optional[EscalationRule]:
    """Active rule for a violation type; a failed lookup counts as no rule."""
    try:
        return rules.get_active(violation_type)
    except Exception:
        logger.warning("Could not load escalation rule for %s; escalation disabled", violation_type.value, exc_info=True)
        return None


def select_multiplier(tiers: Iterable[EscalationTier], occurrence_count: int) -> float:
    for tier in sorted(tiers, key=lambda t: t.occurrence_count, reverse=True):
        if occurrence_count >= tier.occurrence_count:
            return float(tier.multiplier)
    return DEFAULT_MULTIPLIER


class ChargeEscalationEngine:
    def __init__(self, charges: ChargeRepository):
        self._charges = charges

    def occurrence_count(self, *, employee_id: str, violation_type: ViolationType, rule: EscalationRule, today: date) -> int:
        if rule.lookback_period_days <= 0:
            raise ValidationError(f"Escalation rule {rule.rule_id} has no lookback period")
        since = today - timedelta(days=int(rule.lookback_period_days))
        prior = self._charges.count_since(
            employee_id=employee_id,
            charge_types=ChargeType.for_violation(violation_type),
            since=since,
        )
        # The current violation counts toward its own tier.
        return int(prior) + 1

    def multiplier_for(
        self,
        *,
        employee_id: str,
        violation_type: ViolationType,
        rule: Optional[EscalationRule],
        today: date,
    ) -> float:
        if rule is None or not rule.is_active:
            return DEFAULT_MULTIPLIER
        if rule.violation_type != violation_type:
            logger.warning(
                "Escalation rule %s is for %s, not %s; ignoring it",
                rule.rule_id,
                rule.violation_type.value,
                violation_type.value,
            )
            return DEFAULT_MULTIPLIER

        try:
            count = self.occurrence_count(employee_id=employee_id, violation_type=violation_type, rule=rule, today=today)
        except Exception:
            logger.warning(
                "Could not count prior %s charges for employee %s; using multiplier %.1f",
                violation_type.value,
                employee_id,
                DEFAULT_MULTIPLIER,
                exc_info=True,
            )
            return DEFAULT_MULTIPLIER

        return select_multiplier(rule.tiers, count)

    def build_charge(
        self,
        *,
        employee_id: str,
        charge_type: ChargeType,
        base_amount: float,
        rule: Optional[EscalationRule],
        charge_date: date,
        attendance_log_id: Optional[str] = None,
    ) -> Optional[ChargeRecord]:
        """Price one violation; ``None`` when the configured amount is not positive."""
        multiplier = self.multiplier_for(
            employee_id=employee_id,
            violation_type=charge_type.violation_type,
            rule=rule,
            today=charge_date,
        )
        amount = round(float(base_amount or 0) * multiplier, 2)
        if amount <= 0:
            return None

        return ChargeRecord(
            employee_id=employee_id,
            attendance_log_id=attendance_log_id,
            charge_type=charge_type,
            charge_amount=amount,
            charge_date=charge_date,
            escalation_multiplier=multiplier,
            is_escalated=multiplier > 1,
            status=ChargeStatus.PENDING,
        )
