from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import require_non_empty, require_positive
from ..core.constants import DEFAULT_LOOKBACK_DAYS
from ..core.enums import ChargeStatus, Role, ViolationType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import ChargeRecord, EscalationRule, EscalationTier
from .repository import ChargeRepository, EscalationRuleRepository

logger = logging.getLogger(__name__)

ADMIN_ROLES = frozenset({Role.ADMIN, Role.HR})


def parse_tiers(raw: Any) -> tuple[EscalationTier, ...]:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise ValidationError("At least one escalation tier is required")

    tiers: list[EscalationTier] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Each escalation tier needs occurrence_count and multiplier")
        try:
            count = int(item["occurrence_count"])
            multiplier = float(item["multiplier"])
        except (KeyError, TypeError, ValueError):
            raise ValidationError("Each escalation tier needs occurrence_count and multiplier")
        if count < 1:
            raise ValidationError("Tier occurrence count must be at least 1")
        if multiplier < 1:
            raise ValidationError("Tier multiplier must be at least 1.0")
        tiers.append(EscalationTier(occurrence_count=count, multiplier=multiplier))

    counts = [t.occurrence_count for t in tiers]
    if len(set(counts)) != len(counts):
        raise ValidationError("Tier occurrence counts must be unique")

    return tuple(sorted(tiers, key=lambda t: t.occurrence_count))


def parse_rule(payload: dict, *, rule_id: Optional[str] = None) -> EscalationRule:
    """Build an escalation rule from a JSON body (snake_case keys, as stored)."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid rule payload")

    name = require_non_empty(payload.get("rule_name") or "", "Rule name")
    try:
        violation_type = ViolationType(payload.get("violation_type"))
    except ValueError:
        raise ValidationError("Unknown violation type")

    lookback = require_positive(payload.get("lookback_period_days", DEFAULT_LOOKBACK_DAYS), "Lookback period")

    try:
        reset_after = int(payload.get("reset_after_days") or 0)
    except (TypeError, ValueError):
        raise ValidationError("Reset period must be a number")
    if reset_after < 0:
        raise ValidationError("Reset period cannot be negative")

    return EscalationRule(
        rule_id=rule_id,
        rule_name=name,
        violation_type=violation_type,
        lookback_period_days=lookback,
        tiers=parse_tiers(payload.get("escalation_tiers")),
        reset_after_days=reset_after,
        is_active=bool(payload.get("is_active", True)),
    )


class ChargeService:
    def __init__(self, charges: ChargeRepository, rules: EscalationRuleRepository):
        self._charges = charges
        self._rules = rules

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role not in ADMIN_ROLES:
            raise AuthorizationError("Only HR can manage attendance charges")

    def _pending_charge(self, charge_id: str) -> ChargeRecord:
        charge = self._charges.get_by_id(str(charge_id))
        if not charge:
            raise NotFoundError("Charge not found")
        if charge.status != ChargeStatus.PENDING:
            raise ValidationError("Charge has already been processed")
        return charge

    def waive(
        self,
        *,
        current_role: Role,
        charge_id: str,
        hr_user_id: str,
        reason: str,
        now: Optional[datetime] = None,
    ) -> None:
        self._require_admin(current_role)
        reason = require_non_empty(reason, "Waiver reason")
        self._pending_charge(charge_id)

        ok = self._charges.update_status(
            charge_id=str(charge_id),
            status=ChargeStatus.WAIVED,
            decided_at=now or now_local(),
            waived_by=str(hr_user_id),
            waiver_reason=reason,
        )
        if not ok:
            raise ValidationError("Waiving the charge failed")
        logger.info("Charge %s waived by %s", charge_id, hr_user_id)

    def resolve(
        self,
        *,
        current_role: Role,
        charge_id: str,
        resolution: str,
        now: Optional[datetime] = None,
    ) -> None:
        self._require_admin(current_role)
        resolution = require_non_empty(resolution, "Resolution")
        self._pending_charge(charge_id)

        ok = self._charges.update_status(
            charge_id=str(charge_id),
            status=ChargeStatus.RESOLVED,
            decided_at=now or now_local(),
            dispute_resolution=resolution,
        )
        if not ok:
            raise ValidationError("Resolving the charge failed")
        logger.info("Charge %s resolved", charge_id)

    def monthly_report(self, *, current_role: Role, year: int, month: int) -> Sequence[ChargeRecord]:
        self._require_admin(current_role)
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")
        start, end = month_bounds(int(year), int(month))
        return self._charges.list_between(start_date=start, end_date=end, status=ChargeStatus.PENDING)

    def list_rules(self, *, current_role: Role) -> Sequence[EscalationRule]:
        self._require_admin(current_role)
        return self._rules.list_all()

    def _keep_single_active(self, rule: EscalationRule) -> None:
        if not rule.is_active:
            return
        n = self._rules.deactivate_others(violation_type=rule.violation_type, keep_rule_id=str(rule.rule_id))
        if n:
            logger.info("Deactivated %d older %s escalation rule(s)", n, rule.violation_type.value)

    def create_rule(self, *, current_role: Role, payload: dict) -> EscalationRule:
        self._require_admin(current_role)
        rule = parse_rule(payload)
        rule = replace(rule, rule_id=self._rules.create(rule))
        self._keep_single_active(rule)
        return rule

    def update_rule(self, *, current_role: Role, rule_id: str, payload: dict) -> EscalationRule:
        self._require_admin(current_role)
        if not self._rules.get_by_id(str(rule_id)):
            raise NotFoundError("Escalation rule not found")

        rule = parse_rule(payload, rule_id=str(rule_id))
        # MySQL reports 0 affected rows when nothing changed, so a False here is not an error.
        self._rules.update(rule)
        self._keep_single_active(rule)
        return rule

    def delete_rule(self, *, current_role: Role, rule_id: str) -> None:
        self._require_admin(current_role)
        if not self._rules.delete(str(rule_id)):
            raise NotFoundError("Escalation rule not found")
