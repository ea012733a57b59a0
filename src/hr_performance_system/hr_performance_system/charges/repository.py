from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import ChargeStatus, ChargeType, ViolationType
from .model import ChargeRecord, EscalationRule


class ChargeRepository(Protocol):
    def count_since(self, *, employee_id: str, charge_types: Iterable[ChargeType], since: date) -> int:
        raise NotImplementedError

    def exists(self, *, employee_id: str, charge_date: date, charge_type: ChargeType) -> bool:
        raise NotImplementedError

    def insert(self, charge: ChargeRecord) -> ChargeRecord:
        """Persist a new charge and return it with its generated id."""

        raise NotImplementedError

    def get_by_id(self, charge_id: str) -> Optional[ChargeRecord]:
        raise NotImplementedError

    def update_status(
        self,
        *,
        charge_id: str,
        status: ChargeStatus,
        decided_at: datetime,
        waived_by: Optional[str] = None,
        waiver_reason: Optional[str] = None,
        dispute_resolution: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        status: Optional[ChargeStatus] = None,
    ) -> Sequence[ChargeRecord]:
        raise NotImplementedError


class EscalationRuleRepository(Protocol):
    def get_active(self, violation_type: ViolationType) -> Optional[EscalationRule]:
        raise NotImplementedError

    def list_all(self) -> Sequence[EscalationRule]:
        raise NotImplementedError

    def get_by_id(self, rule_id: str) -> Optional[EscalationRule]:
        raise NotImplementedError

    def create(self, rule: EscalationRule) -> str:
        raise NotImplementedError

    def update(self, rule: EscalationRule) -> bool:
        raise NotImplementedError

    def delete(self, rule_id: str) -> bool:
        raise NotImplementedError

    def deactivate_others(self, *, violation_type: ViolationType, keep_rule_id: str) -> int:
        raise NotImplementedError
