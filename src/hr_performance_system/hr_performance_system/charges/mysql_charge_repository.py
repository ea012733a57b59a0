from __future__ import annotations

import json
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import ChargeStatus, ChargeType, ViolationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, fetchall, fetchone, load_json
from .model import ChargeRecord, EscalationRule, EscalationTier
from .repository import ChargeRepository, EscalationRuleRepository

_CHARGE_COLUMNS = """
    charge_id, employee_id, attendance_log_id, charge_type, charge_amount, charge_date,
    escalation_multiplier, is_escalated, status, waived_by, waiver_reason, waived_at,
    dispute_resolution, resolved_at
"""


def _to_charge(r: dict) -> ChargeRecord:
    return ChargeRecord(
        charge_id=str(r["charge_id"]),
        employee_id=str(r["employee_id"]),
        attendance_log_id=str(r["attendance_log_id"]) if r.get("attendance_log_id") else None,
        charge_type=ChargeType(r["charge_type"]),
        charge_amount=as_float(r["charge_amount"], 0.0),
        charge_date=r["charge_date"],
        escalation_multiplier=as_float(r.get("escalation_multiplier"), 1.0),
        is_escalated=as_bool(r.get("is_escalated")),
        status=ChargeStatus(r["status"]),
        waived_by=r.get("waived_by"),
        waiver_reason=r.get("waiver_reason"),
        waived_at=r.get("waived_at"),
        dispute_resolution=r.get("dispute_resolution"),
        resolved_at=r.get("resolved_at"),
    )


def _to_rule(r: dict) -> EscalationRule:
    tiers = load_json(r.get("escalation_tiers"), [])
    return EscalationRule(
        rule_id=str(r["rule_id"]),
        rule_name=r["rule_name"],
        violation_type=ViolationType(r["violation_type"]),
        lookback_period_days=int(r.get("lookback_period_days") or 0),
        tiers=tuple(
            EscalationTier(occurrence_count=int(t["occurrence_count"]), multiplier=float(t["multiplier"]))
            for t in tiers
        ),
        reset_after_days=int(r.get("reset_after_days") or 0),
        is_active=as_bool(r.get("is_active")),
    )


class MySQLChargeRepository(ChargeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def count_since(self, *, employee_id: str, charge_types: Iterable[ChargeType], since: date) -> int:
        values = [c.value for c in charge_types]
        if not values:
            return 0
        placeholders = ",".join(["%s"] * len(values))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS n
                FROM attendance_charges
                WHERE employee_id=%s AND charge_type IN ({placeholders}) AND charge_date >= %s
                """,
                (employee_id, *values, since),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def exists(self, *, employee_id: str, charge_date: date, charge_type: ChargeType) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT charge_id
                FROM attendance_charges
                WHERE employee_id=%s AND charge_date=%s AND charge_type=%s
                LIMIT 1
                """,
                (employee_id, charge_date, charge_type.value),
            )
            return fetchone(cur) is not None

    def insert(self, charge: ChargeRecord) -> ChargeRecord:
        charge_id = charge.charge_id or str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_charges(
                    charge_id, employee_id, attendance_log_id, charge_type, charge_amount, charge_date,
                    escalation_multiplier, is_escalated, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    charge_id,
                    charge.employee_id,
                    charge.attendance_log_id,
                    charge.charge_type.value,
                    charge.charge_amount,
                    charge.charge_date,
                    charge.escalation_multiplier,
                    int(charge.is_escalated),
                    charge.status.value,
                ),
            )
        return replace(charge, charge_id=charge_id)

    def get_by_id(self, charge_id: str) -> Optional[ChargeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_CHARGE_COLUMNS} FROM attendance_charges WHERE charge_id=%s",
                (charge_id,),
            )
            r = fetchone(cur)
            return _to_charge(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_charges
                SET status=%s,
                    waived_by=COALESCE(%s, waived_by),
                    waiver_reason=COALESCE(%s, waiver_reason),
                    waived_at=IF(%s IS NULL, waived_at, %s),
                    dispute_resolution=COALESCE(%s, dispute_resolution),
                    resolved_at=IF(%s IS NULL, resolved_at, %s)
                WHERE charge_id=%s AND status=%s
                """,
                (
                    status.value,
                    waived_by,
                    waiver_reason,
                    waiver_reason,
                    decided_at,
                    dispute_resolution,
                    dispute_resolution,
                    decided_at,
                    charge_id,
                    ChargeStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        status: Optional[ChargeStatus] = None,
    ) -> Sequence[ChargeRecord]:
        clauses = ["charge_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CHARGE_COLUMNS}
                FROM attendance_charges
                WHERE {" AND ".join(clauses)}
                ORDER BY employee_id, charge_date
                """,
                tuple(params),
            )
            return [_to_charge(r) for r in fetchall(cur)]


class MySQLEscalationRuleRepository(EscalationRuleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self, violation_type: ViolationType) -> Optional[EscalationRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT rule_id, rule_name, violation_type, lookback_period_days, escalation_tiers,
                       reset_after_days, is_active
                FROM escalation_rules
                WHERE violation_type=%s AND is_active=1
                LIMIT 1
                """,
                (violation_type.value,),
            )
            r = fetchone(cur)
            return _to_rule(r) if r else None

    def list_all(self) -> Sequence[EscalationRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT rule_id, rule_name, violation_type, lookback_period_days, escalation_tiers,
                       reset_after_days, is_active
                FROM escalation_rules
                ORDER BY violation_type, rule_name
                """
            )
            return [_to_rule(r) for r in fetchall(cur)]

    def get_by_id(self, rule_id: str) -> Optional[EscalationRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT rule_id, rule_name, violation_type, lookback_period_days, escalation_tiers,
                       reset_after_days, is_active
                FROM escalation_rules
                WHERE rule_id=%s
                """,
                (rule_id,),
            )
            r = fetchone(cur)
            return _to_rule(r) if r else None

    def create(self, rule: EscalationRule) -> str:
        rule_id = rule.rule_id or str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO escalation_rules(
                    rule_id, rule_name, violation_type, lookback_period_days, escalation_tiers,
                    reset_after_days, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    rule_id,
                    rule.rule_name,
                    rule.violation_type.value,
                    rule.lookback_period_days,
                    json.dumps([t.as_dict() for t in rule.tiers]),
                    rule.reset_after_days,
                    int(rule.is_active),
                ),
            )
        return rule_id

    def update(self, rule: EscalationRule) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE escalation_rules
                SET rule_name=%s, violation_type=%s, lookback_period_days=%s, escalation_tiers=%s,
                    reset_after_days=%s, is_active=%s
                WHERE rule_id=%s
                """,
                (
                    rule.rule_name,
                    rule.violation_type.value,
                    rule.lookback_period_days,
                    json.dumps([t.as_dict() for t in rule.tiers]),
                    rule.reset_after_days,
                    int(rule.is_active),
                    rule.rule_id,
                ),
            )
            return cur.rowcount > 0

    def delete(self, rule_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM escalation_rules WHERE rule_id=%s", (rule_id,))
            return cur.rowcount > 0

    def deactivate_others(self, *, violation_type: ViolationType, keep_rule_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE escalation_rules
                SET is_active=0
                WHERE violation_type=%s AND rule_id<>%s AND is_active=1
                """,
                (violation_type.value, keep_rule_id),
            )
            return int(cur.rowcount or 0)
