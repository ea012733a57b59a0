from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..attendance.factory import AttendanceStrategyFactory
from ..attendance.model import AttendanceRule, AttendanceViolation
from ..attendance.repository import AttendanceRepository, AttendanceRuleRepository
from ..common.datetime_utils import is_weekend, now_local, yesterday_of
from ..core.constants import DEFAULT_CURRENCY_SYMBOL, DEFAULT_MAX_REPORTED_ERRORS
from ..core.enums import ViolationType
from ..core.exceptions import ConfigurationMissingError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..notifications.repository import NotificationSender, notify_quietly
from .escalation import ChargeEscalationEngine, load_active_rule
from .messages import charge_notification
from .model import ChargeRecord, EscalationRule
from .repository import ChargeRepository, EscalationRuleRepository

logger = logging.getLogger(__name__)


@dataclass
class ScanReport:
    date: date
    charges: list[ChargeRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    already_charged: int = 0
    skipped: bool = False
    reason: Optional[str] = None

    @property
    def charges_created(self) -> int:
        return len(self.charges)

    def as_dict(self) -> dict:
        out = {
            "success": True,
            "date": self.date.strftime("%Y-%m-%d"),
            "chargesCreated": self.charges_created,
            "alreadyCharged": self.already_charged,
            "charges": [c.as_dict() for c in self.charges],
        }
        if self.skipped:
            out["skipped"] = True
            out["reason"] = self.reason
        if self.errors:
            out["errors"] = list(self.errors)
        return out


class DailyAttendanceScanner:
    """Walks the active roster for one day and charges absences and late arrivals."""

    def __init__(
        self,
        *,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        attendance_rules: AttendanceRuleRepository,
        escalation_rules: EscalationRuleRepository,
        charges: ChargeRepository,
        notifications: NotificationSender,
        engine: Optional[ChargeEscalationEngine] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        skip_weekends: bool = True,
        max_reported_errors: int = DEFAULT_MAX_REPORTED_ERRORS,
        currency: str = DEFAULT_CURRENCY_SYMBOL,
    ):
        self._employees = employees
        self._attendance = attendance
        self._attendance_rules = attendance_rules
        self._escalation_rules = escalation_rules
        self._charges = charges
        self._notifications = notifications
        self._engine = engine or ChargeEscalationEngine(charges)
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._skip_weekends = bool(skip_weekends)
        self._max_errors = int(max_reported_errors)
        self._currency = currency

    def run(self, target_date: Optional[date] = None, *, now: Optional[datetime] = None) -> ScanReport:
        now = now or now_local()
        day = target_date or yesterday_of(now)
        logger.info("Calculating charges for date: %s", day)

        if self._skip_weekends and is_weekend(day):
            logger.info("Skipping charge calculation for weekend: %s", day)
            return ScanReport(date=day, skipped=True, reason="Weekend: no charges on Saturdays and Sundays")

        rule = self._attendance_rules.get_active()
        if rule is None:
            raise ConfigurationMissingError("No active attendance rules configured")

        escalation = {
            vt: load_active_rule(self._escalation_rules, vt)
            for vt in (ViolationType.ABSENCE, ViolationType.LATE_ARRIVAL)
        }

        report = ScanReport(date=day)
        for employee in self._employees.list_active():
            try:
                self._process_employee(employee, day=day, rule=rule, escalation=escalation, report=report)
            except Exception as e:
                logger.exception("Error processing employee %s", employee.employee_id)
                if len(report.errors) < self._max_errors:
                    report.errors.append(f"Employee {employee.employee_id}: {e}")

        logger.info(
            "Charges complete for %s. Created: %d, Already charged: %d, Errors: %d",
            day,
            report.charges_created,
            report.already_charged,
            len(report.errors),
        )
        return report

    def classify(self, employee: Employee, *, day: date, rule: AttendanceRule) -> Optional[AttendanceViolation]:
        log = self._attendance.get_for_employee_and_date(employee.employee_id, day)
        strategy = self._factory.for_day(log=log, grace_minutes=rule.grace_period_minutes)
        return strategy.classify(employee_id=employee.employee_id, work_date=day, log=log)

    def _process_employee(
        self,
        employee: Employee,
        *,
        day: date,
        rule: AttendanceRule,
        escalation: dict[ViolationType, Optional[EscalationRule]],
        report: ScanReport,
    ) -> None:
        violation = self.classify(employee, day=day, rule=rule)
        if violation is None:
            return

        if self._charges.exists(employee_id=employee.employee_id, charge_date=day, charge_type=violation.kind):
            report.already_charged += 1
            return

        charge = self._engine.build_charge(
            employee_id=employee.employee_id,
            charge_type=violation.kind,
            base_amount=rule.base_amount(violation.kind),
            rule=escalation.get(violation.kind.violation_type),
            charge_date=day,
            attendance_log_id=violation.attendance_log_id,
        )
        if charge is None:
            return

        saved = self._charges.insert(charge)
        report.charges.append(saved)
        notify_quietly(self._notifications, charge_notification(saved, violation, currency=self._currency))
