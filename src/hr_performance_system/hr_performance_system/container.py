from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .attendance.auto_clockout import AutoClockoutScheduler
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository, MySQLAttendanceRuleRepository
from .charges.escalation import ChargeEscalationEngine
from .charges.mysql_charge_repository import MySQLChargeRepository, MySQLEscalationRuleRepository
from .charges.scanner import DailyAttendanceScanner
from .charges.service import ChargeService
from .core.constants import (
    DEFAULT_CLOSE_WINDOW_MINUTES,
    DEFAULT_CURRENCY_SYMBOL,
    DEFAULT_MAX_REPORTED_ERRORS,
    DEFAULT_REMINDER_WINDOW_MINUTES,
)
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .notifications.mysql_notification_repository import MySQLNotificationSender
from .performance.mysql_performance_repository import MySQLPerformanceRepository
from .performance.service import PerformanceService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    job_token: str

    employees_repo: MySQLEmployeeRepository
    performance_repo: MySQLPerformanceRepository
    attendance_repo: MySQLAttendanceRepository
    attendance_rules_repo: MySQLAttendanceRuleRepository
    escalation_rules_repo: MySQLEscalationRuleRepository
    charges_repo: MySQLChargeRepository
    notifications: MySQLNotificationSender

    performance_service: PerformanceService
    charge_service: ChargeService
    daily_scanner: DailyAttendanceScanner
    auto_clockout: AutoClockoutScheduler


def build_container(*, db_config: dict, settings: Optional[ModuleType] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    max_errors = int(getattr(settings, "MAX_REPORTED_ERRORS", DEFAULT_MAX_REPORTED_ERRORS))
    currency = str(getattr(settings, "CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL))

    employees_repo = MySQLEmployeeRepository(conn)
    performance_repo = MySQLPerformanceRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    attendance_rules_repo = MySQLAttendanceRuleRepository(conn)
    escalation_rules_repo = MySQLEscalationRuleRepository(conn)
    charges_repo = MySQLChargeRepository(conn)
    notifications = MySQLNotificationSender(conn)

    engine = ChargeEscalationEngine(charges_repo)

    performance_service = PerformanceService(performance_repo, max_reported_errors=max_errors)
    charge_service = ChargeService(charges_repo, escalation_rules_repo)
    daily_scanner = DailyAttendanceScanner(
        employees=employees_repo,
        attendance=attendance_repo,
        attendance_rules=attendance_rules_repo,
        escalation_rules=escalation_rules_repo,
        charges=charges_repo,
        notifications=notifications,
        engine=engine,
        strategy_factory=AttendanceStrategyFactory(),
        skip_weekends=bool(getattr(settings, "SKIP_WEEKENDS", True)),
        max_reported_errors=max_errors,
        currency=currency,
    )
    auto_clockout = AutoClockoutScheduler(
        attendance=attendance_repo,
        attendance_rules=attendance_rules_repo,
        escalation_rules=escalation_rules_repo,
        charges=charges_repo,
        notifications=notifications,
        engine=engine,
        reminder_window_minutes=int(
            getattr(settings, "AUTO_CLOCKOUT_REMINDER_WINDOW_MINUTES", DEFAULT_REMINDER_WINDOW_MINUTES)
        ),
        close_window_minutes=int(getattr(settings, "AUTO_CLOCKOUT_CLOSE_WINDOW_MINUTES", DEFAULT_CLOSE_WINDOW_MINUTES)),
        max_reported_errors=max_errors,
        currency=currency,
    )

    return Container(
        conn=conn,
        job_token=str(getattr(settings, "JOB_TOKEN", "") or ""),
        employees_repo=employees_repo,
        performance_repo=performance_repo,
        attendance_repo=attendance_repo,
        attendance_rules_repo=attendance_rules_repo,
        escalation_rules_repo=escalation_rules_repo,
        charges_repo=charges_repo,
        notifications=notifications,
        performance_service=performance_service,
        charge_service=charge_service,
        daily_scanner=daily_scanner,
        auto_clockout=auto_clockout,
    )
