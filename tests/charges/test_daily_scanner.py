from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from src.hr_performance_system.hr_performance_system.attendance.model import AttendanceLog, AttendanceRule
from src.hr_performance_system.hr_performance_system.charges.model import (
    ChargeRecord,
    EscalationRule,
    EscalationTier,
)
from src.hr_performance_system.hr_performance_system.charges.scanner import DailyAttendanceScanner
from src.hr_performance_system.hr_performance_system.core.enums import ChargeType, ViolationType
from src.hr_performance_system.hr_performance_system.core.exceptions import ConfigurationMissingError
from src.hr_performance_system.hr_performance_system.employees.model import Employee
from tests.fakes import (
    FakeAttendanceRepo,
    FakeAttendanceRules,
    FakeChargesRepo,
    FakeEmployees,
    FakeEscalationRulesRepo,
    FakeNotifications,
)

WEDNESDAY = date(2025, 1, 8)
SATURDAY = date(2025, 1, 11)

RULE = AttendanceRule(
    rule_id="ar-1",
    work_start_time=time(8, 0),
    work_end_time=time(17, 0),
    grace_period_minutes=15,
    late_charge_amount=2000.0,
    absence_charge_amount=5000.0,
    early_closure_charge_amount=1000.0,
)


def _employee(eid):
    return Employee(employee_id=eid, first_name=eid.title(), last_name="Okafor")


def _log(log_id, employee_id, *, day=WEDNESDAY, late_by=0):
    return AttendanceLog(
        log_id=log_id,
        employee_id=employee_id,
        clock_in_time=datetime.combine(day, time(8, 0)) + timedelta(minutes=late_by),
        clock_out_time=datetime.combine(day, time(17, 0)),
        is_late=late_by > 0,
        late_by_minutes=late_by,
    )


def _scanner(*, employees, logs=(), rule=RULE, charges=None, rules=None, notifications=None, **kwargs):
    charges = charges if charges is not None else FakeChargesRepo()
    notifications = notifications if notifications is not None else FakeNotifications()
    attendance = FakeAttendanceRepo(logs)
    scanner = DailyAttendanceScanner(
        employees=FakeEmployees(employees),
        attendance=attendance,
        attendance_rules=FakeAttendanceRules(rule),
        escalation_rules=FakeEscalationRulesRepo(rules),
        charges=charges,
        notifications=notifications,
        **kwargs,
    )
    return scanner, attendance, charges, notifications


def test_absent_late_and_compliant_employees():
    scanner, _, charges, notifications = _scanner(
        employees=[_employee("ada"), _employee("bola"), _employee("chidi")],
        logs=[_log("l-bola", "bola", late_by=20), _log("l-chidi", "chidi", late_by=5)],
    )

    report = scanner.run(WEDNESDAY)

    assert report.charges_created == 2
    by_employee = {c.employee_id: c for c in charges.charges}
    assert set(by_employee) == {"ada", "bola"}
    assert by_employee["ada"].charge_type == ChargeType.ABSENCE
    assert by_employee["ada"].charge_amount == 5000.0
    assert by_employee["ada"].attendance_log_id is None
    assert by_employee["bola"].charge_type == ChargeType.LATE_ARRIVAL
    assert by_employee["bola"].charge_amount == 2000.0
    assert by_employee["bola"].attendance_log_id == "l-bola"

    titles = sorted(n.title for n in notifications.sent)
    assert titles == ["Absence Charge Applied", "Late Arrival Charge Applied"]
    late_note = next(n for n in notifications.sent if n.user_id == "bola")
    assert "(20 minutes late)" in late_note.message
    assert "₦2,000.00" in late_note.message


def test_lateness_equal_to_grace_is_not_charged():
    scanner, _, charges, _ = _scanner(employees=[_employee("ada")], logs=[_log("l1", "ada", late_by=15)])

    report = scanner.run(WEDNESDAY)

    assert report.charges_created == 0
    assert charges.charges == []


def test_defaults_to_yesterday():
    scanner, _, _, _ = _scanner(employees=[_employee("ada")])

    report = scanner.run(now=datetime(2025, 1, 9, 0, 30))

    assert report.date == WEDNESDAY
    assert report.charges_created == 1


def test_weekend_is_skipped_without_reading_rules():
    scanner, _, charges, _ = _scanner(employees=[_employee("ada")], rule=None)

    report = scanner.run(SATURDAY)

    assert report.skipped is True
    assert report.as_dict()["skipped"] is True
    assert charges.charges == []


def test_weekend_scan_can_be_enabled():
    scanner, _, charges, _ = _scanner(employees=[_employee("ada")], skip_weekends=False)

    report = scanner.run(SATURDAY)

    assert report.skipped is False
    assert len(charges.charges) == 1


def test_missing_attendance_rule_aborts_the_run():
    scanner, _, _, _ = _scanner(employees=[_employee("ada")], rule=None)

    with pytest.raises(ConfigurationMissingError):
        scanner.run(WEDNESDAY)


def test_one_failing_employee_does_not_stop_the_batch():
    scanner, attendance, charges, _ = _scanner(employees=[_employee("ada"), _employee("bola"), _employee("chidi")])
    attendance.fail_for.add("bola")

    report = scanner.run(WEDNESDAY)

    assert report.charges_created == 2
    assert {c.employee_id for c in charges.charges} == {"ada", "chidi"}
    assert len(report.errors) == 1
    assert report.errors[0].startswith("Employee bola:")
    assert report.as_dict()["errors"] == report.errors


def test_rerun_for_the_same_day_does_not_duplicate_charges():
    scanner, _, charges, notifications = _scanner(employees=[_employee("ada")])

    scanner.run(WEDNESDAY)
    second = scanner.run(WEDNESDAY)

    assert len(charges.charges) == 1
    assert second.charges_created == 0
    assert second.already_charged == 1
    assert len(notifications.sent) == 1


def test_notification_failure_keeps_the_charge():
    scanner, _, charges, _ = _scanner(employees=[_employee("ada")], notifications=FakeNotifications(fail=True))

    report = scanner.run(WEDNESDAY)

    assert report.charges_created == 1
    assert report.errors == []
    assert len(charges.charges) == 1


def test_repeat_absence_is_escalated():
    prior = [
        ChargeRecord(
            employee_id="ada",
            charge_type=ChargeType.ABSENCE,
            charge_amount=5000.0,
            charge_date=WEDNESDAY - timedelta(days=d),
        )
        for d in (1, 2)
    ]
    rule = EscalationRule(
        rule_id="esc-1",
        rule_name="Repeat absence",
        violation_type=ViolationType.ABSENCE,
        lookback_period_days=30,
        tiers=(
            EscalationTier(occurrence_count=1, multiplier=1.0),
            EscalationTier(occurrence_count=3, multiplier=1.5),
        ),
    )
    scanner, _, charges, notifications = _scanner(
        employees=[_employee("ada")],
        charges=FakeChargesRepo(prior),
        rules=[rule],
    )

    scanner.run(WEDNESDAY)

    new_charge = charges.charges[-1]
    assert new_charge.charge_amount == 7500.0
    assert new_charge.escalation_multiplier == 1.5
    assert new_charge.is_escalated is True
    assert "(1.5x escalation)" in notifications.sent[0].message


def test_zero_base_amount_creates_no_charge():
    free_lateness = AttendanceRule(rule_id="ar-2", work_end_time=time(17, 0), grace_period_minutes=0)
    scanner, _, charges, notifications = _scanner(
        employees=[_employee("ada")],
        logs=[_log("l1", "ada", late_by=30)],
        rule=free_lateness,
    )

    report = scanner.run(WEDNESDAY)

    assert report.charges_created == 0
    assert charges.charges == []
    assert notifications.sent == []
