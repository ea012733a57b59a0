from __future__ import annotations

from datetime import datetime, time

import pytest

from src.hr_performance_system.hr_performance_system.attendance.auto_clockout import AutoClockoutScheduler
from src.hr_performance_system.hr_performance_system.attendance.model import AttendanceLog, AttendanceRule
from src.hr_performance_system.hr_performance_system.core.enums import ChargeType, LocationType, SessionState
from src.hr_performance_system.hr_performance_system.core.exceptions import ConfigurationMissingError
from tests.fakes import (
    FakeAttendanceRepo,
    FakeAttendanceRules,
    FakeChargesRepo,
    FakeEscalationRulesRepo,
    FakeNotifications,
)

RULE = AttendanceRule(
    rule_id="ar-1",
    work_start_time=time(8, 0),
    work_end_time=time(17, 0),
    grace_period_minutes=15,
    early_closure_charge_amount=1000.0,
)


def _at(hour, minute, second=0):
    return datetime(2025, 1, 8, hour, minute, second)


def _open(log_id, employee_id, **kwargs):
    return AttendanceLog(log_id=log_id, employee_id=employee_id, clock_in_time=_at(8, 0), **kwargs)


def _scheduler(logs, *, rule=RULE, notifications=None, **options):
    attendance = FakeAttendanceRepo(logs)
    charges = FakeChargesRepo()
    notifications = notifications if notifications is not None else FakeNotifications()
    scheduler = AutoClockoutScheduler(
        attendance=attendance,
        attendance_rules=FakeAttendanceRules(rule),
        escalation_rules=FakeEscalationRulesRepo(),
        charges=charges,
        notifications=notifications,
        **options,
    )
    return scheduler, attendance, charges, notifications


def test_auto_clockout_records_closing_time_not_run_time():
    scheduler, attendance, charges, notifications = _scheduler([_open("l1", "ada")])

    report = scheduler.run(_at(17, 1))

    closed = attendance.logs["l1"]
    assert closed.clock_out_time == _at(17, 0, 0)
    assert closed.total_hours == 9.0
    assert closed.early_closure is True
    assert closed.auto_clocked_out is True
    assert report.auto_clockouts == 1

    assert len(charges.charges) == 1
    charge = charges.charges[0]
    assert charge.charge_type == ChargeType.EARLY_CLOSURE
    assert charge.charge_amount == 1000.0
    assert charge.attendance_log_id == "l1"

    assert notifications.sent[0].title == "Auto Clocked Out"
    assert "₦1,000.00" in notifications.sent[0].message


def test_reminder_is_sent_at_closing_time():
    scheduler, attendance, charges, notifications = _scheduler([_open("l1", "ada"), _open("l2", "bola")])

    report = scheduler.run(_at(17, 0, 30))

    assert report.reminders_sent == 2
    assert report.auto_clockouts == 0
    assert attendance.closed == []
    assert charges.charges == []
    assert {n.title for n in notifications.sent} == {"Closing Time - Clock Out Now"}


def test_nothing_happens_before_closing_time():
    scheduler, attendance, _, notifications = _scheduler([_open("l1", "ada")])

    report = scheduler.run(_at(16, 59))

    assert report.active_sessions == 1
    assert report.reminders_sent == 0
    assert attendance.closed == []
    assert notifications.sent == []


def test_late_trigger_inside_close_window_still_closes():
    scheduler, attendance, _, _ = _scheduler([_open("l1", "ada")])

    scheduler.run(_at(17, 5, 59))

    assert attendance.closed == ["l1"]


def test_trigger_after_close_window_does_nothing():
    scheduler, attendance, _, _ = _scheduler([_open("l1", "ada")])

    scheduler.run(_at(17, 6))

    assert attendance.closed == []


def test_repeated_trigger_does_not_double_charge():
    scheduler, attendance, charges, _ = _scheduler([_open("l1", "ada")])

    scheduler.run(_at(17, 1))
    second = scheduler.run(_at(17, 2))

    assert attendance.closed == ["l1"]
    assert len(charges.charges) == 1
    assert second.active_sessions == 0


def test_overtime_remote_and_closed_sessions_are_left_alone():
    logs = [
        _open("l1", "ada", overtime_approved=True),
        _open("l2", "bola", location_type=LocationType.REMOTE),
        AttendanceLog(log_id="l3", employee_id="chidi", clock_in_time=_at(8, 0), clock_out_time=_at(16, 0)),
        _open("l4", "dayo"),
    ]
    scheduler, attendance, charges, _ = _scheduler(logs)

    report = scheduler.run(_at(17, 1))

    assert report.active_sessions == 1
    assert attendance.closed == ["l4"]
    assert [c.employee_id for c in charges.charges] == ["dayo"]


def test_one_failed_update_does_not_block_the_rest():
    scheduler, attendance, charges, _ = _scheduler([_open("l1", "ada"), _open("l2", "bola"), _open("l3", "chidi")])
    attendance.fail_for.add("bola")

    report = scheduler.run(_at(17, 1))

    assert sorted(attendance.closed) == ["l1", "l3"]
    assert len(charges.charges) == 2
    assert len(report.errors) == 1
    assert report.errors[0].startswith("Employee bola:")


def test_zero_charge_amount_still_closes_session():
    no_charge = AttendanceRule(rule_id="ar-2", work_end_time=time(17, 0))
    scheduler, attendance, charges, notifications = _scheduler([_open("l1", "ada")], rule=no_charge)

    scheduler.run(_at(17, 1))

    assert attendance.closed == ["l1"]
    assert charges.charges == []
    assert "charge" not in notifications.sent[0].message


def test_missing_attendance_rule_aborts():
    scheduler, _, _, _ = _scheduler([_open("l1", "ada")], rule=None)

    with pytest.raises(ConfigurationMissingError):
        scheduler.run(_at(17, 1))


def test_report_shape():
    scheduler, _, _, _ = _scheduler([_open("l1", "ada")])

    body = scheduler.run(_at(17, 1)).as_dict()

    assert body["success"] is True
    assert body["closingTime"] == "17:00:00"
    assert body["autoClockouts"] == 1
    assert body["chargesCreated"] == 1
    assert "errors" not in body


def test_session_state_transitions():
    scheduler, _, _, _ = _scheduler([])
    closing = _at(17, 0)
    open_log = _open("l1", "ada")

    assert scheduler.session_state(open_log, now=_at(16, 0), closing=closing) == SessionState.OPEN
    assert scheduler.session_state(open_log, now=_at(17, 0, 30), closing=closing) == SessionState.REMINDER_SENT
    assert scheduler.session_state(open_log, now=_at(17, 1), closing=closing) == SessionState.OVERDUE

    closed = AttendanceLog(
        log_id="l1",
        employee_id="ada",
        clock_in_time=_at(8, 0),
        clock_out_time=closing,
        auto_clocked_out=True,
    )
    assert scheduler.session_state(closed, now=_at(17, 1), closing=closing) == SessionState.AUTO_CLOSED

    by_hand = AttendanceLog(log_id="l2", employee_id="bola", clock_in_time=_at(8, 0), clock_out_time=_at(16, 30))
    assert scheduler.session_state(by_hand, now=_at(17, 1), closing=closing) is None


def test_missed_reminder_window_is_not_reported_as_reminded():
    scheduler, _, _, notifications = _scheduler([_open("l1", "ada")])

    state = scheduler.session_state(_open("l1", "ada"), now=_at(17, 3), closing=_at(17, 0))

    assert state == SessionState.OVERDUE
    assert notifications.sent == []


def test_wide_reminder_window_still_reminds_once_and_closes_after_a_minute():
    scheduler, attendance, charges, _ = _scheduler([_open("l1", "ada")], reminder_window_minutes=10)

    runs = [scheduler.run(_at(17, minute)) for minute in range(0, 12)]

    assert [(r.reminders_sent, r.auto_clockouts) for r in runs[:3]] == [(1, 0), (0, 1), (0, 0)]
    assert sum(r.reminders_sent for r in runs) == 1
    assert attendance.closed == ["l1"]
    assert len(charges.charges) == 1
