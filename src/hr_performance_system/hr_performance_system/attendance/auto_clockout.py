"""Auto clock-out at closing time.

Driven by an external poll (roughly once a minute). Each still-open office
session moves Open -> ReminderSent at closing time and ReminderSent ->
AutoClosed one minute later; one still open past the reminder window but not
yet closed is Overdue. Instead of comparing the current minute to the
target minute, both steps accept a small window so a late or repeated trigger
still lands; a closed session no longer matches the open-session query, which
makes the close step safe to repeat.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from ..charges.escalation import ChargeEscalationEngine, load_active_rule
from ..charges.messages import format_amount
from ..charges.model import ChargeRecord, EscalationRule
from ..charges.repository import ChargeRepository, EscalationRuleRepository
from ..common.datetime_utils import now_local
from ..core.constants import (
    AUTO_CLOSE_DELAY_MINUTES,
    DEFAULT_CLOSE_WINDOW_MINUTES,
    DEFAULT_CURRENCY_SYMBOL,
    DEFAULT_MAX_REPORTED_ERRORS,
    DEFAULT_REMINDER_WINDOW_MINUTES,
)
from ..core.enums import ChargeType, LocationType, SessionState, ViolationType
from ..core.exceptions import ConfigurationMissingError
from ..notifications.model import NotificationRequest
from ..notifications.repository import NotificationSender, notify_quietly
from .model import AttendanceLog, AttendanceRule
from .repository import AttendanceRepository, AttendanceRuleRepository

logger = logging.getLogger(__name__)


@dataclass
class ClockoutReport:
    timestamp: datetime
    closing_time: datetime
    active_sessions: int = 0
    reminders_sent: int = 0
    auto_clockouts: int = 0
    charges: list[ChargeRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        out = {
            "success": True,
            "timestamp": self.timestamp.isoformat(),
            "closingTime": self.closing_time.strftime("%H:%M:%S"),
            "activeSessions": self.active_sessions,
            "remindersSent": self.reminders_sent,
            "autoClockouts": self.auto_clockouts,
            "chargesCreated": len(self.charges),
            "charges": [c.as_dict() for c in self.charges],
        }
        if self.errors:
            out["errors"] = list(self.errors)
        return out


def is_eligible(log: AttendanceLog) -> bool:
    return (
        log.is_open
        and log.location_type == LocationType.OFFICE
        and not log.overtime_approved
        and not log.early_closure
    )


def closing_time_for(log: AttendanceLog, rule: AttendanceRule) -> datetime:
    return datetime.combine(log.clock_in_time.date(), rule.work_end_time)


class AutoClockoutScheduler:
    def __init__(
        self,
        *,
        attendance: AttendanceRepository,
        attendance_rules: AttendanceRuleRepository,
        escalation_rules: EscalationRuleRepository,
        charges: ChargeRepository,
        notifications: NotificationSender,
        engine: Optional[ChargeEscalationEngine] = None,
        reminder_window_minutes: int = DEFAULT_REMINDER_WINDOW_MINUTES,
        close_window_minutes: int = DEFAULT_CLOSE_WINDOW_MINUTES,
        max_reported_errors: int = DEFAULT_MAX_REPORTED_ERRORS,
        currency: str = DEFAULT_CURRENCY_SYMBOL,
    ):
        self._attendance = attendance
        self._attendance_rules = attendance_rules
        self._escalation_rules = escalation_rules
        self._charges = charges
        self._notifications = notifications
        self._engine = engine or ChargeEscalationEngine(charges)
        reminder_minutes = max(int(reminder_window_minutes), 1)
        if reminder_minutes > AUTO_CLOSE_DELAY_MINUTES:
            # The reminder window must end where the close window starts.
            logger.warning(
                "Reminder window of %d minutes overlaps the auto clock-out; using %d",
                reminder_minutes,
                AUTO_CLOSE_DELAY_MINUTES,
            )
            reminder_minutes = AUTO_CLOSE_DELAY_MINUTES
        self._reminder_window = timedelta(minutes=reminder_minutes)
        self._close_window = timedelta(minutes=max(int(close_window_minutes), 1))
        self._max_errors = int(max_reported_errors)
        self._currency = currency

    def in_reminder_window(self, now: datetime, closing: datetime) -> bool:
        return closing <= now < closing + self._reminder_window

    def in_close_window(self, now: datetime, closing: datetime) -> bool:
        start = closing + timedelta(minutes=AUTO_CLOSE_DELAY_MINUTES)
        return start <= now < start + self._close_window

    def session_state(self, log: AttendanceLog, *, now: datetime, closing: datetime) -> Optional[SessionState]:
        """Where a session sits in the auto clock-out lifecycle; None when closed by hand.

        A session still open after the reminder window is OVERDUE: whether a
        reminder reached it depends on a trigger having landed in that window.
        """
        if log.auto_clocked_out:
            return SessionState.AUTO_CLOSED
        if not log.is_open:
            return None
        if now < closing:
            return SessionState.OPEN
        if self.in_reminder_window(now, closing):
            return SessionState.REMINDER_SENT
        return SessionState.OVERDUE

    def run(self, now: Optional[datetime] = None) -> ClockoutReport:
        now = now or now_local()
        rule = self._attendance_rules.get_active()
        if rule is None:
            raise ConfigurationMissingError("No active attendance rules found")

        closing = datetime.combine(now.date(), rule.work_end_time)
        sessions = [s for s in self._attendance.list_open_office_sessions() if is_eligible(s)]
        report = ClockoutReport(timestamp=now, closing_time=closing, active_sessions=len(sessions))
        logger.info("Auto clock-out check at %s (closing %s): %d open sessions", now, closing, len(sessions))

        if not sessions:
            return report

        if self.in_reminder_window(now, closing):
            self._send_reminders(sessions, rule=rule, report=report)
        elif self.in_close_window(now, closing):
            escalation = load_active_rule(self._escalation_rules, ViolationType.EARLY_DEPARTURE)
            for session in sessions:
                try:
                    self._auto_close(session, rule=rule, escalation=escalation, report=report)
                except Exception as e:
                    logger.exception("Failed to clock out employee %s", session.employee_id)
                    if len(report.errors) < self._max_errors:
                        report.errors.append(f"Employee {session.employee_id}: {e}")

        logger.info(
            "Auto clock-out done. Reminders: %d, Auto clock-outs: %d, Charges: %d, Errors: %d",
            report.reminders_sent,
            report.auto_clockouts,
            len(report.charges),
            len(report.errors),
        )
        return report

    def _send_reminders(self, sessions: list[AttendanceLog], *, rule: AttendanceRule, report: ClockoutReport) -> None:
        closing_label = rule.work_end_time.strftime("%H:%M")
        for session in sessions:
            sent = notify_quietly(
                self._notifications,
                NotificationRequest(
                    user_id=session.employee_id,
                    type="clock_out_reminder",
                    title="Closing Time - Clock Out Now",
                    message=(
                        f"It's {closing_label} (closing time). Please clock out now to avoid being "
                        "automatically clocked out with an early closure charge."
                    ),
                ),
            )
            if sent:
                report.reminders_sent += 1

    def _auto_close(
        self,
        session: AttendanceLog,
        *,
        rule: AttendanceRule,
        escalation: Optional[EscalationRule],
        report: ClockoutReport,
    ) -> None:
        # Hours are credited up to closing time, not up to when the job ran.
        clock_out = max(closing_time_for(session, rule), session.clock_in_time)
        total_hours = round(max(0.0, (clock_out - session.clock_in_time).total_seconds() / 3600), 2)

        closed = self._attendance.close_session(
            log_id=session.log_id,
            clock_out_time=clock_out,
            total_hours=total_hours,
            early_closure=True,
            auto_clocked_out=True,
        )
        if not closed:
            logger.info("Attendance log %s was closed by another run; skipping", session.log_id)
            return
        report.auto_clockouts += 1

        charge_date = clock_out.date()
        charge: Optional[ChargeRecord] = None
        if not self._charges.exists(
            employee_id=session.employee_id,
            charge_date=charge_date,
            charge_type=ChargeType.EARLY_CLOSURE,
        ):
            charge = self._engine.build_charge(
                employee_id=session.employee_id,
                charge_type=ChargeType.EARLY_CLOSURE,
                base_amount=rule.early_closure_charge_amount,
                rule=escalation,
                charge_date=charge_date,
                attendance_log_id=session.log_id,
            )
        if charge is not None:
            charge = self._charges.insert(charge)
            report.charges.append(charge)

        closing_label = clock_out.strftime("%H:%M")
        if charge is not None:
            escalated = f" ({charge.escalation_multiplier:g}x escalation)" if charge.is_escalated else ""
            message = (
                f"You were automatically clocked out at {closing_label} because you didn't clock out manually. "
                f"An early closure charge of {format_amount(charge.charge_amount, self._currency)}{escalated} "
                "has been applied."
            )
        else:
            message = f"You were automatically clocked out at {closing_label} because you didn't clock out manually."

        notify_quietly(
            self._notifications,
            NotificationRequest(
                user_id=session.employee_id,
                type="auto_clock_out",
                title="Auto Clocked Out",
                message=message,
            ),
        )
