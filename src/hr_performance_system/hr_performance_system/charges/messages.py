from __future__ import annotations

from ..attendance.model import AttendanceViolation
from ..core.constants import DEFAULT_CURRENCY_SYMBOL
from ..core.enums import ChargeType
from ..notifications.model import NotificationRequest
from .model import ChargeRecord


def format_amount(amount: float, currency: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    return f"{currency}{amount:,.2f}"


def charge_notification(
    charge: ChargeRecord,
    violation: AttendanceViolation | None = None,
    *,
    currency: str = DEFAULT_CURRENCY_SYMBOL,
) -> NotificationRequest:
    day = charge.charge_date.strftime("%Y-%m-%d")
    amount = format_amount(charge.charge_amount, currency)
    escalation = f" ({charge.escalation_multiplier:g}x escalation)" if charge.escalation_multiplier > 1 else ""

    if charge.charge_type == ChargeType.ABSENCE:
        title = "Absence Charge Applied"
        message = f"An absence charge of {amount} has been applied for {day}{escalation}. You were not clocked in on this day."
    elif charge.charge_type == ChargeType.LATE_ARRIVAL:
        minutes = violation.late_by_minutes if violation and violation.late_by_minutes is not None else None
        late = f" ({minutes} minutes late)" if minutes is not None else ""
        title = "Late Arrival Charge Applied"
        message = f"A late arrival charge of {amount} has been applied for {day}{late}{escalation}."
    else:
        title = "Early Closure Charge Applied"
        message = f"An early closure charge of {amount} has been applied for {day}{escalation}."

    return NotificationRequest(user_id=charge.employee_id, title=title, message=message, type="attendance_charge")
