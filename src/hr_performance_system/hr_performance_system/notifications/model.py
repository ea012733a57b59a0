from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationRequest:
    """Fire-and-forget message for one user; delivery happens elsewhere."""

    user_id: str
    title: str
    message: str
    type: str = "attendance_charge"
