from __future__ import annotations

import logging
from typing import Protocol

from .model import NotificationRequest

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    def send(self, request: NotificationRequest) -> None:
        raise NotImplementedError


def notify_quietly(sender: NotificationSender, request: NotificationRequest) -> bool:
    """Send a notification without letting a delivery failure undo the caller's work."""
    try:
        sender.send(request)
        return True
    except Exception:
        logger.exception("Failed to enqueue notification %r for user %s", request.title, request.user_id)
        return False
