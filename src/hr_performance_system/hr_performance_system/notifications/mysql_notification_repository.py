from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import NotificationRequest
from .repository import NotificationSender


class MySQLNotificationSender(NotificationSender):
    """Queues notifications as rows; a push worker picks them up later."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def send(self, request: NotificationRequest) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, type, title, message)
                VALUES(%s,%s,%s,%s)
                """,
                (request.user_id, request.type, request.title, request.message),
            )
