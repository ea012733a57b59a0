from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall
from .model import Employee
from .repository import EmployeeRepository


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=str(r["employee_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r.get("email"),
        department=r.get("department"),
        is_active=as_bool(r.get("is_active")),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, first_name, last_name, email, department, is_active
                FROM employees
                WHERE is_active=1
                ORDER BY employee_id
                """
            )
            return [_to_employee(r) for r in fetchall(cur)]
