from __future__ import annotations

from typing import Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for the employee roster.

    Services depend on this interface, never on a concrete database.
    """

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError
