from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AppraisalStatus
from .model import Appraisal, PerformanceResult, QuestionResponse


class PerformanceRepository(Protocol):
    def get_appraisal(self, *, employee_id: str, cycle_id: str) -> Optional[Appraisal]:
        raise NotImplementedError

    def list_appraisals(self, *, statuses: Iterable[AppraisalStatus]) -> Sequence[Appraisal]:
        raise NotImplementedError

    def get_responses(self, appraisal_id: str) -> Sequence[QuestionResponse]:
        raise NotImplementedError

    def upsert_result(self, result: PerformanceResult) -> bool:
        """Replace any stored result for (employee_id, cycle_id)."""

        raise NotImplementedError

    def get_result(self, *, employee_id: str, cycle_id: str) -> Optional[dict]:
        raise NotImplementedError
