from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..core.constants import DEFAULT_MAX_REPORTED_ERRORS
from ..core.enums import SCORABLE_APPRAISAL_STATUSES, Role
from ..core.exceptions import AuthorizationError, PersistenceError, ValidationError
from .aggregator import ScoreAggregator
from .model import Appraisal, PerformanceResult
from .repository import PerformanceRepository

logger = logging.getLogger(__name__)

ADMIN_ROLES = frozenset({Role.ADMIN, Role.HR})


@dataclass
class RecalculationReport:
    success: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "success": self.success,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }


class PerformanceService:
    def __init__(
        self,
        performance: PerformanceRepository,
        *,
        aggregator: Optional[ScoreAggregator] = None,
        max_reported_errors: int = DEFAULT_MAX_REPORTED_ERRORS,
    ):
        self._performance = performance
        self._aggregator = aggregator or ScoreAggregator()
        self._max_errors = int(max_reported_errors)

    def _score_appraisal(self, appraisal: Appraisal) -> Optional[PerformanceResult]:
        responses = self._performance.get_responses(appraisal.appraisal_id)
        return self._aggregator.aggregate(
            employee_id=appraisal.employee_id,
            cycle_id=appraisal.cycle_id,
            responses=responses,
            noteworthy=appraisal.noteworthy,
        )

    def calculate_performance_score(self, employee_id: str, cycle_id: str) -> Optional[PerformanceResult]:
        """Score one employee's appraisal; ``None`` when it is not computable yet."""
        if not employee_id or not cycle_id:
            raise ValidationError("Employee and cycle are required")

        appraisal = self._performance.get_appraisal(employee_id=str(employee_id), cycle_id=str(cycle_id))
        if not appraisal:
            return None
        return self._score_appraisal(appraisal)

    def save_performance_analytics(self, result: PerformanceResult) -> None:
        try:
            ok = self._performance.upsert_result(result)
        except Exception as e:
            raise PersistenceError(
                f"Could not save performance result for {result.employee_id}/{result.cycle_id}: {e}"
            ) from e
        if not ok:
            raise PersistenceError(f"Performance result for {result.employee_id}/{result.cycle_id} was not saved")

    def calculate_and_save(self, *, current_role: Role, employee_id: str, cycle_id: str) -> Optional[PerformanceResult]:
        if current_role not in ADMIN_ROLES:
            raise AuthorizationError("Only HR can recalculate performance scores")

        result = self.calculate_performance_score(employee_id, cycle_id)
        if result is not None:
            self.save_performance_analytics(result)
            logger.info(
                "Performance score for %s/%s: %.2f (%s)",
                employee_id,
                cycle_id,
                result.overall_score,
                result.performance_band.value,
            )
        return result

    def get_saved_result(self, *, current_role: Role, employee_id: str, cycle_id: str) -> Optional[dict]:
        if current_role not in ADMIN_ROLES:
            raise AuthorizationError("Only HR can view performance analytics")
        return self._performance.get_result(employee_id=str(employee_id), cycle_id=str(cycle_id))

    def recalculate_all(self, *, current_role: Role) -> RecalculationReport:
        """Recompute every scorable appraisal; one bad record never blocks the rest."""
        if current_role not in ADMIN_ROLES:
            raise AuthorizationError("Only HR can recalculate performance scores")

        appraisals = self._performance.list_appraisals(statuses=SCORABLE_APPRAISAL_STATUSES)
        logger.info("Recalculating performance scores for %d appraisals", len(appraisals))

        report = RecalculationReport()
        for appraisal in appraisals:
            try:
                result = self._score_appraisal(appraisal)
                if result is None:
                    report.skipped += 1
                    continue
                self.save_performance_analytics(result)
                report.success += 1
            except Exception as e:
                logger.exception("Recalculation failed for employee %s", appraisal.employee_id)
                report.failed += 1
                if len(report.errors) < self._max_errors:
                    report.errors.append(f"Employee {appraisal.employee_id}: {e}")

        logger.info(
            "Recalculation complete. Success: %d, Failed: %d, Skipped: %d",
            report.success,
            report.failed,
            report.skipped,
        )
        return report
