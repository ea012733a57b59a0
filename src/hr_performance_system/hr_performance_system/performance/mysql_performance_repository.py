from __future__ import annotations

import json
import logging
from typing import Iterable, Optional, Sequence

from ..core.enums import AppraisalStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, load_json
from .model import Appraisal, PerformanceResult, QuestionResponse
from .repository import PerformanceRepository

logger = logging.getLogger(__name__)


def _to_appraisal(r: dict) -> Appraisal:
    status = AppraisalStatus.parse(r.get("status"))
    if status is None:
        logger.warning("Appraisal %s has unknown status %r", r.get("appraisal_id"), r.get("status"))
    return Appraisal(
        appraisal_id=str(r["appraisal_id"]),
        employee_id=str(r["employee_id"]),
        cycle_id=str(r["cycle_id"]) if r.get("cycle_id") else None,
        status=status,
        noteworthy=r.get("noteworthy"),
    )


class MySQLPerformanceRepository(PerformanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_appraisal(self, *, employee_id: str, cycle_id: str) -> Optional[Appraisal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT appraisal_id, employee_id, cycle_id, status, noteworthy
                FROM appraisals
                WHERE employee_id=%s AND cycle_id=%s
                LIMIT 1
                """,
                (employee_id, cycle_id),
            )
            r = fetchone(cur)
            return _to_appraisal(r) if r else None

    def list_appraisals(self, *, statuses: Iterable[AppraisalStatus]) -> Sequence[Appraisal]:
        values = [s.value for s in statuses]
        if not values:
            return []
        placeholders = ",".join(["%s"] * len(values))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT appraisal_id, employee_id, cycle_id, status, noteworthy
                FROM appraisals
                WHERE status IN ({placeholders})
                ORDER BY employee_id
                """,
                tuple(values),
            )
            return [_to_appraisal(r) for r in fetchall(cur)]

    def get_responses(self, appraisal_id: str) -> Sequence[QuestionResponse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    ar.question_id, ar.emp_rating, ar.mgr_rating,
                    q.weight AS question_weight,
                    s.section_id, s.name AS section_name, s.weight AS section_weight
                FROM appraisal_responses ar
                JOIN appraisal_questions q ON q.question_id = ar.question_id
                JOIN appraisal_question_sections s ON s.section_id = q.section_id
                WHERE ar.appraisal_id=%s
                ORDER BY s.section_id, ar.question_id
                """,
                (appraisal_id,),
            )
            return [
                QuestionResponse(
                    question_id=str(r["question_id"]),
                    section_id=str(r["section_id"]),
                    section_name=r["section_name"],
                    employee_rating=as_float(r.get("emp_rating")),
                    manager_rating=as_float(r.get("mgr_rating")),
                    question_weight=as_float(r.get("question_weight")),
                    section_weight=as_float(r.get("section_weight"), 1.0),
                )
                for r in fetchall(cur)
            ]

    def upsert_result(self, result: PerformanceResult) -> bool:
        payload = json.dumps(
            {
                "sections": [s.as_dict() for s in result.section_scores],
                "baseScore": result.base_score,
                "noteworthyBonus": result.noteworthy_bonus,
            }
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO performance_analytics(employee_id, cycle_id, overall_score, performance_band, section_scores)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    overall_score=VALUES(overall_score),
                    performance_band=VALUES(performance_band),
                    section_scores=VALUES(section_scores)
                """,
                (
                    result.employee_id,
                    result.cycle_id,
                    result.overall_score,
                    result.performance_band.value,
                    payload,
                ),
            )
            # rowcount is 0 when an identical row is re-written, so it cannot signal failure.
            return True

    def get_result(self, *, employee_id: str, cycle_id: str) -> Optional[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, cycle_id, overall_score, performance_band, section_scores
                FROM performance_analytics
                WHERE employee_id=%s AND cycle_id=%s
                """,
                (employee_id, cycle_id),
            )
            r = fetchone(cur)
            if not r:
                return None

        breakdown = load_json(r.get("section_scores"), {})
        return {
            "employeeId": str(r["employee_id"]),
            "cycleId": str(r["cycle_id"]),
            "overallScore": as_float(r["overall_score"]),
            "performanceBand": r["performance_band"],
            "baseScore": as_float(breakdown.get("baseScore")),
            "noteworthyBonus": as_float(breakdown.get("noteworthyBonus"), 0.0),
            "sectionScores": list(breakdown.get("sections") or []),
        }
