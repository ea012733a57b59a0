from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import AppraisalStatus, PerformanceBand


@dataclass(frozen=True)
class QuestionResponse:
    """One rating pair for one appraisal question, joined with its section."""

    question_id: str
    section_id: str
    section_name: str
    employee_rating: Optional[float] = None
    manager_rating: Optional[float] = None
    question_weight: Optional[float] = None
    section_weight: float = 1.0


@dataclass(frozen=True)
class SectionGroup:
    section_id: str
    section_name: str
    section_weight: float
    responses: tuple[QuestionResponse, ...]


@dataclass(frozen=True)
class SectionScore:
    section_id: str
    section_name: str
    raw_percentage: float
    capped_contribution: float
    cap: Optional[float]
    section_weight: float = 1.0
    is_noteworthy: bool = False

    def as_dict(self) -> dict:
        return {
            "sectionId": self.section_id,
            "sectionName": self.section_name,
            "rawPercentage": round(self.raw_percentage * 100, 2),
            "cappedContribution": round(self.capped_contribution, 2),
            "cap": self.cap,
            "weight": self.section_weight,
            "isNoteworthy": self.is_noteworthy,
        }


@dataclass(frozen=True)
class PerformanceResult:
    employee_id: str
    cycle_id: str
    overall_score: float
    performance_band: PerformanceBand
    base_score: float
    noteworthy_bonus: float
    section_scores: tuple[SectionScore, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "cycleId": self.cycle_id,
            "overallScore": self.overall_score,
            "performanceBand": self.performance_band.value,
            "baseScore": self.base_score,
            "noteworthyBonus": self.noteworthy_bonus,
            "sectionScores": [s.as_dict() for s in self.section_scores],
        }


@dataclass(frozen=True)
class Appraisal:
    appraisal_id: str
    employee_id: str
    cycle_id: Optional[str]
    # None when the stored status is not one this service knows.
    status: Optional[AppraisalStatus]
    noteworthy: Optional[str] = None
