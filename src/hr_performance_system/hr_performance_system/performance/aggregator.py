"""Performance score aggregation.

Turns the question responses of one appraisal into an overall 0-100 score:

1. responses are grouped by section and each section gets a raw percentage
   (weighted score over weighted 5-point maximum);
2. the percentage is scaled onto the section's cap (Financial 50, Behavioral 15, ...)
   or onto 100 for uncapped sections;
3. sections named in the appraisal's free-text ``noteworthy`` field earn a bonus
   of 10% of their contribution, at most 10 points in total;
4. the sum is clamped to 100 and mapped onto a performance band.

Everything here is pure; fetching and persisting happen in ``PerformanceService``.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..common.validators import require_rating
from ..core.constants import (
    DEFAULT_QUESTION_WEIGHT,
    MAX_OVERALL_SCORE,
    NOTEWORTHY_BONUS_CAP,
    NOTEWORTHY_BONUS_RATE,
    RATING_SCALE_MAX,
    SECTION_CAPS,
)
from ..core.enums import PerformanceBand
from ..core.exceptions import ValidationError
from .model import PerformanceResult, QuestionResponse, SectionGroup, SectionScore
from .scoring.base import RatingPolicy
from .scoring.manager_first import ManagerFirstRatingPolicy

_BANDS: tuple[tuple[float, PerformanceBand], ...] = (
    (91.0, PerformanceBand.EXCEPTIONAL),
    (81.0, PerformanceBand.EXCELLENT),
    (71.0, PerformanceBand.VERY_GOOD),
    (61.0, PerformanceBand.GOOD),
    (51.0, PerformanceBand.FAIR),
)


def group_by_section(responses: Iterable[QuestionResponse]) -> list[SectionGroup]:
    """Bucket responses by section id, keeping first-seen section order."""
    order: list[str] = []
    buckets: dict[str, list[QuestionResponse]] = {}
    heads: dict[str, QuestionResponse] = {}

    for r in responses:
        if r.section_id not in buckets:
            order.append(r.section_id)
            buckets[r.section_id] = []
            heads[r.section_id] = r
        buckets[r.section_id].append(r)

    return [
        SectionGroup(
            section_id=sid,
            section_name=heads[sid].section_name,
            section_weight=heads[sid].section_weight,
            responses=tuple(buckets[sid]),
        )
        for sid in order
    ]


def section_cap(section_name: str) -> Optional[float]:
    name = (section_name or "").lower()
    for key, cap in SECTION_CAPS:
        if key.lower() in name:
            return cap
    return None


def parse_noteworthy(noteworthy: Optional[str]) -> list[str]:
    """Comma-separated section name fragments, lowercased; blanks are dropped."""
    if not noteworthy:
        return []
    return [part.strip().lower() for part in noteworthy.split(",") if part.strip()]


def performance_band(score: float) -> PerformanceBand:
    for threshold, band in _BANDS:
        if score >= threshold:
            return band
    return PerformanceBand.POOR


def _question_weight(response: QuestionResponse) -> float:
    if response.question_weight is None:
        return DEFAULT_QUESTION_WEIGHT
    weight = float(response.question_weight)
    if weight < 0:
        raise ValidationError(f"Question {response.question_id} has a negative weight")
    return weight


class ScoreAggregator:
    def __init__(self, rating_policy: RatingPolicy | None = None):
        self._policy = rating_policy or ManagerFirstRatingPolicy()

    def raw_percentage(self, group: SectionGroup) -> float:
        total = 0.0
        maximum = 0.0
        for r in group.responses:
            require_rating(r.employee_rating, f"Employee rating for question {r.question_id}")
            require_rating(r.manager_rating, f"Manager rating for question {r.question_id}")
            weight = _question_weight(r)
            total += self._policy.score_for(r) * weight
            maximum += RATING_SCALE_MAX * weight

        if maximum <= 0:
            return 0.0
        return total / maximum

    def score_section(self, group: SectionGroup) -> SectionScore:
        raw = self.raw_percentage(group)
        cap = section_cap(group.section_name)
        ceiling = cap if cap is not None else MAX_OVERALL_SCORE
        contribution = min(raw, 1.0) * ceiling
        return SectionScore(
            section_id=group.section_id,
            section_name=group.section_name,
            raw_percentage=raw,
            capped_contribution=contribution,
            cap=cap,
            section_weight=float(group.section_weight),
        )

    @staticmethod
    def apply_noteworthy(
        sections: Sequence[SectionScore],
        noteworthy: Optional[str],
    ) -> tuple[list[SectionScore], float]:
        fragments = parse_noteworthy(noteworthy)
        if not fragments:
            return list(sections), 0.0

        marked: list[SectionScore] = []
        bonus = 0.0
        for s in sections:
            name = s.section_name.lower()
            if any(fragment in name for fragment in fragments):
                bonus += min(s.capped_contribution * NOTEWORTHY_BONUS_RATE, NOTEWORTHY_BONUS_CAP)
                marked.append(
                    SectionScore(
                        section_id=s.section_id,
                        section_name=s.section_name,
                        raw_percentage=s.raw_percentage,
                        capped_contribution=s.capped_contribution,
                        cap=s.cap,
                        section_weight=s.section_weight,
                        is_noteworthy=True,
                    )
                )
            else:
                marked.append(s)

        # The cap applies once across all noteworthy sections.
        return marked, min(bonus, NOTEWORTHY_BONUS_CAP)

    def aggregate(
        self,
        *,
        employee_id: str,
        cycle_id: str,
        responses: Sequence[QuestionResponse],
        noteworthy: Optional[str] = None,
    ) -> Optional[PerformanceResult]:
        """Score one appraisal; ``None`` means there is nothing to score yet."""
        if not employee_id:
            raise ValidationError("Employee is required")
        if not cycle_id:
            raise ValidationError(f"Appraisal for employee {employee_id} has no cycle")
        if not responses:
            return None

        sections = [self.score_section(g) for g in group_by_section(responses)]
        sections, bonus = self.apply_noteworthy(sections, noteworthy)

        base = sum(s.capped_contribution for s in sections)
        overall = round(min(MAX_OVERALL_SCORE, base + bonus), 2)

        return PerformanceResult(
            employee_id=str(employee_id),
            cycle_id=str(cycle_id),
            overall_score=overall,
            performance_band=performance_band(overall),
            base_score=round(base, 2),
            noteworthy_bonus=round(bonus, 2),
            section_scores=tuple(sections),
        )
