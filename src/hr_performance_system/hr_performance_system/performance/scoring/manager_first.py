from __future__ import annotations

from ..model import QuestionResponse
from .base import RatingPolicy


class ManagerFirstRatingPolicy(RatingPolicy):
    """Manager rating supersedes self-assessment once given; nothing rated scores 0."""

    def score_for(self, response: QuestionResponse) -> float:
        if response.manager_rating is not None:
            return float(response.manager_rating)
        if response.employee_rating is not None:
            return float(response.employee_rating)
        return 0.0
