from __future__ import annotations

from ..model import QuestionResponse
from .base import RatingPolicy


class BlendedRatingPolicy(RatingPolicy):
    """Weighted blend of manager and self ratings when both exist."""

    def __init__(self, manager_share: float = 0.7):
        if not 0 <= manager_share <= 1:
            raise ValueError("manager_share must be between 0 and 1")
        self._manager_share = float(manager_share)

    def score_for(self, response: QuestionResponse) -> float:
        mgr = response.manager_rating
        emp = response.employee_rating
        if mgr is not None and emp is not None:
            return float(mgr) * self._manager_share + float(emp) * (1 - self._manager_share)
        if mgr is not None:
            return float(mgr)
        if emp is not None:
            return float(emp)
        return 0.0
