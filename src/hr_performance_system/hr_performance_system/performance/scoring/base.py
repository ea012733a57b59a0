from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import QuestionResponse


class RatingPolicy(ABC):
    """Strategy Pattern: how a response's rating pair becomes one score."""

    @abstractmethod
    def score_for(self, response: QuestionResponse) -> float:
        raise NotImplementedError
