"""
Confidence scoring.

A clarification session's confidence grows linearly with the share of
answered questions, from base_confidence up to max_confidence:

    min(max, base + (answered / total) * increment)

With the defaults (0.3 base, 0.6 increment, 0.9 max) a fully answered
session reaches exactly 0.9. A session with no questions scores
default_confidence.
"""

from typing import TYPE_CHECKING, Optional

from ideaplan.lib.config import PlannerConfig

if TYPE_CHECKING:
    from ideaplan.breakdown.models import BreakdownSession

# Fixed stage confidences for the overall breakdown score
GRAPH_CONFIDENCE = 0.8
TIMELINE_CONFIDENCE = 0.7

STAGE_WEIGHTS = {
    "analysis": 0.3,
    "tasks": 0.3,
    "dependencies": 0.2,
    "timeline": 0.2,
}


class ConfidenceCalculator:
    def __init__(self, config: Optional[PlannerConfig] = None):
        self.config = config or PlannerConfig()

    def calculate(self, answered_count: int, total_questions: int) -> float:
        """Confidence for answered_count of total_questions answered."""
        if total_questions <= 0:
            return self.config.default_confidence

        answered = max(0, min(answered_count, total_questions))
        ratio = answered / total_questions
        score = self.config.base_confidence + ratio * self.config.increment_per_answer
        # Rounded so a fully answered session lands exactly on 0.3 + 0.6
        return min(self.config.max_confidence, round(score, 4))

    def calculate_from_answers(self, answers: dict[str, str], total_questions: int) -> float:
        """Confidence from an answers map; blank answers don't count."""
        answered = sum(1 for value in answers.values() if value and value.strip())
        return self.calculate(answered, total_questions)

    def calculate_overall(self, session: "BreakdownSession") -> float:
        """Weighted confidence of a finished breakdown, rounded to 2 places.

        Stages missing from the session contribute nothing.
        """
        score = 0.0
        if session.analysis is not None:
            score += session.analysis.overall_confidence * STAGE_WEIGHTS["analysis"]
        if session.tasks is not None:
            score += session.tasks.confidence * STAGE_WEIGHTS["tasks"]
        if session.dependencies is not None:
            score += GRAPH_CONFIDENCE * STAGE_WEIGHTS["dependencies"]
        if session.timeline is not None:
            score += TIMELINE_CONFIDENCE * STAGE_WEIGHTS["timeline"]
        return round(score, 2)
