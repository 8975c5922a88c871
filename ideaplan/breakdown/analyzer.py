"""
Idea analysis stage.

Asks the generator for objectives, deliverables, complexity, scope and
risks, checks the payload against schemas/idea_analysis.schema.json and
normalises it into an IdeaAnalysis. No retries here: a failed or malformed
generation is a GenerationError for the caller to handle.
"""

import logging
import math
from typing import Optional

from ideaplan.errors import GenerationError
from ideaplan.generator.base import ContentGenerator
from ideaplan.lib.config import PlannerConfig
from ideaplan.lib.validate import SchemaError, validate

from .models import Complexity, Deliverable, IdeaAnalysis, Objective, Scope

logger = logging.getLogger(__name__)

STAGE = "analyze_idea"

MIN_COMPLEXITY = 1
MAX_COMPLEXITY = 10
DEFAULT_COMPLEXITY = 5
DEFAULT_SCOPE_SIZE = "medium"
DEFAULT_ESTIMATED_WEEKS = 8
DEFAULT_OVERALL_CONFIDENCE = 0.7


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def finite(value, stage: str, field: str):
    """Return value unchanged, or raise GenerationError if it is an infinite or NaN number.

    json.loads turns 1e999 into inf, which the schemas accept as a number.
    """
    if isinstance(value, float) and not math.isfinite(value):
        raise GenerationError(stage, f"{field} is not a finite number: {value!r}")
    return value


def complexity_level(score: int) -> str:
    """simple (<= 3), medium (<= 7), complex (> 7)."""
    if score <= 3:
        return "simple"
    if score <= 7:
        return "medium"
    return "complex"


class IdeaAnalyzer:
    def __init__(self, generator: ContentGenerator, config: Optional[PlannerConfig] = None):
        self.generator = generator
        self.config = config or PlannerConfig()

    def analyze(self, idea_text: str, answers: dict[str, str], options: Optional[dict] = None) -> IdeaAnalysis:
        """Turn an idea plus its clarification answers into an IdeaAnalysis.

        Raises:
            GenerationError: generator failed or returned an invalid payload
        """
        options = options or {}
        try:
            raw = self.generator.analyze_idea(idea_text, answers, options)
        except GenerationError:
            logger.error("Idea analysis generation failed")
            raise

        try:
            validate(raw, "idea_analysis")
        except SchemaError as e:
            logger.error(f"Idea analysis payload rejected: {e}")
            raise GenerationError(STAGE, str(e), details={"path": e.path}) from e

        analysis = self._normalize(raw, options)
        logger.info(
            f"Analyzed idea: {len(analysis.deliverables)} deliverables, "
            f"complexity {analysis.complexity.score} ({analysis.complexity.level})"
        )
        return analysis

    def _normalize(self, raw: dict, options: dict) -> IdeaAnalysis:
        def number(value, field: str) -> float:
            return float(finite(value, STAGE, field))

        overall = clamp(number(raw.get("overallConfidence", DEFAULT_OVERALL_CONFIDENCE), "overallConfidence"), 0.0, 1.0)

        raw_complexity = raw.get("complexity") or {}
        score = int(round(clamp(
            number(raw_complexity.get("score", DEFAULT_COMPLEXITY), "complexity.score"),
            MIN_COMPLEXITY,
            MAX_COMPLEXITY,
        )))
        complexity = Complexity(
            score=score,
            factors=list(raw_complexity.get("factors", [])),
            level=complexity_level(score),
        )

        raw_scope = raw.get("scope") or {}
        team_size = (
            finite(raw_scope.get("teamSize"), STAGE, "scope.teamSize")
            or options.get("team_size")
            or self.config.default_team_size
        )
        scope = Scope(
            size=raw_scope.get("size", DEFAULT_SCOPE_SIZE),
            estimated_weeks=int(number(raw_scope.get("estimatedWeeks", DEFAULT_ESTIMATED_WEEKS), "scope.estimatedWeeks")),
            team_size=int(team_size),
        )

        deliverables = []
        for i, d in enumerate(raw["deliverables"], 1):
            title = d["title"].strip()
            if not title:
                raise GenerationError(STAGE, f"deliverable {i} has a blank title")
            deliverables.append(Deliverable(
                id=f"d_{i}",
                title=title,
                description=d.get("description", ""),
                priority=finite(d.get("priority", i), STAGE, f"deliverables.{i}.priority"),
                estimated_hours=number(d["estimatedHours"], f"deliverables.{i}.estimatedHours"),
                confidence=clamp(number(d.get("confidence", overall), f"deliverables.{i}.confidence"), 0.0, 1.0),
                depends_on=list(d.get("dependsOn", [])),
            ))

        objectives = [
            Objective(
                title=o["title"],
                description=o.get("description", ""),
                confidence=clamp(number(o.get("confidence", overall), "objectives.confidence"), 0.0, 1.0),
            )
            for o in raw.get("objectives", [])
        ]

        risks = []
        for r in raw.get("riskFactors", []):
            risks.append(r["factor"] if isinstance(r, dict) else r)

        return IdeaAnalysis(
            objectives=objectives,
            deliverables=deliverables,
            complexity=complexity,
            scope=scope,
            risk_factors=risks,
            success_criteria=list(raw.get("successCriteria", [])),
            overall_confidence=overall,
        )
