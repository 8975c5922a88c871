"""
Task decomposition stage.

Each deliverable is broken into tasks by the generator. Task ids are made
unique across the whole decomposition, sibling dependencies are remapped
to the final ids, and repair_dependencies() removes anything that still
doesn't point at a real task.
"""

import logging
import math
from typing import Optional

from ideaplan.errors import GenerationError
from ideaplan.generator.base import ContentGenerator
from ideaplan.lib.config import PlannerConfig
from ideaplan.lib.validate import SchemaError, validate

from .analyzer import DEFAULT_COMPLEXITY, MAX_COMPLEXITY, MIN_COMPLEXITY, clamp, finite
from .models import Deliverable, IdeaAnalysis, Task, TaskDecomposition

logger = logging.getLogger(__name__)

STAGE = "decompose_tasks"
DEFAULT_SKILLS = ["General"]


def repair_dependencies(tasks: list[Task]) -> list[tuple[str, str]]:
    """Drop dangling, self and duplicate dependency ids in place.

    Returns the removed (task_id, dependency_id) pairs.
    """
    known = {t.id for t in tasks}
    removed = []

    for task in tasks:
        kept: list[str] = []
        for dep in task.dependencies:
            if dep == task.id or dep not in known or dep in kept:
                removed.append((task.id, dep))
                continue
            kept.append(dep)
        task.dependencies = kept

    for task_id, dep in removed:
        logger.warning(f"Dropped dependency {task_id} -> {dep}")
    return removed


def _valid_hours(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value) and value >= 0


class TaskDecomposer:
    def __init__(self, generator: ContentGenerator, config: Optional[PlannerConfig] = None):
        self.generator = generator
        self.config = config or PlannerConfig()

    def decompose(self, analysis: IdeaAnalysis) -> TaskDecomposition:
        """Break every deliverable into tasks.

        Raises:
            GenerationError: generator failed or returned an invalid payload
        """
        tasks: list[Task] = []
        used_ids: set[str] = set()

        for deliverable in analysis.deliverables:
            raw = self._generate(deliverable)
            tasks.extend(self._build_tasks(deliverable, raw, used_ids, start=len(tasks)))

        repair_dependencies(tasks)

        decomposition = TaskDecomposition(
            tasks=tasks,
            total_estimated_hours=sum(t.estimated_hours for t in tasks),
            confidence=round(analysis.overall_confidence * self.config.task_confidence_multiplier, 4),
        )
        logger.info(
            f"Decomposed {len(analysis.deliverables)} deliverables into {len(tasks)} tasks "
            f"({decomposition.total_estimated_hours:g}h)"
        )
        return decomposition

    def _generate(self, deliverable: Deliverable) -> list[dict]:
        try:
            raw = self.generator.generate_tasks(deliverable.to_dict())
        except GenerationError:
            logger.error(f"Task generation failed for deliverable {deliverable.title!r}")
            raise

        try:
            validate(raw, "tasks")
        except SchemaError as e:
            logger.error(f"Task payload for {deliverable.title!r} rejected: {e}")
            raise GenerationError(STAGE, str(e), details={"deliverable": deliverable.title}) from e
        return raw

    def _build_tasks(self, deliverable: Deliverable, raw: list[dict], used_ids: set[str], start: int) -> list[Task]:
        if not raw:
            logger.info(f"No tasks generated for {deliverable.title!r}, deriving one")
            raw = [{
                "title": f"Complete {deliverable.title}",
                "description": deliverable.description,
                "estimatedHours": deliverable.estimated_hours,
            }]

        for n, r in enumerate(raw, 1):
            finite(r.get("estimatedHours"), STAGE, f"{deliverable.title}: task {n} estimatedHours")
            finite(r.get("complexity"), STAGE, f"{deliverable.title}: task {n} complexity")

        # Tasks without usable hours split whatever the others leave over
        known_hours = sum(r["estimatedHours"] for r in raw if _valid_hours(r.get("estimatedHours")))
        unknown = [r for r in raw if not _valid_hours(r.get("estimatedHours"))]
        share = max(0.0, deliverable.estimated_hours - known_hours) / len(unknown) if unknown else 0.0

        local_ids: dict[str, str] = {}
        tasks = []
        for offset, r in enumerate(raw):
            task_id = self._assign_id(r.get("id"), start + offset + 1, used_ids)
            if r.get("id"):
                local_ids.setdefault(r["id"], task_id)

            hours = r.get("estimatedHours")
            complexity = r.get("complexity", DEFAULT_COMPLEXITY)
            tasks.append(Task(
                id=task_id,
                title=r["title"],
                description=r.get("description", ""),
                estimated_hours=float(hours) if _valid_hours(hours) else share,
                complexity=int(round(clamp(complexity, MIN_COMPLEXITY, MAX_COMPLEXITY))),
                required_skills=list(r.get("requiredSkills") or DEFAULT_SKILLS),
                dependencies=list(r.get("dependencies", [])),
                deliverable_id=deliverable.id,
            ))

        for task in tasks:
            task.dependencies = [local_ids.get(dep, dep) for dep in task.dependencies]
        return tasks

    @staticmethod
    def _assign_id(proposed: Optional[str], position: int, used_ids: set[str]) -> str:
        if proposed and proposed not in used_ids:
            task_id = proposed
        else:
            n = position
            while f"t_{n}" in used_ids:
                n += 1
            task_id = f"t_{n}"
        used_ids.add(task_id)
        return task_id
