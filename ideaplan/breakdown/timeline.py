"""
Timeline stage.

Turns the task estimate into a dated plan:

    total_weeks = max(1, ceil(total_hours / (hours_per_week * team_size)))

split into three contiguous phases at 25% and 80% of the calendar. Tasks
are bucketed into phases by position in the decomposition (not by
deliverable), deliverables by priority order with any beyond the third
landing in the last phase. Each deliverable gets one milestone dated at
the end of its phase.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Optional

from ideaplan.errors import ValidationError
from ideaplan.lib.config import PlannerConfig

from .models import DependencyGraph, IdeaAnalysis, Milestone, Phase, TaskDecomposition, Timeline

logger = logging.getLogger(__name__)

PHASE_NAMES = ["Planning & Design", "Development", "Testing & Deployment"]

# Cumulative percent of the calendar (and of the task list) at each phase end
PHASE_BOUNDARIES = [25, 80, 100]


class TimelineGenerator:
    def __init__(
        self,
        config: Optional[PlannerConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config or PlannerConfig()
        self.clock = clock

    def generate_timeline(
        self,
        analysis: IdeaAnalysis,
        tasks: TaskDecomposition,
        graph: DependencyGraph,
        options: Optional[dict] = None,
    ) -> Timeline:
        """
        Raises:
            ValidationError: team_size is not a positive integer, there are no tasks,
                or the total hours can't be scheduled
        """
        team_size = self._team_size(options or {})
        if not tasks.tasks:
            raise ValidationError("tasks", "cannot build a timeline from an empty task set")

        total_hours = tasks.total_estimated_hours
        if not math.isfinite(total_hours):
            raise ValidationError("tasks", f"total estimated hours is not finite: {total_hours!r}")

        capacity = self.config.hours_per_week * team_size
        total_weeks = max(1, math.ceil(total_hours / capacity))
        start = self.clock()
        try:
            end = start + timedelta(weeks=total_weeks)
        except OverflowError as e:
            raise ValidationError("tasks", f"{total_weeks} weeks runs past the last representable date") from e

        phases = self._phases(analysis, tasks, start, end, total_weeks)
        milestones = self._milestones(analysis, phases)

        logger.info(
            f"Timeline: {total_weeks} weeks for {tasks.total_estimated_hours:g}h "
            f"with team of {team_size}, {len(milestones)} milestones"
        )
        return Timeline(
            start_date=start,
            end_date=end,
            total_weeks=total_weeks,
            phases=phases,
            milestones=milestones,
            critical_path=list(graph.critical_path),
            resource_allocation={"default": team_size},
        )

    def _team_size(self, options: dict) -> int:
        team_size = options.get("team_size")
        if team_size is None:
            return self.config.default_team_size
        if isinstance(team_size, bool) or not isinstance(team_size, int) or team_size <= 0:
            raise ValidationError("team_size", f"must be a positive integer (got {team_size!r})")
        return team_size

    @staticmethod
    def _phases(
        analysis: IdeaAnalysis,
        tasks: TaskDecomposition,
        start: datetime,
        end: datetime,
        total_weeks: int,
    ) -> list[Phase]:
        task_ids = tasks.task_ids()
        ordered = sorted(analysis.deliverables, key=lambda d: d.priority)

        phases = []
        phase_start = start
        task_start = 0
        for i, (name, percent) in enumerate(zip(PHASE_NAMES, PHASE_BOUNDARIES)):
            last = i == len(PHASE_NAMES) - 1
            phase_end = end if last else start + timedelta(weeks=total_weeks * percent / 100)
            task_end = len(task_ids) if last else -(-len(task_ids) * percent // 100)
            deliverables = [
                d.title for j, d in enumerate(ordered)
                if min(j, len(PHASE_NAMES) - 1) == i
            ]
            phases.append(Phase(
                name=name,
                start_date=phase_start,
                end_date=phase_end,
                tasks=task_ids[task_start:task_end],
                deliverables=deliverables,
            ))
            phase_start, task_start = phase_end, task_end
        return phases

    @staticmethod
    def _milestones(analysis: IdeaAnalysis, phases: list[Phase]) -> list[Milestone]:
        ordered = sorted(analysis.deliverables, key=lambda d: d.priority)
        ids: dict[str, str] = {}
        for i, d in enumerate(ordered, 1):
            ids.setdefault(d.title, f"m_{i}")

        milestones = []
        for i, d in enumerate(ordered):
            phase = phases[min(i, len(phases) - 1)]
            deps = [ids[title] for title in d.depends_on if title in ids and title != d.title]
            milestones.append(Milestone(id=f"m_{i + 1}", title=d.title, date=phase.end_date, dependencies=deps))
        return milestones
