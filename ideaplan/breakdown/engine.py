"""
Breakdown engine: idea -> analysis -> tasks -> dependency graph -> timeline.

Stages run strictly in sequence. The finished BreakdownSession is written
once, after every stage succeeded; a failing stage propagates its own error
and leaves the previously stored session (if any) untouched. Runs for the
same idea are serialised, so the stored session is always one complete run.
"""

import logging
import time
import uuid
from datetime import datetime
from typing import Literal, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from ideaplan.clarifier.confidence import ConfidenceCalculator
from ideaplan.errors import ValidationError
from ideaplan.generator.base import ContentGenerator
from ideaplan.lib.config import PlannerConfig
from ideaplan.lib.constants import KIND_BREAKDOWN
from ideaplan.lib.locking import KeyedLocks, idea_lock
from ideaplan.lib.validate import require_idea_id, require_text
from ideaplan.store import SessionStore

from .analyzer import IdeaAnalyzer
from .decomposer import TaskDecomposer
from .dependencies import DependencyGraphBuilder
from .models import BreakdownSession
from .timeline import TimelineGenerator

logger = logging.getLogger(__name__)


class BreakdownOptions(BaseModel):
    """Caller-supplied planning options."""
    model_config = ConfigDict(extra="forbid")

    complexity: Optional[Literal["simple", "medium", "complex"]] = None
    team_size: Optional[int] = Field(default=None, ge=1)
    timeline_weeks: Optional[int] = Field(default=None, ge=1)
    constraints: list[str] = Field(default_factory=list)


def parse_options(options) -> BreakdownOptions:
    """Coerce None / dict / BreakdownOptions into BreakdownOptions.

    Raises:
        ValidationError: options don't fit the model
    """
    if options is None:
        return BreakdownOptions()
    if isinstance(options, BreakdownOptions):
        return options
    try:
        return BreakdownOptions.model_validate(options)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        path = ".".join(str(p) for p in first["loc"])
        raise ValidationError(f"options.{path}" if path else "options", first["msg"]) from None


class BreakdownEngine:
    def __init__(
        self,
        generator: Optional[ContentGenerator] = None,
        store: Optional[SessionStore] = None,
        config: Optional[PlannerConfig] = None,
        timeline: Optional[TimelineGenerator] = None,
    ):
        self.generator = generator
        self.store = store
        self.config = config or PlannerConfig()
        self.timeline = timeline
        self.calculator = ConfidenceCalculator(self.config)
        self._locks = KeyedLocks()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Build any collaborator that wasn't injected. Safe to call repeatedly."""
        if self._initialized:
            return

        if self.generator is None:
            from ideaplan.generator.claude import ClaudeContentGenerator
            from ideaplan.lib.agents_config import load_agents_config

            self.generator = ClaudeContentGenerator(load_agents_config(self.config.config_dir), self.config)
        self._resolve_store()
        if self.timeline is None:
            self.timeline = TimelineGenerator(self.config)

        self.analyzer = IdeaAnalyzer(self.generator, self.config)
        self.decomposer = TaskDecomposer(self.generator, self.config)
        self.graph_builder = DependencyGraphBuilder()
        self._initialized = True
        logger.debug(f"Breakdown engine initialized (store: {type(self.store).__name__})")

    def _resolve_store(self) -> SessionStore:
        """The injected store, else a JsonFileStore under DATA_DIR, else a MemoryStore."""
        if self.store is None:
            from ideaplan.store import JsonFileStore, MemoryStore

            if self.config.data_dir is not None:
                self.store = JsonFileStore(self.config.data_dir, self.config.lock_timeout)
            else:
                self.store = MemoryStore()
        return self.store

    def health_check(self) -> dict:
        return {"status": "healthy", "initialized": self._initialized}

    def start_breakdown(
        self,
        idea_id: str,
        refined_idea: str,
        user_responses: Optional[dict[str, str]] = None,
        options=None,
    ) -> BreakdownSession:
        """Run the full pipeline for an idea and store the result (replacing any previous one).

        Raises:
            ValidationError: bad idea id, idea text, responses or options
            GenerationError: a generation stage failed
            ConflictError: another breakdown of the same idea held the lock too long
        """
        require_idea_id(idea_id)
        require_text("refined_idea", refined_idea, self.config.max_idea_length)
        responses = self._check_responses(user_responses)
        opts = parse_options(options)
        self.initialize()

        with idea_lock(self._locks, idea_id, self.config.lock_timeout, self.store, KIND_BREAKDOWN):
            logger.info(f"[BREAKDOWN] {idea_id}: starting")
            started = time.monotonic()

            analysis = self.analyzer.analyze(refined_idea, responses, opts.model_dump())
            logger.info(f"[BREAKDOWN] {idea_id}: analysis done")
            tasks = self.decomposer.decompose(analysis)
            logger.info(f"[BREAKDOWN] {idea_id}: decomposition done")
            graph = self.graph_builder.build(tasks.tasks)
            timeline = self.timeline.generate_timeline(analysis, tasks, graph, {"team_size": opts.team_size})

            now = datetime.now()
            session = BreakdownSession(
                id=f"bd_{uuid.uuid4().hex[:12]}",
                idea_id=idea_id,
                analysis=analysis,
                tasks=tasks,
                dependencies=graph,
                timeline=timeline,
                status="completed",
                processing_time=round(time.monotonic() - started, 3),
                created_at=now,
                updated_at=now,
            )
            session.confidence = self.calculator.calculate_overall(session)

            self.store.upsert(KIND_BREAKDOWN, idea_id, session.to_dict())

        logger.info(
            f"[BREAKDOWN] {idea_id}: completed {session.id} "
            f"({len(tasks.tasks)} tasks, {timeline.total_weeks} weeks, confidence {session.confidence})"
        )
        return session

    def get_breakdown_session(self, idea_id: str) -> Optional[BreakdownSession]:
        """Stored session for idea_id. A plain lookup: no generator is built."""
        require_idea_id(idea_id)
        data = self._resolve_store().get(KIND_BREAKDOWN, idea_id)
        if data is None:
            return None
        return BreakdownSession.from_dict(data)

    def _check_responses(self, user_responses) -> dict[str, str]:
        if user_responses is None:
            return {}
        if not isinstance(user_responses, dict):
            raise ValidationError("user_responses", "must be a mapping of question id to answer")
        for key, value in user_responses.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValidationError("user_responses", "keys and answers must be strings")
            if len(value) > self.config.max_answer_length:
                raise ValidationError(
                    f"user_responses.{key}",
                    f"must be at most {self.config.max_answer_length} characters",
                )
        return dict(user_responses)
