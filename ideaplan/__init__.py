"""ideaplan: clarify a raw idea, then break it into a dated project plan."""

__version__ = "0.1.0"

from ideaplan.breakdown import BreakdownEngine, BreakdownOptions, BreakdownSession
from ideaplan.clarifier import ClarificationSession, ClarifierAgent, ConfidenceCalculator
from ideaplan.errors import ConflictError, GenerationError, NotFoundError, PlannerError, ValidationError
from ideaplan.lib.config import PlannerConfig, load_planner_config
from ideaplan.store import JsonFileStore, MemoryStore

__all__ = [
    "BreakdownEngine",
    "BreakdownOptions",
    "BreakdownSession",
    "ClarificationSession",
    "ClarifierAgent",
    "ConfidenceCalculator",
    "ConflictError",
    "GenerationError",
    "JsonFileStore",
    "MemoryStore",
    "NotFoundError",
    "PlannerConfig",
    "PlannerError",
    "ValidationError",
    "load_planner_config",
]
