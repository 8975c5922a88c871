"""
Configuration loader for ideaplan.

Loads tunables from planner.env in the config directory. Every key is
optional; a missing file yields the defaults below.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import envparse

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "planner.env"


@dataclass
class PlannerConfig:
    """Tunables from planner.env"""
    # Confidence scoring
    default_confidence: float = 0.5     # Returned when a session has no questions
    base_confidence: float = 0.3
    increment_per_answer: float = 0.6   # Added in proportion to answered/total
    max_confidence: float = 0.9

    # Clarification
    complete_threshold: float = 0.9     # Confidence at which a session completes
    min_questions: int = 3
    max_questions: int = 10
    max_idea_length: int = 10000
    max_answer_length: int = 500

    # Breakdown
    hours_per_week: int = 40
    default_team_size: int = 1
    task_confidence_multiplier: float = 0.9

    # Collaborators
    generation_timeout: int = 300       # Seconds per generator call
    lock_timeout: float = 60.0          # Seconds to wait for a per-idea lock
    data_dir: Optional[Path] = None     # None -> in-memory store
    config_dir: Optional[Path] = None   # Where agents.yaml is looked up


def load_planner_config(config_dir: Optional[Path]) -> PlannerConfig:
    """Load planner.env and return PlannerConfig.

    If config_dir is None or the file doesn't exist, returns defaults.
    """
    if config_dir is None:
        return PlannerConfig()

    config_path = config_dir / CONFIG_FILENAME
    if not config_path.exists():
        return PlannerConfig(config_dir=config_dir)

    env = envparse.load_env(str(config_path))
    defaults = PlannerConfig()

    max_confidence = envparse.get_float(env, "CONFIDENCE_MAX", defaults.max_confidence, 0.0, 1.0)
    base_confidence = envparse.get_float(env, "CONFIDENCE_BASE", defaults.base_confidence, 0.0, 1.0)
    if base_confidence > max_confidence:
        logger.warning(
            f"CONFIDENCE_BASE {base_confidence} exceeds CONFIDENCE_MAX {max_confidence}, "
            "using defaults"
        )
        base_confidence, max_confidence = defaults.base_confidence, defaults.max_confidence

    min_questions = envparse.get_int(env, "MIN_QUESTIONS", defaults.min_questions, 1)
    max_questions = envparse.get_int(env, "MAX_QUESTIONS", defaults.max_questions, 1)
    if min_questions > max_questions:
        logger.warning(f"MIN_QUESTIONS {min_questions} > MAX_QUESTIONS {max_questions}, using defaults")
        min_questions, max_questions = defaults.min_questions, defaults.max_questions

    data_dir = env.get("DATA_DIR", "")
    if data_dir:
        data_dir = Path(data_dir)
        if not data_dir.is_absolute():
            data_dir = config_dir / data_dir

    return PlannerConfig(
        default_confidence=envparse.get_float(env, "CONFIDENCE_DEFAULT", defaults.default_confidence, 0.0, 1.0),
        base_confidence=base_confidence,
        increment_per_answer=envparse.get_float(env, "CONFIDENCE_INCREMENT", defaults.increment_per_answer, 0.0, 1.0),
        max_confidence=max_confidence,
        complete_threshold=envparse.get_float(env, "CLARIFY_COMPLETE_THRESHOLD", defaults.complete_threshold, 0.0, 1.0),
        min_questions=min_questions,
        max_questions=max_questions,
        max_idea_length=envparse.get_int(env, "MAX_IDEA_LENGTH", defaults.max_idea_length, 1),
        max_answer_length=envparse.get_int(env, "MAX_ANSWER_LENGTH", defaults.max_answer_length, 1),
        hours_per_week=envparse.get_int(env, "HOURS_PER_WEEK", defaults.hours_per_week, 1),
        default_team_size=envparse.get_int(env, "DEFAULT_TEAM_SIZE", defaults.default_team_size, 1),
        task_confidence_multiplier=envparse.get_float(
            env, "TASK_CONFIDENCE_MULTIPLIER", defaults.task_confidence_multiplier, 0.0, 1.0
        ),
        generation_timeout=envparse.get_int(env, "GENERATION_TIMEOUT", defaults.generation_timeout, 1),
        lock_timeout=envparse.get_float(env, "LOCK_TIMEOUT", defaults.lock_timeout, 0.0),
        data_dir=data_dir or None,
        config_dir=config_dir,
    )
