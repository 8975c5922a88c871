"""Prefect flow for running a breakdown.

run_breakdown() is the plain function; breakdown_flow wraps it for
observability when a Prefect server is configured. Generation failures
are retryable, so the breakdown task retries once; validation failures
are not and fail the flow immediately.
"""

from pathlib import Path
from typing import Optional

from prefect import flow, get_run_logger, task
from prefect.cache_policies import NO_CACHE
from pydantic import BaseModel, Field

from ideaplan.breakdown.engine import BreakdownEngine, BreakdownOptions
from ideaplan.errors import PlannerError
from ideaplan.lib.config import load_planner_config


class BreakdownRequest(BaseModel):
    """Input schema for the breakdown flow."""
    idea_id: str
    refined_idea: str
    user_responses: dict[str, str] = Field(default_factory=dict)
    options: BreakdownOptions = Field(default_factory=BreakdownOptions)


def run_breakdown(engine: BreakdownEngine, request: BreakdownRequest) -> dict:
    """Run one breakdown and return the stored session as a dict."""
    session = engine.start_breakdown(
        request.idea_id,
        request.refined_idea,
        request.user_responses,
        request.options,
    )
    return session.to_dict()


def _retry_generation_errors(task, task_run, state) -> bool:
    """Retry only errors the engine marks retryable."""
    error = state.result(raise_on_failure=False)
    return isinstance(error, PlannerError) and error.retryable


@task(
    retries=1,
    retry_delay_seconds=10,
    retry_condition_fn=_retry_generation_errors,
    cache_policy=NO_CACHE,  # Engine holds locks and isn't hashable
    name="breakdown",
    description="Analyze, decompose and schedule an idea",
)
def task_breakdown(engine: BreakdownEngine, request: BreakdownRequest) -> dict:
    return run_breakdown(engine, request)


@flow(name="idea_breakdown")
def breakdown_flow(request: BreakdownRequest, config_dir: Optional[str] = None) -> dict:
    """Build an engine from config_dir (planner.env, agents.yaml) and run one breakdown."""
    log = get_run_logger()
    log.info(f"Starting breakdown flow: {request.idea_id}")

    config = load_planner_config(Path(config_dir) if config_dir else None)
    engine = BreakdownEngine(config=config)
    result = task_breakdown(engine, request)

    log.info(f"Breakdown {result['id']} stored for {request.idea_id}")
    return result
