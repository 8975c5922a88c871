"""
Content generator backed by an LLM CLI.

Each operation renders a prompt template from ideaplan/prompts/, runs the
stage command from agents.yaml (Claude CLI by default) and parses the JSON
it prints. Schema checks happen in the consuming stage, not here.
"""

import json
import logging
from typing import Optional

from ideaplan.errors import GenerationError
from ideaplan.lib.agents_config import AgentsConfig, get_stage_command
from ideaplan.lib.config import PlannerConfig
from ideaplan.lib.prompts import PromptError, build_section, render_prompt

from .claude_utils import parse_json_response, run_stage

logger = logging.getLogger(__name__)


class ClaudeContentGenerator:
    def __init__(
        self,
        agents_config: Optional[AgentsConfig] = None,
        config: Optional[PlannerConfig] = None,
    ):
        self.agents_config = agents_config or AgentsConfig()
        self.config = config or PlannerConfig()

    def generate_questions(self, idea_text: str) -> list[dict]:
        payload = self._run_json(
            "generate_questions",
            idea=idea_text,
            min_questions=self.config.min_questions,
            max_questions=self.config.max_questions,
        )
        # Some models wrap the list: {"questions": [...]}
        if isinstance(payload, dict) and isinstance(payload.get("questions"), list):
            payload = payload["questions"]
        if not isinstance(payload, list):
            raise GenerationError("generate_questions", f"expected a JSON array, got {type(payload).__name__}")
        return payload

    def analyze_idea(self, idea_text: str, answers: dict[str, str], options: dict) -> dict:
        answers_text = "\n".join(f"- {qid}: {answer}" for qid, answer in answers.items())
        payload = self._run_json(
            "analyze_idea",
            idea=idea_text,
            answers_section=build_section(answers_text, "## Clarification Answers"),
            options=json.dumps(options, indent=2, sort_keys=True),
        )
        if not isinstance(payload, dict):
            raise GenerationError("analyze_idea", f"expected a JSON object, got {type(payload).__name__}")
        return payload

    def generate_tasks(self, deliverable: dict) -> list[dict]:
        payload = self._run_json(
            "decompose_tasks",
            title=deliverable.get("title", ""),
            description=deliverable.get("description", ""),
            priority=deliverable.get("priority", ""),
            estimated_hours=deliverable.get("estimated_hours", ""),
        )
        if isinstance(payload, dict) and isinstance(payload.get("tasks"), list):
            payload = payload["tasks"]
        if not isinstance(payload, list):
            raise GenerationError("decompose_tasks", f"expected a JSON array, got {type(payload).__name__}")
        return payload

    def refine_idea(self, idea_text: str, qa_pairs: list[tuple[str, str]]) -> str:
        answers = "\n\n".join(f"Q: {q}\nA: {a}" for q, a in qa_pairs)
        return self._run("refine_idea", idea=idea_text, answers=answers).strip()

    # --- Internals ---

    def _run(self, stage: str, **prompt_vars) -> str:
        try:
            prompt = render_prompt(stage, **prompt_vars)
        except PromptError as e:
            raise GenerationError(stage, str(e)) from e

        command = get_stage_command(self.agents_config, stage, prompt)
        logger.debug(f"Running {stage}: {' '.join(command.cmd[:3])}")
        success, response = run_stage(command, prompt, timeout=self.config.generation_timeout)
        if not success:
            logger.error(f"{stage} failed: {response}")
            raise GenerationError(stage, response)
        return response

    def _run_json(self, stage: str, **prompt_vars):
        response = self._run(stage, **prompt_vars)
        try:
            return parse_json_response(response)
        except ValueError as e:
            raise GenerationError(stage, f"unparseable response: {e}") from e
