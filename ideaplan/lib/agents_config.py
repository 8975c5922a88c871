"""
Generator command configuration.

Loads agents.yaml to determine which CLI command runs each generation stage.
If no config file exists, every stage uses the Claude CLI in print mode with
a JSON envelope.

Each stage maps to a command template. If the template contains {prompt}
the rendered prompt is passed as a CLI argument; otherwise it is piped via
stdin (the default, which avoids argv length limits for long ideas).

Example agents.yaml:

    stages:
      analyze_idea: claude -p --model opus --output-format json
      decompose_tasks: my-llm --json {prompt}
"""

import logging
import shlex
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

AGENTS_FILENAME = "agents.yaml"

# Ordered by workflow sequence.
DEFAULT_STAGE_COMMANDS = {
    # Clarification
    "generate_questions": "claude -p --output-format json",
    # Idea text -> clarifying questions JSON

    "refine_idea": "claude -p --output-format json",
    # Idea + answers -> refined idea prose

    # Breakdown
    "analyze_idea": "claude -p --output-format json",
    # Idea + answers -> idea analysis JSON

    "decompose_tasks": "claude -p --output-format json",
    # One deliverable -> task list JSON
}


@dataclass
class AgentsConfig:
    """Generator stage commands from agents.yaml."""
    stages: dict[str, str] = field(default_factory=lambda: DEFAULT_STAGE_COMMANDS.copy())


def load_agents_config(config_dir: Optional[Path]) -> AgentsConfig:
    """Load agents.yaml and return AgentsConfig.

    If config_dir is None or file doesn't exist, returns defaults.
    """
    if config_dir is None:
        return AgentsConfig()

    config_path = config_dir / AGENTS_FILENAME
    if not config_path.exists():
        return AgentsConfig()

    try:
        data = yaml.safe_load(config_path.read_text())
        stages = DEFAULT_STAGE_COMMANDS.copy()
        if isinstance(data, dict) and isinstance(data.get("stages"), dict):
            unknown = set(data["stages"]) - set(DEFAULT_STAGE_COMMANDS)
            if unknown:
                logger.warning(f"Ignoring unknown stages in {config_path}: {sorted(unknown)}")
            stages.update({k: v for k, v in data["stages"].items() if k in DEFAULT_STAGE_COMMANDS})
        return AgentsConfig(stages=stages)
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return AgentsConfig()


@dataclass
class StageCommand:
    """Result of building a stage command."""
    cmd: list[str]  # Command ready for subprocess
    prompt_via_stdin: bool  # True if prompt should be passed via stdin
    output_format: str | None  # "json" if --output-format json, else None

    def get_stdin_input(self, prompt: str) -> str | None:
        """Return prompt if it should be passed via stdin, else None."""
        return prompt if self.prompt_via_stdin else None


def get_stage_command(config: AgentsConfig, stage: str, prompt: str) -> StageCommand:
    """Build command list for a stage.

    Raises:
        ValueError: If stage is unknown.

    Example:
        >>> result = get_stage_command(AgentsConfig(), "analyze_idea", "...")
        >>> result.cmd
        ['claude', '-p', '--output-format', 'json']
        >>> result.prompt_via_stdin
        True
    """
    if stage not in config.stages:
        raise ValueError(f"Unknown stage: {stage}")

    cmd_template = config.stages[stage]
    prompt_via_stdin = "{prompt}" not in cmd_template

    # Substitute a placeholder so shlex never sees the prompt's quotes
    cmd = shlex.split(cmd_template.replace("{prompt}", "__PROMPT_PLACEHOLDER__"))

    output_format = None
    for i, part in enumerate(cmd):
        if part == "--output-format" and i + 1 < len(cmd):
            output_format = cmd[i + 1]
            break
        if part.startswith("--output-format="):
            output_format = part.split("=", 1)[1]
            break

    if not prompt_via_stdin:
        cmd = [prompt if arg == "__PROMPT_PLACEHOLDER__" else arg for arg in cmd]

    return StageCommand(cmd=cmd, prompt_via_stdin=prompt_via_stdin, output_format=output_format)


def get_stage_binary(config: AgentsConfig, stage: str) -> str:
    """Get the binary name for a stage (first element of command)."""
    if stage not in config.stages:
        raise ValueError(f"Unknown stage: {stage}")
    parts = shlex.split(config.stages[stage])
    return parts[0] if parts else ""


def missing_binaries(config: AgentsConfig) -> dict[str, list[str]]:
    """Return {binary: [stages]} for every stage binary not found in PATH."""
    binary_to_stages: dict[str, list[str]] = {}
    for stage in config.stages:
        binary = get_stage_binary(config, stage)
        binary_to_stages.setdefault(binary, []).append(stage)

    return {
        binary: stages
        for binary, stages in binary_to_stages.items()
        if shutil.which(binary) is None
    }
