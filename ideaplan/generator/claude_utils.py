"""
Shared CLI invocation utilities for the content generator.
"""

import json
import os
import re
import subprocess

from ideaplan.lib.agents_config import StageCommand


def run_stage(command: StageCommand, prompt: str, timeout: int = 300) -> tuple[bool, str]:
    """Run a stage command with a prompt and return (success, response).

    When the command asked for --output-format json, the "result" field of
    the JSON envelope is returned; otherwise raw stdout.
    """
    # Remove ANTHROPIC_API_KEY so Claude uses OAuth
    env = {k: v for k, v in os.environ.items() if k != "ANTHROPIC_API_KEY"}
    binary = command.cmd[0] if command.cmd else "(empty command)"

    try:
        result = subprocess.run(
            command.cmd,
            input=command.get_stdin_input(prompt),
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )
    except subprocess.TimeoutExpired:
        return False, f"{binary} timed out after {timeout}s"
    except FileNotFoundError:
        return False, f"{binary} not found in PATH"

    if result.returncode != 0:
        error_msg = result.stderr.strip() or result.stdout.strip()
        if not error_msg:
            error_msg = f"(no output - check '{binary} --version' and auth status)"
        return False, f"{binary} failed (exit {result.returncode}): {error_msg}"

    if command.output_format != "json":
        return True, result.stdout

    try:
        wrapper = json.loads(result.stdout.strip())
    except json.JSONDecodeError:
        return True, result.stdout

    if isinstance(wrapper, dict):
        if wrapper.get("is_error"):
            return False, f"{binary} reported an error: {wrapper.get('result', '')}"
        if "result" in wrapper:
            return True, wrapper["result"]
    return True, result.stdout


def strip_markdown_fences(text: str) -> str:
    """Strip markdown code fences from text if present."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        if lines and lines[0].strip().startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


_JSON_START = re.compile(r'[\[{]')


def parse_json_response(text: str):
    """Parse a JSON value from a model response.

    Accepts bare JSON, fenced JSON, or JSON preceded by a line of prose.

    Raises:
        ValueError: if no JSON value can be decoded
    """
    text = strip_markdown_fences(text)
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Prose before the payload: decode from the first bracket
    match = _JSON_START.search(text)
    if match:
        try:
            value, _ = json.JSONDecoder().raw_decode(text[match.start():])
            return value
        except json.JSONDecodeError:
            pass

    raise ValueError(f"No JSON found in response: {text[:200]!r}")
