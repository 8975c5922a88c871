"""
Prompt templates for the generator stages.

One markdown file per stage lives in ideaplan/prompts/<stage>.md. Placeholders
use str.format() syntax ({idea}); JSON examples in a template double their
braces. Anything inside <!-- --> is a note for maintainers and never reaches
the model.
"""

import logging
import re
import string
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

__all__ = [
    "PromptError",
    "load_prompt",
    "render_prompt",
    "template_variables",
    "build_section",
    "clear_cache",
    "PROMPTS_DIR",
]

_HTML_COMMENT_PATTERN = re.compile(r'<!--.*?-->\s*', re.DOTALL)

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"


class PromptError(Exception):
    """Template missing or rendered without all of its variables."""


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Return the template for a stage with maintainer notes removed.

    Raises:
        PromptError: no template file for the stage
    """
    path = PROMPTS_DIR / f"{name}.md"
    if not path.is_file():
        raise PromptError(f"Prompt template '{name}' not found at {path}")

    logger.debug(f"Loading prompt template: {name}")
    return _HTML_COMMENT_PATTERN.sub('', path.read_text()).lstrip()


def template_variables(name: str) -> set[str]:
    """Names of the {placeholders} a template expects."""
    return {
        field.split('.')[0].split('[')[0]
        for _, field, _, _ in string.Formatter().parse(load_prompt(name))
        if field
    }


def render_prompt(name: str, **kwargs) -> str:
    """Fill a stage template.

    Every missing variable is reported at once, not just the first one.

    Example:
        render_prompt('refine_idea', idea='...', answers='Q: ...\\nA: ...')
    """
    missing = template_variables(name) - kwargs.keys()
    if missing:
        raise PromptError(
            f"Missing required variable(s) {', '.join(sorted(missing))} in prompt '{name}'"
        )
    return load_prompt(name).format(**kwargs)


def build_section(content: str | None, header: str, empty_msg: str | None = None) -> str:
    """Markdown section under header, or empty_msg in its place, or '' when both are empty."""
    body = content or empty_msg
    if body is None or body == "":
        return ""
    return f"{header}\n\n{body}\n"


def clear_cache() -> None:
    load_prompt.cache_clear()
