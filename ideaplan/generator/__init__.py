"""Content generators: the LLM-facing side of clarification and breakdown."""

from .base import ContentGenerator
from .claude import ClaudeContentGenerator

__all__ = ["ContentGenerator", "ClaudeContentGenerator"]
