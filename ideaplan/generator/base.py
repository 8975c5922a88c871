"""Interface every content generator implements."""

from typing import Protocol


class ContentGenerator(Protocol):
    """Produces questions, analyses, task lists and refined ideas.

    Payloads use the camelCase keys of the prompt response formats
    (e.g. "estimatedHours"). Any failure raises ideaplan.errors.GenerationError.
    """

    def generate_questions(self, idea_text: str) -> list[dict]:
        """[{"id"?, "question", "type"?, "options"?, "required"?}, ...]"""
        ...

    def analyze_idea(self, idea_text: str, answers: dict[str, str], options: dict) -> dict:
        """Raw idea analysis (see schemas/idea_analysis.schema.json)."""
        ...

    def generate_tasks(self, deliverable: dict) -> list[dict]:
        """Tasks for one deliverable (see schemas/tasks.schema.json)."""
        ...

    def refine_idea(self, idea_text: str, qa_pairs: list[tuple[str, str]]) -> str:
        """Idea rewritten with the clarification answers folded in."""
        ...
