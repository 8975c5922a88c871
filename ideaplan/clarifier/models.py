"""
Clarification session records.

Sessions are stored as plain dicts (see ideaplan.store); these dataclasses
are the in-memory form. Datetimes are ISO-8601 strings in storage.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SessionStatus(str, Enum):
    CLARIFYING = "clarifying"
    COMPLETE = "complete"


QUESTION_TYPES = ("open", "multiple_choice", "yes_no")


@dataclass
class Question:
    id: str
    text: str
    answered: bool = False
    type: str = "open"
    options: list[str] = field(default_factory=list)
    required: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "answered": self.answered,
            "type": self.type,
            "options": list(self.options),
            "required": self.required,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        return cls(
            id=data["id"],
            text=data["text"],
            answered=data.get("answered", False),
            type=data.get("type", "open"),
            options=list(data.get("options", [])),
            required=data.get("required", True),
        )


@dataclass
class ClarificationSession:
    """Q/A dialogue for one idea."""
    idea_id: str
    idea_text: str
    questions: list[Question]
    answers: dict[str, str] = field(default_factory=dict)
    status: SessionStatus = SessionStatus.CLARIFYING
    confidence: float = 0.0
    refined_idea: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def question(self, question_id: str) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def unanswered_required(self) -> list[str]:
        return [q.id for q in self.questions if q.required and not self.answers.get(q.id)]

    def qa_pairs(self) -> list[tuple[str, str]]:
        """(question text, answer) for every answered question, in question order."""
        return [(q.text, self.answers[q.id]) for q in self.questions if self.answers.get(q.id)]

    @property
    def is_complete(self) -> bool:
        return self.status == SessionStatus.COMPLETE

    def to_dict(self) -> dict:
        return {
            "idea_id": self.idea_id,
            "idea_text": self.idea_text,
            "questions": [q.to_dict() for q in self.questions],
            "answers": dict(self.answers),
            "status": self.status.value,
            "confidence": self.confidence,
            "refined_idea": self.refined_idea,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ClarificationSession":
        return cls(
            idea_id=data["idea_id"],
            idea_text=data["idea_text"],
            questions=[Question.from_dict(q) for q in data.get("questions", [])],
            answers=dict(data.get("answers", {})),
            status=SessionStatus(data.get("status", SessionStatus.CLARIFYING.value)),
            confidence=data.get("confidence", 0.0),
            refined_idea=data.get("refined_idea"),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
