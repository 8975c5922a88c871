"""Clarification: questions, answers and confidence for a raw idea."""

from .agent import ClarifierAgent
from .confidence import ConfidenceCalculator
from .models import ClarificationSession, Question, SessionStatus

__all__ = [
    "ClarifierAgent",
    "ConfidenceCalculator",
    "ClarificationSession",
    "Question",
    "SessionStatus",
]
