"""Shared fixtures: a scripted content generator and planner config."""

from datetime import datetime

import pytest

from ideaplan.errors import GenerationError
from ideaplan.lib.config import PlannerConfig
from ideaplan.store import MemoryStore

FIXED_NOW = datetime(2025, 1, 6, 9, 0, 0)


def make_questions(n: int) -> list[dict]:
    return [{"id": f"q_{i}", "question": f"Question {i}?", "type": "open"} for i in range(1, n + 1)]


def make_analysis(hours=(40, 40, 20), **overrides) -> dict:
    payload = {
        "objectives": [{"title": "Ship it", "description": "Get to users"}],
        "deliverables": [
            {"title": f"D{i}", "description": f"Deliverable {i}", "priority": i, "estimatedHours": h}
            for i, h in enumerate(hours, 1)
        ],
        "complexity": {"score": 6, "factors": ["integrations"]},
        "scope": {"size": "medium", "estimatedWeeks": 4},
        "riskFactors": ["Scope creep", {"factor": "Vendor lock-in", "impact": "high"}],
        "successCriteria": ["Users sign up"],
        "overallConfidence": 0.8,
    }
    payload.update(overrides)
    return payload


class FakeContentGenerator:
    """Scripted generator. Set attributes to change the payloads; set fail_on to a stage to raise."""

    def __init__(self):
        self.questions = make_questions(3)
        self.analysis = make_analysis()
        self.tasks_by_title: dict[str, list[dict]] = {}
        self.refined = "A refined idea."
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _check(self, stage):
        self.calls.append(stage)
        if stage in self.fail_on:
            raise GenerationError(stage, "scripted failure")

    def generate_questions(self, idea_text):
        self._check("generate_questions")
        return [dict(q) for q in self.questions]

    def analyze_idea(self, idea_text, answers, options):
        self._check("analyze_idea")
        return self.analysis

    def generate_tasks(self, deliverable):
        self._check("decompose_tasks")
        title = deliverable["title"]
        if title in self.tasks_by_title:
            return [dict(t) for t in self.tasks_by_title[title]]
        return [{"title": f"Build {title}", "estimatedHours": deliverable["estimated_hours"]}]

    def refine_idea(self, idea_text, qa_pairs):
        self._check("refine_idea")
        return self.refined


@pytest.fixture
def generator():
    return FakeContentGenerator()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def config():
    return PlannerConfig(lock_timeout=5.0)
