"""
Breakdown records: analysis, tasks, dependency graph, timeline.

Every record round-trips through to_dict()/from_dict() with snake_case
keys. Dates and datetimes are stored as ISO-8601 strings.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Objective:
    title: str
    description: str = ""
    confidence: float = 0.7

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description, "confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: dict) -> "Objective":
        return cls(
            title=data["title"],
            description=data.get("description", ""),
            confidence=data.get("confidence", 0.7),
        )


@dataclass
class Deliverable:
    id: str
    title: str
    description: str = ""
    priority: int = 0                   # Lower is earlier
    estimated_hours: float = 0.0
    confidence: float = 0.7
    depends_on: list[str] = field(default_factory=list)  # Titles of predecessor deliverables

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "estimated_hours": self.estimated_hours,
            "confidence": self.confidence,
            "depends_on": list(self.depends_on),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Deliverable":
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            priority=data.get("priority", 0),
            estimated_hours=data.get("estimated_hours", 0.0),
            confidence=data.get("confidence", 0.7),
            depends_on=list(data.get("depends_on", [])),
        )


@dataclass
class Complexity:
    score: int = 5
    factors: list[str] = field(default_factory=list)
    level: str = "medium"               # simple | medium | complex

    def to_dict(self) -> dict:
        return {"score": self.score, "factors": list(self.factors), "level": self.level}

    @classmethod
    def from_dict(cls, data: dict) -> "Complexity":
        return cls(
            score=data.get("score", 5),
            factors=list(data.get("factors", [])),
            level=data.get("level", "medium"),
        )


@dataclass
class Scope:
    size: str = "medium"                # small | medium | large
    estimated_weeks: int = 8
    team_size: int = 1

    def to_dict(self) -> dict:
        return {"size": self.size, "estimated_weeks": self.estimated_weeks, "team_size": self.team_size}

    @classmethod
    def from_dict(cls, data: dict) -> "Scope":
        return cls(
            size=data.get("size", "medium"),
            estimated_weeks=data.get("estimated_weeks", 8),
            team_size=data.get("team_size", 1),
        )


@dataclass
class IdeaAnalysis:
    """Structured reading of an idea. Produced once per breakdown."""
    objectives: list[Objective]
    deliverables: list[Deliverable]
    complexity: Complexity
    scope: Scope
    risk_factors: list[str] = field(default_factory=list)
    success_criteria: list[str] = field(default_factory=list)
    overall_confidence: float = 0.7

    def deliverable_by_title(self, title: str) -> Optional[Deliverable]:
        for d in self.deliverables:
            if d.title == title:
                return d
        return None

    def to_dict(self) -> dict:
        return {
            "objectives": [o.to_dict() for o in self.objectives],
            "deliverables": [d.to_dict() for d in self.deliverables],
            "complexity": self.complexity.to_dict(),
            "scope": self.scope.to_dict(),
            "risk_factors": list(self.risk_factors),
            "success_criteria": list(self.success_criteria),
            "overall_confidence": self.overall_confidence,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IdeaAnalysis":
        return cls(
            objectives=[Objective.from_dict(o) for o in data.get("objectives", [])],
            deliverables=[Deliverable.from_dict(d) for d in data.get("deliverables", [])],
            complexity=Complexity.from_dict(data.get("complexity", {})),
            scope=Scope.from_dict(data.get("scope", {})),
            risk_factors=list(data.get("risk_factors", [])),
            success_criteria=list(data.get("success_criteria", [])),
            overall_confidence=data.get("overall_confidence", 0.7),
        )


@dataclass
class Task:
    id: str
    title: str
    description: str = ""
    estimated_hours: float = 0.0
    complexity: int = 5                 # 1-10
    required_skills: list[str] = field(default_factory=lambda: ["General"])
    dependencies: list[str] = field(default_factory=list)  # Task ids that must finish first
    deliverable_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "estimated_hours": self.estimated_hours,
            "complexity": self.complexity,
            "required_skills": list(self.required_skills),
            "dependencies": list(self.dependencies),
            "deliverable_id": self.deliverable_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            estimated_hours=data.get("estimated_hours", 0.0),
            complexity=data.get("complexity", 5),
            required_skills=list(data.get("required_skills", ["General"])),
            dependencies=list(data.get("dependencies", [])),
            deliverable_id=data.get("deliverable_id"),
        )


@dataclass
class TaskDecomposition:
    tasks: list[Task]
    total_estimated_hours: float
    confidence: float

    def task_ids(self) -> list[str]:
        return [t.id for t in self.tasks]

    def to_dict(self) -> dict:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "total_estimated_hours": self.total_estimated_hours,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaskDecomposition":
        return cls(
            tasks=[Task.from_dict(t) for t in data.get("tasks", [])],
            total_estimated_hours=data.get("total_estimated_hours", 0.0),
            confidence=data.get("confidence", 0.0),
        )


@dataclass(frozen=True)
class Edge:
    """from_id must complete before to_id."""
    from_id: str
    to_id: str

    def to_dict(self) -> dict:
        return {"from": self.from_id, "to": self.to_id}

    @classmethod
    def from_dict(cls, data: dict) -> "Edge":
        return cls(from_id=data["from"], to_id=data["to"])


@dataclass
class DependencyGraph:
    nodes: list[str]
    edges: list[Edge]
    critical_path: list[str]
    removed_edges: list[Edge] = field(default_factory=list)  # Dropped to break cycles

    def to_dict(self) -> dict:
        return {
            "nodes": list(self.nodes),
            "edges": [e.to_dict() for e in self.edges],
            "critical_path": list(self.critical_path),
            "removed_edges": [e.to_dict() for e in self.removed_edges],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DependencyGraph":
        return cls(
            nodes=list(data.get("nodes", [])),
            edges=[Edge.from_dict(e) for e in data.get("edges", [])],
            critical_path=list(data.get("critical_path", [])),
            removed_edges=[Edge.from_dict(e) for e in data.get("removed_edges", [])],
        )


@dataclass
class Phase:
    name: str
    start_date: datetime
    end_date: datetime
    tasks: list[str] = field(default_factory=list)          # Task ids
    deliverables: list[str] = field(default_factory=list)   # Deliverable titles

    @property
    def duration_weeks(self) -> float:
        return (self.end_date - self.start_date).total_seconds() / (7 * 24 * 3600)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "tasks": list(self.tasks),
            "deliverables": list(self.deliverables),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Phase":
        return cls(
            name=data["name"],
            start_date=datetime.fromisoformat(data["start_date"]),
            end_date=datetime.fromisoformat(data["end_date"]),
            tasks=list(data.get("tasks", [])),
            deliverables=list(data.get("deliverables", [])),
        )


@dataclass
class Milestone:
    id: str
    title: str
    date: datetime
    dependencies: list[str] = field(default_factory=list)  # Milestone ids

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date.isoformat(),
            "dependencies": list(self.dependencies),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Milestone":
        return cls(
            id=data["id"],
            title=data["title"],
            date=datetime.fromisoformat(data["date"]),
            dependencies=list(data.get("dependencies", [])),
        )


@dataclass
class Timeline:
    start_date: datetime
    end_date: datetime
    total_weeks: int
    phases: list[Phase]
    milestones: list[Milestone]
    critical_path: list[str]
    resource_allocation: dict[str, int]

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_weeks": self.total_weeks,
            "phases": [p.to_dict() for p in self.phases],
            "milestones": [m.to_dict() for m in self.milestones],
            "critical_path": list(self.critical_path),
            "resource_allocation": dict(self.resource_allocation),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Timeline":
        return cls(
            start_date=datetime.fromisoformat(data["start_date"]),
            end_date=datetime.fromisoformat(data["end_date"]),
            total_weeks=data["total_weeks"],
            phases=[Phase.from_dict(p) for p in data.get("phases", [])],
            milestones=[Milestone.from_dict(m) for m in data.get("milestones", [])],
            critical_path=list(data.get("critical_path", [])),
            resource_allocation=dict(data.get("resource_allocation", {})),
        )


@dataclass
class BreakdownSession:
    """One finished breakdown of an idea. Replaced wholesale by a re-run."""
    id: str
    idea_id: str
    analysis: Optional[IdeaAnalysis]
    tasks: Optional[TaskDecomposition]
    dependencies: Optional[DependencyGraph]
    timeline: Optional[Timeline]
    status: str = "completed"
    confidence: float = 0.0
    processing_time: float = 0.0        # Seconds
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "idea_id": self.idea_id,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "tasks": self.tasks.to_dict() if self.tasks else None,
            "dependencies": self.dependencies.to_dict() if self.dependencies else None,
            "timeline": self.timeline.to_dict() if self.timeline else None,
            "status": self.status,
            "confidence": self.confidence,
            "processing_time": self.processing_time,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BreakdownSession":
        def _opt(key, record_cls):
            value = data.get(key)
            return record_cls.from_dict(value) if value is not None else None

        return cls(
            id=data["id"],
            idea_id=data["idea_id"],
            analysis=_opt("analysis", IdeaAnalysis),
            tasks=_opt("tasks", TaskDecomposition),
            dependencies=_opt("dependencies", DependencyGraph),
            timeline=_opt("timeline", Timeline),
            status=data.get("status", "completed"),
            confidence=data.get("confidence", 0.0),
            processing_time=data.get("processing_time", 0.0),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
