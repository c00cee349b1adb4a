from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Union


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class IssueType(str, Enum):
    TASK = "Task"
    BUG = "Bug"
    STORY = "Story"
    EPIC = "Epic"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class SprintState(str, Enum):
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass
class Issue:
    """A unit of work tracked by a project.

    ``rank`` orders the issue inside its sprint (or the backlog when
    ``sprint_id`` is None); ``lane_rank`` orders it inside its board lane.
    The two keys are written independently.
    """

    id: str
    project_id: str
    title: str
    lane_id: str
    sprint_id: str | None = None
    rank: float = 0.0
    lane_rank: float = 0.0
    type: IssueType = IssueType.TASK
    priority: Priority = Priority.MEDIUM
    assignee_ids: set[str] = field(default_factory=set)
    description: str = ""
    story_points: int | None = None
    created_at: str = field(default_factory=utcnow)
    updated_at: str = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "title": self.title,
            "lane_id": self.lane_id,
            "sprint_id": self.sprint_id,
            "rank": self.rank,
            "lane_rank": self.lane_rank,
            "type": self.type.value,
            "priority": self.priority.value,
            "assignee_ids": sorted(self.assignee_ids),
            "story_points": self.story_points,
            "updated_at": self.updated_at,
        }


@dataclass
class Sprint:
    id: str
    project_id: str
    name: str
    start_date: str = ""
    end_date: str = ""
    goal: str = ""
    is_active: bool = False
    is_completed: bool = False

    @property
    def state(self) -> SprintState:
        if self.is_completed:
            return SprintState.COMPLETED
        if self.is_active:
            return SprintState.ACTIVE
        return SprintState.PLANNED

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "goal": self.goal,
            "is_active": self.is_active,
            "is_completed": self.is_completed,
            "state": self.state.value,
        }


@dataclass
class Column:
    """Board column (status lane). ``limit`` is a WIP warning threshold."""

    id: str
    title: str
    order: int = 0
    limit: int | None = None
    done: bool = False


@dataclass
class Board:
    id: str
    project_id: str
    title: str
    columns: list[Column] = field(default_factory=list)

    def ordered_columns(self) -> list[Column]:
        return sorted(self.columns, key=lambda c: (c.order, c.id))

    def terminal_lane_ids(self) -> set[str]:
        flagged = {c.id for c in self.columns if c.done}
        if flagged or not self.columns:
            return flagged
        return {self.ordered_columns()[-1].id}


# Destination of a placement request. Exactly one of these shapes.


@dataclass(frozen=True)
class BacklogTarget:
    pass


@dataclass(frozen=True)
class SprintTarget:
    sprint_id: str


@dataclass(frozen=True)
class LaneTarget:
    lane_id: str


Destination = Union[BacklogTarget, SprintTarget, LaneTarget]


def describe_destination(destination: Destination) -> str:
    if isinstance(destination, BacklogTarget):
        return "backlog"
    if isinstance(destination, SprintTarget):
        return f"sprint:{destination.sprint_id}"
    if isinstance(destination, LaneTarget):
        return f"lane:{destination.lane_id}"
    raise TypeError(f"Unsupported destination: {destination!r}")


__all__ = [
    "Issue",
    "IssueType",
    "Priority",
    "Sprint",
    "SprintState",
    "Column",
    "Board",
    "BacklogTarget",
    "SprintTarget",
    "LaneTarget",
    "Destination",
    "describe_destination",
    "utcnow",
]
