"""Read projections consumed by rendering. Pure and repeatable."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models import Issue, Sprint, SprintState
from .resolver import ordered, scope_peers
from .state import ProjectState


def backlog_issues(state: ProjectState, project_id: str) -> list[Issue]:
    return scope_peers(state, project_id, sprint_id=None)


def sprint_issues(state: ProjectState, sprint_id: str) -> list[Issue]:
    sprint = state.get_sprint(sprint_id)
    return scope_peers(state, sprint.project_id, sprint_id=sprint.id)


def lane_issues(
    state: ProjectState, project_id: str, lane_id: str, sprint_id: str | None = None
) -> list[Issue]:
    """Issues of a lane; narrowed to ``sprint_id`` when given (board view)."""
    state.find_column(project_id, lane_id)
    issues = scope_peers(state, project_id, lane_id=lane_id)
    if sprint_id is not None:
        issues = [i for i in issues if i.sprint_id == sprint_id]
    return issues


def active_sprint(state: ProjectState, project_id: str) -> Sprint | None:
    for sprint in state.project_sprints(project_id):
        if sprint.state is SprintState.ACTIVE:
            return sprint
    return None


def open_sprints(state: ProjectState, project_id: str) -> list[Sprint]:
    sprints = [s for s in state.project_sprints(project_id) if s.state is not SprintState.COMPLETED]
    # active first, then by start date
    return sorted(sprints, key=lambda s: (s.state is not SprintState.ACTIVE, s.start_date, s.id))


@dataclass(frozen=True)
class LaneLoad:
    lane_id: str
    count: int
    limit: int | None

    @property
    def over_limit(self) -> bool:
        return self.limit is not None and self.count > self.limit


def lane_load(
    state: ProjectState, project_id: str, lane_id: str, sprint_id: str | None = None
) -> LaneLoad:
    _, column = state.find_column(project_id, lane_id)
    count = len(lane_issues(state, project_id, lane_id, sprint_id))
    limit = column.limit if column.limit and column.limit > 0 else None
    return LaneLoad(lane_id=column.id, count=count, limit=limit)


def sprint_report(state: ProjectState, sprint_id: str) -> dict[str, Any]:
    """Done/open breakdown shown when closing a sprint."""
    sprint = state.get_sprint(sprint_id)
    issues = sprint_issues(state, sprint_id)
    done = [i for i in issues if state.is_terminal_lane(i.project_id, i.lane_id)]
    done_ids = {i.id for i in done}
    open_ = [i for i in issues if i.id not in done_ids]
    return {
        "sprint_id": sprint.id,
        "state": sprint.state.value,
        "done": len(done),
        "open": len(open_),
        "done_points": sum(i.story_points or 0 for i in done),
        "open_points": sum(i.story_points or 0 for i in open_),
        "open_issue_ids": [i.id for i in ordered(open_, "rank")],
    }


__all__ = [
    "LaneLoad",
    "active_sprint",
    "backlog_issues",
    "lane_issues",
    "lane_load",
    "open_sprints",
    "sprint_issues",
    "sprint_report",
]
