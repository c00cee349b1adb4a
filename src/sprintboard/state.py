"""Explicitly owned in-memory state shared by every engine operation.

A ``ProjectState`` holds the issues, sprints and boards of one or more
projects. Engine functions take the state as their first argument and mutate
it only after all checks for an operation have passed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .errors import IssueNotFoundError, LaneNotFoundError, SprintNotFoundError
from .models import Board, Column, Issue, Sprint


@dataclass
class ProjectState:
    issues: dict[str, Issue] = field(default_factory=dict)
    sprints: dict[str, Sprint] = field(default_factory=dict)
    boards: dict[str, Board] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        *,
        issues: Iterable[Issue] = (),
        sprints: Iterable[Sprint] = (),
        boards: Iterable[Board] = (),
    ) -> ProjectState:
        return cls(
            issues={i.id: i for i in issues},
            sprints={s.id: s for s in sprints},
            boards={b.id: b for b in boards},
        )

    def get_issue(self, issue_id: str) -> Issue:
        try:
            return self.issues[issue_id]
        except KeyError:
            raise IssueNotFoundError(issue_id) from None

    def get_sprint(self, sprint_id: str) -> Sprint:
        try:
            return self.sprints[sprint_id]
        except KeyError:
            raise SprintNotFoundError(sprint_id) from None

    def project_boards(self, project_id: str) -> list[Board]:
        return [b for b in self.boards.values() if b.project_id == project_id]

    def find_column(self, project_id: str, lane_id: str) -> tuple[Board, Column]:
        for board in self.project_boards(project_id):
            for column in board.columns:
                if column.id == lane_id:
                    return board, column
        raise LaneNotFoundError(lane_id)

    def is_terminal_lane(self, project_id: str, lane_id: str) -> bool:
        for board in self.project_boards(project_id):
            if lane_id in board.terminal_lane_ids():
                return True
        return False

    def project_issues(self, project_id: str) -> list[Issue]:
        return [i for i in self.issues.values() if i.project_id == project_id]

    def project_sprints(self, project_id: str) -> list[Sprint]:
        return [s for s in self.sprints.values() if s.project_id == project_id]


__all__ = ["ProjectState"]
