from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

from . import engine, integrity, lifecycle, views
from .config import TrackerConfig, default_config, load_config
from .errors import classify_error
from .logging import configure_logging
from .models import Destination, Issue, describe_destination
from .state import ProjectState

T = TypeVar("T")


class Tracker:
    """Controlled handle over one ``ProjectState``.

    Every mutation runs as a single synchronous unit: it either fully applies
    or raises a ``TrackerError`` before any field is written. Failures are
    classified, logged and kept in ``last_error`` for the caller to surface.
    """

    def __init__(self, state: ProjectState | None = None, cfg: TrackerConfig | None = None):
        self.state = state if state is not None else ProjectState()
        self.cfg = cfg or default_config()
        self._debug = os.environ.get("SPRINTBOARD_DEBUG") == "1"
        self.last_error: dict[str, Any] | None = None
        self._logger = configure_logging(
            json_logging=self.cfg.logging_json_enabled, level=self.cfg.logging_level
        )

    @classmethod
    def from_config_path(cls, path: str | Path, state: ProjectState | None = None) -> Tracker:
        return cls(state, load_config(path))

    def _log(self, *parts: Any) -> None:
        if self._debug:
            print("[sprintboard]", *parts)
        self._logger.debug(" ".join(str(p) for p in parts))

    @contextmanager
    def _operation(self, name: str, **kw: Any) -> Iterator[None]:
        self.last_error = None
        try:
            with self._logger.timed_operation(name, **kw):
                yield
        except Exception as exc:
            # timed_operation has already logged the failure
            self.last_error = classify_error(exc).to_dict()
            raise

    def _run(self, name: str, fn: Callable[[], T], **kw: Any) -> T:
        with self._operation(name, **kw):
            return fn()

    # -------------------- placement --------------------
    def place(
        self, issue_id: str, destination: Destination, anchor_id: str | None = None
    ) -> engine.PlacementResult:
        target = describe_destination(destination)
        result = self._run(
            "place",
            lambda: engine.place(self.state, issue_id, destination, anchor_id, config=self.cfg),
            issue_id=issue_id,
            destination=target,
            anchor_id=anchor_id,
        )
        self._logger.log_placement(
            issue_id, target, result.key, result.over_limit, renumbered=len(result.renumbered)
        )
        if result.over_limit:
            self._logger.warning("lane over WIP limit", issue_id=issue_id, destination=target)
        return result

    def add_issue(self, issue: Issue) -> Issue:
        return self._run(
            "add_issue",
            lambda: engine.add_issue(self.state, issue, config=self.cfg),
            issue_id=issue.id,
        )

    def remove_issue(self, issue_id: str) -> Issue:
        return self._run(
            "remove_issue", lambda: engine.remove_issue(self.state, issue_id), issue_id=issue_id
        )

    def update_column(
        self, project_id: str, column_id: str, *, title: str | None = None, limit: int | None = None
    ) -> None:
        self._run(
            "update_column",
            lambda: engine.update_column(
                self.state, project_id, column_id, title=title, limit=limit
            ),
            column_id=column_id,
        )

    # -------------------- sprint lifecycle --------------------
    def create_sprint(
        self, project_id: str, name: str | None = None, now: datetime | None = None
    ) -> lifecycle.LifecycleResult:
        return self._run(
            "create_sprint",
            lambda: lifecycle.create_sprint(
                self.state, project_id, config=self.cfg, name=name, now=now
            ),
            project_id=project_id,
        )

    def start_sprint(self, sprint_id: str, goal: str) -> lifecycle.LifecycleResult:
        return self._run(
            "start_sprint",
            lambda: lifecycle.start_sprint(self.state, sprint_id, goal),
            sprint_id=sprint_id,
        )

    def complete_sprint(self, sprint_id: str) -> lifecycle.LifecycleResult:
        result = self._run(
            "complete_sprint",
            lambda: lifecycle.complete_sprint(self.state, sprint_id, config=self.cfg),
            sprint_id=sprint_id,
        )
        self._log("complete_sprint", sprint_id, f"reassigned={len(result.reassigned)}")
        return result

    def delete_sprint(self, sprint_id: str) -> lifecycle.LifecycleResult:
        result = self._run(
            "delete_sprint",
            lambda: lifecycle.delete_sprint(self.state, sprint_id, config=self.cfg),
            sprint_id=sprint_id,
        )
        self._log("delete_sprint", sprint_id, f"reassigned={len(result.reassigned)}")
        return result

    def edit_sprint(self, sprint_id: str, **fields: Any) -> lifecycle.LifecycleResult:
        return self._run(
            "edit_sprint",
            lambda: lifecycle.edit_sprint(self.state, sprint_id, **fields),
            sprint_id=sprint_id,
            fields=sorted(fields),
        )

    # -------------------- views --------------------
    def backlog(self, project_id: str) -> list[Issue]:
        return views.backlog_issues(self.state, project_id)

    def sprint(self, sprint_id: str) -> list[Issue]:
        return views.sprint_issues(self.state, sprint_id)

    def lane(self, project_id: str, lane_id: str, sprint_id: str | None = None) -> list[Issue]:
        return views.lane_issues(self.state, project_id, lane_id, sprint_id)

    def audit(self) -> dict[str, Any]:
        report = integrity.audit(self.state)
        if not report["consistent"]:
            for line in integrity.format_report(report):
                self._logger.warning(line)
        return report


__all__ = ["Tracker"]
