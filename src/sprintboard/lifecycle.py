"""Sprint lifecycle state machine.

States: planned -> active -> completed. ``complete_sprint`` and
``delete_sprint`` migrate issues back to the backlog tail in one batch that is
planned over a single snapshot of the sprint's issues and committed only once
every new key is known.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .config import TrackerConfig, default_config
from .errors import ConflictingActiveSprintError, InvalidSprintStateError
from .models import Issue, Sprint, SprintState, utcnow
from .ordering import order_for_end
from .resolver import scope_peers
from .state import ProjectState

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "start_date", "end_date", "goal"})


@dataclass
class LifecycleResult:
    sprint: Sprint | None
    transition: str
    reassigned: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transition": self.transition,
            "sprint": self.sprint.to_dict() if self.sprint else None,
            "reassigned": list(self.reassigned),
        }


def _require(sprint: Sprint, allowed: set[SprintState], transition: str) -> None:
    if sprint.state not in allowed:
        raise InvalidSprintStateError(
            f"Cannot {transition} sprint {sprint.id} in state {sprint.state.value}",
            sprint_id=sprint.id,
            state=sprint.state.value,
            transition=transition,
        )


def _plan_backlog_moves(
    state: ProjectState, sprint: Sprint, movers: list[Issue], cfg: TrackerConfig
) -> tuple[dict[str, float], dict[str, float]]:
    """Compute backlog tail keys for ``movers`` (in order) plus any repair.

    Returns (new keys for movers, replacement keys for existing backlog issues).
    """
    backlog = scope_peers(state, sprint.project_id, sprint_id=None)
    keys = [i.rank for i in backlog]
    repairs: dict[str, float] = {}
    assigned: dict[str, float] = {}
    for issue in movers:
        allocation = order_for_end(keys, step=cfg.order_step, baseline=cfg.order_baseline)
        if allocation.repairs:
            for position, value in allocation.repairs.items():
                keys[position] = value
                if position < len(backlog):
                    repairs[backlog[position].id] = value
                else:
                    assigned[movers[position - len(backlog)].id] = value
        keys.append(allocation.key)
        assigned[issue.id] = allocation.key
    return assigned, repairs


def _migrate_to_backlog(
    state: ProjectState, sprint: Sprint, movers: list[Issue], cfg: TrackerConfig
) -> list[str]:
    assigned, repairs = _plan_backlog_moves(state, sprint, movers, cfg)
    stamp = utcnow()
    for issue_id, value in repairs.items():
        state.issues[issue_id].rank = value
    for issue in movers:
        issue.sprint_id = None
        issue.rank = assigned[issue.id]
        issue.updated_at = stamp
    if movers:
        logger.debug("moved %d issues from sprint %s to backlog", len(movers), sprint.id)
    return [i.id for i in movers]


def create_sprint(
    state: ProjectState,
    project_id: str,
    *,
    config: TrackerConfig | None = None,
    name: str | None = None,
    now: datetime | None = None,
) -> LifecycleResult:
    cfg = config or default_config()
    start = now or datetime.now(timezone.utc)
    count = len(state.project_sprints(project_id)) + 1
    sprint = Sprint(
        id=f"SPRINT-{uuid.uuid4().hex[:9]}",
        project_id=project_id,
        name=name or cfg.sprint_name_template.format(n=count),
        start_date=start.isoformat(),
        end_date=(start + timedelta(days=cfg.sprint_length_days)).isoformat(),
    )
    state.sprints[sprint.id] = sprint
    return LifecycleResult(copy.deepcopy(sprint), "create")


def start_sprint(state: ProjectState, sprint_id: str, goal: str) -> LifecycleResult:
    sprint = state.get_sprint(sprint_id)
    _require(sprint, {SprintState.PLANNED}, "start")
    for other in state.project_sprints(sprint.project_id):
        if other.id != sprint.id and other.state is SprintState.ACTIVE:
            raise ConflictingActiveSprintError(
                f"Sprint {other.id} is already active in project {sprint.project_id}",
                sprint_id=sprint.id,
                active_sprint_id=other.id,
            )
    sprint.is_active = True
    sprint.goal = goal
    return LifecycleResult(copy.deepcopy(sprint), "start")


def complete_sprint(
    state: ProjectState, sprint_id: str, *, config: TrackerConfig | None = None
) -> LifecycleResult:
    """Close an active sprint.

    Issues in a terminal lane stay attached for reporting; every other issue
    returns to the end of the backlog, keeping its sprint order.
    """
    cfg = config or default_config()
    sprint = state.get_sprint(sprint_id)
    _require(sprint, {SprintState.ACTIVE}, "complete")
    snapshot = scope_peers(state, sprint.project_id, sprint_id=sprint.id)
    movers = [i for i in snapshot if not state.is_terminal_lane(i.project_id, i.lane_id)]
    reassigned = _migrate_to_backlog(state, sprint, movers, cfg)
    sprint.is_active = False
    sprint.is_completed = True
    return LifecycleResult(copy.deepcopy(sprint), "complete", reassigned)


def delete_sprint(
    state: ProjectState, sprint_id: str, *, config: TrackerConfig | None = None
) -> LifecycleResult:
    cfg = config or default_config()
    sprint = state.get_sprint(sprint_id)
    _require(sprint, {SprintState.PLANNED, SprintState.ACTIVE}, "delete")
    snapshot = scope_peers(state, sprint.project_id, sprint_id=sprint.id)
    reassigned = _migrate_to_backlog(state, sprint, snapshot, cfg)
    del state.sprints[sprint.id]
    return LifecycleResult(None, "delete", reassigned)


def edit_sprint(state: ProjectState, sprint_id: str, **fields: Any) -> LifecycleResult:
    sprint = state.get_sprint(sprint_id)
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Sprint fields not editable: {', '.join(sorted(unknown))}")
    for name, value in fields.items():
        if isinstance(value, datetime):
            value = value.isoformat()
        setattr(sprint, name, "" if value is None else str(value))
    return LifecycleResult(copy.deepcopy(sprint), "edit")


__all__ = [
    "EDITABLE_FIELDS",
    "LifecycleResult",
    "complete_sprint",
    "create_sprint",
    "delete_sprint",
    "edit_sprint",
    "start_sprint",
]
