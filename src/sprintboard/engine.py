"""Reorder engine: the single mutation surface for issue placement.

``place`` moves one issue into a backlog, sprint or lane and gives it a new
key in that dimension. The request is fully resolved and the key allocated
before anything is written, so a rejected call leaves the state untouched.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, cast

from .config import TrackerConfig, default_config
from .errors import NoOpMoveError
from .models import Destination, Issue, describe_destination, utcnow
from .ordering import Allocation, order_before, order_for_end
from .resolver import PlacementPlan, resolve, scope_peers, sort_key, sprint_accepting
from .state import ProjectState

logger = logging.getLogger(__name__)


@dataclass
class PlacementResult:
    issue: Issue
    destination: str
    key: float
    over_limit: bool = False
    renumbered: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "issue": self.issue.to_dict(),
            "destination": self.destination,
            "key": self.key,
            "over_limit": self.over_limit,
            "renumbered": list(self.renumbered),
        }


def _allocate(plan: PlacementPlan, cfg: TrackerConfig) -> Allocation:
    keys = plan.keys
    if plan.anchor_index is None:
        return order_for_end(keys, step=cfg.order_step, baseline=cfg.order_baseline)
    return order_before(
        keys, plan.anchor_index, step=cfg.order_step, baseline=cfg.order_baseline
    )


def _set_key(issue: Issue, dimension: str, value: float) -> None:
    if dimension == "rank":
        issue.rank = value
    else:
        issue.lane_rank = value


def _commit(issue: Issue, plan: PlacementPlan, allocation: Allocation) -> list[str]:
    renumbered: list[str] = []
    for position, value in allocation.repairs.items():
        peer = plan.peers[position]
        if sort_key(peer, plan.dimension) != value:
            _set_key(peer, plan.dimension, value)
            renumbered.append(peer.id)
    if plan.dimension == "rank":
        issue.sprint_id = plan.sprint_id
    else:
        issue.lane_id = cast(str, plan.lane_id)
    _set_key(issue, plan.dimension, allocation.key)
    issue.updated_at = utcnow()
    return renumbered


def place(
    state: ProjectState,
    issue_id: str,
    destination: Destination,
    anchor_id: str | None = None,
    *,
    config: TrackerConfig | None = None,
) -> PlacementResult:
    """Move ``issue_id`` into ``destination`` before ``anchor_id`` (or last).

    Only one membership dimension changes per call: ``sprint_id`` for backlog
    and sprint destinations, ``lane_id`` for lane destinations.
    """
    cfg = config or default_config()
    issue = state.get_issue(issue_id)
    if anchor_id is not None and anchor_id == issue_id:
        raise NoOpMoveError(f"Issue {issue_id} cannot be anchored to itself", issue_id=issue_id)
    plan = resolve(state, issue, destination, anchor_id)
    allocation = _allocate(plan, cfg)

    renumbered = _commit(issue, plan, allocation)
    if renumbered:
        logger.debug(
            "placement of %s renumbered %d peers in %s",
            issue_id,
            len(renumbered),
            describe_destination(destination),
        )
    return PlacementResult(
        issue=copy.deepcopy(issue),
        destination=describe_destination(destination),
        key=allocation.key,
        over_limit=plan.over_limit,
        renumbered=renumbered,
    )


def add_issue(
    state: ProjectState, issue: Issue, *, config: TrackerConfig | None = None
) -> Issue:
    """Register a new issue at the end of its sprint/backlog list and its lane."""
    cfg = config or default_config()
    if issue.id in state.issues:
        raise ValueError(f"Issue id already exists: {issue.id}")
    state.find_column(issue.project_id, issue.lane_id)
    if issue.sprint_id is not None:
        sprint_accepting(state, issue.sprint_id, issue.project_id)

    plan_peers = scope_peers(state, issue.project_id, sprint_id=issue.sprint_id)
    lane_peers = scope_peers(state, issue.project_id, lane_id=issue.lane_id)
    rank = order_for_end(
        [p.rank for p in plan_peers], step=cfg.order_step, baseline=cfg.order_baseline
    )
    lane_rank = order_for_end(
        [p.lane_rank for p in lane_peers], step=cfg.order_step, baseline=cfg.order_baseline
    )

    for position, value in rank.repairs.items():
        plan_peers[position].rank = value
    for position, value in lane_rank.repairs.items():
        lane_peers[position].lane_rank = value
    issue.rank = rank.key
    issue.lane_rank = lane_rank.key
    state.issues[issue.id] = issue
    return copy.deepcopy(issue)


def remove_issue(state: ProjectState, issue_id: str) -> Issue:
    issue = state.get_issue(issue_id)
    del state.issues[issue_id]
    return issue


def update_column(
    state: ProjectState,
    project_id: str,
    column_id: str,
    *,
    title: str | None = None,
    limit: int | None = None,
) -> None:
    """Rename a lane and set its WIP limit. A limit of 0 or less clears it."""
    _, column = state.find_column(project_id, column_id)
    if title is not None:
        column.title = title
    column.limit = limit if limit is not None and limit > 0 else None


__all__ = ["PlacementResult", "add_issue", "place", "remove_issue", "update_column"]
