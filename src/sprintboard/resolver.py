"""Container resolution for placement requests.

Turns a destination plus an optional anchor into the ordered list of peers the
allocator works on, and validates the request. Nothing here mutates state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .errors import InvalidAnchorError, InvalidSprintStateError
from .models import (
    BacklogTarget,
    Destination,
    Issue,
    LaneTarget,
    Sprint,
    SprintState,
    SprintTarget,
)
from .state import ProjectState

Dimension = Literal["rank", "lane_rank"]


@dataclass(frozen=True)
class PlacementPlan:
    dimension: Dimension
    sprint_id: str | None  # membership after the move, plan dimension only
    lane_id: str | None  # membership after the move, lane dimension only
    peers: tuple[Issue, ...]
    anchor_index: int | None  # None => end of list
    limit: int | None = None
    over_limit: bool = False

    @property
    def keys(self) -> list[float]:
        return [sort_key(p, self.dimension) for p in self.peers]


def sort_key(issue: Issue, dimension: Dimension) -> float:
    return issue.rank if dimension == "rank" else issue.lane_rank


def ordered(issues: list[Issue], dimension: Dimension) -> list[Issue]:
    return sorted(issues, key=lambda i: (sort_key(i, dimension), i.id))


def scope_peers(
    state: ProjectState,
    project_id: str,
    *,
    sprint_id: str | None = None,
    lane_id: str | None = None,
    exclude: str | None = None,
) -> list[Issue]:
    """Issues of one scope in list order.

    Pass ``lane_id`` for a lane scope; otherwise the scope is the sprint named
    by ``sprint_id`` (the backlog when None).
    """
    if lane_id is not None:
        members = [
            i for i in state.project_issues(project_id)
            if i.lane_id == lane_id and i.id != exclude
        ]
        return ordered(members, "lane_rank")
    members = [
        i for i in state.project_issues(project_id)
        if i.sprint_id == sprint_id and i.id != exclude
    ]
    return ordered(members, "rank")


def _locate_anchor(peers: list[Issue], anchor_id: str | None, destination: Destination) -> int | None:
    if anchor_id is None:
        return None
    for index, peer in enumerate(peers):
        if peer.id == anchor_id:
            return index
    raise InvalidAnchorError(
        f"Anchor {anchor_id} is not in the destination container",
        anchor_id=anchor_id,
        destination=repr(destination),
    )


def sprint_accepting(state: ProjectState, sprint_id: str, project_id: str) -> Sprint:
    """Return the sprint if an issue of ``project_id`` may join it."""
    sprint = state.get_sprint(sprint_id)
    if sprint.project_id != project_id:
        raise InvalidSprintStateError(
            f"Sprint {sprint.id} belongs to another project",
            sprint_id=sprint.id,
            project_id=project_id,
        )
    if sprint.state is SprintState.COMPLETED:
        raise InvalidSprintStateError(
            f"Sprint {sprint.id} is completed and accepts no issues",
            sprint_id=sprint.id,
            state=sprint.state.value,
        )
    return sprint


def resolve(
    state: ProjectState,
    issue: Issue,
    destination: Destination,
    anchor_id: str | None = None,
) -> PlacementPlan:
    if isinstance(destination, BacklogTarget):
        peers = scope_peers(state, issue.project_id, sprint_id=None, exclude=issue.id)
        return PlacementPlan(
            dimension="rank",
            sprint_id=None,
            lane_id=None,
            peers=tuple(peers),
            anchor_index=_locate_anchor(peers, anchor_id, destination),
        )
    if isinstance(destination, SprintTarget):
        sprint = sprint_accepting(state, destination.sprint_id, issue.project_id)
        peers = scope_peers(state, issue.project_id, sprint_id=sprint.id, exclude=issue.id)
        return PlacementPlan(
            dimension="rank",
            sprint_id=sprint.id,
            lane_id=None,
            peers=tuple(peers),
            anchor_index=_locate_anchor(peers, anchor_id, destination),
        )
    if isinstance(destination, LaneTarget):
        _, column = state.find_column(issue.project_id, destination.lane_id)
        peers = scope_peers(state, issue.project_id, lane_id=column.id, exclude=issue.id)
        anchor_index = _locate_anchor(peers, anchor_id, destination)
        limit = column.limit if column.limit and column.limit > 0 else None
        return PlacementPlan(
            dimension="lane_rank",
            sprint_id=None,
            lane_id=column.id,
            peers=tuple(peers),
            anchor_index=anchor_index,
            limit=limit,
            # advisory only: an over-limit lane still accepts the issue
            over_limit=limit is not None and len(peers) + 1 > limit,
        )
    raise TypeError(f"Unsupported destination: {destination!r}")


__all__ = [
    "Dimension",
    "PlacementPlan",
    "ordered",
    "resolve",
    "scope_peers",
    "sort_key",
    "sprint_accepting",
]
