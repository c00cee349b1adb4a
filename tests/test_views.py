from __future__ import annotations

from sprintboard.lifecycle import complete_sprint
from sprintboard.state import ProjectState
from sprintboard.views import (
    active_sprint,
    backlog_issues,
    lane_issues,
    lane_load,
    open_sprints,
    sprint_report,
)


def test_views_are_repeatable(state: ProjectState) -> None:
    first = [i.id for i in backlog_issues(state, "p1")]
    second = [i.id for i in backlog_issues(state, "p1")]

    assert first == second == ["b1", "b2", "b3"]


def test_lane_issues_narrowed_to_sprint(state: ProjectState) -> None:
    assert [i.id for i in lane_issues(state, "p1", "c2")] == ["b3", "i2"]
    assert [i.id for i in lane_issues(state, "p1", "c2", sprint_id="s1")] == ["i2"]


def test_active_and_open_sprints(state: ProjectState) -> None:
    active = active_sprint(state, "p1")
    assert active is not None and active.id == "s0"
    assert [s.id for s in open_sprints(state, "p1")] == ["s0", "s1"]

    complete_sprint(state, "s0")

    assert active_sprint(state, "p1") is None
    assert [s.id for s in open_sprints(state, "p1")] == ["s1"]


def test_lane_load(state: ProjectState) -> None:
    load = lane_load(state, "p1", "c2")
    assert (load.count, load.limit, load.over_limit) == (2, 3, False)

    for issue_id in ("b1", "b2"):
        state.issues[issue_id].lane_id = "c2"
    assert lane_load(state, "p1", "c2").over_limit is True
    assert lane_load(state, "p1", "c1").limit is None


def test_sprint_report(state: ProjectState) -> None:
    report = sprint_report(state, "s1")

    assert report["done"] == 1
    assert report["open"] == 2
    assert report["done_points"] == 2
    assert report["open_points"] == 8
    assert report["open_issue_ids"] == ["i1", "i2"]
