from __future__ import annotations

from sprintboard.engine import place
from sprintboard.integrity import audit, format_report
from sprintboard.lifecycle import delete_sprint
from sprintboard.models import BacklogTarget, LaneTarget, Sprint, SprintTarget
from sprintboard.state import ProjectState


def test_seed_state_is_consistent(state: ProjectState) -> None:
    report = audit(state)

    assert report["consistent"] is True
    assert report["summary"] == {"issue_count": 6, "sprint_count": 2, "problem_count": 0}
    assert format_report(report)[0].startswith("[audit] State consistent")


def test_engine_operations_keep_state_consistent(state: ProjectState) -> None:
    place(state, "b1", SprintTarget("s1"), anchor_id="i1")
    place(state, "i3", LaneTarget("c1"), anchor_id="b2")
    place(state, "i2", BacklogTarget())
    delete_sprint(state, "s1")

    assert audit(state)["consistent"] is True


def test_detects_duplicate_keys(state: ProjectState) -> None:
    state.issues["b2"].rank = state.issues["b1"].rank
    state.issues["i2"].lane_rank = state.issues["b3"].lane_rank

    report = audit(state)

    kinds = {p["kind"] for p in report["problems"]}
    assert kinds == {"duplicate_rank", "duplicate_lane_rank"}
    dup = next(p for p in report["problems"] if p["kind"] == "duplicate_rank")
    assert dup["issue_ids"] == ["b1", "b2"]
    assert dup["sprint_id"] is None
    lines = format_report(report)
    assert any("duplicate_rank: backlog" in line for line in lines)


def test_detects_dangling_references(state: ProjectState) -> None:
    state.issues["b1"].sprint_id = "ghost"
    state.issues["b2"].lane_id = "nowhere"

    report = audit(state)

    kinds = sorted(p["kind"] for p in report["problems"])
    assert kinds == ["dangling_lane", "dangling_sprint"]
    assert report["consistent"] is False


def test_detects_multiple_active_sprints(state: ProjectState) -> None:
    state.sprints["s1"].is_active = True

    report = audit(state)

    assert report["problems"] == [
        {"kind": "multiple_active_sprints", "project_id": "p1", "sprint_ids": ["s0", "s1"]}
    ]
    assert "multiple_active_sprints: p1 [s0,s1]" in format_report(report)[1]


def test_detects_sprint_of_another_project(state: ProjectState) -> None:
    state.sprints["sx"] = Sprint(id="sx", project_id="p2", name="Other project")
    state.issues["b1"].sprint_id = "sx"
    state.issues["b1"].rank = -1.0

    report = audit(state)

    assert report["problems"] == [
        {"kind": "foreign_sprint", "project_id": "p1", "issue_id": "b1", "sprint_id": "sx"}
    ]
    assert "foreign_sprint: b1 -> sx" in format_report(report)[1]
