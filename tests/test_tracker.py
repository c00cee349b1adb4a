from __future__ import annotations

import copy
import json

import pytest

from sprintboard import (
    BacklogTarget,
    ConflictingActiveSprintError,
    InvalidAnchorError,
    LaneTarget,
    SprintTarget,
    Tracker,
)
from sprintboard.state import ProjectState
from conftest import make_issue

CONFIG = """
version: 1
ordering:
  step: 10
logging:
  json_enabled: true
  level: INFO
"""


def _json_lines(out: str) -> list[dict]:  # type: ignore[type-arg]
    entries = []
    for line in out.split("\n"):
        line = line.strip()
        if line.startswith("{"):
            entries.append(json.loads(line))
    return entries


@pytest.fixture
def tracker(state: ProjectState, tmp_path, capsys) -> Tracker:  # type: ignore[no-untyped-def]
    cfg_path = tmp_path / "sprintboard.yaml"
    cfg_path.write_text(CONFIG)
    # built while capsys is active so the log handler writes to captured stdout
    tracker = Tracker.from_config_path(cfg_path, state)
    capsys.readouterr()
    return tracker


def test_place_logs_structured_events(tracker: Tracker, capsys) -> None:  # type: ignore[no-untyped-def]
    result = tracker.place("b1", SprintTarget("s1"))

    assert result.key == 2048.0 + 10.0
    operations = [e.get("operation") for e in _json_lines(capsys.readouterr().out)]
    assert "place_start" in operations
    assert "place" in operations
    assert tracker.last_error is None


def test_rejection_is_classified_and_state_kept(tracker: Tracker, capsys) -> None:  # type: ignore[no-untyped-def]
    snapshot = copy.deepcopy(tracker.state)

    with pytest.raises(InvalidAnchorError):
        tracker.place("b1", SprintTarget("s1"), anchor_id="b2")

    assert tracker.state == snapshot
    assert tracker.last_error is not None
    assert tracker.last_error["category"] == "invalid_anchor"
    errors = [e for e in _json_lines(capsys.readouterr().out) if e["level"] == "ERROR"]
    assert len(errors) == 1
    assert errors[0]["category"] == "invalid_anchor"
    assert errors[0]["error_type"] == "InvalidAnchorError"


def test_last_error_cleared_on_success(tracker: Tracker) -> None:
    with pytest.raises(ConflictingActiveSprintError):
        tracker.start_sprint("s1", "goal")
    assert tracker.last_error is not None

    tracker.place("b2", BacklogTarget(), anchor_id="b1")
    assert tracker.last_error is None


def test_over_limit_warning(tracker: Tracker, capsys) -> None:  # type: ignore[no-untyped-def]
    tracker.place("b1", LaneTarget("c2"))
    result = tracker.place("b2", LaneTarget("c2"))

    assert result.over_limit is True
    entries = _json_lines(capsys.readouterr().out)
    assert any(e.get("message") == "lane over WIP limit" for e in entries)


def test_full_sprint_cycle(tracker: Tracker) -> None:
    tracker.complete_sprint("s0")
    created = tracker.create_sprint("p1")
    assert created.sprint is not None
    new_id = created.sprint.id
    assert created.sprint.name == "Sprint 3"

    tracker.add_issue(make_issue("n1", rank=0.0, lane_id="c3"))
    tracker.place("n1", SprintTarget(new_id))
    tracker.place("b1", SprintTarget(new_id), anchor_id="n1")
    tracker.edit_sprint(new_id, goal="Draft")
    tracker.start_sprint(new_id, "Deliver n1")
    result = tracker.complete_sprint(new_id)

    assert result.reassigned == ["b1", "n1"]
    assert [i.id for i in tracker.backlog("p1")][-2:] == ["b1", "n1"]
    assert tracker.sprint(new_id) == []
    assert tracker.audit()["consistent"] is True


def test_delete_and_lane_views(tracker: Tracker) -> None:
    result = tracker.delete_sprint("s1")

    assert result.reassigned == ["i1", "i2", "i3"]
    assert [i.id for i in tracker.lane("p1", "c2")] == ["b3", "i2"]
    tracker.update_column("p1", "c2", title="Doing", limit=1)
    tracker.remove_issue("b3")
    assert [i.id for i in tracker.lane("p1", "c2")] == ["i2"]
