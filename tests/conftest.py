"""Pytest configuration for sprintboard tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`), and provides a
seeded project state mirroring a small engineering board.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path

import pytest

_TEST_START_TIMES: dict[str, float] = {}
_TEST_DURATIONS: list[tuple[str, float]] = []

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from sprintboard.models import Board, Column, Issue, IssueType, Priority, Sprint  # noqa: E402
from sprintboard.state import ProjectState  # noqa: E402


def make_issue(issue_id: str, *, rank: float, lane_rank: float | None = None, **overrides) -> Issue:  # type: ignore[no-untyped-def]
    base = {
        "id": issue_id,
        "project_id": "p1",
        "title": f"Issue {issue_id}",
        "lane_id": "c1",
        "sprint_id": None,
        "rank": rank,
        "lane_rank": rank if lane_rank is None else lane_rank,
        "type": IssueType.TASK,
        "priority": Priority.MEDIUM,
    }
    base.update(overrides)
    return Issue(**base)


def make_board() -> Board:
    return Board(
        id="b1",
        project_id="p1",
        title="Engineering Board",
        columns=[
            Column(id="c1", title="To Do", order=0),
            Column(id="c2", title="In Progress", order=1, limit=3),
            Column(id="c3", title="Code Review", order=2),
            Column(id="c4", title="Done", order=3, done=True),
        ],
    )


@pytest.fixture
def state() -> ProjectState:
    """Backlog b1..b3, planned sprint s1 with i1..i3, active sprint s0 empty.

    Lanes: b1, b2, i1 in c1; b3, i2 in c2; i3 in c4 (done).
    """
    return ProjectState.from_records(
        boards=[make_board()],
        sprints=[
            Sprint(id="s0", project_id="p1", name="Sprint 1", is_active=True),
            Sprint(id="s1", project_id="p1", name="Sprint 2"),
        ],
        issues=[
            make_issue("b1", rank=0.0, lane_rank=0.0),
            make_issue("b2", rank=1024.0, lane_rank=1024.0),
            make_issue("b3", rank=2048.0, lane_rank=0.0, lane_id="c2"),
            make_issue("i1", rank=0.0, lane_rank=2048.0, sprint_id="s1", story_points=3),
            make_issue("i2", rank=1024.0, lane_rank=1024.0, sprint_id="s1", lane_id="c2", story_points=5),
            make_issue("i3", rank=2048.0, lane_rank=0.0, sprint_id="s1", lane_id="c4", story_points=2),
        ],
    )


# --- Timing utilities to help identify slow/stalling tests ---


def pytest_runtest_setup(item):  # type: ignore
    _TEST_START_TIMES[item.nodeid] = time.perf_counter()


def pytest_runtest_teardown(item):  # type: ignore
    start = _TEST_START_TIMES.pop(item.nodeid, None)
    if start is not None:
        _TEST_DURATIONS.append((item.nodeid, time.perf_counter() - start))


def pytest_sessionfinish(session, exitstatus):  # type: ignore
    if not _TEST_DURATIONS:
        return
    slow = sorted(_TEST_DURATIONS, key=lambda x: x[1], reverse=True)[:10]
    print("\n=== Slowest Tests (top 10) ===")
    for nodeid, secs in slow:
        print(f"{secs:0.3f}s  {nodeid}")
