"""sprintboard - issue placement and sprint lifecycle engine.

High-level public API (stable):

from sprintboard import Tracker, ProjectState, LaneTarget

tracker = Tracker(state)  # or Tracker.from_config_path('sprintboard.yaml', state)
result = tracker.place('ISSUE-7', LaneTarget('c2'), anchor_id='ISSUE-3')
print(result.over_limit)

The engine is an in-process library; the UI layer reads the derived views
(``tracker.backlog``, ``tracker.sprint``, ``tracker.lane``) and calls the
mutation methods. Module-level functions in ``engine`` and ``lifecycle`` take
the state explicitly for callers that do not want the facade.
"""

from __future__ import annotations

from .config import TrackerConfig, default_config, load_config
from .core import Tracker
from .errors import (
    ConflictingActiveSprintError,
    InvalidAnchorError,
    InvalidSprintStateError,
    IssueNotFoundError,
    LaneNotFoundError,
    NoOpMoveError,
    NotFoundError,
    SprintNotFoundError,
    TrackerError,
)
from .models import (
    BacklogTarget,
    Board,
    Column,
    Destination,
    Issue,
    IssueType,
    LaneTarget,
    Priority,
    Sprint,
    SprintState,
    SprintTarget,
)
from .state import ProjectState

# Version constant (sync manually with pyproject)
__version__ = "0.1.0"

__all__ = [
    "Tracker",
    "ProjectState",
    "TrackerConfig",
    "default_config",
    "load_config",
    "Issue",
    "IssueType",
    "Priority",
    "Sprint",
    "SprintState",
    "Column",
    "Board",
    "BacklogTarget",
    "SprintTarget",
    "LaneTarget",
    "Destination",
    "TrackerError",
    "NotFoundError",
    "IssueNotFoundError",
    "SprintNotFoundError",
    "LaneNotFoundError",
    "InvalidAnchorError",
    "NoOpMoveError",
    "ConflictingActiveSprintError",
    "InvalidSprintStateError",
    "__version__",
]
