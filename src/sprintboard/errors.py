"""Error taxonomy for placement and sprint lifecycle operations.

Every rejection raised by the engine derives from ``TrackerError`` and carries
a stable ``category`` string. Callers surface these as a rejected user action;
the state is left exactly as it was before the call.

Public API:
- TrackerError and its subclasses
- classify_error(exc) -> ErrorInfo
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class TrackerError(Exception):
    category = "generic"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details


class NotFoundError(TrackerError, LookupError):
    category = "not_found"


class IssueNotFoundError(NotFoundError):
    def __init__(self, issue_id: str) -> None:
        super().__init__(f"Issue not found: {issue_id}", kind="issue", id=issue_id)


class SprintNotFoundError(NotFoundError):
    def __init__(self, sprint_id: str) -> None:
        super().__init__(f"Sprint not found: {sprint_id}", kind="sprint", id=sprint_id)


class LaneNotFoundError(NotFoundError):
    def __init__(self, lane_id: str) -> None:
        super().__init__(f"Lane not found: {lane_id}", kind="lane", id=lane_id)


class InvalidAnchorError(TrackerError):
    category = "invalid_anchor"


class NoOpMoveError(TrackerError):
    category = "noop_move"


class ConflictingActiveSprintError(TrackerError):
    category = "conflicting_active_sprint"


class InvalidSprintStateError(TrackerError):
    """Requested transition is not valid from the sprint's current state."""

    category = "precondition"


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    recoverable: bool = False
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "message": self.message,
            "original_type": self.original_type,
            "recoverable": self.recoverable,
            "details": self.details or {},
        }


def classify_error(exc: BaseException) -> ErrorInfo:
    """Classify an exception for logging and user-facing reporting.

    - TrackerError subclasses -> their own category, recoverable
    - Fallback -> 'generic', not recoverable
    """
    msg = str(exc) if exc else ""
    if isinstance(exc, TrackerError):
        return ErrorInfo(
            exc.category,
            msg,
            exc.__class__.__name__,
            recoverable=True,
            details=dict(exc.details) or None,
        )
    return ErrorInfo("generic", msg, exc.__class__.__name__)


__all__ = [
    "TrackerError",
    "NotFoundError",
    "IssueNotFoundError",
    "SprintNotFoundError",
    "LaneNotFoundError",
    "InvalidAnchorError",
    "NoOpMoveError",
    "ConflictingActiveSprintError",
    "InvalidSprintStateError",
    "ErrorInfo",
    "classify_error",
]
