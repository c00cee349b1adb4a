from __future__ import annotations

import pytest

from sprintboard.engine import place
from sprintboard.integrity import audit
from sprintboard.lifecycle import complete_sprint, delete_sprint, start_sprint
from sprintboard.models import LaneTarget
from sprintboard.schema_registry import get_schema_descriptor, get_schema_registry
from sprintboard.schemas import get_schemas, validate_payload
from sprintboard.state import ProjectState


def test_registry_matches_published_schemas() -> None:
    schemas = get_schemas()

    assert set(schemas) == set(get_schema_registry())
    for name, schema in schemas.items():
        descriptor = get_schema_descriptor(name)
        assert descriptor.version in schema["$comment"]


def test_placement_payload_validates(state: ProjectState) -> None:
    result = place(state, "b1", LaneTarget("c2"), anchor_id="i2")

    assert validate_payload("placement", result.to_dict()) == []


def test_lifecycle_payloads_validate(state: ProjectState) -> None:
    completed = complete_sprint(state, "s0")
    started = start_sprint(state, "s1", "Goal")
    deleted = delete_sprint(state, "s1")

    for result in (completed, started, deleted):
        assert validate_payload("lifecycle", result.to_dict()) == []


def test_audit_payload_validates(state: ProjectState) -> None:
    state.issues["b1"].sprint_id = "ghost"

    assert validate_payload("audit", audit(state)) == []


def test_invalid_payload_reports_path() -> None:
    errors = validate_payload("lifecycle", {"transition": "restart", "sprint": None, "reassigned": []})

    assert len(errors) == 1
    assert errors[0].startswith("transition:")


def test_unknown_schema_name() -> None:
    with pytest.raises(KeyError):
        get_schema_descriptor("burndown")
