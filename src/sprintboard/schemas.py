"""JSON Schemas for the payloads returned by engine operations.

Schemas cover the top-level structure and the fields rendering relies on;
nested objects stay open to allow additive evolution. ``validate_payload``
checks a ``to_dict()`` payload with jsonschema's Draft 7 validator.
"""

from __future__ import annotations

from typing import Any

from jsonschema import Draft7Validator

from .schema_registry import get_schema_descriptor

SCHEMA_KEY = "$schema"
SCHEMA_URL = "http://json-schema.org/draft-07/schema#"

_NULLABLE_STRING = {"type": ["string", "null"]}

_ISSUE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "project_id", "lane_id", "sprint_id", "rank", "lane_rank"],
    "properties": {
        "id": {"type": "string"},
        "project_id": {"type": "string"},
        "title": {"type": "string"},
        "lane_id": {"type": "string"},
        "sprint_id": _NULLABLE_STRING,
        "rank": {"type": "number"},
        "lane_rank": {"type": "number"},
        "type": {"enum": ["Task", "Bug", "Story", "Epic"]},
        "priority": {"enum": ["Low", "Medium", "High", "Urgent"]},
        "assignee_ids": {"type": "array", "items": {"type": "string"}},
        "story_points": {"type": ["integer", "null"]},
    },
}

_SPRINT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "project_id", "name", "is_active", "is_completed", "state"],
    "properties": {
        "id": {"type": "string"},
        "project_id": {"type": "string"},
        "name": {"type": "string"},
        "goal": {"type": "string"},
        "is_active": {"type": "boolean"},
        "is_completed": {"type": "boolean"},
        "state": {"enum": ["planned", "active", "completed"]},
    },
}


def get_schemas() -> dict[str, Any]:
    """Return a mapping of schema name -> JSON Schema dictionary.

    Keys:
        placement: result of ``place``.
        lifecycle: result of sprint create/start/complete/delete/edit.
        audit:     report produced by ``integrity.audit``.
    """
    placement_descriptor = get_schema_descriptor("placement")
    placement_schema: dict[str, Any] = {
        SCHEMA_KEY: SCHEMA_URL,
        "$comment": f"sprintboard placement schema v{placement_descriptor.version}",
        "title": "PlacementResult",
        "type": "object",
        "required": ["issue", "destination", "key", "over_limit", "renumbered"],
        "properties": {
            "issue": _ISSUE_SCHEMA,
            "destination": {"type": "string", "pattern": "^(backlog|sprint:.+|lane:.+)$"},
            "key": {"type": "number"},
            "over_limit": {"type": "boolean"},
            "renumbered": {"type": "array", "items": {"type": "string"}},
        },
    }

    lifecycle_descriptor = get_schema_descriptor("lifecycle")
    lifecycle_schema: dict[str, Any] = {
        SCHEMA_KEY: SCHEMA_URL,
        "$comment": f"sprintboard lifecycle schema v{lifecycle_descriptor.version}",
        "title": "LifecycleResult",
        "type": "object",
        "required": ["transition", "sprint", "reassigned"],
        "properties": {
            "transition": {"enum": ["create", "start", "complete", "delete", "edit"]},
            "sprint": {"oneOf": [_SPRINT_SCHEMA, {"type": "null"}]},
            "reassigned": {"type": "array", "items": {"type": "string"}},
        },
    }

    audit_descriptor = get_schema_descriptor("audit")
    audit_schema: dict[str, Any] = {
        SCHEMA_KEY: SCHEMA_URL,
        "$comment": f"sprintboard audit schema v{audit_descriptor.version}",
        "title": "AuditReport",
        "type": "object",
        "required": ["summary", "problems", "consistent"],
        "properties": {
            "summary": {
                "type": "object",
                "required": ["issue_count", "sprint_count", "problem_count"],
            },
            "problems": {
                "type": "array",
                "items": {
                    "type": "object",
                    "required": ["kind", "project_id"],
                    "properties": {
                        "kind": {
                            "enum": [
                                "duplicate_rank",
                                "duplicate_lane_rank",
                                "dangling_sprint",
                                "foreign_sprint",
                                "dangling_lane",
                                "multiple_active_sprints",
                            ]
                        },
                    },
                },
            },
            "consistent": {"type": "boolean"},
        },
    }

    return {
        "placement": placement_schema,
        "lifecycle": lifecycle_schema,
        "audit": audit_schema,
    }


def validate_payload(name: str, payload: Any) -> list[str]:
    """Return validation error messages for ``payload`` (empty when valid)."""
    schema = get_schemas()[name]
    validator = Draft7Validator(schema)
    return [
        f"{'/'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
        for err in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path])
    ]


__all__ = ["get_schemas", "validate_payload"]
