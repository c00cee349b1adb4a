"""Central schema registry with version metadata."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class SchemaDescriptor:
    """Describes a result schema published by sprintboard."""

    name: str
    version: str
    description: str


_REGISTRY: dict[str, SchemaDescriptor] = {
    "placement": SchemaDescriptor(
        name="placement",
        version="20261019",
        description="Outcome of a single issue placement (place).",
    ),
    "lifecycle": SchemaDescriptor(
        name="lifecycle",
        version="20261019",
        description="Outcome of a sprint transition, edit, creation or deletion.",
    ),
    "audit": SchemaDescriptor(
        name="audit",
        version="20261019",
        description="Invariant audit report over a project state.",
    ),
}


def get_schema_descriptor(name: str) -> SchemaDescriptor:
    """Return a copy of a schema descriptor by name."""

    try:
        descriptor = _REGISTRY[name]
    except KeyError as exc:
        raise KeyError(f"Unknown schema '{name}'") from exc
    return replace(descriptor)


def get_schema_registry() -> dict[str, SchemaDescriptor]:
    return {name: replace(descriptor) for name, descriptor in _REGISTRY.items()}


__all__ = [
    "SchemaDescriptor",
    "get_schema_descriptor",
    "get_schema_registry",
]
