"""Pydantic models for workflow definitions and their version history.

Python attributes are snake_case; the wire format (JSON import/export) is
camelCase so documents written by other services load unchanged.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from workflow_versioning.versioning.semver import ChangeType, parse_version

_DOCUMENT_ID_KEYS = ("documentId", "useCaseId", "document_id")


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using wire (camelCase) names."""

        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# WORKFLOW DEFINITION (owned by the caller, treated as structured input)
# ============================================================================


class Step(_WireModel):
    """One unit of work, identified across revisions by ``id``."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    type: str = ""
    agent: str | None = None
    service: str | None = None
    action: str | None = None
    parameters: dict[str, Any] | None = None
    conditions: Any = None


class WorkflowMetadata(_WireModel):
    model_config = ConfigDict(extra="allow")

    required_services: list[str] = Field(default_factory=list)
    required_agents: list[str] = Field(default_factory=list)
    criticality: str | None = None
    tags: list[str] = Field(default_factory=list)
    compliance: Any = None


class WorkflowDefinition(_WireModel):
    """A versionable workflow document.

    ``document_id`` is the logical entity whose history is tracked. It is read
    from ``documentId`` or ``useCaseId`` and falls back to ``id``.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    document_id: str = Field(
        validation_alias=AliasChoices(*_DOCUMENT_ID_KEYS),
        serialization_alias="documentId",
    )
    name: str
    description: str = ""
    version: str | None = None
    steps: list[Step] = Field(default_factory=list)
    triggers: list[Any] = Field(default_factory=list)
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)

    @model_validator(mode="before")
    @classmethod
    def _default_document_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and "id" in data:
            if not any(data.get(key) for key in _DOCUMENT_ID_KEYS):
                return {**data, "document_id": data["id"]}
        return data

    @field_validator("steps")
    @classmethod
    def _unique_step_ids(cls, steps: list[Step]) -> list[Step]:
        seen: set[str] = set()
        for step in steps:
            if step.id in seen:
                raise ValueError(f"duplicate step id: {step.id}")
            seen.add(step.id)
        return steps


# ============================================================================
# CHANGES AND VERSIONS
# ============================================================================


class ChangeKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


class Compatibility(str, Enum):
    COMPATIBLE = "compatible"
    WARNING = "warning"
    INCOMPATIBLE = "incompatible"


class Change(_WireModel):
    """One atomic difference between two definition snapshots."""

    type: ChangeKind
    path: str
    old_value: Any = None
    new_value: Any = None
    description: str | None = None


class VersionMetadata(_WireModel):
    change_type: ChangeType
    description: str
    breaking: bool = False
    tags: tuple[str, ...] = ()

    @field_validator("tags", mode="before")
    @classmethod
    def _unique_tags(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        return tuple(dict.fromkeys(value))


class Version(_WireModel):
    """Immutable history record.

    Only ``is_active`` ever changes, and the store does that by replacing the
    record with a copy; objects already handed out keep their values.
    """

    id: str
    workflow_id: str
    document_id: str
    version: str
    version_number: int
    changes: tuple[Change, ...] = ()
    created_at: datetime
    created_by: str | None = None
    is_active: bool = True
    rollback_from: str | None = None
    metadata: VersionMetadata


class ChangeRequest(_WireModel):
    """Caller-supplied description of a new version."""

    change_type: ChangeType
    description: str
    breaking: bool = False
    tags: list[str] = Field(default_factory=list)
    base_version: str | None = Field(
        default=None,
        description="Version string for the first version of a document (ignored afterwards)",
    )

    @field_validator("base_version")
    @classmethod
    def _valid_base_version(cls, value: str | None) -> str | None:
        if value is not None:
            parse_version(value)
        return value


class CurrentVersion(_WireModel):
    version: str
    definition: WorkflowDefinition
    version_id: str


class ComparisonResult(_WireModel):
    changes: list[Change]
    breaking: bool
    compatibility: Compatibility
