"""Structural diff between two workflow definition snapshots.

Steps are matched by id, never by position. Parameters, conditions, triggers
and metadata values are compared as opaque wholes (canonical JSON equality);
there is no recursive sub-diff inside them.

Emission order is fixed: scalar fields, added steps, removed steps, modified
steps, triggers, metadata.
"""

from __future__ import annotations

import json
from typing import Any

from workflow_versioning.versioning.models import (
    Change,
    ChangeKind,
    Step,
    WorkflowDefinition,
    WorkflowMetadata,
)

SCALAR_FIELDS: tuple[str, ...] = ("name", "description")
STEP_FIELDS: tuple[str, ...] = ("name", "type", "agent", "service", "action")
STEP_BLOB_FIELDS: tuple[str, ...] = ("parameters", "conditions")
METADATA_FIELDS: tuple[tuple[str, str], ...] = (
    ("required_services", "requiredServices"),
    ("required_agents", "requiredAgents"),
    ("criticality", "criticality"),
    ("tags", "tags"),
    ("compliance", "compliance"),
)


def canonical_json(value: Any) -> str:
    """Serialize a value so that equal structures produce equal strings."""

    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def _same(old: Any, new: Any) -> bool:
    return canonical_json(old) == canonical_json(new)


def diff(old: WorkflowDefinition, new: WorkflowDefinition) -> list[Change]:
    """Compute the ordered list of changes turning ``old`` into ``new``."""

    changes: list[Change] = []
    changes.extend(_diff_scalars(old, new))
    changes.extend(_diff_steps(old.steps, new.steps))
    changes.extend(_diff_triggers(old.triggers, new.triggers))
    changes.extend(_diff_metadata(old.metadata, new.metadata))
    return changes


def _diff_scalars(old: WorkflowDefinition, new: WorkflowDefinition) -> list[Change]:
    changes: list[Change] = []
    for field in SCALAR_FIELDS:
        old_value = getattr(old, field)
        new_value = getattr(new, field)
        if old_value != new_value:
            changes.append(
                Change(
                    type=ChangeKind.MODIFIED,
                    path=field,
                    old_value=old_value,
                    new_value=new_value,
                )
            )
    return changes


def _diff_steps(old_steps: list[Step], new_steps: list[Step]) -> list[Change]:
    old_by_id = {step.id: step for step in old_steps}
    new_by_id = {step.id: step for step in new_steps}

    added = [
        Change(
            type=ChangeKind.ADDED,
            path=f"steps.{step.id}",
            new_value=step.to_wire(),
            description=f"Added step: {step.name}",
        )
        for step in new_steps
        if step.id not in old_by_id
    ]
    removed = [
        Change(
            type=ChangeKind.REMOVED,
            path=f"steps.{step.id}",
            old_value=step.to_wire(),
            description=f"Removed step: {step.name}",
        )
        for step in old_steps
        if step.id not in new_by_id
    ]

    modified: list[Change] = []
    for old_step in old_steps:
        new_step = new_by_id.get(old_step.id)
        if new_step is not None:
            modified.extend(_diff_step(old_step, new_step))

    return added + removed + modified


def _diff_step(old_step: Step, new_step: Step) -> list[Change]:
    step_path = f"steps.{old_step.id}"
    changes: list[Change] = []

    for field in STEP_FIELDS:
        old_value = getattr(old_step, field)
        new_value = getattr(new_step, field)
        if old_value != new_value:
            changes.append(
                Change(
                    type=ChangeKind.MODIFIED,
                    path=f"{step_path}.{field}",
                    old_value=old_value,
                    new_value=new_value,
                )
            )

    for field in STEP_BLOB_FIELDS:
        old_value = getattr(old_step, field)
        new_value = getattr(new_step, field)
        if not _same(old_value, new_value):
            changes.append(
                Change(
                    type=ChangeKind.MODIFIED,
                    path=f"{step_path}.{field}",
                    old_value=old_value,
                    new_value=new_value,
                )
            )

    return changes


def _diff_triggers(old_triggers: list[Any], new_triggers: list[Any]) -> list[Change]:
    if _same(old_triggers, new_triggers):
        return []
    return [
        Change(
            type=ChangeKind.MODIFIED,
            path="triggers",
            old_value=old_triggers,
            new_value=new_triggers,
            description="Workflow triggers modified",
        )
    ]


def _diff_metadata(old: WorkflowMetadata, new: WorkflowMetadata) -> list[Change]:
    changes: list[Change] = []
    for attr, key in METADATA_FIELDS:
        old_value = getattr(old, attr)
        new_value = getattr(new, attr)
        if not _same(old_value, new_value):
            changes.append(
                Change(
                    type=ChangeKind.MODIFIED,
                    path=f"metadata.{key}",
                    old_value=old_value,
                    new_value=new_value,
                )
            )
    return changes
