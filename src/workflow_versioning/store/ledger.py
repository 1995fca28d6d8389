"""Version history bookkeeping shared by the store backends.

A ledger is plain in-memory state. It enforces the history invariants (one
active version per document, strictly increasing version numbers, append-only
records) but knows nothing about locking or persistence; backends wrap every
call in their own lock and, where needed, load/save the ledger around it.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from workflow_versioning.errors import ConcurrentModificationConflict, SnapshotMissing
from workflow_versioning.versioning.models import Version, WorkflowDefinition


@dataclass
class VersionLedger:
    versions: dict[str, Version] = field(default_factory=dict)
    snapshots: dict[str, dict[str, Any]] = field(default_factory=dict)

    def active(self, document_id: str) -> Version | None:
        for version in self.versions.values():
            if version.document_id == document_id and version.is_active:
                return version
        return None

    def history(self, document_id: str) -> list[Version]:
        matching = [v for v in self.versions.values() if v.document_id == document_id]
        return sorted(matching, key=lambda v: v.version_number, reverse=True)

    def version(self, version_id: str) -> Version | None:
        return self.versions.get(version_id)

    def snapshot(self, version_id: str) -> WorkflowDefinition:
        data = self.snapshots.get(version_id)
        if data is None:
            raise SnapshotMissing(version_id)
        try:
            # Validation keeps nested values by reference; hand out a private copy.
            return WorkflowDefinition.model_validate(copy.deepcopy(data))
        except ValidationError as e:
            raise SnapshotMissing(version_id) from e

    def deactivate(self, version_id: str) -> None:
        current = self.versions.get(version_id)
        if current is None:
            raise KeyError(f"Version not found: {version_id}")
        if current.is_active:
            self.versions[version_id] = current.model_copy(update={"is_active": False})

    def append(self, version: Version, snapshot: WorkflowDefinition) -> None:
        if version.id in self.versions:
            raise ValueError(f"Version id already recorded: {version.id}")

        history = self.history(version.document_id)
        if history and version.version_number <= history[0].version_number:
            raise ValueError(
                f"Version number {version.version_number} does not increase on "
                f"{history[0].version_number} for {version.document_id}"
            )

        if version.is_active:
            active = self.active(version.document_id)
            if active is not None:
                raise ConcurrentModificationConflict(version.document_id, None, active.id)

        self.versions[version.id] = version
        self.snapshots[version.id] = snapshot.to_wire()

    def commit(
        self, version: Version, snapshot: WorkflowDefinition, expected_active_id: str | None
    ) -> None:
        """Supersede ``expected_active_id`` with ``version`` or change nothing."""

        active = self.active(version.document_id)
        actual_active_id = active.id if active is not None else None
        if actual_active_id != expected_active_id:
            raise ConcurrentModificationConflict(
                version.document_id, expected_active_id, actual_active_id
            )

        # Validate the append before touching the active record so a rejected
        # append leaves the ledger unchanged.
        trial = VersionLedger(versions=dict(self.versions), snapshots={})
        if active is not None:
            trial.deactivate(active.id)
        trial.append(version, snapshot)

        if active is not None:
            self.deactivate(active.id)
        self.append(version, snapshot)

    def to_json(self) -> dict[str, Any]:
        return {
            "versions": [v.to_wire() for v in self.versions.values()],
            "snapshots": dict(self.snapshots),
        }

    @staticmethod
    def from_json(obj: dict[str, Any]) -> VersionLedger:
        """Rebuild a ledger from :meth:`to_json` output.

        Raises:
            TypeError: If ``versions`` is not a list or ``snapshots`` not an object.
            ValidationError: If a version record does not validate.
        """

        versions_raw = obj.get("versions") or []
        snapshots_raw = obj.get("snapshots") or {}
        if not isinstance(versions_raw, list):
            raise TypeError(f"'versions' must be a list, got {type(versions_raw).__name__}")
        if not isinstance(snapshots_raw, dict):
            raise TypeError(f"'snapshots' must be an object, got {type(snapshots_raw).__name__}")
        versions = [Version.model_validate(item) for item in versions_raw]
        return VersionLedger(
            versions={v.id: v for v in versions},
            snapshots={str(k): v for k, v in snapshots_raw.items()},
        )
