"""In-memory version store.

Useful for tests and for processes that do not need history to survive a
restart.

Records are deep-copied on the way in and on the way out. ``Version`` is
frozen, but the change values it carries are plain dicts, and a caller
editing one must not rewrite the stored history.
"""

from __future__ import annotations

import threading

from workflow_versioning.store.base import VersionStore
from workflow_versioning.store.ledger import VersionLedger
from workflow_versioning.versioning.models import Version, WorkflowDefinition


def _detached(version: Version | None) -> Version | None:
    return version.model_copy(deep=True) if version is not None else None


class InMemoryVersionStore(VersionStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ledger = VersionLedger()

    def get_active(self, document_id: str) -> Version | None:
        with self._lock:
            return _detached(self._ledger.active(document_id))

    def get_version(self, version_id: str) -> Version | None:
        with self._lock:
            return _detached(self._ledger.version(version_id))

    def list_history(self, document_id: str) -> list[Version]:
        with self._lock:
            return [v.model_copy(deep=True) for v in self._ledger.history(document_id)]

    def get_snapshot(self, version_id: str) -> WorkflowDefinition:
        # The ledger keeps snapshots as wire dicts and validates a fresh model per read.
        with self._lock:
            return self._ledger.snapshot(version_id)

    def append(self, version: Version, snapshot: WorkflowDefinition) -> None:
        with self._lock:
            self._ledger.append(version.model_copy(deep=True), snapshot)

    def deactivate(self, version_id: str) -> None:
        with self._lock:
            self._ledger.deactivate(version_id)

    def commit(
        self,
        version: Version,
        snapshot: WorkflowDefinition,
        *,
        expected_active_id: str | None,
    ) -> None:
        with self._lock:
            self._ledger.commit(version.model_copy(deep=True), snapshot, expected_active_id)
