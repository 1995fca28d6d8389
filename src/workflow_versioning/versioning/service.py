"""Versioning service: the public contract for workflow definition history.

The service is stateless apart from its history cache. Construct one instance
at process start and pass it to whatever needs it.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from workflow_versioning.config import VersioningSettings
from workflow_versioning.errors import (
    ConcurrentModificationConflict,
    VersioningError,
    VersionNotFound,
    WorkflowNotFound,
)
from workflow_versioning.registry import WorkflowRegistry
from workflow_versioning.store.base import VersionStore
from workflow_versioning.store.factory import create_store
from workflow_versioning.versioning import classifier, differ
from workflow_versioning.versioning.cache import HistoryCache
from workflow_versioning.versioning.models import (
    ChangeRequest,
    ComparisonResult,
    CurrentVersion,
    Version,
    VersionMetadata,
    WorkflowDefinition,
)
from workflow_versioning.versioning.semver import (
    INITIAL_VERSION,
    ChangeType,
    next_version,
    parse_version,
    to_sort_key,
)

logger = logging.getLogger(__name__)

ROLLBACK_TAG = "rollback"


class VersioningService:
    """Create, inspect, compare and roll back workflow definition versions."""

    def __init__(
        self,
        store: VersionStore,
        *,
        registry: WorkflowRegistry | None = None,
        cache: HistoryCache | None = None,
        base_version: str = INITIAL_VERSION,
        cache_enabled: bool = True,
    ) -> None:
        """Initialize the service.

        Args:
            store: Persistence for version records and snapshots.
            registry: Optional workflow registry. When set, versions can only be
                created for workflows it knows, and it is kept up to date with
                each new version.
            cache: History cache to use (a private one is created if omitted).
            base_version: Version bumped from for a document's first version.
            cache_enabled: Serve history from the cache.
        """
        parse_version(base_version)
        self._store = store
        self._registry = registry
        self._cache = cache if cache is not None else HistoryCache()
        self._base_version = base_version
        self._cache_enabled = cache_enabled

    @classmethod
    def from_settings(
        cls, settings: VersioningSettings, *, registry: WorkflowRegistry | None = None
    ) -> VersioningService:
        return cls(
            create_store(settings),
            registry=registry,
            base_version=settings.base_version,
            cache_enabled=settings.cache_enabled,
        )

    @property
    def store(self) -> VersionStore:
        return self._store

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_version(
        self,
        definition: WorkflowDefinition,
        request: ChangeRequest | dict[str, Any],
        created_by: str | None = None,
    ) -> Version:
        """Record ``definition`` as the new active version of its document.

        Raises:
            WorkflowNotFound: If a registry is configured and does not know the
                document.
            ConcurrentModificationConflict: If another writer activated a version
                after this call read the current one. Safe to retry.
        """
        if not isinstance(request, ChangeRequest):
            request = ChangeRequest.model_validate(request)
        try:
            return self._create_version(definition, request, created_by)
        except ConcurrentModificationConflict:
            # Already reported as a lost race.
            raise
        except VersioningError as e:
            logger.error(
                "Failed to create workflow version",
                extra={
                    "document_id": definition.document_id,
                    "change_type": request.change_type.value,
                    "error": str(e),
                },
            )
            raise

    def _create_version(
        self,
        definition: WorkflowDefinition,
        request: ChangeRequest,
        created_by: str | None,
        rollback_from: str | None = None,
    ) -> Version:
        document_id = definition.document_id
        if self._registry is not None and not self._registry.has_workflow(document_id):
            raise WorkflowNotFound(document_id)

        active = self._store.get_active(document_id)

        if active is not None:
            previous = self._store.get_snapshot(active.id)
            changes = differ.diff(previous, definition)
            version_string = next_version(active.version, request.change_type)
        else:
            changes = []
            version_string = self._first_version(document_id, request)

        version = Version(
            id=str(uuid.uuid4()),
            workflow_id=definition.id,
            document_id=document_id,
            version=version_string,
            version_number=to_sort_key(version_string),
            changes=tuple(changes),
            created_at=datetime.now(tz=UTC),
            created_by=created_by,
            is_active=True,
            rollback_from=rollback_from,
            metadata=VersionMetadata(
                change_type=request.change_type,
                description=request.description,
                breaking=request.breaking,
                tags=request.tags,
            ),
        )

        try:
            self._store.commit(
                version,
                definition,
                expected_active_id=active.id if active is not None else None,
            )
        except ConcurrentModificationConflict as e:
            logger.warning(
                "Version creation lost a race",
                extra={
                    "document_id": document_id,
                    "expected_active_id": e.expected_active_id,
                    "actual_active_id": e.actual_active_id,
                },
            )
            raise

        self._cache.invalidate(document_id)

        if self._registry is not None:
            stamped = definition.model_copy(update={"version": version_string})
            self._registry.register_workflow(stamped)

        logger.info(
            "Created new version",
            extra={
                "document_id": document_id,
                "version": version_string,
                "version_id": version.id,
                "changes": len(changes),
            },
        )
        return version

    def _first_version(self, document_id: str, request: ChangeRequest) -> str:
        # A document can have history but no active version only if something
        # deactivated it directly; keep numbering monotonic in that case.
        history = self._store.list_history(document_id)
        if history:
            return next_version(history[0].version, request.change_type)
        if request.base_version is not None:
            return request.base_version
        return next_version(self._base_version, request.change_type)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_current_version(self, document_id: str) -> CurrentVersion | None:
        """Return the active version string and its definition, if any.

        Always read from the store, never from the history cache.
        """
        active = self._store.get_active(document_id)
        if active is None:
            return None
        definition = self._store.get_snapshot(active.id)
        return CurrentVersion(version=active.version, definition=definition, version_id=active.id)

    def get_version_history(self, document_id: str) -> list[Version]:
        """Return every version of a document, newest first."""
        if not self._cache_enabled:
            return self._store.list_history(document_id)

        cached = self._cache.get(document_id)
        if cached is not None:
            return cached

        # A commit landing during the load invalidates the generation, so the
        # now-stale list is not cached.
        generation = self._cache.generation(document_id)
        versions = self._store.list_history(document_id)
        self._cache.put(document_id, versions, generation=generation)
        return versions

    def _find_version(self, document_id: str, version: str) -> Version:
        parse_version(version)
        for candidate in self.get_version_history(document_id):
            if candidate.version == version:
                return candidate
        raise VersionNotFound(document_id, version)

    # ------------------------------------------------------------------
    # Rollback / compare / export
    # ------------------------------------------------------------------

    def rollback_to_version(
        self,
        document_id: str,
        target_version: str,
        reason: str,
        performed_by: str | None = None,
    ) -> WorkflowDefinition:
        """Re-activate the content of ``target_version`` as a new patch version.

        History is not rewound: a new version carrying the target's snapshot is
        appended with ``rollback_from`` pointing at the target.

        Raises:
            VersionNotFound: If ``target_version`` is not in the history.
            WorkflowNotFound: If a registry is configured and no longer knows
                the document.
        """
        try:
            target = self._find_version(document_id, target_version)
            snapshot = self._store.get_snapshot(target.id)
            request = ChangeRequest(
                change_type=ChangeType.PATCH,
                description=f"Rollback to version {target_version}: {reason}",
                breaking=False,
                tags=[ROLLBACK_TAG],
            )
            rollback = self._create_version(
                snapshot, request, performed_by, rollback_from=target.id
            )
        except VersioningError as e:
            logger.error(
                "Failed to rollback workflow",
                extra={
                    "document_id": document_id,
                    "target_version": target_version,
                    "error": str(e),
                },
            )
            raise

        logger.info(
            "Rolled back workflow",
            extra={
                "document_id": document_id,
                "target_version": target_version,
                "version": rollback.version,
            },
        )
        return snapshot

    def compare_versions(self, document_id: str, version1: str, version2: str) -> ComparisonResult:
        """Diff two historical versions; ``version1`` is treated as the old one."""
        old_version = self._find_version(document_id, version1)
        new_version = self._find_version(document_id, version2)

        old_definition = self._store.get_snapshot(old_version.id)
        new_definition = self._store.get_snapshot(new_version.id)

        changes = differ.diff(old_definition, new_definition)
        return ComparisonResult(
            changes=changes,
            breaking=classifier.classify(changes),
            compatibility=classifier.compatibility(changes),
        )

    def export_version_history(self, document_id: str) -> str:
        versions = self.get_version_history(document_id)
        return json.dumps([v.to_wire() for v in versions], indent=2, ensure_ascii=False)

    def clear_cache(self, document_id: str | None = None) -> None:
        if document_id is None:
            self._cache.clear()
        else:
            self._cache.invalidate(document_id)
