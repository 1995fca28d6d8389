"""Abstract base class for version stores."""

from __future__ import annotations

from abc import ABC, abstractmethod

from workflow_versioning.versioning.models import Version, WorkflowDefinition


class VersionStore(ABC):
    """Append-only, per-document version history.

    Implementations must keep at most one active version per document at every
    observable instant. :meth:`commit` is the only way the service activates a
    new version; it must be atomic with respect to readers and other writers.
    """

    @abstractmethod
    def get_active(self, document_id: str) -> Version | None:
        """Return the active version of a document, or None if it has none."""
        pass

    @abstractmethod
    def get_version(self, version_id: str) -> Version | None:
        """Return a version record by id."""
        pass

    @abstractmethod
    def list_history(self, document_id: str) -> list[Version]:
        """Return every version of a document, newest (highest number) first."""
        pass

    @abstractmethod
    def get_snapshot(self, version_id: str) -> WorkflowDefinition:
        """Load the definition captured with a version.

        Raises:
            SnapshotMissing: If no snapshot is stored for the version.
        """
        pass

    @abstractmethod
    def append(self, version: Version, snapshot: WorkflowDefinition) -> None:
        """Record a version and its snapshot without superseding anything.

        Raises:
            ConcurrentModificationConflict: If ``version`` is active and the
                document already has an active version.
            ValueError: If the id is reused or the version number does not increase.
        """
        pass

    @abstractmethod
    def deactivate(self, version_id: str) -> None:
        """Flip a version's ``is_active`` flag to False."""
        pass

    @abstractmethod
    def commit(
        self,
        version: Version,
        snapshot: WorkflowDefinition,
        *,
        expected_active_id: str | None,
    ) -> None:
        """Atomically deactivate ``expected_active_id`` and append ``version``.

        Args:
            version: The new (active) version record.
            snapshot: The definition captured with it.
            expected_active_id: Id of the version the caller read as active, or
                None if the caller saw no active version.

        Raises:
            ConcurrentModificationConflict: If the document's active version is
                no longer ``expected_active_id``. Nothing is written.
            StoreUnavailable: If the backend cannot be reached in time.
        """
        pass
