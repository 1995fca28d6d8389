"""Error taxonomy for the versioning engine.

Every error is surfaced to the caller unmodified. The caller layer decides how
each kind maps onto its own outcomes (HTTP status, exit code, retry policy).
"""

from __future__ import annotations


class VersioningError(Exception):
    """Base class for all versioning errors."""


class WorkflowNotFound(VersioningError, LookupError):
    """Raised when a logical workflow id is unknown to the registry."""

    def __init__(self, document_id: str) -> None:
        super().__init__(f"Workflow not found: {document_id}")
        self.document_id = document_id


class VersionNotFound(VersioningError, LookupError):
    """Raised when a semver string (or version id) is absent from history."""

    def __init__(self, document_id: str, version: str) -> None:
        super().__init__(f"Version {version} not found for workflow {document_id}")
        self.document_id = document_id
        self.version = version


class SnapshotMissing(VersioningError, LookupError):
    """A version record exists but its definition snapshot cannot be loaded."""

    def __init__(self, version_id: str) -> None:
        super().__init__(f"Workflow data not found for version {version_id}")
        self.version_id = version_id


class InvalidVersionFormat(VersioningError, ValueError):
    """Raised for semver strings that are not three non-negative integers."""

    def __init__(self, value: object, reason: str = "expected MAJOR.MINOR.PATCH") -> None:
        super().__init__(f"Invalid version {value!r}: {reason}")
        self.value = value


class ConcurrentModificationConflict(VersioningError):
    """Raised when the active version was superseded by another writer.

    The operation had no effect and may be retried by the caller.
    """

    retryable = True

    def __init__(
        self, document_id: str, expected_active_id: str | None, actual_active_id: str | None
    ) -> None:
        super().__init__(
            f"Active version of {document_id} changed concurrently "
            f"(expected {expected_active_id or 'none'}, found {actual_active_id or 'none'})"
        )
        self.document_id = document_id
        self.expected_active_id = expected_active_id
        self.actual_active_id = actual_active_id


class StoreUnavailable(VersioningError):
    """Raised for I/O failures or timeouts in the persistence collaborator."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
