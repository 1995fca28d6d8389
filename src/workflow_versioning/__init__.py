"""Workflow Versioning.

Change tracking and rollback for workflow definitions:
- structural diffs between definition snapshots
- breaking-change classification
- semantic version arithmetic
- append-only history with a single active version per workflow
"""

__version__ = "0.1.0"

from workflow_versioning.config import VersioningSettings
from workflow_versioning.errors import (
    ConcurrentModificationConflict,
    InvalidVersionFormat,
    SnapshotMissing,
    StoreUnavailable,
    VersioningError,
    VersionNotFound,
    WorkflowNotFound,
)
from workflow_versioning.versioning.models import (
    Change,
    ChangeKind,
    ChangeRequest,
    ComparisonResult,
    Compatibility,
    CurrentVersion,
    Step,
    Version,
    VersionMetadata,
    WorkflowDefinition,
    WorkflowMetadata,
)
from workflow_versioning.versioning.semver import ChangeType
from workflow_versioning.versioning.service import VersioningService

__all__ = [
    "__version__",
    "Change",
    "ChangeKind",
    "ChangeRequest",
    "ChangeType",
    "ComparisonResult",
    "Compatibility",
    "ConcurrentModificationConflict",
    "CurrentVersion",
    "InvalidVersionFormat",
    "SnapshotMissing",
    "Step",
    "StoreUnavailable",
    "Version",
    "VersionMetadata",
    "VersionNotFound",
    "VersioningError",
    "VersioningService",
    "VersioningSettings",
    "WorkflowDefinition",
    "WorkflowMetadata",
    "WorkflowNotFound",
]
