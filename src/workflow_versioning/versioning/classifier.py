"""Breaking-change classification for a list of changes."""

from __future__ import annotations

from collections.abc import Iterable

from workflow_versioning.versioning.models import Change, ChangeKind, Compatibility

BREAKING_DEPENDENCY_KEYS: tuple[str, ...] = ("requiredServices", "requiredAgents")


def is_breaking(change: Change) -> bool:
    """Return True if consumers of the previous version may break.

    Removing a step, changing a step's type, and touching the required
    services/agents are breaking.
    """

    if change.type is ChangeKind.REMOVED and change.path.startswith("steps."):
        return True
    if change.type is ChangeKind.MODIFIED and change.path.endswith(".type"):
        return True
    return any(key in change.path for key in BREAKING_DEPENDENCY_KEYS)


def breaking_changes(changes: Iterable[Change]) -> list[Change]:
    """All breaking changes, in input order (useful for diagnostics)."""

    return [change for change in changes if is_breaking(change)]


def classify(changes: Iterable[Change]) -> bool:
    return any(is_breaking(change) for change in changes)


def compatibility(changes: Iterable[Change]) -> Compatibility:
    items = list(changes)
    if classify(items):
        return Compatibility.INCOMPATIBLE
    if items:
        return Compatibility.WARNING
    return Compatibility.COMPATIBLE
