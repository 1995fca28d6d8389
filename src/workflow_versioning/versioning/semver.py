"""Semantic version arithmetic.

Versions are plain ``MAJOR.MINOR.PATCH`` strings of non-negative integers.
Pre-release and build suffixes are not supported.
"""

from __future__ import annotations

import re
from enum import Enum

from workflow_versioning.errors import InvalidVersionFormat

_SEMVER_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")

# Each component owns six decimal digits of the sort key.
SORT_KEY_COMPONENT_LIMIT = 1_000_000

INITIAL_VERSION = "0.0.0"


class ChangeType(str, Enum):
    """Size of a change, i.e. which version component it bumps."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


def parse_version(value: str) -> tuple[int, int, int]:
    """Split a version string into its integer components.

    Raises:
        InvalidVersionFormat: If the value is not three dot-separated integers.
    """

    if not isinstance(value, str):
        raise InvalidVersionFormat(value, "not a string")
    match = _SEMVER_RE.match(value.strip())
    if match is None:
        raise InvalidVersionFormat(value)
    major, minor, patch = (int(part) for part in match.groups())
    return major, minor, patch


def format_version(major: int, minor: int, patch: int) -> str:
    if min(major, minor, patch) < 0:
        raise InvalidVersionFormat(f"{major}.{minor}.{patch}", "components must be non-negative")
    return f"{major}.{minor}.{patch}"


def next_version(current: str, bump: ChangeType | str) -> str:
    """Return the version that follows ``current`` for the given bump.

    >>> next_version("1.4.2", ChangeType.MINOR)
    '1.5.0'
    """

    major, minor, patch = parse_version(current)
    change_type = ChangeType(bump)

    if change_type is ChangeType.MAJOR:
        return format_version(major + 1, 0, 0)
    if change_type is ChangeType.MINOR:
        return format_version(major, minor + 1, 0)
    return format_version(major, minor, patch + 1)


def to_sort_key(value: str) -> int:
    """Encode a version as a monotonic integer for ordering.

    Components must stay below ``SORT_KEY_COMPONENT_LIMIT``; larger values
    are rejected instead of being allowed to overlap the next component.
    """

    major, minor, patch = parse_version(value)
    for component in (minor, patch):
        if component >= SORT_KEY_COMPONENT_LIMIT:
            raise InvalidVersionFormat(
                value, f"minor and patch must be below {SORT_KEY_COMPONENT_LIMIT}"
            )
    return (major * SORT_KEY_COMPONENT_LIMIT + minor) * SORT_KEY_COMPONENT_LIMIT + patch
