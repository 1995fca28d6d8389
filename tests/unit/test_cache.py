"""Unit tests for the history cache."""

from __future__ import annotations

from datetime import UTC, datetime

from workflow_versioning.versioning.cache import HistoryCache
from workflow_versioning.versioning.models import Version, VersionMetadata
from workflow_versioning.versioning.semver import ChangeType


def _version(version_id: str) -> Version:
    return Version(
        id=version_id,
        workflow_id="wf-1",
        document_id="doc-1",
        version="1.0.0",
        version_number=1,
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
        metadata=VersionMetadata(change_type=ChangeType.MAJOR, description="init"),
    )


def test_miss_then_hit() -> None:
    cache = HistoryCache()

    assert cache.get("doc-1") is None

    cache.put("doc-1", [_version("a")])

    assert "doc-1" in cache
    assert [v.id for v in cache.get("doc-1") or []] == ["a"]


def test_returned_list_is_a_copy() -> None:
    cache = HistoryCache()
    cache.put("doc-1", [_version("a")])

    first = cache.get("doc-1")
    assert first is not None
    first.append(_version("b"))

    assert [v.id for v in cache.get("doc-1") or []] == ["a"]


def test_invalidate_and_clear() -> None:
    cache = HistoryCache()
    cache.put("doc-1", [_version("a")])
    cache.put("doc-2", [])

    cache.invalidate("doc-1")
    cache.invalidate("unknown")

    assert "doc-1" not in cache
    assert cache.get("doc-2") == []
    assert len(cache) == 1

    cache.clear()

    assert len(cache) == 0


def test_put_after_invalidation_is_dropped() -> None:
    cache = HistoryCache()
    generation = cache.generation("doc-1")

    # A writer invalidates while the reader is still loading.
    cache.invalidate("doc-1")

    assert cache.put("doc-1", [_version("stale")], generation=generation) is False
    assert cache.get("doc-1") is None

    fresh = cache.generation("doc-1")
    assert cache.put("doc-1", [_version("fresh")], generation=fresh) is True
    assert [v.id for v in cache.get("doc-1") or []] == ["fresh"]


def test_put_after_clear_is_dropped() -> None:
    cache = HistoryCache()
    generation = cache.generation("doc-1")

    cache.clear()

    assert cache.put("doc-1", [_version("stale")], generation=generation) is False
    assert "doc-1" not in cache


def test_invalidating_one_document_keeps_others_loadable() -> None:
    cache = HistoryCache()
    generation = cache.generation("doc-2")

    cache.invalidate("doc-1")

    assert cache.put("doc-2", [_version("b")], generation=generation) is True
