"""Unit tests for the JSON-file version store."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from workflow_versioning.errors import SnapshotMissing, StoreUnavailable
from workflow_versioning.store.json_store import JsonFileVersionStore


def test_history_survives_a_new_store_instance(
    tmp_path: Path, make_definition, make_version
) -> None:
    path = tmp_path / "state" / "workflow_versions.json"
    v1 = make_version("1.0.0")
    JsonFileVersionStore(path=path).commit(v1, make_definition(), expected_active_id=None)

    reopened = JsonFileVersionStore(path=path)

    active = reopened.get_active("grid-resilience")
    assert active is not None
    assert active.id == v1.id
    assert active.created_at == v1.created_at
    assert reopened.get_snapshot(v1.id).name == "Grid Resilience & Outage Response"


def test_file_uses_wire_names(tmp_path: Path, make_definition, make_version) -> None:
    path = tmp_path / "workflow_versions.json"
    v1 = make_version("1.0.0")
    JsonFileVersionStore(path=path).commit(v1, make_definition(), expected_active_id=None)

    raw = json.loads(path.read_text(encoding="utf-8"))

    assert raw["versions"][0]["documentId"] == "grid-resilience"
    assert raw["versions"][0]["isActive"] is True
    assert raw["snapshots"][v1.id]["documentId"] == "grid-resilience"
    assert not path.with_name(path.name + ".tmp").exists()


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        '{"versions": [{"id": "x"}]}',
        '{"versions": [], "snapshots": [1]}',
        '{"versions": {"id": "x"}, "snapshots": {}}',
        '{"versions": [1]}',
    ],
)
def test_unreadable_state_is_store_unavailable(tmp_path: Path, content: str) -> None:
    path = tmp_path / "workflow_versions.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(StoreUnavailable):
        JsonFileVersionStore(path=path).list_history("grid-resilience")


def test_snapshot_that_no_longer_validates_is_missing(
    tmp_path: Path, make_definition, make_version
) -> None:
    path = tmp_path / "workflow_versions.json"
    v1 = make_version("1.0.0")
    JsonFileVersionStore(path=path).commit(v1, make_definition(), expected_active_id=None)
    raw = json.loads(path.read_text(encoding="utf-8"))
    raw["snapshots"][v1.id] = {"id": "wf"}
    path.write_text(json.dumps(raw), encoding="utf-8")

    with pytest.raises(SnapshotMissing):
        JsonFileVersionStore(path=path).get_snapshot(v1.id)


def test_lock_timeout_is_store_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "workflow_versions.json"
    holder = JsonFileVersionStore(path=path)
    waiter = JsonFileVersionStore(path=path, lock_timeout_seconds=0.05)

    # Both instances share one per-path lock.
    acquired = threading.Event()
    release = threading.Event()

    def hold() -> None:
        with holder._locked():
            acquired.set()
            release.wait(timeout=5)

    thread = threading.Thread(target=hold)
    thread.start()
    try:
        assert acquired.wait(timeout=5)
        with pytest.raises(StoreUnavailable):
            waiter.get_active("grid-resilience")
    finally:
        release.set()
        thread.join()

    assert waiter.get_active("grid-resilience") is None
