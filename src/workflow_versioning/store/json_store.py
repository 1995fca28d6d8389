"""JSON-file backed version store.

The whole history lives in one JSON document, so "deactivate the old version
and append the new one" is a single write: the new document is written to a
temporary file and moved over the old one with ``os.replace``. A reader
therefore sees either the old history or the new one, never a state with zero
or two active versions.

Writers are serialised with a per-path lock shared by every store instance in
the process. The file is not locked against other processes.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from workflow_versioning.errors import StoreUnavailable
from workflow_versioning.store.base import VersionStore
from workflow_versioning.store.ledger import VersionLedger
from workflow_versioning.versioning.models import Version, WorkflowDefinition

logger = logging.getLogger(__name__)

_PATH_LOCKS: dict[Path, threading.Lock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _PATH_LOCKS_GUARD:
        lock = _PATH_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _PATH_LOCKS[key] = lock
        return lock


@dataclass
class JsonFileVersionStore(VersionStore):
    path: Path
    lock_timeout_seconds: float = 5.0

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self._lock = _lock_for(self.path)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.lock_timeout_seconds):
            raise StoreUnavailable(
                f"Timed out after {self.lock_timeout_seconds}s waiting for {self.path}"
            )
        try:
            yield
        finally:
            self._lock.release()

    def _load_unlocked(self) -> VersionLedger:
        if not self.path.exists():
            return VersionLedger()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StoreUnavailable(f"Failed to read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StoreUnavailable(f"Version state file is not valid JSON: {self.path}") from e
        if not isinstance(raw, dict):
            raise StoreUnavailable(f"Version state file has unexpected shape: {self.path}")
        try:
            return VersionLedger.from_json(raw)
        except (ValidationError, TypeError) as e:
            raise StoreUnavailable(f"Version state file is corrupt: {self.path}") from e

    def _save_unlocked(self, ledger: VersionLedger) -> None:
        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(ledger.to_json(), indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
            os.replace(temp_path, self.path)
        except OSError as e:
            raise StoreUnavailable(f"Failed to write {self.path}: {e}") from e
        logger.debug(
            "Version state saved",
            extra={"path": str(self.path), "versions": len(ledger.versions)},
        )

    def get_active(self, document_id: str) -> Version | None:
        with self._locked():
            return self._load_unlocked().active(document_id)

    def get_version(self, version_id: str) -> Version | None:
        with self._locked():
            return self._load_unlocked().version(version_id)

    def list_history(self, document_id: str) -> list[Version]:
        with self._locked():
            return self._load_unlocked().history(document_id)

    def get_snapshot(self, version_id: str) -> WorkflowDefinition:
        with self._locked():
            return self._load_unlocked().snapshot(version_id)

    def append(self, version: Version, snapshot: WorkflowDefinition) -> None:
        with self._locked():
            ledger = self._load_unlocked()
            ledger.append(version, snapshot)
            self._save_unlocked(ledger)

    def deactivate(self, version_id: str) -> None:
        with self._locked():
            ledger = self._load_unlocked()
            ledger.deactivate(version_id)
            self._save_unlocked(ledger)

    def commit(
        self,
        version: Version,
        snapshot: WorkflowDefinition,
        *,
        expected_active_id: str | None,
    ) -> None:
        with self._locked():
            ledger = self._load_unlocked()
            ledger.commit(version, snapshot, expected_active_id)
            self._save_unlocked(ledger)
