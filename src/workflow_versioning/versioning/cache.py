"""In-process cache of per-document version history.

There is no TTL: entries live until they are invalidated explicitly.

Every invalidation bumps a per-document generation. A reader takes the
generation before loading from the store and hands it back to :meth:`put`;
if a writer invalidated the document in between, the loaded list is dropped
instead of overwriting the invalidation.
"""

from __future__ import annotations

import logging
import threading

from workflow_versioning.versioning.models import Version

logger = logging.getLogger(__name__)

Generation = tuple[int, int]


class HistoryCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[Version, ...]] = {}
        self._generations: dict[str, int] = {}
        self._clears = 0

    def get(self, document_id: str) -> list[Version] | None:
        with self._lock:
            entry = self._entries.get(document_id)
        if entry is None:
            logger.debug("History cache miss", extra={"document_id": document_id})
            return None
        logger.debug("History cache hit", extra={"document_id": document_id})
        return list(entry)

    def generation(self, document_id: str) -> Generation:
        with self._lock:
            return self._clears, self._generations.get(document_id, 0)

    def put(
        self,
        document_id: str,
        versions: list[Version],
        generation: Generation | None = None,
    ) -> bool:
        """Cache ``versions`` unless the document was invalidated since ``generation``.

        Returns True if the entry was stored.
        """

        with self._lock:
            current = (self._clears, self._generations.get(document_id, 0))
            if generation is not None and generation != current:
                stale = True
            else:
                stale = False
                self._entries[document_id] = tuple(versions)
        if stale:
            logger.debug("Dropped stale history load", extra={"document_id": document_id})
            return False
        return True

    def invalidate(self, document_id: str) -> None:
        with self._lock:
            self._entries.pop(document_id, None)
            self._generations[document_id] = self._generations.get(document_id, 0) + 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._clears += 1

    def __contains__(self, document_id: object) -> bool:
        with self._lock:
            return document_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
