"""Registry of known workflows.

The registry is the collaborator that decides whether a logical workflow
exists. The versioning service consults it before creating a version and
registers the definition again, stamped with its new version string, once the
version is committed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Protocol

from workflow_versioning.versioning.models import WorkflowDefinition

logger = logging.getLogger(__name__)


class WorkflowRegistry(Protocol):
    def has_workflow(self, document_id: str) -> bool: ...

    def register_workflow(self, definition: WorkflowDefinition) -> None: ...


class InMemoryWorkflowRegistry:
    """Latest registered definition per document, plus superseded revisions."""

    def __init__(self, definitions: Iterable[WorkflowDefinition] = ()) -> None:
        self._lock = threading.Lock()
        self._workflows: dict[str, WorkflowDefinition] = {}
        self._previous: dict[str, list[WorkflowDefinition]] = {}
        for definition in definitions:
            self.register_workflow(definition)

    def register_workflow(self, definition: WorkflowDefinition) -> None:
        with self._lock:
            existing = self._workflows.get(definition.document_id)
            if existing is not None:
                self._previous.setdefault(definition.document_id, []).append(existing)
            self._workflows[definition.document_id] = definition
        logger.info(
            "Workflow registered",
            extra={"document_id": definition.document_id, "version": definition.version},
        )

    def get_workflow(self, document_id: str) -> WorkflowDefinition | None:
        with self._lock:
            return self._workflows.get(document_id)

    def has_workflow(self, document_id: str) -> bool:
        with self._lock:
            return document_id in self._workflows

    def previous_revisions(self, document_id: str) -> list[WorkflowDefinition]:
        with self._lock:
            return list(self._previous.get(document_id, []))

    def remove_workflow(self, document_id: str) -> bool:
        with self._lock:
            removed = self._workflows.pop(document_id, None)
        if removed is None:
            return False
        logger.info("Workflow removed", extra={"document_id": document_id})
        return True
