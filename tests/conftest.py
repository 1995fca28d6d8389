"""Test configuration and fixtures."""

from __future__ import annotations

import copy
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from workflow_versioning.registry import InMemoryWorkflowRegistry
from workflow_versioning.store.json_store import JsonFileVersionStore
from workflow_versioning.store.memory import InMemoryVersionStore
from workflow_versioning.versioning.models import Version, VersionMetadata, WorkflowDefinition
from workflow_versioning.versioning.semver import ChangeType, to_sort_key
from workflow_versioning.versioning.service import VersioningService

GRID_RESILIENCE: dict[str, Any] = {
    "id": "wf-grid-001",
    "useCaseId": "grid-resilience",
    "name": "Grid Resilience & Outage Response",
    "description": "Detect outages, assess impact, coordinate restoration",
    "industry": "energy-utilities",
    "steps": [
        {
            "id": "detect-outages",
            "name": "Detect Grid Outages",
            "type": "detect",
            "agent": "Outage Detection Vanguard",
            "service": "grid-resilience",
            "action": "detectOutages",
            "parameters": {
                "monitoringInterval": 30000,
                "thresholds": {"voltageDropPercent": 10, "customerAffectedMin": 100},
            },
            "outputs": ["outageData", "affectedAreas", "severity"],
        },
        {
            "id": "assess-impact",
            "name": "Assess Outage Impact",
            "type": "analyze",
            "agent": "Grid Analysis Vanguard",
            "service": "grid-resilience",
            "action": "assessImpact",
            "parameters": {"includesCriticalFacilities": True},
            "conditions": [
                {"field": "detect-outages.outageData.confirmed", "operator": "=", "value": True}
            ],
        },
        {
            "id": "step-7",
            "name": "Notify Crews",
            "type": "notify",
            "service": "dispatch",
            "action": "notifyCrews",
            "parameters": {"channels": ["sms"]},
        },
    ],
    "triggers": [{"type": "event", "config": {"event": "outage.detected"}}],
    "metadata": {
        "requiredServices": ["grid-resilience", "dispatch"],
        "requiredAgents": ["Outage Detection Vanguard", "Grid Analysis Vanguard"],
        "criticality": "critical",
        "tags": ["energy", "outage"],
        "compliance": ["NERC-CIP"],
    },
}


@pytest.fixture
def grid_payload() -> dict[str, Any]:
    """Provide a fresh copy of the sample workflow payload."""
    return copy.deepcopy(GRID_RESILIENCE)


@pytest.fixture
def make_definition() -> Callable[..., WorkflowDefinition]:
    """Build a definition from the sample payload, with optional edits applied.

    ``edit`` receives a private copy of the payload and may mutate it in place.
    """

    def _make(edit: Callable[[dict[str, Any]], None] | None = None) -> WorkflowDefinition:
        payload = copy.deepcopy(GRID_RESILIENCE)
        if edit is not None:
            edit(payload)
        return WorkflowDefinition.model_validate(payload)

    return _make


@pytest.fixture
def make_version() -> Callable[..., Version]:
    """Build an active version record for the sample document."""

    def _make(
        version: str, *, document_id: str = "grid-resilience", active: bool = True
    ) -> Version:
        return Version(
            id=str(uuid.uuid4()),
            workflow_id="wf-grid-001",
            document_id=document_id,
            version=version,
            version_number=to_sort_key(version),
            created_at=datetime.now(tz=UTC),
            is_active=active,
            metadata=VersionMetadata(change_type=ChangeType.MINOR, description=f"v{version}"),
        )

    return _make


@pytest.fixture
def memory_store() -> InMemoryVersionStore:
    return InMemoryVersionStore()


@pytest.fixture
def json_store(tmp_path: Path) -> JsonFileVersionStore:
    return JsonFileVersionStore(path=tmp_path / "state" / "workflow_versions.json")


@pytest.fixture
def service(memory_store: InMemoryVersionStore) -> VersioningService:
    return VersioningService(memory_store)


@pytest.fixture
def registry() -> InMemoryWorkflowRegistry:
    return InMemoryWorkflowRegistry()
