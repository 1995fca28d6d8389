"""Version store package initialization."""

from workflow_versioning.store.base import VersionStore
from workflow_versioning.store.factory import create_store
from workflow_versioning.store.json_store import JsonFileVersionStore
from workflow_versioning.store.memory import InMemoryVersionStore

__all__ = [
    "InMemoryVersionStore",
    "JsonFileVersionStore",
    "VersionStore",
    "create_store",
]
