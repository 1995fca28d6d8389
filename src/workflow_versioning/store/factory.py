"""Factory for creating version stores."""

import logging

from workflow_versioning.config import VersioningSettings
from workflow_versioning.store.base import VersionStore
from workflow_versioning.store.json_store import JsonFileVersionStore
from workflow_versioning.store.memory import InMemoryVersionStore

logger = logging.getLogger(__name__)


def create_store(settings: VersioningSettings) -> VersionStore:
    """Create a version store based on configuration.

    Args:
        settings: Settings naming the backend and its location.

    Returns:
        Configured store instance.

    Raises:
        ValueError: If the backend is not supported.
    """
    logger.info("Creating version store", extra={"backend": settings.store_backend})

    if settings.store_backend == "memory":
        return InMemoryVersionStore()
    elif settings.store_backend == "json":
        return JsonFileVersionStore(
            path=settings.store_file,
            lock_timeout_seconds=settings.lock_timeout_seconds,
        )
    else:
        raise ValueError(f"Unsupported store backend: {settings.store_backend}")
