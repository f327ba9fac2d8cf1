from __future__ import annotations

import logging

from bomso.core.config import Settings, get_settings
from bomso.storage.base import SnapshotStore


logger = logging.getLogger("bomso.storage")

_store: SnapshotStore | None = None


def build_store(settings: Settings) -> SnapshotStore:
    backend = settings.storage_backend.lower()
    if backend == "redis":
        from bomso.storage.redis_store import RedisSnapshotStore

        store: SnapshotStore = RedisSnapshotStore.from_url(
            settings.redis_url,
            key=settings.redis_key,
            timeout_seconds=settings.storage_timeout_seconds,
        )
    elif backend == "database":
        from bomso.storage.sql_store import SqlSnapshotStore

        store = SqlSnapshotStore.from_url(settings.database_url, timeout_seconds=settings.storage_timeout_seconds)
    else:
        from bomso.storage.file_store import JsonFileStore

        store = JsonFileStore(settings.data_file_path)
    logger.info("dataset store ready", extra={"backend": store.backend_name})
    return store


def get_store() -> SnapshotStore:
    global _store
    if _store is None:
        _store = build_store(get_settings())
    return _store


def reset_store() -> None:
    """Forget the cached store (used by tests and after settings change)."""
    global _store
    _store = None
