from bomso.storage.base import Snapshot, SnapshotStore
from bomso.storage.factory import build_store, get_store, reset_store

__all__ = ["Snapshot", "SnapshotStore", "build_store", "get_store", "reset_store"]
