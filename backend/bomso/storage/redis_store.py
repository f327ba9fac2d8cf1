from __future__ import annotations

import logging

import redis
from redis.exceptions import RedisError, WatchError

from bomso.domain.errors import ConflictError, StorageError
from bomso.schemas.dataset import Dataset
from bomso.storage.base import Snapshot, SnapshotStore, decode_document, encode_document


logger = logging.getLogger("bomso.storage.redis")


def _as_text(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisSnapshotStore(SnapshotStore):
    """Whole dataset under one key with a revision counter beside it.

    Both keys are read in one MULTI block and written in one WATCHed
    transaction, so readers never see the two collections half-applied.
    """

    backend_name = "redis"

    def __init__(self, client: redis.Redis, *, key: str) -> None:
        self._redis = client
        self._key = key
        self._revision_key = f"{key}:rev"

    @classmethod
    def from_url(cls, url: str, *, key: str, timeout_seconds: float) -> "RedisSnapshotStore":
        client = redis.Redis.from_url(
            url,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        return cls(client, key=key)

    def load(self) -> Snapshot:
        try:
            with self._redis.pipeline(transaction=True) as pipe:
                pipe.get(self._key)
                pipe.get(self._revision_key)
                raw, revision = pipe.execute()
        except RedisError as exc:
            logger.warning("redis dataset read failed", extra={"backend": self.backend_name})
            raise StorageError("Unable to read dataset from redis") from exc
        if raw is None:
            return Snapshot(revision=_as_text(revision))
        return Snapshot(dataset=decode_document(raw, source=f"redis:{self._key}"), revision=_as_text(revision))

    def save(self, dataset: Dataset, expected_revision: str | None) -> str:
        payload = encode_document(dataset)
        try:
            with self._redis.pipeline() as pipe:
                pipe.watch(self._revision_key)
                current = _as_text(pipe.get(self._revision_key))
                if current != expected_revision:
                    raise ConflictError(
                        "Dataset changed since it was loaded; reload and retry",
                        details={"expected_revision": expected_revision, "current_revision": current},
                    )
                new_revision = str(int(current or 0) + 1)
                pipe.multi()
                pipe.set(self._key, payload)
                pipe.set(self._revision_key, new_revision)
                pipe.execute()
        except WatchError as exc:
            raise ConflictError("Dataset changed while saving; reload and retry") from exc
        except RedisError as exc:
            logger.error("redis dataset write failed", extra={"backend": self.backend_name})
            raise StorageError("Unable to write dataset to redis") from exc
        return new_revision

    def ping(self) -> bool:
        try:
            return bool(self._redis.ping())
        except RedisError:
            return False
