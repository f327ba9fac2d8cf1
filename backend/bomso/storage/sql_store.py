from __future__ import annotations

import logging

from sqlalchemy import Column, DateTime, Integer, MetaData, Table, Text, create_engine, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from bomso.domain.dates import utcnow
from bomso.domain.errors import ConflictError, StorageError
from bomso.schemas.dataset import Dataset
from bomso.storage.base import Snapshot, SnapshotStore, decode_document, encode_document


logger = logging.getLogger("bomso.storage.sql")

SNAPSHOT_ROW_ID = 1

metadata = MetaData()

dataset_snapshots = Table(
    "dataset_snapshots",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("document", Text, nullable=False),
    Column("revision", Integer, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


def create_store_engine(database_url: str, *, timeout_seconds: float) -> Engine:
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        connect_args: dict = {"check_same_thread": False, "timeout": timeout_seconds}
        # SQLite files are cheap to open and should not share pooled handles across threads.
        return create_engine(database_url, connect_args=connect_args, poolclass=NullPool)
    connect_args = {"connect_timeout": max(1, int(timeout_seconds))}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


class SqlSnapshotStore(SnapshotStore):
    """Dataset document stored in a single row guarded by an integer revision."""

    backend_name = "database"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        try:
            metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise StorageError("Unable to prepare dataset table") from exc

    @classmethod
    def from_url(cls, database_url: str, *, timeout_seconds: float) -> "SqlSnapshotStore":
        return cls(create_store_engine(database_url, timeout_seconds=timeout_seconds))

    @property
    def engine(self) -> Engine:
        return self._engine

    def load(self) -> Snapshot:
        query = select(dataset_snapshots.c.document, dataset_snapshots.c.revision).where(
            dataset_snapshots.c.id == SNAPSHOT_ROW_ID
        )
        try:
            with self._engine.connect() as conn:
                row = conn.execute(query).first()
        except SQLAlchemyError as exc:
            logger.warning("database dataset read failed", extra={"backend": self.backend_name})
            raise StorageError("Unable to read dataset from database") from exc
        if row is None:
            return Snapshot()
        return Snapshot(dataset=decode_document(row.document, source="database"), revision=str(row.revision))

    def save(self, dataset: Dataset, expected_revision: str | None) -> str:
        payload = encode_document(dataset)
        now = utcnow()
        conflict = ConflictError(
            "Dataset changed since it was loaded; reload and retry",
            details={"expected_revision": expected_revision},
        )
        try:
            with self._engine.begin() as conn:
                if expected_revision is None:
                    conn.execute(
                        insert(dataset_snapshots).values(
                            id=SNAPSHOT_ROW_ID,
                            document=payload,
                            revision=1,
                            updated_at=now,
                        )
                    )
                    return "1"
                try:
                    expected = int(expected_revision)
                except ValueError:
                    raise conflict from None
                result = conn.execute(
                    update(dataset_snapshots)
                    .where(
                        dataset_snapshots.c.id == SNAPSHOT_ROW_ID,
                        dataset_snapshots.c.revision == expected,
                    )
                    .values(document=payload, revision=expected + 1, updated_at=now)
                )
                if result.rowcount != 1:
                    raise conflict
                return str(expected + 1)
        except IntegrityError as exc:
            # Another writer created the row first.
            raise conflict from exc
        except SQLAlchemyError as exc:
            logger.error("database dataset write failed", extra={"backend": self.backend_name})
            raise StorageError("Unable to write dataset to database") from exc
