"""
SQLAlchemy Document Store.

Documents live in the ``documents`` table (see models.DocumentORM).
``atomic_write`` runs inside one session transaction: touched rows are
loaded, the batch is applied in memory, and rows are written and
committed together. Any failure rolls the transaction back.

The version check in ``apply_batch`` only sees what this session read.
The mapper's version counter repeats it in the database: every UPDATE
and DELETE carries ``WHERE version = <version read>``, so a writer that
committed in between makes the flush fail with StaleDataError, and a
concurrent insert of the same key fails with IntegrityError. Both are
reported as ConcurrentModificationError.

Usage:
    store = SQLAlchemyDocumentStore("sqlite:///data/equiprent.db")
    store.atomic_write(WriteBatch().set("machines", "m1", {...}))
"""

from typing import Any, Dict, Iterable, List, Optional
import logging
import uuid

from sqlalchemy import create_engine, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from equiprent.domain.interfaces.document_store import (
    DocumentSnapshot,
    IDocumentStore,
    QueryOp,
    WriteOp,
)
from equiprent.domain.models.exceptions import (
    ConcurrentModificationError,
    ConsistencyWriteError,
    EquipRentError,
)
from .batch_apply import Entry, Key, apply_batch
from .models import Base, DocumentORM

logger = logging.getLogger(__name__)


class SQLAlchemyDocumentStore(IDocumentStore):
    """SQLAlchemy-backed document store."""

    def __init__(self, db_url: str = "sqlite:///data/equiprent.db", echo: bool = False):
        """
        Initialize the store.

        Args:
            db_url: Database connection URL
            echo: If True, log SQL statements
        """
        self._db_url = db_url
        self._engine = create_engine(db_url, echo=echo)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

        # Create tables if they don't exist
        Base.metadata.create_all(self._engine)

    @property
    def db_url(self) -> str:
        return self._db_url

    def new_id(self, collection: str) -> str:
        return uuid.uuid4().hex

    def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        with self._session_factory() as session:
            row = session.get(DocumentORM, (collection, doc_id))
            return self._to_snapshot(row) if row else None

    def list(self, collection: str) -> List[DocumentSnapshot]:
        with self._session_factory() as session:
            rows = session.scalars(self._select(collection)).all()
            return [self._to_snapshot(row) for row in rows]

    def query(self, collection: str, field_name: str, op: Any, value: Any) -> List[DocumentSnapshot]:
        query_op = QueryOp.parse(op)
        stmt = self._select(collection)
        if query_op == QueryOp.EQUALS and isinstance(value, str):
            stmt = stmt.where(DocumentORM.body[field_name].as_string() == value)
        # array-contains scans the collection; JSON array membership is dialect specific
        try:
            with self._session_factory() as session:
                snapshots = [self._to_snapshot(row) for row in session.scalars(stmt).all()]
        except SQLAlchemyError as e:
            raise ConsistencyWriteError(
                f"Query on {collection}.{field_name} failed", cause=e, collection=collection
            ) from e
        return [s for s in snapshots if query_op.matches(s.data.get(field_name), value)]

    def atomic_write(self, batch: Iterable[WriteOp]) -> None:
        ops = list(batch)
        if not ops:
            return

        session: Session = self._session_factory()
        current: Dict[Key, Optional[Entry]] = {}
        try:
            rows: Dict[Key, Optional[DocumentORM]] = {}
            for op in ops:
                if op.key in rows:
                    continue
                row = session.get(DocumentORM, op.key, with_for_update=True)
                rows[op.key] = row
                current[op.key] = (row.data, row.version) if row else None

            result = apply_batch(current, ops)

            for key, entry in result.items():
                row = rows[key]
                if entry is None:
                    if row is not None:
                        session.delete(row)
                    continue
                data, version = entry
                if row is None:
                    row = DocumentORM(collection=key[0], doc_id=key[1])
                    session.add(row)
                row.data = data
                row.version = version

            session.commit()
            logger.debug(f"Committed {len(ops)} ops touching {len(result)} documents")
        except EquipRentError:
            session.rollback()
            raise
        except (StaleDataError, IntegrityError) as e:
            session.rollback()
            conflict = self._find_conflict(current)
            if conflict is None:
                logger.error(f"Atomic write of {len(ops)} ops failed: {e}")
                raise ConsistencyWriteError("Atomic write failed", cause=e) from e
            logger.warning(f"Atomic write rejected: {conflict}")
            raise conflict from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Atomic write of {len(ops)} ops failed: {e}")
            raise ConsistencyWriteError("Atomic write failed", cause=e) from e
        finally:
            session.close()

    def close(self) -> None:
        self._engine.dispose()

    def _find_conflict(self, read: Dict[Key, Optional[Entry]]) -> Optional[ConcurrentModificationError]:
        """First touched document whose stored version moved since it was read."""
        for key, entry in read.items():
            expected = entry[1] if entry else 0
            try:
                snapshot = self.get(*key)
            except SQLAlchemyError:
                return None
            actual = snapshot.version if snapshot else None
            if (actual or 0) != expected:
                return ConcurrentModificationError(key[0], key[1], expected, actual)
        return None

    @staticmethod
    def _select(collection: str):
        return (
            select(DocumentORM)
            .where(DocumentORM.collection == collection)
            .order_by(DocumentORM.created_at, DocumentORM.doc_id)
        )

    @staticmethod
    def _to_snapshot(row: DocumentORM) -> DocumentSnapshot:
        return DocumentSnapshot(id=row.doc_id, data=row.data, version=row.version)
