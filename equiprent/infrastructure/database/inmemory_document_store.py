"""
In-Memory Document Store.

For unit tests and fast iteration - no database I/O.
Same interface and failure semantics as SQLAlchemyDocumentStore.
"""

from copy import deepcopy
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional
import logging
import uuid

from equiprent.domain.interfaces.document_store import (
    DocumentSnapshot,
    IDocumentStore,
    QueryOp,
    WriteOp,
)
from .batch_apply import Entry, apply_batch

logger = logging.getLogger(__name__)


class InMemoryDocumentStore(IDocumentStore):
    """
    Thread-safe in-memory document store.

    Reads and writes deep-copy document bodies so callers never share
    mutable state with the store. A batch is applied to a staged copy of
    the touched documents and swapped in only when every op succeeded.
    """

    def __init__(self):
        self._docs: Dict[str, Dict[str, Entry]] = {}
        self._lock = Lock()

    def new_id(self, collection: str) -> str:
        return uuid.uuid4().hex

    def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        with self._lock:
            entry = self._docs.get(collection, {}).get(doc_id)
            if entry is None:
                return None
            return DocumentSnapshot(id=doc_id, data=deepcopy(entry[0]), version=entry[1])

    def list(self, collection: str) -> List[DocumentSnapshot]:
        with self._lock:
            return [
                DocumentSnapshot(id=doc_id, data=deepcopy(data), version=version)
                for doc_id, (data, version) in self._docs.get(collection, {}).items()
            ]

    def query(self, collection: str, field_name: str, op: Any, value: Any) -> List[DocumentSnapshot]:
        query_op = QueryOp.parse(op)
        return [
            snapshot
            for snapshot in self.list(collection)
            if query_op.matches(snapshot.data.get(field_name), value)
        ]

    def atomic_write(self, batch: Iterable[WriteOp]) -> None:
        ops = list(batch)
        if not ops:
            return

        with self._lock:
            current = {
                op.key: self._docs.get(op.collection, {}).get(op.doc_id)
                for op in ops
            }
            result = apply_batch(current, ops)

            for (collection, doc_id), entry in result.items():
                docs = self._docs.setdefault(collection, {})
                if entry is None:
                    docs.pop(doc_id, None)
                else:
                    docs[doc_id] = entry

        logger.debug(f"Committed {len(ops)} ops touching {len(result)} documents")

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._docs.get(collection, {}))

    def clear(self) -> None:
        with self._lock:
            self._docs.clear()
