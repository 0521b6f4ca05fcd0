"""
Document Store Interface.

Collections of JSON-like documents keyed by id, with a single atomic
multi-document write primitive. Every stored document carries a version
number that moves on each committed write; writes may state the version
they expect to find (optimistic concurrency).

Usage:
    batch = WriteBatch()
    batch.set("machines", machine_id, body, expected_version=0)
    batch.update("auxiliary_equipment", aux_id, {"linked_equipment_id": machine_id})
    store.atomic_write(batch)  # all-or-nothing
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional


class WriteOpType(Enum):
    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


class QueryOp(Enum):
    """Supported query predicates."""
    EQUALS = "=="
    ARRAY_CONTAINS = "array-contains"

    @classmethod
    def parse(cls, value: Any) -> "QueryOp":
        if isinstance(value, cls):
            return value
        for op in cls:
            if value == op.value:
                return op
        raise ValueError(f"Unsupported query operator: {value!r}")

    def matches(self, stored: Any, value: Any) -> bool:
        if self == QueryOp.EQUALS:
            return stored == value
        return isinstance(stored, list) and value in stored


@dataclass(frozen=True)
class DocumentSnapshot:
    """A document as read from the store."""
    id: str
    data: Dict[str, Any]
    version: int


@dataclass
class WriteOp:
    """
    One operation inside an atomic write.

    Semantics:
    - SET creates or fully replaces the document
    - UPDATE merges ``data`` into an existing document; missing target
      rejects the whole batch
    - DELETE removes the document; a missing target is a no-op unless
      ``expected_version`` is given

    ``expected_version`` of 0 means the document must not exist yet.
    """
    op_type: WriteOpType
    collection: str
    doc_id: str
    data: Optional[Dict[str, Any]] = None
    expected_version: Optional[int] = None

    @property
    def key(self) -> tuple:
        return (self.collection, self.doc_id)


@dataclass
class WriteBatch:
    """Ordered list of write operations committed together."""
    _ops: List[WriteOp] = field(default_factory=list)

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> "WriteBatch":
        self._ops.append(WriteOp(WriteOpType.SET, collection, doc_id, dict(data), expected_version))
        return self

    def update(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> "WriteBatch":
        self._ops.append(WriteOp(WriteOpType.UPDATE, collection, doc_id, dict(data), expected_version))
        return self

    def delete(
        self,
        collection: str,
        doc_id: str,
        expected_version: Optional[int] = None,
    ) -> "WriteBatch":
        self._ops.append(WriteOp(WriteOpType.DELETE, collection, doc_id, None, expected_version))
        return self

    def extend(self, other: Iterable[WriteOp]) -> "WriteBatch":
        self._ops.extend(other)
        return self

    @property
    def ops(self) -> List[WriteOp]:
        return list(self._ops)

    def ops_for(self, collection: str) -> List[WriteOp]:
        return [op for op in self._ops if op.collection == collection]

    def __len__(self) -> int:
        return len(self._ops)

    def __iter__(self) -> Iterator[WriteOp]:
        return iter(list(self._ops))


class IDocumentStore(ABC):
    """
    Document store port.

    Implementations must make ``atomic_write`` all-or-nothing: either every
    op is applied, or none is and ConsistencyWriteError is raised. Version
    mismatches raise ConcurrentModificationError.
    """

    @abstractmethod
    def new_id(self, collection: str) -> str:
        """Allocate a fresh document id without writing anything."""
        pass

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        pass

    @abstractmethod
    def list(self, collection: str) -> List[DocumentSnapshot]:
        pass

    @abstractmethod
    def query(self, collection: str, field_name: str, op: Any, value: Any) -> List[DocumentSnapshot]:
        """
        Return every document whose ``field_name`` satisfies ``op``.

        Args:
            op: "==" or "array-contains" (or a QueryOp)

        Raises:
            ConsistencyWriteError: If the backend fails
        """
        pass

    @abstractmethod
    def atomic_write(self, batch: Iterable[WriteOp]) -> None:
        """
        Commit every op or none.

        Raises:
            ConcurrentModificationError: An expected_version did not match
            ConsistencyWriteError: Any other rejection
        """
        pass

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.atomic_write(WriteBatch().set(collection, doc_id, data))

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.atomic_write(WriteBatch().update(collection, doc_id, data))

    def delete(self, collection: str, doc_id: str) -> None:
        self.atomic_write(WriteBatch().delete(collection, doc_id))
