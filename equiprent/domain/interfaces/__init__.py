"""Domain Interfaces - Abstract contracts (Ports) for the domain layer."""

from .document_store import (
    IDocumentStore,
    DocumentSnapshot,
    QueryOp,
    WriteOp,
    WriteOpType,
    WriteBatch,
)
from .object_store import IObjectStore, ObjectInfo

__all__ = [
    # Document store
    "IDocumentStore",
    "DocumentSnapshot",
    "QueryOp",
    "WriteOp",
    "WriteOpType",
    "WriteBatch",
    # Object store
    "IObjectStore",
    "ObjectInfo",
]
