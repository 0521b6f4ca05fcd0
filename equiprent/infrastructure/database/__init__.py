"""Document store backends."""

from .inmemory_document_store import InMemoryDocumentStore
from .sqlalchemy_document_store import SQLAlchemyDocumentStore
from .models import Base, DocumentORM

__all__ = [
    "InMemoryDocumentStore",
    "SQLAlchemyDocumentStore",
    "Base",
    "DocumentORM",
]
