"""
SQLAlchemy ORM Models for equiprent.

Documents of every collection share one table; the body is a JSON column
and the version column is the mapper's version counter, so every UPDATE
and DELETE is guarded by ``WHERE version = <version read>``.
"""

from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    DateTime,
    Index,
)
from sqlalchemy.orm import declarative_base
from datetime import datetime
from copy import deepcopy

Base = declarative_base()


# ═══════════════════════════════════════════════════════════════════════════════
# Document Model
# ═══════════════════════════════════════════════════════════════════════════════

class DocumentORM(Base):
    """ORM model for the documents table."""

    __tablename__ = 'documents'

    collection = Column(String(64), primary_key=True)
    doc_id = Column(String(64), primary_key=True)
    body = Column(JSON, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('idx_documents_collection', 'collection'),
    )

    # Versions are assigned by the store (batch_apply), the mapper only
    # checks them; a stale row raises StaleDataError at flush.
    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": False,
    }

    @property
    def data(self):
        return deepcopy(self.body) if self.body else {}

    @data.setter
    def data(self, value):
        self.body = deepcopy(value or {})


__all__ = ["Base", "DocumentORM"]
