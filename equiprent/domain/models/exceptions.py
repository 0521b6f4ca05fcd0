"""
Domain Exceptions.

Exception hierarchy for equipment, relationship and attachment operations.

Design Principles:
- Hierarchy: everything inherits from EquipRentError
- Rich context: exceptions carry field, value and underlying store error
- No automatic retry: callers decide what to do with a surfaced error

Taxonomy:
- ValidationError: pre-flight shape/uniqueness violation, zero side effects
- AttachmentError: an object-store operation failed
- ConsistencyWriteError: the atomic multi-document write was rejected
- NotFoundError: the mutation target does not exist
"""

from typing import Any, Dict, Iterable, List, Optional


class EquipRentError(Exception):
    """
    Base exception for equiprent errors.

    Attributes:
        message: Human readable description
        context: Extra data for caller-visible messages (field, value, ids)
    """

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses and log records."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "context": {k: v if isinstance(v, (int, float, bool, list)) else str(v)
                        for k, v in self.context.items()},
        }


class ValidationError(EquipRentError):
    """
    Input rejected before any side effect.

    Raised for missing required fields, out-of-range values, unknown link
    targets and uniqueness violations.
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None, **context: Any):
        super().__init__(message, field=field, value=value, **context)
        self.field = field
        self.value = value


class UniquenessViolation(ValidationError):
    """A field declared unique already holds this value on another entity."""

    def __init__(self, field: str, value: Any, conflicting_id: Optional[str] = None):
        super().__init__(
            f"{field} '{value}' is already in use",
            field=field,
            value=value,
            conflicting_id=conflicting_id,
        )
        self.conflicting_id = conflicting_id


class AttachmentLimitExceeded(ValidationError):
    """A multi-valued attachment slot would exceed its maximum count."""

    def __init__(self, slot: str, count: int, max_count: int):
        super().__init__(
            f"Slot '{slot}' accepts at most {max_count} files, got {count}",
            field=slot,
            value=count,
            max_count=max_count,
        )
        self.slot = slot
        self.count = count
        self.max_count = max_count


class _OrphanTracking:
    """Mixin for errors raised after some uploads already landed."""

    orphaned_urls: List[str]

    def add_orphans(self, urls: Iterable[str]) -> None:
        for url in urls:
            if url not in self.orphaned_urls:
                self.orphaned_urls.append(url)
        if self.orphaned_urls:
            self.context["orphaned_urls"] = list(self.orphaned_urls)


class AttachmentError(_OrphanTracking, EquipRentError):
    """
    Object-store operation failed.

    When a must-succeed upload fails the owning mutation aborts; files
    uploaded earlier in the same request are listed in ``orphaned_urls``.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        url: Optional[str] = None,
        cause: Optional[BaseException] = None,
        orphaned_urls: Optional[Iterable[str]] = None,
    ):
        super().__init__(message, path=path, url=url, cause=repr(cause) if cause else None)
        self.path = path
        self.url = url
        self.cause = cause
        self.orphaned_urls = []
        self.add_orphans(orphaned_urls or [])


class ConsistencyWriteError(_OrphanTracking, EquipRentError):
    """
    Atomic multi-document write rejected.

    No document changed. Attachments uploaded for the aborted mutation are
    listed in ``orphaned_urls``.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        orphaned_urls: Optional[Iterable[str]] = None,
        **context: Any,
    ):
        super().__init__(message, cause=repr(cause) if cause else None, **context)
        self.cause = cause
        self.orphaned_urls = []
        self.add_orphans(orphaned_urls or [])


class ConcurrentModificationError(ConsistencyWriteError):
    """
    A document changed between read and write.

    Raised when a write carries an ``expected_version`` that no longer
    matches the stored version.
    """

    def __init__(
        self,
        collection: str,
        doc_id: str,
        expected_version: int,
        actual_version: Optional[int],
    ):
        super().__init__(
            f"{collection}/{doc_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})",
            collection=collection,
            doc_id=doc_id,
            expected_version=expected_version,
            actual_version=actual_version,
        )
        self.collection = collection
        self.doc_id = doc_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class NotFoundError(EquipRentError):
    """Mutation or lookup target does not exist."""

    def __init__(self, collection: str, entity_id: str):
        super().__init__(f"{collection}/{entity_id} not found", collection=collection, entity_id=entity_id)
        self.collection = collection
        self.entity_id = entity_id


__all__ = [
    "EquipRentError",
    "ValidationError",
    "UniquenessViolation",
    "AttachmentLimitExceeded",
    "AttachmentError",
    "ConsistencyWriteError",
    "ConcurrentModificationError",
    "NotFoundError",
]
