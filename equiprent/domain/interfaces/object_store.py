"""
Object Store Interface.

Binary objects addressed by slash-separated paths. Callers keep the URL
returned by ``upload``; ``delete`` accepts that URL back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class ObjectInfo:
    """Listing entry for a stored object."""
    path: str
    size: int
    created_at: datetime


class IObjectStore(ABC):
    """
    Object store port.

    Design Decisions:
    - ``delete`` is idempotent: a missing object is success (returns False)
    - Paths are opaque to the store; callers own the naming scheme
    """

    @abstractmethod
    def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        """
        Store ``content`` at ``path`` and return its public URL.

        Raises:
            AttachmentError: On any storage failure
        """
        pass

    @abstractmethod
    def delete(self, url: str) -> bool:
        """
        Delete the object behind ``url``.

        Returns:
            True if an object was removed, False if it was already gone

        Raises:
            AttachmentError: On storage failures other than not-found
        """
        pass

    @abstractmethod
    def resolve_url(self, path: str) -> str:
        """Public URL for ``path`` (the object need not exist)."""
        pass

    @abstractmethod
    def path_for_url(self, url: str) -> Optional[str]:
        """Inverse of resolve_url; None for URLs this store does not own."""
        pass

    @abstractmethod
    def exists(self, url: str) -> bool:
        pass

    @abstractmethod
    def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        """Every stored object whose path starts with ``prefix``."""
        pass

    def list_paths(self, prefix: str = "") -> List[str]:
        return [info.path for info in self.list_objects(prefix)]
