"""
In-Memory Object Store.

Stores objects in a dictionary. No filesystem involved.
"""

from datetime import datetime
from threading import Lock
from typing import Dict, List, Optional
import logging

from equiprent.domain.interfaces.object_store import IObjectStore, ObjectInfo
from equiprent.domain.models.exceptions import AttachmentError
from .path_core import ObjectPathCore

logger = logging.getLogger(__name__)


class InMemoryObjectStore(IObjectStore):
    """In-memory object store for testing and development."""

    DEFAULT_BASE_URL = "memory://equiprent"

    def __init__(self, base_url: str = DEFAULT_BASE_URL):
        self._base_url = base_url
        self._objects: Dict[str, bytes] = {}
        self._metadata: Dict[str, Dict] = {}
        self._lock = Lock()

    def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        try:
            path = ObjectPathCore.normalize(path)
        except ValueError as e:
            raise AttachmentError(str(e), path=path, cause=e) from e
        with self._lock:
            self._objects[path] = bytes(content)
            self._metadata[path] = {
                "size": len(content),
                "content_type": content_type,
                "created_at": datetime.now(),
            }
        logger.debug(f"Stored {path} ({len(content)} bytes)")
        return self.resolve_url(path)

    def delete(self, url: str) -> bool:
        path = self.path_for_url(url)
        if path is None:
            raise AttachmentError(f"URL not owned by this store: {url}", url=url)
        with self._lock:
            if path not in self._objects:
                return False
            del self._objects[path]
            del self._metadata[path]
        logger.debug(f"Deleted {path}")
        return True

    def resolve_url(self, path: str) -> str:
        return ObjectPathCore.to_url(self._base_url, path)

    def path_for_url(self, url: str) -> Optional[str]:
        return ObjectPathCore.from_url(self._base_url, url)

    def exists(self, url: str) -> bool:
        path = self.path_for_url(url)
        with self._lock:
            return path is not None and path in self._objects

    def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        with self._lock:
            return [
                ObjectInfo(path=path, size=meta["size"], created_at=meta["created_at"])
                for path, meta in sorted(self._metadata.items())
                if path.startswith(prefix)
            ]

    def read(self, url: str) -> Optional[bytes]:
        path = self.path_for_url(url)
        with self._lock:
            return self._objects.get(path) if path else None

    def content_type(self, url: str) -> Optional[str]:
        path = self.path_for_url(url)
        with self._lock:
            meta = self._metadata.get(path) if path else None
            return meta["content_type"] if meta else None

    def set_created_at(self, path: str, created_at: datetime) -> None:
        """Backdate an object (used to exercise grace periods)."""
        with self._lock:
            self._metadata[path]["created_at"] = created_at

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)
