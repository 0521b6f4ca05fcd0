"""
Filesystem Object Store.

Objects are files under ``root_path`` mirroring their object path.
Writes are atomic (temp file + rename); URLs are ``public_base_url`` +
path, or ``file://`` URLs when no public base URL is configured.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional
import logging
import os

from equiprent.domain.interfaces.object_store import IObjectStore, ObjectInfo
from equiprent.domain.models.exceptions import AttachmentError
from .path_core import ObjectPathCore

logger = logging.getLogger(__name__)


class FilesystemObjectStore(IObjectStore):
    """
    Object store backed by a local directory.

    Usage:
        store = FilesystemObjectStore("./data/objects", "http://localhost:8000/files")
        url = store.upload("equipment_images/m1/image_ab12-front.jpg", data)
    """

    TEMP_SUFFIX = ".tmp"

    def __init__(self, root_path: str, public_base_url: Optional[str] = None):
        self._root = Path(root_path).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._base_url = public_base_url or self._root.as_uri()

    @property
    def root_path(self) -> Path:
        return self._root

    def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        try:
            path = ObjectPathCore.normalize(path)
            file_path = self._root / path
            file_path.parent.mkdir(parents=True, exist_ok=True)

            # Atomic write
            temp_path = file_path.with_name(f"{file_path.name}.{ObjectPathCore.new_token()}{self.TEMP_SUFFIX}")
            temp_path.write_bytes(content)
            os.replace(temp_path, file_path)
        except (OSError, ValueError) as e:
            logger.error(f"Upload to {path} failed: {e}")
            raise AttachmentError(f"Upload to {path} failed", path=path, cause=e) from e

        logger.debug(f"Stored {path} ({len(content)} bytes)")
        return self.resolve_url(path)

    def delete(self, url: str) -> bool:
        path = self.path_for_url(url)
        if path is None:
            raise AttachmentError(f"URL not owned by this store: {url}", url=url)
        try:
            (self._root / ObjectPathCore.normalize(path)).unlink()
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as e:
            raise AttachmentError(f"Delete of {path} failed", path=path, url=url, cause=e) from e
        logger.debug(f"Deleted {path}")
        return True

    def resolve_url(self, path: str) -> str:
        return ObjectPathCore.to_url(self._base_url, path)

    def path_for_url(self, url: str) -> Optional[str]:
        return ObjectPathCore.from_url(self._base_url, url)

    def exists(self, url: str) -> bool:
        path = self.path_for_url(url)
        if path is None:
            return False
        try:
            return (self._root / ObjectPathCore.normalize(path)).is_file()
        except ValueError:
            return False

    def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        result = []
        for file_path in sorted(self._root.rglob("*")):
            if not file_path.is_file() or file_path.name.endswith(self.TEMP_SUFFIX):
                continue
            path = file_path.relative_to(self._root).as_posix()
            if not path.startswith(prefix):
                continue
            stat = file_path.stat()
            result.append(ObjectInfo(
                path=path,
                size=stat.st_size,
                created_at=datetime.fromtimestamp(stat.st_mtime),
            ))
        return result
