"""
Object Path Core - Shared naming logic for object store backends.

Design:
- Static methods for pure functions (no I/O)
- Paths are namespaced ``{directory}/{entity_id}/{prefix}_{token}-{filename}``
- Every upload gets a fresh token, so a replacement never lands on the
  path of the object it replaces
"""

import re
import uuid
from typing import Optional
from urllib.parse import quote, unquote


class ObjectPathCore:
    """
    Pure logic for object paths and URLs.

    Usage:
        path = ObjectPathCore.build_path("equipment_files", machine_id, "partsCatalog", "manual.pdf")
        url = ObjectPathCore.to_url("memory://equiprent", path)
    """

    UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
    TOKEN_LENGTH = 12

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """
        Replace characters outside ``[a-zA-Z0-9._-]`` with underscores.

        Directory components are stripped first.
        """
        name = filename.replace("\\", "/").rsplit("/", 1)[-1]
        name = ObjectPathCore.UNSAFE_CHARS.sub("_", name)
        return name or "file"

    @staticmethod
    def new_token() -> str:
        return uuid.uuid4().hex[:ObjectPathCore.TOKEN_LENGTH]

    @staticmethod
    def build_path(
        directory: str,
        entity_id: str,
        prefix: str,
        filename: str,
        token: Optional[str] = None,
    ) -> str:
        if not entity_id:
            raise ValueError("entity_id is required to build an attachment path")
        token = token or ObjectPathCore.new_token()
        return f"{directory}/{entity_id}/{prefix}_{token}-{ObjectPathCore.sanitize_filename(filename)}"

    @staticmethod
    def entity_prefix(directory: str, entity_id: str) -> str:
        return f"{directory}/{entity_id}/"

    @staticmethod
    def normalize(path: str) -> str:
        """Strip leading slashes and reject parent-directory segments."""
        parts = [p for p in path.replace("\\", "/").split("/") if p and p != "."]
        if not parts or ".." in parts:
            raise ValueError(f"Invalid object path: {path!r}")
        return "/".join(parts)

    @staticmethod
    def to_url(base_url: str, path: str) -> str:
        return f"{base_url.rstrip('/')}/{quote(path, safe='/')}"

    @staticmethod
    def from_url(base_url: str, url: str) -> Optional[str]:
        base = base_url.rstrip("/") + "/"
        if not url or not url.startswith(base):
            return None
        return unquote(url[len(base):]) or None
