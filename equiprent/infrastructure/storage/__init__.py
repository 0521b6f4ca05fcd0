"""Object store backends and attachment housekeeping."""

from .path_core import ObjectPathCore
from .inmemory_object_store import InMemoryObjectStore
from .filesystem_object_store import FilesystemObjectStore
from .orphan_cleaner import OrphanAttachmentCleaner

__all__ = [
    "ObjectPathCore",
    "InMemoryObjectStore",
    "FilesystemObjectStore",
    "OrphanAttachmentCleaner",
]
