from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Set
import logging

from equiprent.domain.interfaces.document_store import IDocumentStore
from equiprent.domain.interfaces.object_store import IObjectStore, ObjectInfo
from equiprent.domain.models.attachments import AttachmentSlot
from equiprent.domain.models.exceptions import AttachmentError

logger = logging.getLogger(__name__)


class OrphanAttachmentCleaner:
    """
    Orphan attachment detection and cleanup.

    An object is orphaned when it sits in a managed slot directory but no
    live document records its URL, which happens when a mutation aborts
    after its uploads or a best-effort delete fails.
    """

    def __init__(
        self,
        object_store: IObjectStore,
        document_store: IDocumentStore,
        slots_by_collection: Dict[str, Sequence[AttachmentSlot]],
        grace_period_minutes: int = 10,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._object_store = object_store
        self._document_store = document_store
        self._slots_by_collection = slots_by_collection
        self._grace_period_minutes = grace_period_minutes
        self._clock = clock or datetime.now

    def clean_orphans(self, dry_run: bool = True) -> List[str]:
        """
        Find and optionally delete orphaned objects.

        Returns:
            Object paths considered orphaned
        """
        orphans = []
        failed = 0

        stored = self._list_managed_objects()
        logger.info(f"Found {len(stored)} objects in managed directories")

        referenced = self._referenced_paths()
        logger.info(f"Found {len(referenced)} attachment references in documents")

        for info in stored:
            if info.path in referenced:
                continue
            # Skip objects whose owning write may still be in flight
            if self._is_within_grace_period(info):
                logger.debug(f"Skipping recent object: {info.path}")
                continue

            orphans.append(info.path)
            if not dry_run:
                try:
                    self._object_store.delete(self._object_store.resolve_url(info.path))
                except AttachmentError as e:
                    failed += 1
                    logger.warning(f"Could not delete orphan object {info.path}: {e}")
                    continue
                logger.info(f"Deleted orphan object: {info.path}")

        logger.info(
            f"Found {len(orphans)} orphaned objects "
            f"({'DRY RUN - not deleted' if dry_run else f'DELETED, {failed} failed'})"
        )
        return orphans

    def _list_managed_objects(self) -> List[ObjectInfo]:
        directories = sorted({
            slot.directory
            for slots in self._slots_by_collection.values()
            for slot in slots
        })
        objects = []
        for directory in directories:
            objects.extend(self._object_store.list_objects(f"{directory}/"))
        return objects

    def _referenced_paths(self) -> Set[str]:
        paths: Set[str] = set()
        for collection, slots in self._slots_by_collection.items():
            for snapshot in self._document_store.list(collection):
                for slot in slots:
                    value = snapshot.data.get(slot.field)
                    urls = value if isinstance(value, list) else [value]
                    for url in urls:
                        path = self._object_store.path_for_url(url) if url else None
                        if path:
                            paths.add(path)
        return paths

    def _is_within_grace_period(self, info: ObjectInfo) -> bool:
        age_minutes = (self._clock() - info.created_at).total_seconds() / 60
        return age_minutes < self._grace_period_minutes
