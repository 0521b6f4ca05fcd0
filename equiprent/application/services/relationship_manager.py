"""
RelationshipManager - Keeps both sides of a denormalized link consistent.

A parent document holds an ordered list of child ids (forward side); each
child holds the id of its single parent (back side). Every change is
expressed as write operations that the caller commits in ONE atomic
write together with its own document writes.

Design Principles:
- Parameterised by LinkSpec (collections + field names), no entity types
- Reads happen here, writes happen in the caller's batch
- Every op carries the version read, so a concurrent change to any
  touched document rejects the whole batch

Linking a child that currently belongs to another parent moves it: the
other parent's forward list loses the id in the same batch.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from equiprent.domain.interfaces.document_store import (
    DocumentSnapshot,
    IDocumentStore,
    QueryOp,
    WriteBatch,
)
from equiprent.domain.models.exceptions import (
    ConsistencyWriteError,
    EquipRentError,
    ValidationError,
)
from equiprent.domain.models.links import LinkDiff, LinkSpec, ordered_unique

logger = logging.getLogger(__name__)


class RelationshipManager:
    """
    Computes write batches for one bidirectional link.

    Usage:
        manager = RelationshipManager(store, MACHINE_AUXILIARY_LINK)
        diff, ops = manager.link_ops(machine_id, previous_ids, new_ids)
        batch = WriteBatch().set("machines", machine_id, body).extend(ops)
        store.atomic_write(batch)
    """

    def __init__(self, document_store: IDocumentStore, link: LinkSpec):
        self._store = document_store
        self._link = link

    @property
    def link(self) -> LinkSpec:
        return self._link

    @staticmethod
    def diff(previous: Optional[Iterable[str]], new: Optional[Iterable[str]]) -> LinkDiff:
        return LinkDiff.between(previous, new)

    # ═══════════════════════════════════════════════════════════════════════════
    # Parent-side changes
    # ═══════════════════════════════════════════════════════════════════════════

    def link_ops(
        self,
        parent_id: str,
        previous_ids: Optional[Iterable[str]],
        new_ids: Optional[Iterable[str]],
    ) -> Tuple[LinkDiff, WriteBatch]:
        """
        Child-side writes for a forward-list change (the parent write is
        left to the caller).

        Raises:
            ValidationError: A newly linked child does not exist
        """
        link = self._link
        diff = self.diff(previous_ids, new_ids)
        batch = WriteBatch()
        if diff.is_empty:
            return diff, batch

        children = self._load_children(diff.to_link + diff.to_unlink)
        missing = [child_id for child_id in diff.to_link if child_id not in children]
        if missing:
            raise ValidationError(
                f"Unknown {link.child_collection} ids: {', '.join(missing)}",
                field=link.forward_field,
                value=missing,
            )

        # Children moving away from another parent, grouped per parent
        moved: Dict[str, List[str]] = {}
        for child_id in diff.to_link:
            child = children[child_id]
            current_parent = child.data.get(link.back_field)
            if current_parent and current_parent != parent_id:
                moved.setdefault(current_parent, []).append(child_id)
            batch.update(
                link.child_collection,
                child_id,
                {link.back_field: parent_id},
                expected_version=child.version,
            )

        for child_id in diff.to_unlink:
            child = children.get(child_id)
            if child is None:
                logger.warning(f"Unlinking missing {link.child_collection}/{child_id} from {parent_id}")
                continue
            current_parent = child.data.get(link.back_field)
            if current_parent and current_parent != parent_id:
                logger.warning(
                    f"{link.child_collection}/{child_id} already points at {current_parent}, "
                    f"leaving its back reference alone"
                )
                continue
            batch.update(
                link.child_collection,
                child_id,
                {link.back_field: None},
                expected_version=child.version,
            )

        for other_parent_id, child_ids in moved.items():
            batch.extend(self._remove_from_parent(other_parent_id, child_ids))

        logger.debug(
            f"Link diff for {link.parent_collection}/{parent_id}: "
            f"+{len(diff.to_link)} -{len(diff.to_unlink)} ({len(batch)} ops)"
        )
        return diff, batch

    def reconcile_links(
        self,
        parent_id: str,
        previous_ids: Optional[Iterable[str]],
        new_ids: Optional[Iterable[str]],
        parent_version: Optional[int] = None,
    ) -> WriteBatch:
        """
        Full batch for changing an existing parent's forward list: the child
        flips plus the parent's forward-list update.
        """
        _, batch = self.link_ops(parent_id, previous_ids, new_ids)
        batch.update(
            self._link.parent_collection,
            parent_id,
            {self._link.forward_field: ordered_unique(new_ids)},
            expected_version=parent_version,
        )
        return batch

    def detach_parent(
        self,
        parent_id: str,
        forward_ids: Optional[Iterable[str]],
        parent_version: Optional[int] = None,
    ) -> WriteBatch:
        """Batch deleting a parent and clearing every child's back reference."""
        _, batch = self.link_ops(parent_id, forward_ids, [])
        batch.delete(self._link.parent_collection, parent_id, expected_version=parent_version)
        return batch

    # ═══════════════════════════════════════════════════════════════════════════
    # Child-side changes
    # ═══════════════════════════════════════════════════════════════════════════

    def parents_of(self, child_id: str) -> List[DocumentSnapshot]:
        """
        Every parent whose forward list contains ``child_id``.

        Raises:
            ConsistencyWriteError: The query failed
        """
        link = self._link
        try:
            return self._store.query(
                link.parent_collection, link.forward_field, QueryOp.ARRAY_CONTAINS, child_id
            )
        except EquipRentError:
            raise
        except Exception as e:
            logger.error(f"Querying {link.parent_collection} for {child_id} failed: {e}")
            raise ConsistencyWriteError(
                f"Could not look up {link.parent_collection} linked to {child_id}",
                cause=e,
                child_id=child_id,
            ) from e

    def detach_child(self, child_id: str, child_version: Optional[int] = None) -> WriteBatch:
        """
        Batch deleting a child and removing it from every parent that lists it.

        All matches are handled, not just the first.
        """
        batch = WriteBatch()
        for parent in self.parents_of(child_id):
            batch.update(
                self._link.parent_collection,
                parent.id,
                {self._link.forward_field: self._without(parent.data, [child_id])},
                expected_version=parent.version,
            )
        batch.delete(self._link.child_collection, child_id, expected_version=child_version)
        return batch

    # ═══════════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════════

    def _load_children(self, child_ids: Iterable[str]) -> Dict[str, DocumentSnapshot]:
        children = {}
        for child_id in child_ids:
            snapshot = self._store.get(self._link.child_collection, child_id)
            if snapshot is not None:
                children[child_id] = snapshot
        return children

    def _remove_from_parent(self, parent_id: str, child_ids: List[str]) -> WriteBatch:
        batch = WriteBatch()
        parent = self._store.get(self._link.parent_collection, parent_id)
        if parent is None:
            logger.warning(f"Back reference points at missing {self._link.parent_collection}/{parent_id}")
            return batch
        logger.info(
            f"Moving {', '.join(child_ids)} away from {self._link.parent_collection}/{parent_id}"
        )
        batch.update(
            self._link.parent_collection,
            parent_id,
            {self._link.forward_field: self._without(parent.data, child_ids)},
            expected_version=parent.version,
        )
        return batch

    def _without(self, data: Dict[str, Any], child_ids: Iterable[str]) -> List[str]:
        drop = set(child_ids)
        return [i for i in ordered_unique(data.get(self._link.forward_field)) if i not in drop]
