"""
EntityMutationService - Create, update and delete for attachment-owning entities.

Every mutation follows the same order:

1. Pre-flight: shape validation, uniqueness, attachment plan and
   relationship ops are computed. Failures here have no side effects.
2. Uploads (must succeed) for new attachments.
3. ONE atomic write: the entity document plus every relationship write.
4. Best-effort deletion of replaced or dropped attachments.

Deletion purges attachments first (best effort) and then commits the
document delete together with the relationship repair.

Subclasses declare the entity type, its attachment slots and optionally
override the hooks for uniqueness, relationships and ordering.
"""

import logging
from copy import deepcopy
from typing import Any, ClassVar, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from equiprent.domain.interfaces.document_store import (
    DocumentSnapshot,
    IDocumentStore,
    QueryOp,
    WriteBatch,
)
from equiprent.domain.models.attachments import AttachmentChanges, AttachmentSlot
from equiprent.domain.models.exceptions import (
    ConsistencyWriteError,
    NotFoundError,
    UniquenessViolation,
    ValidationError,
)
from .attachment_manager import AttachmentManager, AttachmentPlan

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityMutationService(Generic[T]):
    """
    Generic mutation orchestrator.

    Subclasses set ``entity_type`` (a dataclass with COLLECTION,
    validate, to_document, from_document) and ``slots``.
    """

    entity_type: ClassVar[type]
    slots: ClassVar[Tuple[AttachmentSlot, ...]] = ()
    unique_fields: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, document_store: IDocumentStore, attachments: AttachmentManager):
        self._store = document_store
        self._attachments = attachments

    @property
    def collection(self) -> str:
        return self.entity_type.COLLECTION

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    def get(self, entity_id: str) -> Optional[T]:
        snapshot = self._store.get(self.collection, entity_id)
        return self._from_snapshot(snapshot) if snapshot else None

    def require(self, entity_id: str) -> T:
        entity = self.get(entity_id)
        if entity is None:
            raise NotFoundError(self.collection, entity_id)
        return entity

    def list(self) -> List[T]:
        entities = [self._from_snapshot(s) for s in self._store.list(self.collection)]
        return sorted(entities, key=self._sort_key)

    def find(self, field_name: str, value: Any) -> List[T]:
        snapshots = self._store.query(self.collection, field_name, QueryOp.EQUALS, value)
        return sorted((self._from_snapshot(s) for s in snapshots), key=self._sort_key)

    # ═══════════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════════

    def create(self, entity: T, attachments: Optional[AttachmentChanges] = None) -> T:
        """
        Create a new entity with its attachments and relationships.

        Returns:
            The stored entity, with its new id and attachment URLs

        Raises:
            ValidationError: Shape, uniqueness, attachment-limit or link
                target violations (nothing written)
            AttachmentError: An upload failed (no document written)
            ConsistencyWriteError: The atomic write failed
        """
        entity = deepcopy(entity)
        self._reset_attachment_fields(entity)
        self._prepare_new(entity)
        entity.validate()
        self._check_uniqueness(entity, None)

        entity.id = self._store.new_id(self.collection)
        plan = self._attachments.plan(entity.id, self.slots, {}, attachments)
        relationship_ops = self._relationship_ops(entity, None)

        self._attachments.execute_uploads(plan)
        self._apply_plan(entity, plan)

        batch = WriteBatch().set(self.collection, entity.id, entity.to_document(), expected_version=0)
        batch.extend(relationship_ops)
        self._commit(batch, plan)

        logger.info(f"Created {self.collection}/{entity.id} ({len(batch)} writes, {len(plan.uploads)} uploads)")
        return entity

    def update(self, entity_id: str, entity: T, attachments: Optional[AttachmentChanges] = None) -> T:
        """
        Replace an entity's fields, attachments and relationships.

        Attachment fields on ``entity`` are ignored; attachments change only
        through ``attachments``.

        Raises:
            NotFoundError: No entity with ``entity_id``
            ValidationError, AttachmentError, ConsistencyWriteError: As create
        """
        snapshot = self._require_snapshot(entity_id)
        current = self._from_snapshot(snapshot)

        entity = deepcopy(entity)
        entity.id = entity_id
        self._carry_forward(entity, current)
        entity.validate()
        self._check_uniqueness(entity, current)

        plan = self._attachments.plan(entity_id, self.slots, self._attachment_values(current), attachments)
        relationship_ops = self._relationship_ops(entity, current)

        self._attachments.execute_uploads(plan)
        self._apply_plan(entity, plan)

        batch = WriteBatch().set(
            self.collection, entity_id, entity.to_document(), expected_version=snapshot.version
        )
        batch.extend(relationship_ops)
        self._commit(batch, plan)

        failed = self._attachments.execute_cleanup(plan)
        logger.info(
            f"Updated {self.collection}/{entity_id} ({len(batch)} writes, {len(plan.uploads)} uploads, "
            f"{len(plan.cleanups) - len(failed)} attachments deleted)"
        )
        return entity

    def delete(self, entity_id: str) -> None:
        """
        Delete an entity, its attachments and its relationships.

        Raises:
            NotFoundError: No entity with ``entity_id``
            ConsistencyWriteError: The atomic write failed (attachments may
                already be gone)
        """
        snapshot = self._require_snapshot(entity_id)
        current = self._from_snapshot(snapshot)

        failed = self._attachments.purge(self._attachment_urls(current))
        if failed:
            logger.warning(f"{len(failed)} attachments of {self.collection}/{entity_id} left behind")

        batch = self._deletion_batch(current, snapshot.version)
        self._commit(batch, None)
        logger.info(f"Deleted {self.collection}/{entity_id} ({len(batch)} writes)")

    def remove_attachment(self, entity_id: str, slot_name: str, url: Optional[str] = None) -> T:
        """
        Delete one attachment and clear its reference.

        For multi slots ``url`` names the image to drop. Removing something
        that is not attached is a no-op.

        Raises:
            NotFoundError: No entity with ``entity_id``
            ValidationError: Unknown slot, or a multi slot without ``url``
            AttachmentError: The object store failed (document untouched)
        """
        snapshot = self._require_snapshot(entity_id)
        entity = self._from_snapshot(snapshot)
        slot = self._slot(slot_name)

        current = getattr(entity, slot.field)
        if slot.is_multi:
            if not url:
                raise ValidationError(f"Slot '{slot_name}' needs the URL to remove", field=slot_name)
            if url not in current:
                return entity
            new_value = [u for u in current if u != url]
        else:
            if not current:
                return entity
            url, new_value = current, None

        self._attachments.remove(entity_id, slot, url)
        batch = WriteBatch().update(
            self.collection, entity_id, {slot.field: new_value}, expected_version=snapshot.version
        )
        self._commit(batch, None)
        setattr(entity, slot.field, new_value)
        logger.info(f"Removed {slot_name} from {self.collection}/{entity_id}")
        return entity

    # ═══════════════════════════════════════════════════════════════════════════
    # Hooks
    # ═══════════════════════════════════════════════════════════════════════════

    def _prepare_new(self, entity: T) -> None:
        """Adjust a new entity before validation."""

    def _check_uniqueness(self, entity: T, current: Optional[T]) -> None:
        """
        Reject values of ``unique_fields`` already used by another entity.
        Only fields that changed are re-checked on update.
        """
        for field_name in self.unique_fields:
            value = getattr(entity, field_name)
            if current is not None and getattr(current, field_name) == value:
                continue
            for match in self._store.query(self.collection, field_name, QueryOp.EQUALS, value):
                if match.id != entity.id:
                    raise UniquenessViolation(field_name, value, conflicting_id=match.id)

    def _relationship_ops(self, entity: T, current: Optional[T]) -> WriteBatch:
        return WriteBatch()

    def _deletion_batch(self, entity: T, version: int) -> WriteBatch:
        return WriteBatch().delete(self.collection, entity.id, expected_version=version)

    def _carry_forward(self, entity: T, current: T) -> None:
        """Copy fields the caller cannot change on update."""
        for slot in self.slots:
            setattr(entity, slot.field, deepcopy(getattr(current, slot.field)))

    def _sort_key(self, entity: T):
        return entity.id

    # ═══════════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════════

    def _commit(self, batch: WriteBatch, plan: Optional[AttachmentPlan]) -> None:
        uploaded = plan.uploaded_urls if plan else []
        try:
            self._store.atomic_write(batch)
        except ConsistencyWriteError as e:
            e.add_orphans(uploaded)
            logger.error(
                f"Atomic write on {self.collection} rejected: {e.message} "
                f"({len(uploaded)} uploads orphaned)"
            )
            raise

    def _require_snapshot(self, entity_id: str) -> DocumentSnapshot:
        snapshot = self._store.get(self.collection, entity_id)
        if snapshot is None:
            raise NotFoundError(self.collection, entity_id)
        return snapshot

    def _from_snapshot(self, snapshot: DocumentSnapshot) -> T:
        return self.entity_type.from_document(snapshot.id, snapshot.data)

    def _slot(self, slot_name: str) -> AttachmentSlot:
        for slot in self.slots:
            if slot.name == slot_name:
                return slot
        raise ValidationError(f"Unknown attachment slot: {slot_name}", field=slot_name)

    def _attachment_values(self, entity: T) -> Dict[str, Any]:
        return {slot.field: deepcopy(getattr(entity, slot.field)) for slot in self.slots}

    def _attachment_urls(self, entity: T) -> List[str]:
        urls = []
        for slot in self.slots:
            value = getattr(entity, slot.field)
            if slot.is_multi:
                urls.extend(value or [])
            elif value:
                urls.append(value)
        return urls

    def _reset_attachment_fields(self, entity: T) -> None:
        for slot in self.slots:
            setattr(entity, slot.field, [] if slot.is_multi else None)

    @staticmethod
    def _apply_plan(entity: T, plan: AttachmentPlan) -> None:
        for field_name, value in plan.resolve_values().items():
            setattr(entity, field_name, value)
