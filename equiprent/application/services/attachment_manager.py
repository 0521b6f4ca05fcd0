"""
AttachmentManager - Lifecycle of binary artifacts owned by entities.

Object store and document store share no transaction, so every mutation
that touches attachments runs as an AttachmentPlan with two phases:

1. Uploads (StepPolicy.MUST_SUCCEED) run before the owning document write.
   The first failure aborts the mutation; earlier uploads become orphans.
2. Cleanups (StepPolicy.BEST_EFFORT) delete replaced or dropped objects
   only after the document write committed. Failures are logged.

The document therefore never references an object that was not uploaded,
and an aborted mutation never deletes an object the stored document
still references.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from equiprent.domain.interfaces.object_store import IObjectStore
from equiprent.domain.models.attachments import (
    AttachmentChanges,
    AttachmentSlot,
    FileUpload,
    ImageSetChange,
    SingleSlotChange,
)
from equiprent.domain.models.exceptions import (
    AttachmentError,
    AttachmentLimitExceeded,
    EquipRentError,
    ValidationError,
)
from equiprent.infrastructure.storage.path_core import ObjectPathCore

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Plan model
# ═══════════════════════════════════════════════════════════════════════════════


class StepPolicy(Enum):
    """
    Failure policy of a plan step.

    MUST_SUCCEED: failure aborts the mutation
    BEST_EFFORT: failure is logged and tolerated
    """
    MUST_SUCCEED = "must_succeed"
    BEST_EFFORT = "best_effort"


class StepAction(Enum):
    UPLOAD = "upload"
    DELETE = "delete"


@dataclass
class AttachmentStep:
    """One object-store operation of a plan."""
    action: StepAction
    slot: AttachmentSlot
    policy: StepPolicy
    upload: Optional[FileUpload] = None
    url: Optional[str] = None
    done: bool = False
    error: Optional[str] = None

    @classmethod
    def upload_of(cls, slot: AttachmentSlot, upload: FileUpload) -> "AttachmentStep":
        return cls(StepAction.UPLOAD, slot, StepPolicy.MUST_SUCCEED, upload=upload)

    @classmethod
    def delete_of(cls, slot: AttachmentSlot, url: str) -> "AttachmentStep":
        return cls(StepAction.DELETE, slot, StepPolicy.BEST_EFFORT, url=url)


@dataclass
class AttachmentPlan:
    """
    Ordered object-store work for one mutation.

    ``targets`` maps each slot field to its final content: a URL string or
    an upload step (single slots), or a list mixing both (multi slots).
    Fields absent from ``targets`` keep their stored value.
    """
    entity_id: str
    uploads: List[AttachmentStep] = field(default_factory=list)
    cleanups: List[AttachmentStep] = field(default_factory=list)
    targets: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.uploads and not self.cleanups and not self.targets

    @property
    def uploaded_urls(self) -> List[str]:
        return [step.url for step in self.uploads if step.done and step.url]

    @property
    def failed_cleanups(self) -> List[str]:
        return [step.url for step in self.cleanups if step.error]

    def resolve_values(self) -> Dict[str, Any]:
        """
        Final field values, valid once every upload step is done.

        Raises:
            RuntimeError: If called before the uploads ran
        """
        def resolve(target):
            if isinstance(target, AttachmentStep):
                if not target.done:
                    raise RuntimeError(f"Upload for {target.slot.name} has not run")
                return target.url
            return target

        values = {}
        for field_name, target in self.targets.items():
            if isinstance(target, list):
                values[field_name] = [resolve(t) for t in target]
            else:
                values[field_name] = resolve(target)
        return values


# ═══════════════════════════════════════════════════════════════════════════════
# Manager
# ═══════════════════════════════════════════════════════════════════════════════


class AttachmentManager:
    """
    Uploads, replaces and removes attachments through an IObjectStore.

    Usage:
        plan = manager.plan(machine_id, MACHINE_SLOTS, current_values, changes)
        manager.execute_uploads(plan)          # before the document write
        body.update(plan.resolve_values())
        store.atomic_write(batch)
        manager.execute_cleanup(plan)          # after the document write
    """

    def __init__(self, object_store: IObjectStore):
        self._object_store = object_store

    @property
    def object_store(self) -> IObjectStore:
        return self._object_store

    def build_path(self, entity_id: str, slot: AttachmentSlot, filename: str) -> str:
        return ObjectPathCore.build_path(slot.directory, entity_id, slot.prefix, filename)

    # ═══════════════════════════════════════════════════════════════════════════
    # Single operations
    # ═══════════════════════════════════════════════════════════════════════════

    def upload(self, entity_id: str, slot: AttachmentSlot, upload: FileUpload) -> str:
        """
        Upload one file into ``slot`` of ``entity_id``.

        Raises:
            AttachmentError: If the object store fails
        """
        path = self.build_path(entity_id, slot, upload.filename)
        try:
            url = self._object_store.upload(path, upload.content, upload.content_type)
        except AttachmentError:
            raise
        except Exception as e:
            raise AttachmentError(f"Upload to {path} failed", path=path, cause=e) from e
        logger.debug(f"Uploaded {slot.name} for {entity_id}: {path}")
        return url

    def replace(
        self,
        entity_id: str,
        slot: AttachmentSlot,
        old_url: Optional[str],
        upload: FileUpload,
    ) -> str:
        """Upload the new file, then best-effort delete the old one."""
        url = self.upload(entity_id, slot, upload)
        if old_url and old_url != url:
            self._delete_best_effort(old_url, slot)
        return url

    def remove(self, entity_id: str, slot: AttachmentSlot, url: Optional[str]) -> None:
        """
        Delete an attachment object. An already missing object is success.

        Raises:
            AttachmentError: On object-store failures other than not-found
        """
        if not url:
            return
        try:
            removed = self._object_store.delete(url)
        except AttachmentError:
            raise
        except Exception as e:
            raise AttachmentError(f"Delete of {slot.name} for {entity_id} failed", url=url, cause=e) from e
        if not removed:
            logger.debug(f"{slot.name} for {entity_id} was already gone: {url}")

    def purge(self, urls: Iterable[Optional[str]]) -> List[str]:
        """
        Best-effort delete of every URL.

        Returns:
            URLs that could not be deleted
        """
        failed = []
        for url in urls:
            if url and not self._delete_best_effort(url):
                failed.append(url)
        return failed

    # ═══════════════════════════════════════════════════════════════════════════
    # Plans
    # ═══════════════════════════════════════════════════════════════════════════

    def plan(
        self,
        entity_id: str,
        slots: Sequence[AttachmentSlot],
        current: Dict[str, Any],
        changes: Optional[AttachmentChanges],
    ) -> AttachmentPlan:
        """
        Validate requested changes and build the plan. Nothing is uploaded.

        Args:
            entity_id: Owner id, already assigned
            slots: Slots of the entity type
            current: Stored value per slot field (empty for new entities)
            changes: Requested change per slot name

        Raises:
            ValidationError: Unknown slot, wrong change kind, kept URL not
                currently in the slot
            AttachmentLimitExceeded: A multi slot would exceed max_count
        """
        plan = AttachmentPlan(entity_id=entity_id)
        by_name = {slot.name: slot for slot in slots}

        for name, change in (changes or {}).items():
            slot = by_name.get(name)
            if slot is None:
                raise ValidationError(f"Unknown attachment slot: {name}", field=name)
            if slot.is_multi:
                self._plan_multi(plan, slot, current.get(slot.field) or [], change)
            else:
                self._plan_single(plan, slot, current.get(slot.field), change)

        return plan

    def execute_uploads(self, plan: AttachmentPlan) -> None:
        """
        Run upload steps in order; the first failure aborts.

        Raises:
            AttachmentError: With ``orphaned_urls`` listing completed uploads
        """
        for step in plan.uploads:
            try:
                step.url = self.upload(plan.entity_id, step.slot, step.upload)
                step.done = True
            except AttachmentError as e:
                step.error = str(e)
                e.add_orphans(plan.uploaded_urls)
                logger.error(
                    f"Upload of {step.slot.name} for {plan.entity_id} failed, aborting "
                    f"({len(plan.uploaded_urls)} earlier uploads orphaned)"
                )
                raise

    def execute_cleanup(self, plan: AttachmentPlan) -> List[str]:
        """
        Run best-effort deletes. Call only after the document write committed.

        Returns:
            URLs whose deletion failed
        """
        for step in plan.cleanups:
            step.done = self._delete_best_effort(step.url, step.slot)
            if not step.done:
                step.error = "delete failed"
        return plan.failed_cleanups

    # ═══════════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════════

    def _plan_single(
        self,
        plan: AttachmentPlan,
        slot: AttachmentSlot,
        current_url: Optional[str],
        change: Any,
    ) -> None:
        if isinstance(change, FileUpload):
            change = SingleSlotChange.replace_with(change)
        if not isinstance(change, SingleSlotChange):
            raise ValidationError(f"Slot '{slot.name}' takes a single file", field=slot.name)

        if change.upload is not None:
            step = AttachmentStep.upload_of(slot, change.upload)
            plan.uploads.append(step)
            plan.targets[slot.field] = step
            if current_url:
                plan.cleanups.append(AttachmentStep.delete_of(slot, current_url))
        elif change.remove:
            plan.targets[slot.field] = None
            if current_url:
                plan.cleanups.append(AttachmentStep.delete_of(slot, current_url))

    def _plan_multi(
        self,
        plan: AttachmentPlan,
        slot: AttachmentSlot,
        current_urls: List[str],
        change: Any,
    ) -> None:
        if isinstance(change, FileUpload):
            change = ImageSetChange(keep_urls=tuple(current_urls), new_files=(change,))
        if not isinstance(change, ImageSetChange):
            raise ValidationError(f"Slot '{slot.name}' takes an image set", field=slot.name)

        unknown = [url for url in change.keep_urls if url not in current_urls]
        if unknown:
            raise ValidationError(
                f"Kept URLs are not attached to slot '{slot.name}'",
                field=slot.name,
                value=unknown,
            )
        keep = list(dict.fromkeys(change.keep_urls))
        total = len(keep) + len(change.new_files)
        if total > slot.max_count:
            raise AttachmentLimitExceeded(slot.name, total, slot.max_count)

        steps = [AttachmentStep.upload_of(slot, upload) for upload in change.new_files]
        plan.uploads.extend(steps)
        plan.targets[slot.field] = keep + steps
        for url in current_urls:
            if url not in keep:
                plan.cleanups.append(AttachmentStep.delete_of(slot, url))

    def _delete_best_effort(self, url: str, slot: Optional[AttachmentSlot] = None) -> bool:
        try:
            self._object_store.delete(url)
            return True
        except EquipRentError as e:
            logger.warning(f"Could not delete {slot.name if slot else 'attachment'} {url}: {e}")
        except Exception as e:
            logger.warning(f"Could not delete {slot.name if slot else 'attachment'} {url}: {e!r}")
        return False
