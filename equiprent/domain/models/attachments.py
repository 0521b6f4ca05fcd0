"""
Attachment Domain Model.

Binary artifacts owned by an entity live in the object store; the entity
document only records their URLs. A slot names one such artifact field:

- Single-valued slots hold one URL (parts catalog, error codes, photo)
- Multi-valued slots hold an ordered list capped at ``max_count``

Change requests describe what the caller wants a slot to look like after
the mutation. Anything not mentioned keeps its current value.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .exceptions import ValidationError


class SlotKind(Enum):
    """Cardinality of an attachment slot."""
    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True)
class AttachmentSlot:
    """
    Definition of one attachment field on an entity.

    Attributes:
        name: Slot name used in change requests ("parts_catalog")
        field: Entity attribute that stores the URL(s) ("parts_catalog_url")
        directory: Top-level object-store directory ("equipment_files")
        kind: SINGLE or MULTI
        max_count: Maximum number of files (1 for single slots)
        prefix: File name prefix inside the entity directory
    """
    name: str
    field: str
    directory: str
    kind: SlotKind = SlotKind.SINGLE
    max_count: int = 1
    prefix: str = "file"

    def __post_init__(self):
        if self.max_count < 1:
            raise ValueError(f"max_count must be positive: {self.max_count}")
        if self.kind == SlotKind.SINGLE and self.max_count != 1:
            raise ValueError("single-valued slots hold exactly one file")

    @property
    def is_multi(self) -> bool:
        return self.kind == SlotKind.MULTI


@dataclass(frozen=True)
class FileUpload:
    """Raw file supplied by the presentation layer."""
    filename: str
    content: bytes = field(repr=False)
    content_type: Optional[str] = None

    def __post_init__(self):
        if not self.filename or not self.filename.strip():
            raise ValidationError("filename cannot be empty", field="filename")

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class SingleSlotChange:
    """
    Requested change to a single-valued slot.

    ``upload`` replaces the current file, ``remove`` clears it.
    """
    upload: Optional[FileUpload] = None
    remove: bool = False

    def __post_init__(self):
        if self.upload is not None and self.remove:
            raise ValidationError("cannot upload and remove the same slot in one request")

    @classmethod
    def replace_with(cls, upload: FileUpload) -> "SingleSlotChange":
        return cls(upload=upload)

    @classmethod
    def clear(cls) -> "SingleSlotChange":
        return cls(remove=True)


@dataclass(frozen=True)
class ImageSetChange:
    """
    Desired content of a multi-valued slot.

    Current URLs absent from ``keep_urls`` are dropped.
    """
    keep_urls: Tuple[str, ...] = ()
    new_files: Tuple[FileUpload, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "keep_urls", tuple(self.keep_urls))
        object.__setattr__(self, "new_files", tuple(self.new_files))

    @property
    def total(self) -> int:
        return len(self.keep_urls) + len(self.new_files)


SlotChange = Union[SingleSlotChange, ImageSetChange, FileUpload]
AttachmentChanges = Dict[str, SlotChange]


# ═══════════════════════════════════════════════════════════════════════════════
# Slot definitions
# ═══════════════════════════════════════════════════════════════════════════════

MAX_EQUIPMENT_IMAGES = 5
MAX_VEHICLE_IMAGES = 2

MACHINE_PARTS_CATALOG = AttachmentSlot(
    name="parts_catalog",
    field="parts_catalog_url",
    directory="equipment_files",
    prefix="partsCatalog",
)
MACHINE_ERROR_CODES = AttachmentSlot(
    name="error_codes",
    field="error_codes_url",
    directory="equipment_files",
    prefix="errorCodes",
)
MACHINE_IMAGES = AttachmentSlot(
    name="images",
    field="image_urls",
    directory="equipment_images",
    kind=SlotKind.MULTI,
    max_count=MAX_EQUIPMENT_IMAGES,
    prefix="image",
)
AUXILIARY_IMAGES = AttachmentSlot(
    name="images",
    field="image_urls",
    directory="auxiliary_equipment_images",
    kind=SlotKind.MULTI,
    max_count=MAX_EQUIPMENT_IMAGES,
    prefix="image",
)
TECHNICIAN_PHOTO = AttachmentSlot(
    name="photo",
    field="image_url",
    directory="technician_images",
    prefix="profile",
)
VEHICLE_IMAGES = AttachmentSlot(
    name="images",
    field="image_urls",
    directory="vehicle_images",
    kind=SlotKind.MULTI,
    max_count=MAX_VEHICLE_IMAGES,
    prefix="image",
)


__all__ = [
    "SlotKind",
    "AttachmentSlot",
    "FileUpload",
    "SingleSlotChange",
    "ImageSetChange",
    "SlotChange",
    "AttachmentChanges",
    "MAX_EQUIPMENT_IMAGES",
    "MAX_VEHICLE_IMAGES",
    "MACHINE_PARTS_CATALOG",
    "MACHINE_ERROR_CODES",
    "MACHINE_IMAGES",
    "AUXILIARY_IMAGES",
    "TECHNICIAN_PHOTO",
    "VEHICLE_IMAGES",
]
