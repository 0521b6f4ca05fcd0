"""Domain Models - Entities, Value Objects, and Exceptions."""

from .exceptions import (
    EquipRentError,
    ValidationError,
    UniquenessViolation,
    AttachmentLimitExceeded,
    AttachmentError,
    ConsistencyWriteError,
    ConcurrentModificationError,
    NotFoundError,
)
from .links import LinkSpec, LinkDiff, ordered_unique, MACHINE_AUXILIARY_LINK
from .attachments import (
    SlotKind,
    AttachmentSlot,
    FileUpload,
    SingleSlotChange,
    ImageSetChange,
    SlotChange,
    AttachmentChanges,
    MAX_EQUIPMENT_IMAGES,
    MAX_VEHICLE_IMAGES,
    MACHINE_PARTS_CATALOG,
    MACHINE_ERROR_CODES,
    MACHINE_IMAGES,
    AUXILIARY_IMAGES,
    TECHNICIAN_PHOTO,
    VEHICLE_IMAGES,
)
from .machine import (
    Machine,
    OperationalStatus,
    COMPANY_IDS,
    CUSTOMER_OWNED,
    MACHINE_TYPES,
)
from .auxiliary_equipment import AuxiliaryEquipment, AUXILIARY_TYPES
from .technician import Technician, TECHNICIAN_ROLES
from .vehicle import Vehicle, VehicleStatus
from .integrity import (
    IntegrityIssueType,
    IntegritySeverity,
    RepairAction,
    IntegrityIssue,
    IntegrityReport,
)

__all__ = [
    # Exceptions
    "EquipRentError",
    "ValidationError",
    "UniquenessViolation",
    "AttachmentLimitExceeded",
    "AttachmentError",
    "ConsistencyWriteError",
    "ConcurrentModificationError",
    "NotFoundError",
    # Links
    "LinkSpec",
    "LinkDiff",
    "ordered_unique",
    "MACHINE_AUXILIARY_LINK",
    # Attachments
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
    # Entities
    "Machine",
    "OperationalStatus",
    "COMPANY_IDS",
    "CUSTOMER_OWNED",
    "MACHINE_TYPES",
    "AuxiliaryEquipment",
    "AUXILIARY_TYPES",
    "Technician",
    "TECHNICIAN_ROLES",
    "Vehicle",
    "VehicleStatus",
    # Integrity
    "IntegrityIssueType",
    "IntegritySeverity",
    "RepairAction",
    "IntegrityIssue",
    "IntegrityReport",
]
