"""
equiprent - Equipment rental backend core.

Relationship and attachment consistency for machines, auxiliary equipment,
technicians and vehicles:
- Relationship Manager: bidirectional machine ⇄ auxiliary equipment links
- Attachment Manager: object-store uploads and deletes ordered around
  the document write
- Mutation services: create / update / delete in one atomic write

Architecture follows:
- Domain-Driven Design (domain / application / infrastructure / api)
- Interface-based store abstractions (IDocumentStore, IObjectStore)
- In-memory twins of every backend for tests
"""

__version__ = "0.1.0"

# Domain Models
from equiprent.domain.models import (
    Machine,
    AuxiliaryEquipment,
    Technician,
    Vehicle,
    OperationalStatus,
    VehicleStatus,
    FileUpload,
    SingleSlotChange,
    ImageSetChange,
    EquipRentError,
    ValidationError,
    UniquenessViolation,
    AttachmentLimitExceeded,
    AttachmentError,
    ConsistencyWriteError,
    ConcurrentModificationError,
    NotFoundError,
)

# Domain Interfaces
from equiprent.domain.interfaces import (
    IDocumentStore,
    IObjectStore,
    WriteBatch,
)

# Application
from equiprent.application.factories import ServiceFactory, ServiceContainer

# Configuration
from equiprent.config import EquipRentConfig, AttachmentConfig, get_config, set_config, reset_config

__all__ = [
    "__version__",
    # Entities
    "Machine",
    "AuxiliaryEquipment",
    "Technician",
    "Vehicle",
    "OperationalStatus",
    "VehicleStatus",
    # Attachments
    "FileUpload",
    "SingleSlotChange",
    "ImageSetChange",
    # Errors
    "EquipRentError",
    "ValidationError",
    "UniquenessViolation",
    "AttachmentLimitExceeded",
    "AttachmentError",
    "ConsistencyWriteError",
    "ConcurrentModificationError",
    "NotFoundError",
    # Interfaces
    "IDocumentStore",
    "IObjectStore",
    "WriteBatch",
    # Wiring
    "ServiceFactory",
    "ServiceContainer",
    # Config
    "EquipRentConfig",
    "AttachmentConfig",
    "get_config",
    "set_config",
    "reset_config",
]
