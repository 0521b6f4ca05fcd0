"""
Application Factories.

Factory pattern for creating stores and services with proper dependency
injection. Services never reach for global state: every store is passed
in, so tests and the REST layer can wire their own instances.

Usage:
    container = ServiceFactory.create(EquipRentConfig.for_testing())
    machine = container.machines.create(Machine(...))
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence
import logging

from equiprent.config import AttachmentConfig, EquipRentConfig, get_config
from equiprent.domain.interfaces.document_store import IDocumentStore
from equiprent.domain.interfaces.object_store import IObjectStore
from equiprent.domain.models.attachments import AttachmentSlot
from equiprent.domain.models.links import MACHINE_AUXILIARY_LINK
from equiprent.infrastructure.database import InMemoryDocumentStore, SQLAlchemyDocumentStore
from equiprent.infrastructure.integrity import LinkIntegrityChecker
from equiprent.infrastructure.storage import (
    FilesystemObjectStore,
    InMemoryObjectStore,
    OrphanAttachmentCleaner,
)

from .services.attachment_manager import AttachmentManager
from .services.auxiliary_equipment_service import AuxiliaryEquipmentService
from .services.machine_service import MachineService
from .services.relationship_manager import RelationshipManager
from .services.technician_service import TechnicianService
from .services.vehicle_service import VehicleService

logger = logging.getLogger(__name__)


class DocumentStoreFactory:
    """Creates the configured document store backend."""

    @staticmethod
    def create(mode: str = "inmemory", db_url: Optional[str] = None, echo: bool = False) -> IDocumentStore:
        """
        Args:
            mode: "inmemory" or "sqlalchemy"
            db_url: Database URL (sqlalchemy mode)
            echo: Log SQL statements

        Raises:
            ValueError: Unknown mode
        """
        if mode == "inmemory":
            return InMemoryDocumentStore()
        if mode == "sqlalchemy":
            return SQLAlchemyDocumentStore(db_url or "sqlite:///data/equiprent.db", echo=echo)
        raise ValueError(f"Unknown document storage mode: {mode}")

    @staticmethod
    def from_config(config: EquipRentConfig) -> IDocumentStore:
        return DocumentStoreFactory.create(config.storage_mode, config.db_url, config.log_sql)


class ObjectStoreFactory:
    """Creates the configured object store backend."""

    @staticmethod
    def from_config(config: AttachmentConfig) -> IObjectStore:
        """
        Raises:
            ValueError: Unknown mode
        """
        if config.object_store_mode == "inmemory":
            return InMemoryObjectStore()
        if config.object_store_mode == "filesystem":
            config.ensure_storage_path()
            return FilesystemObjectStore(config.storage_path, config.public_base_url)
        raise ValueError(f"Unknown object store mode: {config.object_store_mode}")


@dataclass
class ServiceContainer:
    """Every service wired against one document store and one object store."""
    document_store: IDocumentStore
    object_store: IObjectStore
    attachments: AttachmentManager
    relationships: RelationshipManager
    machines: MachineService
    auxiliary_equipment: AuxiliaryEquipmentService
    technicians: TechnicianService
    vehicles: VehicleService
    integrity_checker: LinkIntegrityChecker
    orphan_cleaner: OrphanAttachmentCleaner

    def slots_by_collection(self) -> Dict[str, Sequence[AttachmentSlot]]:
        return _slots_by_collection()


def _slots_by_collection() -> Dict[str, Sequence[AttachmentSlot]]:
    return {
        service.entity_type.COLLECTION: service.slots
        for service in (MachineService, AuxiliaryEquipmentService, TechnicianService, VehicleService)
    }


class ServiceFactory:
    """
    Wires services from configuration or from explicit stores.

    SOLID Compliance:
    - SRP: Creates services only
    - DIP: Services receive IDocumentStore / IObjectStore abstractions
    """

    @staticmethod
    def create(config: Optional[EquipRentConfig] = None) -> ServiceContainer:
        """
        Create all services from configuration (defaults to global config).
        """
        config = config or get_config()
        logger.info(
            f"Wiring services (documents={config.storage_mode}, "
            f"objects={config.attachments.object_store_mode})"
        )
        return ServiceFactory.create_with_stores(
            DocumentStoreFactory.from_config(config),
            ObjectStoreFactory.from_config(config.attachments),
            orphan_grace_period_minutes=config.attachments.orphan_grace_period_minutes,
        )

    @staticmethod
    def create_with_stores(
        document_store: IDocumentStore,
        object_store: IObjectStore,
        orphan_grace_period_minutes: int = 10,
    ) -> ServiceContainer:
        """Create all services around existing stores."""
        attachments = AttachmentManager(object_store)
        relationships = RelationshipManager(document_store, MACHINE_AUXILIARY_LINK)
        return ServiceContainer(
            document_store=document_store,
            object_store=object_store,
            attachments=attachments,
            relationships=relationships,
            machines=MachineService(document_store, attachments, relationships),
            auxiliary_equipment=AuxiliaryEquipmentService(document_store, attachments, relationships),
            technicians=TechnicianService(document_store, attachments),
            vehicles=VehicleService(document_store, attachments),
            integrity_checker=LinkIntegrityChecker(document_store, MACHINE_AUXILIARY_LINK),
            orphan_cleaner=OrphanAttachmentCleaner(
                object_store,
                document_store,
                _slots_by_collection(),
                grace_period_minutes=orphan_grace_period_minutes,
            ),
        )

    @staticmethod
    def create_for_testing() -> ServiceContainer:
        """In-memory stores, no grace period for the orphan sweep."""
        return ServiceFactory.create(EquipRentConfig.for_testing())
