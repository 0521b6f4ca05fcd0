"""
MachineService - Mutations and reads for machines.

Machines own the forward side of the machine/auxiliary-equipment link, so
create, update and delete here also flip the auxiliary equipment back
references in the same atomic write.
"""

import logging
from typing import List, Optional

from equiprent.domain.interfaces.document_store import IDocumentStore, WriteBatch
from equiprent.domain.models.attachments import (
    MACHINE_ERROR_CODES,
    MACHINE_IMAGES,
    MACHINE_PARTS_CATALOG,
)
from equiprent.domain.models.auxiliary_equipment import AuxiliaryEquipment
from equiprent.domain.models.machine import Machine, OperationalStatus
from .attachment_manager import AttachmentManager
from .base_service import EntityMutationService
from .relationship_manager import RelationshipManager

logger = logging.getLogger(__name__)


class MachineService(EntityMutationService[Machine]):
    """
    Machine orchestrator.

    Usage:
        service = MachineService(store, AttachmentManager(objects), relationships)
        machine = service.create(
            Machine(brand="Toyota", model="8FGU25", chassis_number="CH-1",
                    linked_auxiliary_equipment_ids=[battery_id]),
            {"parts_catalog": FileUpload("catalog.pdf", data)},
        )
    """

    entity_type = Machine
    slots = (MACHINE_PARTS_CATALOG, MACHINE_ERROR_CODES, MACHINE_IMAGES)
    unique_fields = ("chassis_number",)

    def __init__(
        self,
        document_store: IDocumentStore,
        attachments: AttachmentManager,
        relationships: RelationshipManager,
    ):
        super().__init__(document_store, attachments)
        self._relationships = relationships

    def list_by_status(self, status) -> List[Machine]:
        return self.find("operational_status", OperationalStatus.parse(status).value)

    def find_by_chassis_number(self, chassis_number: str) -> Optional[Machine]:
        matches = self.find("chassis_number", chassis_number)
        return matches[0] if matches else None

    def linked_auxiliary_equipment(self, machine_id: str) -> List[AuxiliaryEquipment]:
        """Auxiliary equipment listed by the machine, in link order."""
        machine = self.require(machine_id)
        result = []
        for aux_id in machine.linked_auxiliary_equipment_ids:
            snapshot = self._store.get(AuxiliaryEquipment.COLLECTION, aux_id)
            if snapshot is None:
                logger.warning(f"Machine {machine_id} lists missing auxiliary equipment {aux_id}")
                continue
            result.append(AuxiliaryEquipment.from_document(snapshot.id, snapshot.data))
        return result

    def _relationship_ops(self, entity: Machine, current: Optional[Machine]) -> WriteBatch:
        previous = current.linked_auxiliary_equipment_ids if current else []
        _, batch = self._relationships.link_ops(entity.id, previous, entity.linked_auxiliary_equipment_ids)
        return batch

    def _deletion_batch(self, entity: Machine, version: int) -> WriteBatch:
        return self._relationships.detach_parent(entity.id, entity.linked_auxiliary_equipment_ids, version)

    def _sort_key(self, entity: Machine):
        return (entity.brand.lower(), entity.model.lower(), entity.id)
