"""
AuxiliaryEquipmentService - Mutations and reads for auxiliary equipment.

Links are owned by the machine side: a new item starts unlinked and an
update keeps the stored ``linked_equipment_id``. Deleting an item removes
it from every machine that lists it, in the same atomic write.
"""

from typing import List, Optional

from equiprent.domain.interfaces.document_store import IDocumentStore, WriteBatch
from equiprent.domain.models.attachments import AUXILIARY_IMAGES
from equiprent.domain.models.auxiliary_equipment import AuxiliaryEquipment
from equiprent.domain.models.machine import OperationalStatus
from .attachment_manager import AttachmentManager
from .base_service import EntityMutationService
from .relationship_manager import RelationshipManager


class AuxiliaryEquipmentService(EntityMutationService[AuxiliaryEquipment]):
    """Auxiliary equipment orchestrator."""

    entity_type = AuxiliaryEquipment
    slots = (AUXILIARY_IMAGES,)

    def __init__(
        self,
        document_store: IDocumentStore,
        attachments: AttachmentManager,
        relationships: RelationshipManager,
    ):
        super().__init__(document_store, attachments)
        self._relationships = relationships

    def list_by_status(self, status) -> List[AuxiliaryEquipment]:
        return self.find("status", OperationalStatus.parse(status).value)

    def list_unlinked(self) -> List[AuxiliaryEquipment]:
        return [aux for aux in self.list() if not aux.is_linked]

    def linked_to(self, machine_id: Optional[str]) -> List[AuxiliaryEquipment]:
        return self.find("linked_equipment_id", machine_id)

    def _prepare_new(self, entity: AuxiliaryEquipment) -> None:
        entity.linked_equipment_id = None

    def _carry_forward(self, entity: AuxiliaryEquipment, current: AuxiliaryEquipment) -> None:
        super()._carry_forward(entity, current)
        entity.linked_equipment_id = current.linked_equipment_id

    def _deletion_batch(self, entity: AuxiliaryEquipment, version: int) -> WriteBatch:
        return self._relationships.detach_child(entity.id, version)

    def _sort_key(self, entity: AuxiliaryEquipment):
        return (entity.name.lower(), entity.id)
