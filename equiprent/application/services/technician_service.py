"""TechnicianService - Technicians and their profile photo."""

from equiprent.domain.models.attachments import TECHNICIAN_PHOTO
from equiprent.domain.models.technician import Technician
from .base_service import EntityMutationService


class TechnicianService(EntityMutationService[Technician]):
    entity_type = Technician
    slots = (TECHNICIAN_PHOTO,)

    def _sort_key(self, entity: Technician):
        return (entity.name.lower(), entity.id)
