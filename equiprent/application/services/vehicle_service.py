"""VehicleService - Vehicles and their image set (at most two images)."""

from typing import List

from equiprent.domain.models.attachments import VEHICLE_IMAGES
from equiprent.domain.models.vehicle import Vehicle, VehicleStatus
from .base_service import EntityMutationService


class VehicleService(EntityMutationService[Vehicle]):
    entity_type = Vehicle
    slots = (VEHICLE_IMAGES,)

    def list_by_status(self, status) -> List[Vehicle]:
        return self.find("status", VehicleStatus.parse(status).value)

    def _sort_key(self, entity: Vehicle):
        return (entity.model.lower(), entity.license_plate, entity.id)
