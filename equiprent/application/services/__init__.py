"""Application Services - Mutation orchestration, relationships and attachments."""

from .relationship_manager import RelationshipManager
from .attachment_manager import (
    AttachmentManager,
    AttachmentPlan,
    AttachmentStep,
    StepAction,
    StepPolicy,
)
from .base_service import EntityMutationService
from .machine_service import MachineService
from .auxiliary_equipment_service import AuxiliaryEquipmentService
from .technician_service import TechnicianService
from .vehicle_service import VehicleService

__all__ = [
    "RelationshipManager",
    "AttachmentManager",
    "AttachmentPlan",
    "AttachmentStep",
    "StepAction",
    "StepPolicy",
    "EntityMutationService",
    "MachineService",
    "AuxiliaryEquipmentService",
    "TechnicianService",
    "VehicleService",
]
