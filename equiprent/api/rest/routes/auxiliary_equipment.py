"""
Auxiliary equipment endpoints.

Provides:
- CRUD operations for auxiliary equipment
- Standalone image removal

Links to machines are changed through the machine endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from equiprent.api.rest.dependencies import get_auxiliary_equipment_service
from equiprent.api.rest.models import (
    AuxiliaryEquipmentListResponse,
    AuxiliaryEquipmentResponse,
    AuxiliaryEquipmentWriteRequest,
    OperationalStatusEnum,
)
from equiprent.application.services import AuxiliaryEquipmentService

router = APIRouter(prefix="/api/v1/auxiliary-equipment", tags=["Auxiliary Equipment"])


@router.get("", response_model=AuxiliaryEquipmentListResponse)
def list_auxiliary_equipment(
    status: Optional[OperationalStatusEnum] = Query(None),
    unlinked: bool = Query(False, description="Only items not linked to a machine"),
    service: AuxiliaryEquipmentService = Depends(get_auxiliary_equipment_service),
) -> AuxiliaryEquipmentListResponse:
    if unlinked:
        items = service.list_unlinked()
        if status:
            items = [a for a in items if a.status.value == status.value]
    elif status:
        items = service.list_by_status(status.value)
    else:
        items = service.list()
    return AuxiliaryEquipmentListResponse(
        auxiliary_equipment=[AuxiliaryEquipmentResponse.from_entity(a) for a in items],
        total=len(items),
    )


@router.post("", response_model=AuxiliaryEquipmentResponse, status_code=201)
def create_auxiliary_equipment(
    request: AuxiliaryEquipmentWriteRequest,
    service: AuxiliaryEquipmentService = Depends(get_auxiliary_equipment_service),
) -> AuxiliaryEquipmentResponse:
    aux = service.create(request.to_entity(), request.attachments.to_domain())
    return AuxiliaryEquipmentResponse.from_entity(aux)


@router.get("/{aux_id}", response_model=AuxiliaryEquipmentResponse)
def get_auxiliary_equipment(
    aux_id: str,
    service: AuxiliaryEquipmentService = Depends(get_auxiliary_equipment_service),
) -> AuxiliaryEquipmentResponse:
    return AuxiliaryEquipmentResponse.from_entity(service.require(aux_id))


@router.put("/{aux_id}", response_model=AuxiliaryEquipmentResponse)
def update_auxiliary_equipment(
    aux_id: str,
    request: AuxiliaryEquipmentWriteRequest,
    service: AuxiliaryEquipmentService = Depends(get_auxiliary_equipment_service),
) -> AuxiliaryEquipmentResponse:
    """Full-replace update; the stored machine link is kept."""
    aux = service.update(aux_id, request.to_entity(), request.attachments.to_domain())
    return AuxiliaryEquipmentResponse.from_entity(aux)


@router.delete("/{aux_id}", status_code=204)
def delete_auxiliary_equipment(
    aux_id: str,
    service: AuxiliaryEquipmentService = Depends(get_auxiliary_equipment_service),
) -> None:
    """Delete the item, its images, and remove it from every machine listing it."""
    service.delete(aux_id)


@router.delete("/{aux_id}/attachments/{slot}", response_model=AuxiliaryEquipmentResponse)
def remove_auxiliary_attachment(
    aux_id: str,
    slot: str,
    url: Optional[str] = Query(None),
    service: AuxiliaryEquipmentService = Depends(get_auxiliary_equipment_service),
) -> AuxiliaryEquipmentResponse:
    return AuxiliaryEquipmentResponse.from_entity(service.remove_attachment(aux_id, slot, url))
