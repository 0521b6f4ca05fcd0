"""
Machine endpoints.

Provides:
- CRUD operations for machines (attachments and auxiliary links included)
- Standalone attachment removal
- Linked auxiliary equipment lookup
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from equiprent.api.rest.dependencies import get_machine_service
from equiprent.api.rest.models import (
    AuxiliaryEquipmentListResponse,
    AuxiliaryEquipmentResponse,
    MachineListResponse,
    MachineResponse,
    MachineWriteRequest,
    OperationalStatusEnum,
)
from equiprent.application.services import MachineService

router = APIRouter(prefix="/api/v1/machines", tags=["Machines"])


@router.get("", response_model=MachineListResponse)
def list_machines(
    status: Optional[OperationalStatusEnum] = Query(None),
    service: MachineService = Depends(get_machine_service),
) -> MachineListResponse:
    """List machines ordered by brand and model, optionally by status."""
    machines = service.list_by_status(status.value) if status else service.list()
    return MachineListResponse(
        machines=[MachineResponse.from_entity(m) for m in machines],
        total=len(machines),
    )


@router.post("", response_model=MachineResponse, status_code=201)
def create_machine(
    request: MachineWriteRequest,
    service: MachineService = Depends(get_machine_service),
) -> MachineResponse:
    """
    Create a machine.

    Uploads attachments first, then writes the machine and every linked
    auxiliary equipment back reference in one atomic write.
    """
    machine = service.create(request.to_entity(), request.attachments.to_domain())
    return MachineResponse.from_entity(machine)


@router.get("/{machine_id}", response_model=MachineResponse)
def get_machine(
    machine_id: str,
    service: MachineService = Depends(get_machine_service),
) -> MachineResponse:
    return MachineResponse.from_entity(service.require(machine_id))


@router.put("/{machine_id}", response_model=MachineResponse)
def update_machine(
    machine_id: str,
    request: MachineWriteRequest,
    service: MachineService = Depends(get_machine_service),
) -> MachineResponse:
    """Full-replace update of a machine."""
    machine = service.update(machine_id, request.to_entity(), request.attachments.to_domain())
    return MachineResponse.from_entity(machine)


@router.delete("/{machine_id}", status_code=204)
def delete_machine(
    machine_id: str,
    service: MachineService = Depends(get_machine_service),
) -> None:
    """Delete a machine, its attachments and its auxiliary equipment links."""
    service.delete(machine_id)


@router.delete("/{machine_id}/attachments/{slot}", response_model=MachineResponse)
def remove_machine_attachment(
    machine_id: str,
    slot: str,
    url: Optional[str] = Query(None, description="Image URL (image slots only)"),
    service: MachineService = Depends(get_machine_service),
) -> MachineResponse:
    """Delete one attachment and clear its reference. Idempotent."""
    return MachineResponse.from_entity(service.remove_attachment(machine_id, slot, url))


@router.get("/{machine_id}/auxiliary-equipment", response_model=AuxiliaryEquipmentListResponse)
def list_linked_auxiliary_equipment(
    machine_id: str,
    service: MachineService = Depends(get_machine_service),
) -> AuxiliaryEquipmentListResponse:
    items = service.linked_auxiliary_equipment(machine_id)
    return AuxiliaryEquipmentListResponse(
        auxiliary_equipment=[AuxiliaryEquipmentResponse.from_entity(a) for a in items],
        total=len(items),
    )
