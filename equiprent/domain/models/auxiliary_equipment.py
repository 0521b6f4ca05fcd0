"""
Auxiliary Equipment Domain Model.

Batteries, chargers, cradles and cables that travel with a machine.
Holds the back side of the Machine ⇄ AuxiliaryEquipment link in
``linked_equipment_id`` (one machine or None).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Optional

from .attachments import MAX_EQUIPMENT_IMAGES
from .exceptions import ValidationError
from .machine import OperationalStatus


AUXILIARY_TYPES = ("Battery", "Charger", "Cradle", "Cable")


@dataclass
class AuxiliaryEquipment:
    """Auxiliary equipment entity."""
    COLLECTION: ClassVar[str] = "auxiliary_equipment"

    name: str = ""
    type: str = ""
    id: str = ""
    serial_number: Optional[str] = None
    status: OperationalStatus = OperationalStatus.AVAILABLE
    linked_equipment_id: Optional[str] = None
    notes: Optional[str] = None
    image_urls: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.status = OperationalStatus.parse(self.status)
        self.image_urls = list(self.image_urls or [])
        self.serial_number = self.serial_number or None
        self.linked_equipment_id = self.linked_equipment_id or None

    def validate(self) -> None:
        for name in ("name", "type"):
            if not getattr(self, name) or not getattr(self, name).strip():
                raise ValidationError(f"{name} is required", field=name)
        if len(self.image_urls) > MAX_EQUIPMENT_IMAGES:
            raise ValidationError(
                f"At most {MAX_EQUIPMENT_IMAGES} images per auxiliary equipment",
                field="image_urls",
                value=len(self.image_urls),
            )

    @property
    def is_linked(self) -> bool:
        return self.linked_equipment_id is not None

    def to_document(self) -> Dict[str, Any]:
        body = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "id"}
        body["status"] = self.status.value
        body["image_urls"] = list(self.image_urls)
        return body

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "AuxiliaryEquipment":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and k != "id"}
        values["status"] = values.get("status") or OperationalStatus.AVAILABLE
        return cls(id=doc_id, **values)


__all__ = ["AuxiliaryEquipment", "AUXILIARY_TYPES"]
