"""
Machine Domain Model.

A rentable machine (forklift, pallet truck, ...) owned by one of the group
companies or by a customer. Machines hold the forward side of the
Machine ⇄ AuxiliaryEquipment link in ``linked_auxiliary_equipment_ids``.

Invariants:
- chassis_number is unique across machines (checked by the service layer)
- linked_auxiliary_equipment_ids never holds duplicates
- at most MAX_EQUIPMENT_IMAGES image URLs
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from .attachments import MAX_EQUIPMENT_IMAGES
from .exceptions import ValidationError
from .links import ordered_unique


class OperationalStatus(Enum):
    """Operational status shared by machines and auxiliary equipment."""
    AVAILABLE = "Available"
    RENTED = "Rented"
    IN_MAINTENANCE = "In Maintenance"
    SCRAPPED = "Scrapped"

    @classmethod
    def parse(cls, value: Any) -> "OperationalStatus":
        if isinstance(value, cls):
            return value
        for status in cls:
            if value in (status.value, status.name):
                return status
        raise ValidationError(f"Unknown status: {value!r}", field="status", value=value)


COMPANY_IDS = ("goldmaq", "goldcomercio", "goldjob")
CUSTOMER_OWNED = "CUSTOMER_OWNED"

MACHINE_TYPES = (
    "Counterbalance Forklift LPG",
    "Counterbalance Forklift Electric",
    "Reach Truck",
    "Electric Pallet Truck",
)

_POSITIVE_MEASUREMENTS = (
    "tower_open_height_mm",
    "tower_closed_height_mm",
    "nominal_capacity_kg",
    "battery_box_width_mm",
    "battery_box_height_mm",
    "battery_box_depth_mm",
)
_NON_NEGATIVE_MEASUREMENTS = ("monthly_rental_value", "hour_meter")


@dataclass
class Machine:
    """
    Machine entity.

    Attachment fields (parts_catalog_url, error_codes_url, image_urls) are
    owned by the attachment lifecycle; values supplied by callers on
    create/update are ignored in favour of the attachment plan.
    """
    COLLECTION: ClassVar[str] = "machines"

    brand: str = ""
    model: str = ""
    chassis_number: str = ""
    id: str = ""
    fleet_number: Optional[str] = None
    equipment_type: str = MACHINE_TYPES[0]
    manufacture_year: Optional[int] = None
    operational_status: OperationalStatus = OperationalStatus.AVAILABLE
    owner_reference: Optional[str] = None
    customer_id: Optional[str] = None

    tower_open_height_mm: Optional[float] = None
    tower_closed_height_mm: Optional[float] = None
    nominal_capacity_kg: Optional[float] = None
    battery_box_width_mm: Optional[float] = None
    battery_box_height_mm: Optional[float] = None
    battery_box_depth_mm: Optional[float] = None
    monthly_rental_value: Optional[float] = None
    hour_meter: Optional[float] = None
    notes: Optional[str] = None

    parts_catalog_url: Optional[str] = None
    error_codes_url: Optional[str] = None
    image_urls: List[str] = field(default_factory=list)
    linked_auxiliary_equipment_ids: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.operational_status = OperationalStatus.parse(self.operational_status)
        self.image_urls = list(self.image_urls or [])
        self.linked_auxiliary_equipment_ids = ordered_unique(self.linked_auxiliary_equipment_ids)
        self.fleet_number = self.fleet_number or None

    def validate(self) -> None:
        """
        Check shape rules.

        Raises:
            ValidationError: On the first violated rule
        """
        for name in ("brand", "model", "chassis_number", "equipment_type"):
            if not getattr(self, name) or not str(getattr(self, name)).strip():
                raise ValidationError(f"{name} is required", field=name)

        if self.manufacture_year is not None:
            max_year = datetime.now().year + 1
            if not 1900 <= self.manufacture_year <= max_year:
                raise ValidationError(
                    f"manufacture_year must be between 1900 and {max_year}",
                    field="manufacture_year",
                    value=self.manufacture_year,
                )

        if self.owner_reference is not None:
            if self.owner_reference not in COMPANY_IDS and self.owner_reference != CUSTOMER_OWNED:
                raise ValidationError(
                    f"Unknown owner reference: {self.owner_reference}",
                    field="owner_reference",
                    value=self.owner_reference,
                )
            if self.owner_reference == CUSTOMER_OWNED and not self.customer_id:
                raise ValidationError(
                    "A customer must be selected for customer-owned machines",
                    field="customer_id",
                )

        for name in _POSITIVE_MEASUREMENTS:
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValidationError(f"{name} must be positive", field=name, value=value)
        for name in _NON_NEGATIVE_MEASUREMENTS:
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValidationError(f"{name} cannot be negative", field=name, value=value)

        if len(self.image_urls) > MAX_EQUIPMENT_IMAGES:
            raise ValidationError(
                f"At most {MAX_EQUIPMENT_IMAGES} images per machine",
                field="image_urls",
                value=len(self.image_urls),
            )

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.model}".strip()

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a document body (the id is the document key)."""
        body = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "id"}
        body["operational_status"] = self.operational_status.value
        body["image_urls"] = list(self.image_urls)
        body["linked_auxiliary_equipment_ids"] = list(self.linked_auxiliary_equipment_ids)
        return body

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Machine":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and k != "id"}
        values["operational_status"] = values.get("operational_status") or OperationalStatus.AVAILABLE
        return cls(id=doc_id, **values)


__all__ = [
    "Machine",
    "OperationalStatus",
    "COMPANY_IDS",
    "CUSTOMER_OWNED",
    "MACHINE_TYPES",
]
