"""
Vehicle Domain Model.

Service vehicles used by technicians. Images are capped at
MAX_VEHICLE_IMAGES.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from .attachments import MAX_VEHICLE_IMAGES
from .exceptions import ValidationError


class VehicleStatus(Enum):
    AVAILABLE = "Available"
    IN_USE = "In Use"
    MAINTENANCE = "Maintenance"

    @classmethod
    def parse(cls, value: Any) -> "VehicleStatus":
        if isinstance(value, cls):
            return value
        for status in cls:
            if value in (status.value, status.name):
                return status
        raise ValidationError(f"Unknown vehicle status: {value!r}", field="status", value=value)


@dataclass
class Vehicle:
    """Vehicle entity."""
    COLLECTION: ClassVar[str] = "vehicles"

    model: str = ""
    license_plate: str = ""
    kind: str = ""
    id: str = ""
    current_mileage: float = 0.0
    fuel_consumption: float = 0.0
    cost_per_kilometer: float = 0.0
    fipe_value: Optional[float] = None
    year: Optional[int] = None
    status: VehicleStatus = VehicleStatus.AVAILABLE
    maintenance_notes: Optional[str] = None
    image_urls: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.status = VehicleStatus.parse(self.status)
        self.image_urls = list(self.image_urls or [])

    def validate(self) -> None:
        for name in ("model", "license_plate", "kind"):
            if not getattr(self, name) or not getattr(self, name).strip():
                raise ValidationError(f"{name} is required", field=name)
        for name in ("current_mileage", "fuel_consumption", "cost_per_kilometer", "fipe_value"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValidationError(f"{name} cannot be negative", field=name, value=value)
        if self.year is not None and not 1900 <= self.year <= datetime.now().year + 1:
            raise ValidationError("year out of range", field="year", value=self.year)
        if len(self.image_urls) > MAX_VEHICLE_IMAGES:
            raise ValidationError(
                f"At most {MAX_VEHICLE_IMAGES} images per vehicle",
                field="image_urls",
                value=len(self.image_urls),
            )

    def to_document(self) -> Dict[str, Any]:
        body = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "id"}
        body["status"] = self.status.value
        body["image_urls"] = list(self.image_urls)
        return body

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Vehicle":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and k != "id"}
        values["status"] = values.get("status") or VehicleStatus.AVAILABLE
        return cls(id=doc_id, **values)


__all__ = ["Vehicle", "VehicleStatus"]
