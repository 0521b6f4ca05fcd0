"""Technician Domain Model."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Optional

from .exceptions import ValidationError


TECHNICIAN_ROLES = (
    "Technician",
    "Administrative",
    "Management",
    "Fiscal",
    "Finance",
    "Purchasing",
    "Sales",
    "Commercial",
)


@dataclass
class Technician:
    """Staff member; ``image_url`` is the profile photo attachment."""
    COLLECTION: ClassVar[str] = "technicians"

    name: str = ""
    role: str = ""
    id: str = ""
    specialization: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None

    def __post_init__(self):
        if self.phone:
            self.phone = "".join(ch for ch in self.phone if ch.isdigit()) or None

    def validate(self) -> None:
        for name in ("name", "role"):
            if not getattr(self, name) or not getattr(self, name).strip():
                raise ValidationError(f"{name} is required", field=name)

    def to_document(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "id"}

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Technician":
        known = {f.name for f in fields(cls)}
        return cls(id=doc_id, **{k: v for k, v in data.items() if k in known and k != "id"})


__all__ = ["Technician", "TECHNICIAN_ROLES"]
