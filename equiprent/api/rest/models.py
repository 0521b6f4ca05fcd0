"""
REST API Pydantic Models (Request/Response Schemas).

Following SOLID principles:
- Single Responsibility: Each model represents one concept
- Interface Segregation: Separate request/response models

Attachments travel inside JSON bodies: file content is base64 encoded.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Literal
from enum import Enum
from pydantic import BaseModel, Base64Bytes, Field, ConfigDict

from equiprent.domain.models import (
    AttachmentChanges,
    AuxiliaryEquipment,
    FileUpload,
    ImageSetChange,
    Machine,
    SingleSlotChange,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════════

class OperationalStatusEnum(str, Enum):
    """Operational status enum for API."""
    AVAILABLE = "Available"
    RENTED = "Rented"
    IN_MAINTENANCE = "In Maintenance"
    SCRAPPED = "Scrapped"


# ═══════════════════════════════════════════════════════════════════════════════
# Common Models
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(from_attributes=True)


class HealthResponse(BaseModel):
    """Health check response."""
    status: Literal["healthy", "degraded", "unhealthy"]
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    components: Dict[str, str] = Field(
        default_factory=dict,
        description="Component health status"
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Attachment Models
# ═══════════════════════════════════════════════════════════════════════════════

class FileUploadSchema(BaseModel):
    """A file to upload, content base64 encoded."""
    filename: str = Field(..., min_length=1)
    content: Base64Bytes = Field(..., description="Base64 encoded file content")
    content_type: Optional[str] = None

    def to_domain(self) -> FileUpload:
        return FileUpload(self.filename, self.content, self.content_type)


class SingleSlotChangeSchema(BaseModel):
    """Replace (``upload``) or clear (``remove``) a single-file slot."""
    upload: Optional[FileUploadSchema] = None
    remove: bool = False

    def to_domain(self) -> SingleSlotChange:
        return SingleSlotChange(
            upload=self.upload.to_domain() if self.upload else None,
            remove=self.remove,
        )


class ImageSetChangeSchema(BaseModel):
    """Desired image set: current URLs to keep plus new files."""
    keep_urls: List[str] = Field(default_factory=list)
    new_files: List[FileUploadSchema] = Field(default_factory=list)

    def to_domain(self) -> ImageSetChange:
        return ImageSetChange(
            keep_urls=tuple(self.keep_urls),
            new_files=tuple(f.to_domain() for f in self.new_files),
        )


class MachineAttachmentsSchema(BaseModel):
    parts_catalog: Optional[SingleSlotChangeSchema] = None
    error_codes: Optional[SingleSlotChangeSchema] = None
    images: Optional[ImageSetChangeSchema] = None

    def to_domain(self) -> AttachmentChanges:
        changes: AttachmentChanges = {}
        for name in ("parts_catalog", "error_codes", "images"):
            value = getattr(self, name)
            if value is not None:
                changes[name] = value.to_domain()
        return changes


class AuxiliaryAttachmentsSchema(BaseModel):
    images: Optional[ImageSetChangeSchema] = None

    def to_domain(self) -> AttachmentChanges:
        return {"images": self.images.to_domain()} if self.images is not None else {}


# ═══════════════════════════════════════════════════════════════════════════════
# Machine Models
# ═══════════════════════════════════════════════════════════════════════════════

class MachineFields(BaseModel):
    """Writable machine fields."""
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    chassis_number: str = Field(..., min_length=1)
    fleet_number: Optional[str] = None
    equipment_type: str = Field(..., min_length=1)
    manufacture_year: Optional[int] = None
    operational_status: OperationalStatusEnum = OperationalStatusEnum.AVAILABLE
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
    linked_auxiliary_equipment_ids: List[str] = Field(default_factory=list)


class MachineWriteRequest(MachineFields):
    """Create or full-replace request for a machine."""
    attachments: MachineAttachmentsSchema = Field(default_factory=MachineAttachmentsSchema)

    def to_entity(self) -> Machine:
        data = self.model_dump(exclude={"attachments"})
        data["operational_status"] = self.operational_status.value
        return Machine(**data)


class MachineResponse(MachineFields):
    """Machine as stored."""
    id: str
    parts_catalog_url: Optional[str] = None
    error_codes_url: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, machine: Machine) -> "MachineResponse":
        data = machine.to_document()
        data["id"] = machine.id
        return cls(**data)


class MachineListResponse(BaseModel):
    machines: List[MachineResponse]
    total: int


# ═══════════════════════════════════════════════════════════════════════════════
# Auxiliary Equipment Models
# ═══════════════════════════════════════════════════════════════════════════════

class AuxiliaryEquipmentFields(BaseModel):
    """Writable auxiliary equipment fields."""
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    serial_number: Optional[str] = None
    status: OperationalStatusEnum = OperationalStatusEnum.AVAILABLE
    notes: Optional[str] = None


class AuxiliaryEquipmentWriteRequest(AuxiliaryEquipmentFields):
    """Create or full-replace request; the machine link is set from the machine side."""
    attachments: AuxiliaryAttachmentsSchema = Field(default_factory=AuxiliaryAttachmentsSchema)

    def to_entity(self) -> AuxiliaryEquipment:
        data = self.model_dump(exclude={"attachments"})
        data["status"] = self.status.value
        return AuxiliaryEquipment(**data)


class AuxiliaryEquipmentResponse(AuxiliaryEquipmentFields):
    """Auxiliary equipment as stored."""
    id: str
    linked_equipment_id: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, aux: AuxiliaryEquipment) -> "AuxiliaryEquipmentResponse":
        data = aux.to_document()
        data["id"] = aux.id
        return cls(**data)


class AuxiliaryEquipmentListResponse(BaseModel):
    auxiliary_equipment: List[AuxiliaryEquipmentResponse]
    total: int


# ═══════════════════════════════════════════════════════════════════════════════
# Maintenance Models
# ═══════════════════════════════════════════════════════════════════════════════

class IntegrityIssueSchema(BaseModel):
    issue_type: str
    severity: str
    parent_id: Optional[str] = None
    child_id: str
    message: str
    repair_action: str
    details: Dict[str, Any] = Field(default_factory=dict)


class IntegrityReportResponse(BaseModel):
    healthy: bool
    total_checked: int
    repaired_count: int
    repair_failed_count: int
    duration_ms: float
    checked_at: datetime
    issues: List[IntegrityIssueSchema]


class OrphanSweepResponse(BaseModel):
    dry_run: bool
    orphans: List[str]
    count: int
