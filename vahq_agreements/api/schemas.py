"""Request/response schemas for the Agreements API"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

from vahq_agreements.models.operation import StructureOperation
from vahq_agreements.models.structure import Structure


class TemplateItem(BaseModel):
    """A template in the library list"""
    id: str
    title: str
    category: str = ""
    description: str = ""


class TemplateListResponse(BaseModel):
    templates: list[TemplateItem] = []


class DeployRequest(BaseModel):
    """Create a draft agreement for a client from a template"""
    client_id: str = Field(..., min_length=1)


class VersionedRequest(BaseModel):
    """Carries the agreement version the caller last read"""
    version: int = Field(..., ge=1)


class StructureSaveRequest(VersionedRequest):
    structure: Structure


class OperationsRequest(VersionedRequest):
    """Customization operations applied in order, saved as one write"""
    operations: list[StructureOperation] = Field(..., min_length=1)


class FieldValueItem(BaseModel):
    section_id: str
    field_id: str
    value: Union[bool, str, list[str], None] = None


class ValuesRequest(VersionedRequest):
    """Field answers; checkbox_group values are the full selection"""
    values: list[FieldValueItem] = Field(..., min_length=1)


class TransitionRequest(VersionedRequest):
    """Publish / accept; an optional structure is saved with the status change"""
    structure: Optional[Structure] = None


class FeedbackRequest(TransitionRequest):
    comment: Optional[str] = Field(None, max_length=2000)


class AuditEntryItem(BaseModel):
    id: str
    changed_by: Optional[str] = None
    change_summary: str
    snapshot: Optional[Structure] = None
    created_at: Optional[datetime] = None


class AuditLogResponse(BaseModel):
    agreement_id: str
    entries: list[AuditEntryItem] = []


class ErrorResponse(BaseModel):
    error: str
    detail: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str  # "ok" | "error"
    db_mode: str
    version: str = "0.1.0"
