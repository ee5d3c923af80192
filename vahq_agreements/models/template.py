"""Workflow template models"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from vahq_agreements.models.structure import Structure

# Built-in authorisation wording used when a structure carries none
DEFAULT_AUTHORISATION_DISCLAIMER = (
    "I understand this workflow agreement describes how work will be delivered "
    "and does not amend or replace the booking agreement."
)
DEFAULT_AUTHORISATION_CONFIRMATION = (
    'By clicking "Authorise Workflow", I confirm that the details provided above '
    "are accurate and I grant permission for the VA to proceed with these specific "
    "instruction parameters."
)


class GuidanceSection(BaseModel):
    """A block of internal, VA-facing guidance text"""
    id: str
    title: str
    body: str = ""
    sort_order: int = 0


class GuidanceContent(BaseModel):
    """Internal guidance tree, separate from the client-facing structure"""
    sections: list[GuidanceSection] = []

    def ordered_sections(self) -> list[GuidanceSection]:
        return sorted(self.sections, key=lambda s: s.sort_order)


class WorkflowTemplate(BaseModel):
    """A reusable agreement blueprint owned by the business"""
    id: str = ""
    title: str
    category: str = ""
    description: str = ""
    default_structure: Structure = Structure()
    guidance_content: Optional[GuidanceContent] = None
    created_at: Optional[datetime] = None
