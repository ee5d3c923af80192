"""Client agreement instance models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from vahq_agreements.models.structure import Structure


class AgreementStatus(str, Enum):
    """Lifecycle status of a client agreement"""
    DRAFT = "draft"
    PENDING_CLIENT = "pending_client"
    FEEDBACK_RECEIVED = "feedback_received"
    ACCEPTED = "accepted"


class AgreementInstance(BaseModel):
    """A per-client copy of a template structure plus metadata"""
    id: str = ""
    title: str
    client_id: str
    va_id: Optional[str] = None
    template_id: Optional[str] = None   # traceability only
    custom_structure: Structure
    status: AgreementStatus = AgreementStatus.DRAFT
    is_locked: bool = False
    version: int = 1
    created_at: Optional[datetime] = None
    last_updated_at: Optional[datetime] = None
