"""Audit log models"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from vahq_agreements.models.structure import Structure


class AuditEntry(BaseModel):
    """One immutable record of a change to an agreement structure"""
    model_config = ConfigDict(frozen=True)

    id: str = ""
    agreement_id: str
    changed_by: Optional[str] = None
    change_summary: str
    snapshot: Optional[Structure] = None
    created_at: Optional[datetime] = None
