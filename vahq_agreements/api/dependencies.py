"""Shared FastAPI dependencies"""

from typing import Optional

from fastapi import Header

from vahq_agreements.db.supabase import get_database
from vahq_agreements.services.agreement import AgreementService


def get_agreement_service() -> AgreementService:
    """Build the service against the configured database."""
    return AgreementService(get_database())


def get_actor_id(x_actor_id: Optional[str] = Header(None)) -> Optional[str]:
    """Acting user id, supplied by the identity layer in front of the API."""
    return x_actor_id


def require_actor_id(x_actor_id: str = Header(..., min_length=1)) -> str:
    """Acting user id for routes that record an owner; missing header is a 422."""
    return x_actor_id
