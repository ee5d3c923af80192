"""Client agreement routes: customize, fill, publish and client responses"""

from typing import Optional

from fastapi import APIRouter, Depends

from vahq_agreements.api.dependencies import get_actor_id, get_agreement_service
from vahq_agreements.api.schemas import (
    AuditEntryItem,
    AuditLogResponse,
    FeedbackRequest,
    OperationsRequest,
    StructureSaveRequest,
    TransitionRequest,
    ValuesRequest,
    VersionedRequest,
)
from vahq_agreements.models.agreement import AgreementInstance
from vahq_agreements.models.template import WorkflowTemplate
from vahq_agreements.services.agreement import AgreementService
from vahq_agreements.services.render import ClientView, render_client_view

router = APIRouter(prefix="/api/agreements", tags=["agreements"])


def _load(service: AgreementService, agreement_id: str, request: VersionedRequest) -> AgreementInstance:
    """Load the agreement, pinned to the version the caller edited."""
    agreement = service.get_agreement(agreement_id)
    return agreement.model_copy(update={"version": request.version})


@router.get("", response_model=list[AgreementInstance])
async def list_agreements(
    client_id: Optional[str] = None,
    service: AgreementService = Depends(get_agreement_service),
):
    return service.list_agreements(client_id)


@router.get("/{agreement_id}", response_model=AgreementInstance)
async def get_agreement(
    agreement_id: str,
    service: AgreementService = Depends(get_agreement_service),
):
    return service.get_agreement(agreement_id)


@router.get("/{agreement_id}/client-view", response_model=ClientView)
async def get_client_view(
    agreement_id: str,
    service: AgreementService = Depends(get_agreement_service),
):
    """The agreement as the client portal shows it."""
    agreement = service.get_agreement(agreement_id)
    return render_client_view(agreement.custom_structure, agreement.title)


@router.put("/{agreement_id}/structure", response_model=AgreementInstance)
async def save_structure(
    agreement_id: str,
    request: StructureSaveRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: AgreementService = Depends(get_agreement_service),
):
    """Save a structure edited by the operator."""
    agreement = _load(service, agreement_id, request)
    return service.save_structure(agreement, request.structure, actor_id)


@router.post("/{agreement_id}/operations", response_model=AgreementInstance)
async def apply_operations(
    agreement_id: str,
    request: OperationsRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: AgreementService = Depends(get_agreement_service),
):
    """Apply show/hide and option edits; a failing step saves nothing."""
    agreement = _load(service, agreement_id, request)
    return service.customize(agreement, request.operations, actor_id)


@router.put("/{agreement_id}/values", response_model=AgreementInstance)
async def fill_values(
    agreement_id: str,
    request: ValuesRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: AgreementService = Depends(get_agreement_service),
):
    agreement = _load(service, agreement_id, request)
    values = [(v.section_id, v.field_id, v.value) for v in request.values]
    return service.fill_values(agreement, values, actor_id)


@router.post("/{agreement_id}/publish", response_model=AgreementInstance)
async def publish(
    agreement_id: str,
    request: TransitionRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: AgreementService = Depends(get_agreement_service),
):
    """Issue the agreement to the client."""
    agreement = _load(service, agreement_id, request)
    return service.publish(agreement, actor_id, request.structure)


@router.post("/{agreement_id}/template-defaults", response_model=WorkflowTemplate)
async def save_template_defaults(
    agreement_id: str,
    service: AgreementService = Depends(get_agreement_service),
):
    """Save this agreement's authorisation texts as its template's defaults."""
    return service.save_template_defaults(service.get_agreement(agreement_id))


@router.put("/{agreement_id}/progress", response_model=AgreementInstance)
async def client_save_progress(
    agreement_id: str,
    request: StructureSaveRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: AgreementService = Depends(get_agreement_service),
):
    """Client portal: save filled values without responding yet."""
    agreement = _load(service, agreement_id, request)
    return service.client_save_progress(agreement, request.structure, actor_id)


@router.post("/{agreement_id}/accept", response_model=AgreementInstance)
async def client_accept(
    agreement_id: str,
    request: TransitionRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: AgreementService = Depends(get_agreement_service),
):
    agreement = _load(service, agreement_id, request)
    return service.client_accept(agreement, actor_id, request.structure)


@router.post("/{agreement_id}/feedback", response_model=AgreementInstance)
async def client_feedback(
    agreement_id: str,
    request: FeedbackRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: AgreementService = Depends(get_agreement_service),
):
    agreement = _load(service, agreement_id, request)
    return service.client_feedback(agreement, actor_id, request.comment, request.structure)


@router.get("/{agreement_id}/audit", response_model=AuditLogResponse)
async def get_audit_log(
    agreement_id: str,
    service: AgreementService = Depends(get_agreement_service),
):
    """Version log, newest first."""
    service.get_agreement(agreement_id)
    entries = service.audit_log(agreement_id)
    return AuditLogResponse(
        agreement_id=agreement_id,
        entries=[
            AuditEntryItem(
                id=e.id,
                changed_by=e.changed_by,
                change_summary=e.change_summary,
                snapshot=e.snapshot,
                created_at=e.created_at,
            )
            for e in entries
        ],
    )
