"""Template library routes"""

from typing import Optional

from fastapi import APIRouter, Depends

from vahq_agreements.api.dependencies import get_agreement_service, require_actor_id
from vahq_agreements.api.schemas import DeployRequest, TemplateItem, TemplateListResponse
from vahq_agreements.models.agreement import AgreementInstance
from vahq_agreements.models.template import GuidanceContent, WorkflowTemplate
from vahq_agreements.services.agreement import AgreementService

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("", response_model=TemplateListResponse)
async def list_templates(
    category: Optional[str] = None,
    service: AgreementService = Depends(get_agreement_service),
):
    """List workflow templates, optionally within one category."""
    templates = service.templates.list_templates(category)
    return TemplateListResponse(templates=[
        TemplateItem(id=t.id, title=t.title, category=t.category, description=t.description)
        for t in templates
    ])


@router.get("/{template_id}", response_model=WorkflowTemplate)
async def get_template(
    template_id: str,
    service: AgreementService = Depends(get_agreement_service),
):
    """Template with its default structure; guidance sorted by sort_order."""
    template = service.templates.get_template(template_id)
    if template.guidance_content:
        ordered = GuidanceContent(sections=template.guidance_content.ordered_sections())
        template = template.model_copy(update={"guidance_content": ordered})
    return template


@router.post("/{template_id}/deploy", response_model=AgreementInstance, status_code=201)
async def deploy_template(
    template_id: str,
    request: DeployRequest,
    actor_id: str = Depends(require_actor_id),
    service: AgreementService = Depends(get_agreement_service),
):
    """Clone the template into a draft agreement owned by the acting VA."""
    return service.deploy(template_id, request.client_id, actor_id)
