"""Template store: read access to workflow templates and the defaults write path"""

import logging
from typing import List, Optional

from vahq_agreements.db.base import DatabaseInterface
from vahq_agreements.errors import NotFoundError
from vahq_agreements.models.structure import Structure
from vahq_agreements.models.template import (
    DEFAULT_AUTHORISATION_CONFIRMATION,
    DEFAULT_AUTHORISATION_DISCLAIMER,
    GuidanceContent,
    WorkflowTemplate,
)
from vahq_agreements.services.schema import parse_structure, validate

logger = logging.getLogger(__name__)


class TemplateStore:
    """Loads templates and writes back promoted defaults."""

    def __init__(self, db: DatabaseInterface):
        self.db = db

    def get_template(self, template_id: str) -> WorkflowTemplate:
        row = self.db.get_template(template_id)
        if row is None:
            raise NotFoundError(f"Template not found: {template_id}")
        return self._row_to_template(row)

    def list_templates(self, category: Optional[str] = None) -> List[WorkflowTemplate]:
        return [self._row_to_template(row) for row in self.db.list_templates(category)]

    def update_template_defaults(self, template_id: str, structure: Structure) -> None:
        """Replace a template's default structure."""
        validate(structure)
        if not self.db.update_template_defaults(template_id, structure.to_json()):
            raise NotFoundError(f"Template not found: {template_id}")
        logger.info(f"Updated default structure of template {template_id}")

    def save_authorisation_defaults(self, template_id: str, agreement_structure: Structure) -> WorkflowTemplate:
        """Promote an agreement's authorisation wording into the template defaults.

        Only the authorisation texts are copied; sections stay as they are.
        """
        template = self.get_template(template_id)
        defaults = template.default_structure.model_copy(update={
            "authorisation_disclaimer": (
                agreement_structure.authorisation_disclaimer or DEFAULT_AUTHORISATION_DISCLAIMER
            ),
            "authorisation_confirmation": (
                agreement_structure.authorisation_confirmation or DEFAULT_AUTHORISATION_CONFIRMATION
            ),
        })
        self.update_template_defaults(template_id, defaults)
        return template.model_copy(update={"default_structure": defaults})

    def _row_to_template(self, row: dict) -> WorkflowTemplate:
        guidance = row.get("guidance_content")
        return WorkflowTemplate(
            id=row.get("id", ""),
            title=row.get("title", ""),
            category=row.get("category") or "",
            description=row.get("description") or "",
            default_structure=parse_structure(row.get("default_structure")),
            guidance_content=GuidanceContent.model_validate(guidance) if guidance else None,
            created_at=row.get("created_at"),
        )
