"""Instance cloner: deploy a template as a client-specific draft agreement"""

import logging
import uuid
from datetime import datetime, timezone

from vahq_agreements.db.base import DatabaseInterface
from vahq_agreements.models.agreement import AgreementInstance, AgreementStatus
from vahq_agreements.models.structure import Structure
from vahq_agreements.services.schema import validate
from vahq_agreements.services.template_store import TemplateStore

logger = logging.getLogger(__name__)


def clone_structure(structure: Structure) -> Structure:
    """Structural copy sharing no objects with the source."""
    return Structure.model_validate(structure.model_dump())


class InstanceCloner:
    """Creates client agreements from templates."""

    def __init__(self, db: DatabaseInterface, templates: TemplateStore = None):
        self.db = db
        self.templates = templates or TemplateStore(db)

    def deploy(self, template_id: str, client_id: str, operator_id: str) -> AgreementInstance:
        """Clone a template's default structure into a new draft agreement.

        Raises NotFoundError if the template does not exist.
        """
        template = self.templates.get_template(template_id)
        structure = validate(clone_structure(template.default_structure))
        now = datetime.now(timezone.utc)

        agreement = AgreementInstance(
            id=str(uuid.uuid4()),
            title=template.title,
            client_id=client_id,
            va_id=operator_id,
            template_id=template.id,
            custom_structure=structure,
            status=AgreementStatus.DRAFT,
            version=1,
            created_at=now,
            last_updated_at=now,
        )
        self.db.insert_agreement({
            "id": agreement.id,
            "client_id": agreement.client_id,
            "va_id": agreement.va_id,
            "template_id": agreement.template_id,
            "title": agreement.title,
            "custom_structure": structure.to_json(),
            "status": agreement.status.value,
            "is_locked": False,
            "version": agreement.version,
            "created_at": now.isoformat(),
            "last_updated_at": now.isoformat(),
        })
        logger.info(f"Deployed template {template_id} to client {client_id} as agreement {agreement.id}")
        return agreement
