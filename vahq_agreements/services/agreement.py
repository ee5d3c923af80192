"""Agreement service: validation, persistence, lifecycle, audit and notification

The structure engines (customization, value_fill) are pure. This service is
the caller that owns the current structure of an agreement: it validates
each new structure, writes structure and status together under the
agreement's version, then records the change in the audit log.
"""

import logging
from typing import Iterable, List, Optional

from vahq_agreements.db.base import DatabaseInterface
from vahq_agreements.errors import InvalidTransitionError, NotFoundError, PersistenceError
from vahq_agreements.models.agreement import AgreementInstance, AgreementStatus
from vahq_agreements.models.audit import AuditEntry
from vahq_agreements.models.operation import StructureOperation
from vahq_agreements.models.structure import Structure
from vahq_agreements.models.template import WorkflowTemplate
from vahq_agreements.services import customization, value_fill
from vahq_agreements.services.audit import AuditService
from vahq_agreements.services.cloner import InstanceCloner
from vahq_agreements.services.lifecycle import (
    CLIENT_EDITABLE_STATUSES,
    EDITABLE_STATUSES,
    LifecycleEvent,
    next_status,
)
from vahq_agreements.services.notification import NotificationService
from vahq_agreements.services.schema import parse_structure, validate
from vahq_agreements.services.template_store import TemplateStore
from vahq_agreements.utils.config import get_settings

logger = logging.getLogger(__name__)

SUMMARY_VA_UPDATE = "VA updated agreement structure/content"
SUMMARY_PUBLISHED = "published to client"
SUMMARY_CLIENT_PROGRESS = "Client saved progress"
SUMMARY_CLIENT_ACCEPTED = "Client authorised the agreement"
SUMMARY_CLIENT_FEEDBACK = "Client submitted changes"


class AgreementService:
    """Operator and client actions on client agreements."""

    def __init__(
        self,
        db: DatabaseInterface,
        audit: AuditService = None,
        notifications: NotificationService = None,
        templates: TemplateStore = None,
    ):
        self.db = db
        self.templates = templates or TemplateStore(db)
        self.cloner = InstanceCloner(db, self.templates)
        self.audit = audit or AuditService(db)
        self.notifications = notifications or NotificationService(db)

    # ---- Reads ----

    def get_agreement(self, agreement_id: str) -> AgreementInstance:
        row = self.db.get_agreement(agreement_id)
        if row is None:
            raise NotFoundError(f"Agreement not found: {agreement_id}")
        return self._row_to_agreement(row)

    def list_agreements(self, client_id: Optional[str] = None) -> List[AgreementInstance]:
        return [self._row_to_agreement(row) for row in self.db.list_agreements(client_id)]

    def audit_log(self, agreement_id: str) -> List[AuditEntry]:
        return self.audit.list(agreement_id)

    # ---- Operator actions ----

    def deploy(self, template_id: str, client_id: str, operator_id: str) -> AgreementInstance:
        return self.cloner.deploy(template_id, client_id, operator_id)

    def save_structure(
        self,
        agreement: AgreementInstance,
        structure: Structure,
        actor_id: Optional[str],
        summary: str = SUMMARY_VA_UPDATE,
    ) -> AgreementInstance:
        """Persist an edited structure without changing status."""
        self._require_editable(agreement)
        structure = validate(structure)
        saved = self._persist(agreement, {"custom_structure": structure.to_json()})
        self._record(saved.id, actor_id, summary, structure)
        return saved

    def customize(
        self,
        agreement: AgreementInstance,
        operations: Iterable[StructureOperation],
        actor_id: Optional[str],
    ) -> AgreementInstance:
        """Apply customization operations and save the result as one write."""
        structure = customization.apply_operations(agreement.custom_structure, list(operations))
        return self.save_structure(agreement, structure, actor_id)

    def fill_values(
        self,
        agreement: AgreementInstance,
        values: list[tuple[str, str, object]],
        actor_id: Optional[str],
    ) -> AgreementInstance:
        """Write (section_id, field_id, value) answers as the operator."""
        structure = value_fill.set_field_values(agreement.custom_structure, values)
        return self.save_structure(agreement, structure, actor_id)

    def publish(
        self,
        agreement: AgreementInstance,
        actor_id: Optional[str],
        structure: Optional[Structure] = None,
    ) -> AgreementInstance:
        """Issue the agreement to the client portal.

        Structure and status are written together; nothing is notified
        unless that write succeeds.
        """
        target = next_status(agreement.status, LifecycleEvent.PUBLISH)
        structure = validate(structure if structure is not None else agreement.custom_structure)
        published = self._persist(agreement, {
            "custom_structure": structure.to_json(),
            "status": target.value,
        })
        self._record(published.id, actor_id, SUMMARY_PUBLISHED, structure)
        if get_settings().notify_on_publish:
            self._notify("agreement_issued", self.notifications.agreement_issued, published)
        return published

    def save_template_defaults(self, agreement: AgreementInstance) -> WorkflowTemplate:
        """Promote the agreement's authorisation texts into its template."""
        if not agreement.template_id:
            raise NotFoundError(f"Agreement {agreement.id} has no source template")
        return self.templates.save_authorisation_defaults(
            agreement.template_id, agreement.custom_structure
        )

    # ---- Client actions ----

    def client_save_progress(
        self,
        agreement: AgreementInstance,
        structure: Structure,
        actor_id: Optional[str],
    ) -> AgreementInstance:
        """Persist client-filled values while the agreement awaits the client."""
        if agreement.is_locked or agreement.status not in CLIENT_EDITABLE_STATUSES:
            raise InvalidTransitionError(
                f"Agreement {agreement.id} is not available for update"
            )
        return self.save_structure(agreement, structure, actor_id, SUMMARY_CLIENT_PROGRESS)

    def client_accept(
        self,
        agreement: AgreementInstance,
        actor_id: Optional[str],
        structure: Optional[Structure] = None,
    ) -> AgreementInstance:
        """Client authorises the agreement; it becomes locked."""
        target = next_status(agreement.status, LifecycleEvent.CLIENT_ACCEPT)
        structure = validate(structure if structure is not None else agreement.custom_structure)
        accepted = self._persist(agreement, {
            "custom_structure": structure.to_json(),
            "status": target.value,
            "is_locked": True,
        })
        self._record(accepted.id, actor_id, SUMMARY_CLIENT_ACCEPTED, structure)
        self._notify("agreement_authorised", self.notifications.agreement_authorised, accepted)
        return accepted

    def client_feedback(
        self,
        agreement: AgreementInstance,
        actor_id: Optional[str],
        comment: Optional[str] = None,
        structure: Optional[Structure] = None,
    ) -> AgreementInstance:
        """Client asks for changes. The comment goes to the VA inbox only."""
        if agreement.is_locked:
            raise InvalidTransitionError(f"Agreement {agreement.id} is locked")
        target = next_status(agreement.status, LifecycleEvent.CLIENT_FEEDBACK)
        structure = validate(structure if structure is not None else agreement.custom_structure)
        updated = self._persist(agreement, {
            "custom_structure": structure.to_json(),
            "status": target.value,
        })
        self._record(updated.id, actor_id, SUMMARY_CLIENT_FEEDBACK, structure)
        self._notify("changes_requested", self.notifications.changes_requested, updated, comment)
        return updated

    # ---- Internal helpers ----

    def _require_editable(self, agreement: AgreementInstance) -> None:
        if agreement.is_locked or agreement.status not in EDITABLE_STATUSES:
            raise InvalidTransitionError(
                f"Agreement {agreement.id} is {agreement.status.value} and can no longer be edited"
            )

    def _persist(self, agreement: AgreementInstance, changes: dict) -> AgreementInstance:
        row = self.db.update_agreement(agreement.id, changes, agreement.version)
        saved = self._row_to_agreement(row)
        logger.info(f"Saved agreement {saved.id} (status={saved.status.value}, version={saved.version})")
        return saved

    def _record(self, agreement_id: str, actor_id: Optional[str], summary: str, structure: Structure) -> Optional[AuditEntry]:
        """Append to the audit log. The structure write stays authoritative on failure."""
        try:
            return self.audit.append(agreement_id, actor_id, summary, structure)
        except PersistenceError as e:
            logger.error(
                f"Audit entry lost for agreement {agreement_id} ({summary!r}); reconcile manually: {e}"
            )
            return None

    def _notify(self, event: str, send, *args) -> None:
        try:
            send(*args)
        except Exception as e:
            logger.warning(f"Notification {event} failed for agreement {args[0].id}: {e}")

    def _row_to_agreement(self, row: dict) -> AgreementInstance:
        return AgreementInstance(
            id=row.get("id", ""),
            title=row.get("title", ""),
            client_id=row.get("client_id", ""),
            va_id=row.get("va_id"),
            template_id=row.get("template_id"),
            custom_structure=parse_structure(row.get("custom_structure")),
            status=AgreementStatus(row.get("status") or AgreementStatus.DRAFT.value),
            is_locked=bool(row.get("is_locked", False)),
            version=row.get("version") or 1,
            created_at=row.get("created_at"),
            last_updated_at=row.get("last_updated_at"),
        )
