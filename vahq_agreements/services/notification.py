"""Client notifications and VA inbox requests"""

import logging
from typing import Optional

from vahq_agreements.db.base import DatabaseInterface
from vahq_agreements.models.agreement import AgreementInstance

logger = logging.getLogger(__name__)


class NotificationService:
    """Posts agreement events to the client portal and the VA inbox."""

    def __init__(self, db: DatabaseInterface):
        self.db = db

    def agreement_issued(self, agreement: AgreementInstance) -> str:
        """Tell the client a new agreement is waiting in their portal."""
        notification_id = self.db.insert_notification({
            "client_id": agreement.client_id,
            "type": "agreement_issued",
            "message": f"New service agreement available: {agreement.title}",
        })
        logger.info(f"Notified client {agreement.client_id} of agreement {agreement.id}")
        return notification_id

    def agreement_authorised(self, agreement: AgreementInstance) -> str:
        """Post the client's authorisation to the VA inbox."""
        return self.db.insert_client_request({
            "client_id": agreement.client_id,
            "type": "work",
            "message": f"WORKFLOW AUTHORISED: {agreement.title or 'Agreement'}",
        })

    def changes_requested(self, agreement: AgreementInstance, comment: Optional[str]) -> str:
        """Forward the client's change request comment to the VA inbox."""
        title = agreement.title or "Agreement"
        comment = (comment or "").strip()
        message = f"WORKFLOW CHANGES SUBMITTED ({title})"
        if comment:
            message += f": {comment}"
        return self.db.insert_client_request({
            "client_id": agreement.client_id,
            "type": "work",
            "message": message,
        })
