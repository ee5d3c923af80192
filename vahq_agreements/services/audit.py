"""Audit trail service: append-only structure snapshots per agreement"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from vahq_agreements.db.base import DatabaseInterface
from vahq_agreements.models.audit import AuditEntry
from vahq_agreements.models.structure import Structure
from vahq_agreements.services.schema import parse_structure

logger = logging.getLogger(__name__)


class AuditService:
    """Records and retrieves the version log of client agreements."""

    def __init__(self, db: DatabaseInterface):
        self.db = db

    def append(
        self,
        agreement_id: str,
        actor_id: Optional[str],
        summary: str,
        snapshot: Structure,
    ) -> AuditEntry:
        """Append an entry holding the full structure snapshot.

        Raises PersistenceError if the store rejects the insert.
        """
        entry = AuditEntry(
            id=str(uuid.uuid4()),
            agreement_id=agreement_id,
            changed_by=actor_id,
            change_summary=summary,
            snapshot=snapshot,
            created_at=datetime.now(timezone.utc),
        )
        self.db.insert_audit_entry({
            "id": entry.id,
            "agreement_id": entry.agreement_id,
            "changed_by": entry.changed_by,
            "change_summary": entry.change_summary,
            "snapshot": snapshot.to_json(),
            "created_at": entry.created_at.isoformat(),
        })
        logger.info(f"Saved audit entry {entry.id} for agreement {agreement_id}: {summary}")
        return entry

    def list(self, agreement_id: str) -> List[AuditEntry]:
        """List entries for an agreement, newest first."""
        rows = self.db.list_audit_entries(agreement_id)
        entries = [self._row_to_entry(row) for row in rows]
        entries.sort(key=lambda e: e.created_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return entries

    def get_snapshot(self, agreement_id: str, entry_id: str) -> Optional[Structure]:
        """Point-in-time structure recorded by one entry."""
        for entry in self.list(agreement_id):
            if entry.id == entry_id:
                return entry.snapshot
        return None

    # ---- Internal helpers ----

    def _row_to_entry(self, row: dict) -> AuditEntry:
        snapshot = row.get("snapshot")
        return AuditEntry(
            id=row.get("id", ""),
            agreement_id=row.get("agreement_id", ""),
            changed_by=row.get("changed_by"),
            change_summary=row.get("change_summary", ""),
            snapshot=parse_structure(snapshot) if snapshot is not None else None,
            created_at=row.get("created_at"),
        )
