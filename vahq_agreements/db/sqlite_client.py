"""SQLite wrapper implementing DatabaseInterface"""

import logging
import sqlite3
from typing import List, Optional

from vahq_agreements.db.base import DatabaseInterface
from vahq_agreements.db import sqlite as sqlite_ops
from vahq_agreements.errors import ConflictError, NotFoundError, PersistenceError
from vahq_agreements.utils.config import get_settings

logger = logging.getLogger(__name__)


class SQLiteClient(DatabaseInterface):
    """SQLite implementation of DatabaseInterface.
    Wraps sqlite.py functions and reports sqlite3 errors as PersistenceError."""

    def _call(self, fn, *args):
        try:
            return fn(*args)
        except sqlite3.Error as e:
            logger.error(f"SQLite operation {fn.__name__} failed: {e}")
            raise PersistenceError(f"SQLite {fn.__name__} failed: {e}") from e

    def init_db(self) -> None:
        self._call(sqlite_ops.init_db)

    def get_template(self, template_id: str) -> Optional[dict]:
        return self._call(sqlite_ops.get_template, template_id)

    def list_templates(self, category: Optional[str] = None) -> List[dict]:
        return self._call(sqlite_ops.list_templates, category)

    def insert_template(self, template: dict) -> str:
        return self._call(sqlite_ops.insert_template, template)

    def update_template_defaults(self, template_id: str, default_structure: dict) -> bool:
        return self._call(sqlite_ops.update_template_defaults, template_id, default_structure)

    def insert_agreement(self, agreement: dict) -> str:
        return self._call(sqlite_ops.insert_agreement, agreement)

    def get_agreement(self, agreement_id: str) -> Optional[dict]:
        return self._call(sqlite_ops.get_agreement, agreement_id)

    def list_agreements(self, client_id: Optional[str] = None) -> List[dict]:
        return self._call(sqlite_ops.list_agreements, client_id)

    def update_agreement(self, agreement_id: str, changes: dict, expected_version: int) -> dict:
        try:
            stored_version = self._call(
                sqlite_ops.update_agreement, agreement_id, changes, expected_version
            )
        except LookupError as e:
            raise NotFoundError(f"Agreement not found: {agreement_id}") from e
        if stored_version is not None:
            raise ConflictError(agreement_id, expected_version, stored_version)
        return self.get_agreement(agreement_id)

    def insert_audit_entry(self, entry: dict) -> str:
        return self._call(sqlite_ops.insert_audit_entry, entry)

    def list_audit_entries(self, agreement_id: str) -> List[dict]:
        return self._call(sqlite_ops.list_audit_entries, agreement_id)

    def insert_notification(self, notification: dict) -> str:
        return self._call(sqlite_ops.insert_notification, notification)

    def insert_client_request(self, request: dict) -> str:
        return self._call(sqlite_ops.insert_client_request, request)

    def get_status(self) -> dict:
        settings = get_settings()
        try:
            return {
                "mode": "sqlite",
                "path": settings.database_path,
                "templates": sqlite_ops.count_rows("sop_templates"),
                "agreements": sqlite_ops.count_rows("client_agreements"),
                "audit_entries": sqlite_ops.count_rows("agreement_logs"),
                "status": "connected",
            }
        except Exception as e:
            return {
                "mode": "sqlite",
                "path": settings.database_path,
                "status": f"error: {e}",
            }
