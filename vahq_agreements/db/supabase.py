"""Supabase database client implementing DatabaseInterface"""

import logging
from pathlib import Path
from typing import List, Optional

from vahq_agreements.db.base import DatabaseInterface
from vahq_agreements.db.sqlite import now_iso
from vahq_agreements.errors import ConflictError, NotFoundError, PersistenceError
from vahq_agreements.utils.config import get_settings

logger = logging.getLogger(__name__)

MIGRATION_PATH = Path(__file__).parent / "migrations" / "001_supabase.sql"

# Lazy imports to avoid requiring supabase when using sqlite mode
_supabase_client = None
_service_client = None


def _get_supabase_client():
    """Get or create the singleton Supabase client (anon key)."""
    global _supabase_client
    if _supabase_client is None:
        from supabase import ClientOptions, create_client

        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_KEY must be set when DB_MODE=supabase"
            )
        _supabase_client = create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(postgrest_client_timeout=10),
        )
    return _supabase_client


def _get_service_client():
    """Get or create the singleton Supabase service-role client (bypasses RLS)."""
    global _service_client
    if _service_client is None:
        from supabase import ClientOptions, create_client

        settings = get_settings()
        key = settings.supabase_service_key or settings.supabase_key
        if not settings.supabase_url or not key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY must be set for write operations"
            )
        _service_client = create_client(
            settings.supabase_url,
            key,
            options=ClientOptions(postgrest_client_timeout=10),
        )
    return _service_client


class SupabaseClient(DatabaseInterface):
    """Supabase implementation of DatabaseInterface."""

    def __init__(self):
        self._read = _get_supabase_client
        self._write = _get_service_client

    def _execute(self, action: str, build_query):
        """Run a query built from a client, reporting failures as PersistenceError."""
        try:
            return build_query().execute()
        except Exception as e:
            logger.error(f"Supabase {action} failed: {e}")
            raise PersistenceError(f"Supabase {action} failed: {e}") from e

    def init_db(self) -> None:
        """Verify the schema exists.
        In practice, users run the SQL in Supabase SQL Editor."""
        try:
            self._read().table("sop_templates").select("id").limit(1).execute()
            logger.info("Supabase schema verified: tables accessible")
        except Exception as e:
            logger.error(
                f"Schema not found. Run migration SQL in Supabase SQL Editor: {MIGRATION_PATH}"
            )
            raise PersistenceError(
                f"Supabase schema not initialized. Run 001_supabase.sql in SQL Editor. Error: {e}"
            ) from e

    # Templates

    def get_template(self, template_id: str) -> Optional[dict]:
        result = self._execute(
            "get_template",
            lambda: self._read().table("sop_templates").select("*").eq("id", template_id),
        )
        return result.data[0] if result.data else None

    def list_templates(self, category: Optional[str] = None) -> List[dict]:
        def query():
            q = self._read().table("sop_templates").select("*")
            if category:
                q = q.eq("category", category)
            return q.order("title")

        return self._execute("list_templates", query).data

    def insert_template(self, template: dict) -> str:
        data = {k: v for k, v in template.items() if v is not None}
        result = self._execute(
            "insert_template",
            lambda: self._write().table("sop_templates").insert(data),
        )
        return result.data[0]["id"]

    def update_template_defaults(self, template_id: str, default_structure: dict) -> bool:
        result = self._execute(
            "update_template_defaults",
            lambda: self._write()
            .table("sop_templates")
            .update({"default_structure": default_structure})
            .eq("id", template_id),
        )
        return bool(result.data)

    # Client agreements

    def insert_agreement(self, agreement: dict) -> str:
        data = {k: v for k, v in agreement.items() if v is not None}
        data.setdefault("last_updated_at", now_iso())
        result = self._execute(
            "insert_agreement",
            lambda: self._write().table("client_agreements").insert(data),
        )
        return result.data[0]["id"]

    def get_agreement(self, agreement_id: str) -> Optional[dict]:
        result = self._execute(
            "get_agreement",
            lambda: self._read().table("client_agreements").select("*").eq("id", agreement_id),
        )
        return result.data[0] if result.data else None

    def list_agreements(self, client_id: Optional[str] = None) -> List[dict]:
        def query():
            q = self._read().table("client_agreements").select("*")
            if client_id:
                q = q.eq("client_id", client_id)
            return q.order("created_at", desc=True)

        return self._execute("list_agreements", query).data

    def update_agreement(self, agreement_id: str, changes: dict, expected_version: int) -> dict:
        data = {k: v for k, v in changes.items() if k not in ("id", "version")}
        data["version"] = expected_version + 1
        data["last_updated_at"] = now_iso()
        # Compare-and-set on the version column
        result = self._execute(
            "update_agreement",
            lambda: self._write()
            .table("client_agreements")
            .update(data)
            .eq("id", agreement_id)
            .eq("version", expected_version),
        )
        if result.data:
            return result.data[0]

        current = self.get_agreement(agreement_id)
        if current is None:
            raise NotFoundError(f"Agreement not found: {agreement_id}")
        raise ConflictError(agreement_id, expected_version, current.get("version"))

    # Audit log

    def insert_audit_entry(self, entry: dict) -> str:
        data = {k: v for k, v in entry.items() if v is not None}
        # Service role: agreement_logs is not writable by clients under RLS
        result = self._execute(
            "insert_audit_entry",
            lambda: self._write().table("agreement_logs").insert(data),
        )
        return result.data[0]["id"]

    def list_audit_entries(self, agreement_id: str) -> List[dict]:
        result = self._execute(
            "list_audit_entries",
            lambda: self._write()
            .table("agreement_logs")
            .select("*")
            .eq("agreement_id", agreement_id)
            .order("created_at", desc=True),
        )
        return result.data

    # Notifications and inbox

    def insert_notification(self, notification: dict) -> str:
        result = self._execute(
            "insert_notification",
            lambda: self._write().table("client_notifications").insert(notification),
        )
        return result.data[0]["id"]

    def insert_client_request(self, request: dict) -> str:
        result = self._execute(
            "insert_client_request",
            lambda: self._write().table("client_requests").insert(request),
        )
        return result.data[0]["id"]

    def get_status(self) -> dict:
        """Get database status info."""
        settings = get_settings()
        try:
            client = self._read()
            templates = client.table("sop_templates").select("id", count="exact").execute()
            agreements = client.table("client_agreements").select("id", count="exact").execute()
            logs = self._write().table("agreement_logs").select("id", count="exact").execute()
            return {
                "mode": "supabase",
                "url": settings.supabase_url,
                "templates": templates.count or 0,
                "agreements": agreements.count or 0,
                "audit_entries": logs.count or 0,
                "status": "connected",
            }
        except Exception as e:
            return {
                "mode": "supabase",
                "url": settings.supabase_url,
                "status": f"error: {e}",
            }


def get_database(mode: str = None) -> DatabaseInterface:
    """Factory: returns appropriate database implementation.

    mode: 'supabase' or 'sqlite'. Defaults to DB_MODE env var.
    """
    if mode is None:
        mode = get_settings().db_mode

    if mode == "supabase":
        return SupabaseClient()
    else:
        # Import here to avoid circular imports
        from vahq_agreements.db.sqlite_client import SQLiteClient

        return SQLiteClient()
