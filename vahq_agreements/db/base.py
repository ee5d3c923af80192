"""Abstract database interface: strategy pattern for SQLite/Supabase switching"""

from abc import ABC, abstractmethod
from typing import List, Optional


class DatabaseInterface(ABC):
    """Abstract interface for persistence operations.
    Implemented by both SQLite and Supabase backends.

    Rows are plain dicts with JSON-compatible values; structures travel as
    their stored JSON. Backend failures are raised as PersistenceError.
    """

    @abstractmethod
    def init_db(self) -> None:
        """Initialize database schema (create tables, indexes)."""

    # Templates

    @abstractmethod
    def get_template(self, template_id: str) -> Optional[dict]:
        """Get template by ID."""

    @abstractmethod
    def list_templates(self, category: Optional[str] = None) -> List[dict]:
        """List templates ordered by title, optionally within one category."""

    @abstractmethod
    def insert_template(self, template: dict) -> str:
        """Insert a template. Returns template ID."""

    @abstractmethod
    def update_template_defaults(self, template_id: str, default_structure: dict) -> bool:
        """Replace a template's default structure. Returns False if absent."""

    # Client agreements

    @abstractmethod
    def insert_agreement(self, agreement: dict) -> str:
        """Insert a client agreement. Returns agreement ID."""

    @abstractmethod
    def get_agreement(self, agreement_id: str) -> Optional[dict]:
        """Get agreement by ID."""

    @abstractmethod
    def list_agreements(self, client_id: Optional[str] = None) -> List[dict]:
        """List agreements, newest first, optionally for one client."""

    @abstractmethod
    def update_agreement(self, agreement_id: str, changes: dict, expected_version: int) -> dict:
        """Apply changes if the stored version equals expected_version.

        Bumps the version and last_updated_at. Returns the updated row.
        Raises NotFoundError or ConflictError.
        """

    # Audit log

    @abstractmethod
    def insert_audit_entry(self, entry: dict) -> str:
        """Append an audit log entry. Returns entry ID."""

    @abstractmethod
    def list_audit_entries(self, agreement_id: str) -> List[dict]:
        """List audit entries for an agreement, newest first."""

    # Notifications and inbox

    @abstractmethod
    def insert_notification(self, notification: dict) -> str:
        """Insert a client notification. Returns notification ID."""

    @abstractmethod
    def insert_client_request(self, request: dict) -> str:
        """Insert a client request into the VA inbox. Returns request ID."""

    @abstractmethod
    def get_status(self) -> dict:
        """Get database status info (table counts, connection status)."""
