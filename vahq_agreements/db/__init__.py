"""Database modules"""

from vahq_agreements.db.base import DatabaseInterface
from vahq_agreements.db.supabase import SupabaseClient, get_database
from vahq_agreements.db.sqlite_client import SQLiteClient

__all__ = [
    "DatabaseInterface",
    "SupabaseClient",
    "SQLiteClient",
    "get_database",
]
