"""SQLite database operations"""

import json
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from vahq_agreements.utils.config import get_settings

# Columns holding JSON documents, stored as text
JSON_COLUMNS = ("default_structure", "guidance_content", "custom_structure", "snapshot")

TEMPLATE_COLUMNS = ("id", "title", "category", "description", "default_structure", "guidance_content", "created_at")
AGREEMENT_COLUMNS = (
    "id", "client_id", "va_id", "template_id", "title", "custom_structure",
    "status", "is_locked", "version", "created_at", "last_updated_at",
)


def get_db_path() -> Path:
    """Get database path from settings"""
    settings = get_settings()
    return Path(settings.database_path)


@contextmanager
def get_connection():
    """Get a database connection as context manager"""
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    """Initialize database with schema"""
    with get_connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS sop_templates (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                category TEXT DEFAULT '',
                description TEXT DEFAULT '',
                default_structure TEXT NOT NULL,
                guidance_content TEXT,
                created_at TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS client_agreements (
                id TEXT PRIMARY KEY,
                client_id TEXT NOT NULL,
                va_id TEXT,
                template_id TEXT,
                title TEXT NOT NULL,
                custom_structure TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'draft',
                is_locked INTEGER NOT NULL DEFAULT 0,
                version INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP,
                last_updated_at TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_agreements_client
            ON client_agreements(client_id)
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS agreement_logs (
                id TEXT PRIMARY KEY,
                agreement_id TEXT NOT NULL,
                changed_by TEXT,
                change_summary TEXT NOT NULL,
                snapshot TEXT,
                created_at TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_logs_agreement
            ON agreement_logs(agreement_id, created_at)
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS client_notifications (
                id TEXT PRIMARY KEY,
                client_id TEXT NOT NULL,
                type TEXT NOT NULL,
                message TEXT NOT NULL,
                created_at TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS client_requests (
                id TEXT PRIMARY KEY,
                client_id TEXT NOT NULL,
                type TEXT NOT NULL,
                message TEXT NOT NULL,
                created_at TIMESTAMP
            )
        """)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _encode(data: dict) -> dict:
    row = dict(data)
    for key in JSON_COLUMNS:
        if key in row and row[key] is not None and not isinstance(row[key], str):
            row[key] = json.dumps(row[key], ensure_ascii=False)
    return row


def _decode(row: sqlite3.Row) -> dict:
    data = dict(row)
    for key in JSON_COLUMNS:
        if isinstance(data.get(key), str):
            data[key] = json.loads(data[key])
    if "is_locked" in data:
        data["is_locked"] = bool(data["is_locked"])
    return data


def _insert(table: str, data: dict) -> str:
    row = _encode(data)
    row.setdefault("id", str(uuid.uuid4()))
    row.setdefault("created_at", now_iso())
    cols = ", ".join(row.keys())
    placeholders = ", ".join("?" for _ in row)
    with get_connection() as conn:
        conn.execute(f"INSERT INTO {table} ({cols}) VALUES ({placeholders})", tuple(row.values()))
    return row["id"]


def _get(table: str, row_id: str) -> Optional[dict]:
    with get_connection() as conn:
        row = conn.execute(f"SELECT * FROM {table} WHERE id = ?", (row_id,)).fetchone()
    return _decode(row) if row else None


def insert_template(template: dict) -> str:
    return _insert("sop_templates", {k: v for k, v in template.items() if k in TEMPLATE_COLUMNS})


def get_template(template_id: str) -> Optional[dict]:
    return _get("sop_templates", template_id)


def list_templates(category: Optional[str] = None) -> List[dict]:
    query = "SELECT * FROM sop_templates"
    params: tuple = ()
    if category:
        query += " WHERE category = ?"
        params = (category,)
    with get_connection() as conn:
        rows = conn.execute(query + " ORDER BY title", params).fetchall()
    return [_decode(r) for r in rows]


def update_template_defaults(template_id: str, default_structure: dict) -> bool:
    with get_connection() as conn:
        cursor = conn.execute(
            "UPDATE sop_templates SET default_structure = ? WHERE id = ?",
            (json.dumps(default_structure, ensure_ascii=False), template_id),
        )
        return cursor.rowcount > 0


def insert_agreement(agreement: dict) -> str:
    data = {k: v for k, v in agreement.items() if k in AGREEMENT_COLUMNS}
    data.setdefault("last_updated_at", now_iso())
    return _insert("client_agreements", data)


def get_agreement(agreement_id: str) -> Optional[dict]:
    return _get("client_agreements", agreement_id)


def list_agreements(client_id: Optional[str] = None) -> List[dict]:
    query = "SELECT * FROM client_agreements"
    params: tuple = ()
    if client_id:
        query += " WHERE client_id = ?"
        params = (client_id,)
    with get_connection() as conn:
        rows = conn.execute(query + " ORDER BY created_at DESC", params).fetchall()
    return [_decode(r) for r in rows]


def update_agreement(agreement_id: str, changes: dict, expected_version: int) -> Optional[int]:
    """Compare-and-set update. Returns the stored version on mismatch,
    None when applied, and raises LookupError when the row is missing."""
    data = _encode({k: v for k, v in changes.items() if k in AGREEMENT_COLUMNS and k not in ("id", "version")})
    data["last_updated_at"] = now_iso()
    assignments = ", ".join(f"{k} = ?" for k in data)
    with get_connection() as conn:
        cursor = conn.execute(
            f"UPDATE client_agreements SET {assignments}, version = version + 1 "
            "WHERE id = ? AND version = ?",
            (*data.values(), agreement_id, expected_version),
        )
        if cursor.rowcount:
            return None
        row = conn.execute(
            "SELECT version FROM client_agreements WHERE id = ?", (agreement_id,)
        ).fetchone()
    if row is None:
        raise LookupError(agreement_id)
    return row["version"]


def insert_audit_entry(entry: dict) -> str:
    return _insert("agreement_logs", entry)


def list_audit_entries(agreement_id: str) -> List[dict]:
    with get_connection() as conn:
        rows = conn.execute(
            "SELECT * FROM agreement_logs WHERE agreement_id = ? "
            "ORDER BY created_at DESC, rowid DESC",
            (agreement_id,),
        ).fetchall()
    return [_decode(r) for r in rows]


def insert_notification(notification: dict) -> str:
    return _insert("client_notifications", notification)


def insert_client_request(request: dict) -> str:
    return _insert("client_requests", request)


def count_rows(table: str) -> int:
    with get_connection() as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
