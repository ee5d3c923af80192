"""Pytest configuration and fixtures"""

import pytest

from vahq_agreements.db.sqlite_client import SQLiteClient
from vahq_agreements.models.structure import Structure
from vahq_agreements.services.agreement import AgreementService

SCOPE_STRUCTURE = {
    "sections": [
        {
            "id": "s1",
            "title": "1. Scope",
            "items": [
                {
                    "id": "f1",
                    "label": "Services",
                    "type": "checkbox_group",
                    "options": ["Email", "Social"],
                },
                {"id": "f2", "label": "Notes", "type": "textarea"},
                {"id": "f3", "label": "Out of hours contact allowed", "type": "checkbox"},
            ],
        },
        {
            "id": "s2",
            "title": "2. Timing",
            "items": [
                {"id": "start", "label": "Start date", "type": "date"},
                {"id": "hours", "label": "Hours per week", "type": "text"},
            ],
        },
    ]
}


@pytest.fixture(autouse=True)
def test_env(tmp_path, monkeypatch):
    """Set up test environment with temporary database"""
    monkeypatch.setenv("DB_MODE", "sqlite")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("NOTIFY_ON_PUBLISH", "true")

    yield

    # Cleanup handled by tmp_path fixture


@pytest.fixture
def structure() -> Structure:
    return Structure.model_validate(SCOPE_STRUCTURE)


@pytest.fixture
def db() -> SQLiteClient:
    client = SQLiteClient()
    client.init_db()
    return client


@pytest.fixture
def template_id(db) -> str:
    return db.insert_template({
        "title": "Inbox Management",
        "category": "Communication",
        "description": "Inbox triage and replies",
        "default_structure": SCOPE_STRUCTURE,
        "guidance_content": {
            "sections": [
                {"id": "b", "title": "Second", "body": "later", "sort_order": 2},
                {"id": "a", "title": "First", "body": "start here", "sort_order": 1},
            ]
        },
    })


@pytest.fixture
def service(db) -> AgreementService:
    return AgreementService(db)
