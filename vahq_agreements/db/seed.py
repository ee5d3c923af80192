"""Sample workflow templates for a fresh database"""

from typing import List

from vahq_agreements.db.base import DatabaseInterface

SAMPLE_TEMPLATES = [
    {
        "title": "Inbox Management",
        "category": "Communication",
        "description": "A structured process for managing client inboxes efficiently and consistently.",
        "default_structure": {
            "sections": [
                {
                    "id": "scope",
                    "title": "1. Scope",
                    "items": [
                        {
                            "id": "accounts",
                            "label": "Inboxes to manage",
                            "type": "checkbox_group",
                            "options": ["Primary email", "Shared support inbox", "Social DMs"],
                        },
                        {"id": "account_notes", "label": "Account notes", "type": "textarea"},
                    ],
                },
                {
                    "id": "standards",
                    "title": "2. Response Standards",
                    "items": [
                        {"id": "response_time", "label": "Target response time", "type": "text",
                         "placeholder": "e.g. within 4 working hours"},
                        {"id": "reply_on_behalf", "label": "VA may reply on my behalf", "type": "checkbox"},
                        {"id": "escalation", "label": "Escalation rules", "type": "textarea"},
                    ],
                },
                {
                    "id": "start",
                    "title": "3. Start",
                    "items": [
                        {"id": "start_date", "label": "Start date", "type": "date"},
                    ],
                },
            ]
        },
        "guidance_content": {
            "sections": [
                {"id": "triage", "title": "Daily triage", "sort_order": 1,
                 "body": "Work top-down: urgent, client, admin, newsletters."},
                {"id": "setup", "title": "Before you start", "sort_order": 0,
                 "body": "Confirm inbox access and agree folder names with the client."},
            ]
        },
    },
    {
        "title": "Diary & Calendar Management",
        "category": "Scheduling",
        "description": "A clear, repeatable process for managing client calendars and appointments.",
        "default_structure": {
            "sections": [
                {
                    "id": "calendar",
                    "title": "1. Calendar",
                    "items": [
                        {"id": "tools", "label": "Calendar tools", "type": "checkbox_group",
                         "options": ["Google Calendar", "Outlook", "Calendly"]},
                        {"id": "working_hours", "label": "Bookable hours", "type": "text"},
                        {"id": "accept_invites", "label": "VA may accept invites", "type": "checkbox"},
                    ],
                },
            ]
        },
    },
    {
        "title": "Social Media Scheduling",
        "category": "Marketing",
        "description": "A defined workflow for preparing and scheduling social media content.",
        "default_structure": {
            "sections": [
                {
                    "id": "channels",
                    "title": "1. Channels",
                    "items": [
                        {"id": "platforms", "label": "Platforms", "type": "checkbox_group",
                         "options": ["Instagram", "LinkedIn", "Facebook", "TikTok"]},
                        {"id": "posting_frequency", "label": "Posting frequency", "type": "text"},
                        {"id": "approval", "label": "Approval process", "type": "textarea"},
                    ],
                },
            ]
        },
    },
]


def seed_sample_templates(db: DatabaseInterface) -> List[str]:
    """Insert the sample templates that are not present yet. Returns new IDs."""
    existing = {t["title"] for t in db.list_templates()}
    return [
        db.insert_template(dict(template))
        for template in SAMPLE_TEMPLATES
        if template["title"] not in existing
    ]
