"""Tests for the lifecycle state machine and agreement service transitions"""

import logging

import pytest

from vahq_agreements.db import sqlite as sqlite_ops
from vahq_agreements.db.sqlite_client import SQLiteClient
from vahq_agreements.errors import (
    ConflictError,
    InvalidOptionError,
    InvalidTransitionError,
    PersistenceError,
    SchemaError,
)
from vahq_agreements.models.agreement import AgreementStatus
from vahq_agreements.models.operation import OperationType, StructureOperation
from vahq_agreements.models.structure import CheckboxGroupField
from vahq_agreements.services.agreement import (
    SUMMARY_CLIENT_ACCEPTED,
    SUMMARY_CLIENT_FEEDBACK,
    SUMMARY_CLIENT_PROGRESS,
    SUMMARY_PUBLISHED,
    AgreementService,
)
from vahq_agreements.services.customization import replace_item
from vahq_agreements.services.lifecycle import (
    LifecycleEvent,
    allowed_events,
    is_terminal,
    next_status,
)
from vahq_agreements.services.value_fill import set_field_value


def rows(table):
    with sqlite_ops.get_connection() as conn:
        return [dict(r) for r in conn.execute(f"SELECT * FROM {table}").fetchall()]


class FailingAuditClient(SQLiteClient):
    def insert_audit_entry(self, entry: dict) -> str:
        raise PersistenceError("audit table unavailable")


class FailingNotificationClient(SQLiteClient):
    def insert_notification(self, notification: dict) -> str:
        raise PersistenceError("notifications unavailable")


class TestStateMachine:

    @pytest.mark.parametrize("current,event,expected", [
        (AgreementStatus.DRAFT, LifecycleEvent.PUBLISH, AgreementStatus.PENDING_CLIENT),
        (AgreementStatus.FEEDBACK_RECEIVED, LifecycleEvent.PUBLISH, AgreementStatus.PENDING_CLIENT),
        (AgreementStatus.PENDING_CLIENT, LifecycleEvent.CLIENT_ACCEPT, AgreementStatus.ACCEPTED),
        (AgreementStatus.PENDING_CLIENT, LifecycleEvent.CLIENT_FEEDBACK, AgreementStatus.FEEDBACK_RECEIVED),
    ])
    def test_allowed_transitions(self, current, event, expected):
        assert next_status(current, event) == expected

    @pytest.mark.parametrize("current,event", [
        (AgreementStatus.DRAFT, LifecycleEvent.CLIENT_ACCEPT),
        (AgreementStatus.DRAFT, LifecycleEvent.CLIENT_FEEDBACK),
        (AgreementStatus.PENDING_CLIENT, LifecycleEvent.PUBLISH),
        (AgreementStatus.FEEDBACK_RECEIVED, LifecycleEvent.CLIENT_ACCEPT),
        (AgreementStatus.ACCEPTED, LifecycleEvent.PUBLISH),
        (AgreementStatus.ACCEPTED, LifecycleEvent.CLIENT_FEEDBACK),
    ])
    def test_rejected_transitions(self, current, event):
        with pytest.raises(InvalidTransitionError):
            next_status(current, event)

    def test_accepted_is_terminal(self):
        assert is_terminal(AgreementStatus.ACCEPTED)
        assert not is_terminal(AgreementStatus.DRAFT)
        assert allowed_events(AgreementStatus.PENDING_CLIENT) == [
            LifecycleEvent.CLIENT_ACCEPT,
            LifecycleEvent.CLIENT_FEEDBACK,
        ]


class TestPublish:

    def test_publish_moves_to_pending_and_notifies(self, service, template_id):
        draft = service.deploy(template_id, "client-1", "va-1")
        published = service.publish(draft, "va-1")

        assert published.status == AgreementStatus.PENDING_CLIENT
        assert published.version == 2
        assert service.audit_log(draft.id)[0].change_summary == SUMMARY_PUBLISHED

        notifications = rows("client_notifications")
        assert len(notifications) == 1
        assert notifications[0]["type"] == "agreement_issued"
        assert notifications[0]["message"] == "New service agreement available: Inbox Management"

    def test_publish_respects_notify_setting(self, service, template_id, monkeypatch):
        monkeypatch.setenv("NOTIFY_ON_PUBLISH", "false")
        service.publish(service.deploy(template_id, "client-1", "va-1"), "va-1")
        assert rows("client_notifications") == []

    def test_publish_with_invalid_structure_changes_nothing(self, service, template_id):
        draft = service.deploy(template_id, "client-1", "va-1")
        broken = replace_item(
            draft.custom_structure, "s1", "f1",
            lambda f: f.model_copy(update={"hidden_options": ("Fax",)}),
        )
        assert isinstance(broken.find_section("s1").find_item("f1"), CheckboxGroupField)

        with pytest.raises(SchemaError):
            service.publish(draft, "va-1", broken)

        stored = service.get_agreement(draft.id)
        assert stored.status == AgreementStatus.DRAFT
        assert stored.version == 1
        assert rows("client_notifications") == []
        assert service.audit_log(draft.id) == []

    def test_republish_after_feedback(self, service, template_id):
        pending = service.publish(service.deploy(template_id, "client-1", "va-1"), "va-1")
        feedback = service.client_feedback(pending, "client-user", "Add Phone")
        republished = service.publish(feedback, "va-1")
        assert republished.status == AgreementStatus.PENDING_CLIENT

    def test_cannot_publish_twice(self, service, template_id):
        pending = service.publish(service.deploy(template_id, "client-1", "va-1"), "va-1")
        with pytest.raises(InvalidTransitionError):
            service.publish(pending, "va-1")

    def test_notification_failure_does_not_undo_publish(self, template_id, caplog):
        service = AgreementService(FailingNotificationClient())
        draft = service.deploy(template_id, "client-1", "va-1")
        with caplog.at_level(logging.WARNING):
            published = service.publish(draft, "va-1")
        assert published.status == AgreementStatus.PENDING_CLIENT
        assert "agreement_issued" in caplog.text


class TestClientResponses:

    def test_accept_locks_agreement(self, service, template_id):
        pending = service.publish(service.deploy(template_id, "client-1", "va-1"), "va-1")
        accepted = service.client_accept(pending, "client-user")

        assert accepted.status == AgreementStatus.ACCEPTED
        assert accepted.is_locked is True
        assert service.audit_log(pending.id)[0].change_summary == SUMMARY_CLIENT_ACCEPTED
        assert rows("client_requests")[0]["message"] == "WORKFLOW AUTHORISED: Inbox Management"

    def test_accepted_agreement_rejects_edits(self, service, template_id):
        pending = service.publish(service.deploy(template_id, "client-1", "va-1"), "va-1")
        accepted = service.client_accept(pending, "client-user")

        with pytest.raises(InvalidTransitionError):
            service.save_structure(accepted, accepted.custom_structure, "va-1")
        with pytest.raises(InvalidTransitionError):
            service.client_save_progress(accepted, accepted.custom_structure, "client-user")
        with pytest.raises(InvalidTransitionError):
            service.client_feedback(accepted, "client-user", "too late")
        with pytest.raises(InvalidTransitionError):
            service.publish(accepted, "va-1")

    def test_feedback_forwards_comment(self, service, template_id):
        pending = service.publish(service.deploy(template_id, "client-1", "va-1"), "va-1")
        filled = set_field_value(pending.custom_structure, "s1", "f1", ["Email"])
        updated = service.client_feedback(pending, "client-user", "Please add Phone", filled)

        assert updated.status == AgreementStatus.FEEDBACK_RECEIVED
        assert updated.custom_structure.find_section("s1").find_item("f1").value == ("Email",)
        assert service.audit_log(pending.id)[0].change_summary == SUMMARY_CLIENT_FEEDBACK
        request = rows("client_requests")[0]
        assert request["message"] == "WORKFLOW CHANGES SUBMITTED (Inbox Management): Please add Phone"
        assert request["client_id"] == "client-1"

    def test_client_progress_needs_issued_agreement(self, service, template_id):
        draft = service.deploy(template_id, "client-1", "va-1")
        with pytest.raises(InvalidTransitionError):
            service.client_save_progress(draft, draft.custom_structure, "client-user")

        pending = service.publish(draft, "va-1")
        filled = set_field_value(pending.custom_structure, "s2", "hours", "12")
        saved = service.client_save_progress(pending, filled, "client-user")
        assert saved.status == AgreementStatus.PENDING_CLIENT
        assert saved.custom_structure.find_section("s2").find_item("hours").value == "12"

    def test_client_fill_is_audited_with_full_snapshot(self, service, template_id):
        pending = service.publish(service.deploy(template_id, "client-1", "va-1"), "va-1")
        filled = set_field_value(pending.custom_structure, "s1", "f1", {"Social"})

        saved = service.client_save_progress(pending, filled, "client-user")

        assert saved.custom_structure.find_section("s1").find_item("f1").value == ("Social",)
        assert saved.custom_structure.find_section("s1").find_item("f1").options == ("Email", "Social")
        latest = service.audit_log(pending.id)[0]
        assert latest.change_summary == SUMMARY_CLIENT_PROGRESS
        assert latest.changed_by == "client-user"
        assert latest.snapshot == saved.custom_structure
        assert latest.snapshot == filled


class TestPersistenceRules:

    def test_stale_version_conflicts(self, service, template_id):
        draft = service.deploy(template_id, "client-1", "va-1")
        op = StructureOperation(op=OperationType.HIDE_FIELD, section_id="s1", field_id="f2")
        service.customize(draft, [op], "va-1")

        with pytest.raises(ConflictError) as exc_info:
            service.customize(draft, [op], "va-2")
        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2
        assert len(service.audit_log(draft.id)) == 1

    def test_audit_failure_is_logged_not_raised(self, template_id, caplog):
        service = AgreementService(FailingAuditClient())
        draft = service.deploy(template_id, "client-1", "va-1")
        op = StructureOperation(op=OperationType.HIDE_FIELD, section_id="s1", field_id="f2")

        with caplog.at_level(logging.ERROR):
            saved = service.customize(draft, [op], "va-1")

        assert saved.version == 2
        assert saved.custom_structure.find_section("s1").find_item("f2").hidden is True
        assert any(r.levelno == logging.ERROR and "Audit entry lost" in r.getMessage() for r in caplog.records)

    def test_failed_operation_saves_nothing(self, service, template_id):
        draft = service.deploy(template_id, "client-1", "va-1")
        ops = [
            StructureOperation(op=OperationType.HIDE_FIELD, section_id="s1", field_id="f2"),
            StructureOperation(op=OperationType.HIDE_OPTION, section_id="s1", field_id="f1", option="Fax"),
        ]
        with pytest.raises(InvalidOptionError):
            service.customize(draft, ops, "va-1")
        stored = service.get_agreement(draft.id)
        assert stored.version == 1
        assert stored.custom_structure == draft.custom_structure
