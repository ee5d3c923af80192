"""Tests for deploying templates into client agreements"""

import pytest

from vahq_agreements.errors import NotFoundError
from vahq_agreements.models.agreement import AgreementStatus
from vahq_agreements.services.cloner import InstanceCloner, clone_structure
from vahq_agreements.services.customization import hide_field


class TestCloneStructure:

    def test_equal_but_not_shared(self, structure):
        copy = clone_structure(structure)
        assert copy == structure
        assert copy is not structure
        assert copy.sections[0] is not structure.sections[0]
        assert copy.sections[0].items[0] is not structure.sections[0].items[0]


class TestDeploy:

    def test_deploy_creates_draft(self, db, template_id):
        agreement = InstanceCloner(db).deploy(template_id, "client-1", "va-1")

        assert agreement.status == AgreementStatus.DRAFT
        assert agreement.version == 1
        assert agreement.is_locked is False
        assert agreement.title == "Inbox Management"
        assert agreement.template_id == template_id
        assert agreement.va_id == "va-1"

        row = db.get_agreement(agreement.id)
        assert row["client_id"] == "client-1"
        assert row["status"] == "draft"
        assert row["custom_structure"]["sections"][0]["id"] == "s1"

    def test_deploy_copies_template_structure(self, db, template_id, service):
        agreement = InstanceCloner(db).deploy(template_id, "client-1", "va-1")
        template = service.templates.get_template(template_id)
        assert agreement.custom_structure == template.default_structure

    def test_two_deploys_are_independent(self, db, template_id, service):
        first = service.deploy(template_id, "client-1", "va-1")
        second = service.deploy(template_id, "client-2", "va-1")
        assert first.id != second.id

        service.save_structure(first, hide_field(first.custom_structure, "s1", "f2"), "va-1")

        assert service.get_agreement(first.id).custom_structure.find_section("s1").find_item("f2").hidden
        assert not service.get_agreement(second.id).custom_structure.find_section("s1").find_item("f2").hidden
        template = service.templates.get_template(template_id)
        assert not template.default_structure.find_section("s1").find_item("f2").hidden

    def test_unknown_template(self, db):
        with pytest.raises(NotFoundError):
            InstanceCloner(db).deploy("no-such-template", "client-1", "va-1")
        assert db.list_agreements() == []
