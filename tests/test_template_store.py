"""Tests for template reads and the save-as-defaults path"""

import pytest

from vahq_agreements.db.seed import SAMPLE_TEMPLATES, seed_sample_templates
from vahq_agreements.errors import NotFoundError
from vahq_agreements.models.template import DEFAULT_AUTHORISATION_CONFIRMATION
from vahq_agreements.services.customization import hide_field
from vahq_agreements.services.template_store import TemplateStore


class TestTemplateStore:

    def test_get_template(self, db, template_id):
        template = TemplateStore(db).get_template(template_id)
        assert template.title == "Inbox Management"
        assert template.category == "Communication"
        assert [s.id for s in template.default_structure.sections] == ["s1", "s2"]

    def test_guidance_sorted_by_sort_order(self, db, template_id):
        template = TemplateStore(db).get_template(template_id)
        assert [g.title for g in template.guidance_content.ordered_sections()] == ["First", "Second"]

    def test_missing_template(self, db):
        with pytest.raises(NotFoundError):
            TemplateStore(db).get_template("missing")

    def test_list_by_category(self, db):
        seed_sample_templates(db)
        store = TemplateStore(db)
        assert len(store.list_templates()) == len(SAMPLE_TEMPLATES)
        communication = store.list_templates("Communication")
        assert communication
        assert all(t.category == "Communication" for t in communication)

    def test_update_template_defaults(self, db, template_id, structure):
        store = TemplateStore(db)
        store.update_template_defaults(template_id, hide_field(structure, "s2", "hours"))
        stored = store.get_template(template_id).default_structure
        assert stored.find_section("s2").find_item("hours").hidden is True

    def test_update_missing_template(self, db, structure):
        with pytest.raises(NotFoundError):
            TemplateStore(db).update_template_defaults("missing", structure)


class TestSaveAuthorisationDefaults:

    def test_copies_only_authorisation_texts(self, db, template_id, structure):
        store = TemplateStore(db)
        agreement_structure = hide_field(structure, "s1", "f2").model_copy(
            update={"authorisation_disclaimer": "Client confirms the workflow above."}
        )

        updated = store.save_authorisation_defaults(template_id, agreement_structure)

        assert updated.default_structure.authorisation_disclaimer == "Client confirms the workflow above."
        assert updated.default_structure.authorisation_confirmation == DEFAULT_AUTHORISATION_CONFIRMATION
        stored = store.get_template(template_id).default_structure
        assert stored.authorisation_disclaimer == "Client confirms the workflow above."
        assert stored.find_section("s1").find_item("f2").hidden is False

    def test_service_uses_agreement_template(self, service, template_id):
        draft = service.deploy(template_id, "client-1", "va-1")
        custom = draft.custom_structure.model_copy(update={"authorisation_confirmation": "I agree"})
        saved = service.save_structure(draft, custom, "va-1")

        template = service.save_template_defaults(saved)
        assert template.id == template_id
        assert template.default_structure.authorisation_confirmation == "I agree"
