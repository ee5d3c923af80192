"""Tests for structure models and shape validation"""

import pytest

from vahq_agreements.errors import SchemaError
from vahq_agreements.models.structure import (
    CheckboxField,
    CheckboxGroupField,
    FieldKind,
    Section,
    Structure,
    TextField,
)
from vahq_agreements.services.schema import parse_structure, validate


class TestStructureModel:

    def test_items_parse_into_kind_specific_fields(self, structure):
        items = structure.sections[0].items
        assert isinstance(items[0], CheckboxGroupField)
        assert items[0].kind == FieldKind.CHECKBOX_GROUP
        assert items[0].options == ("Email", "Social")
        assert isinstance(items[2], CheckboxField)

    def test_structure_is_frozen(self, structure):
        with pytest.raises(Exception):
            structure.sections[0].title = "Changed"

    def test_to_json_round_trips_stored_shape(self, structure):
        data = structure.to_json()
        assert data["sections"][0]["items"][0]["options"] == ["Email", "Social"]
        assert "value" not in data["sections"][0]["items"][1]
        assert Structure.model_validate(data) == structure

    def test_find_helpers(self, structure):
        assert structure.find_section("s2").title == "2. Timing"
        assert structure.find_section("missing") is None
        assert structure.find_section("s1").find_item("f2").label == "Notes"


class TestValidate:

    def test_valid_structure_passes(self, structure):
        assert validate(structure) is structure

    def test_duplicate_section_ids(self, structure):
        broken = structure.model_copy(update={"sections": structure.sections + (structure.sections[0],)})
        with pytest.raises(SchemaError, match="Duplicate section id 's1'"):
            validate(broken)

    def test_duplicate_field_ids(self):
        section = Section(id="s", title="S", items=(
            TextField(id="a", label="A"),
            TextField(id="a", label="A again"),
        ))
        with pytest.raises(SchemaError, match="Duplicate field id 'a'"):
            validate(Structure(sections=(section,)))

    def test_hidden_option_not_in_options(self):
        field = CheckboxGroupField(id="f", label="F", options=("Email",), hidden_options=("Phone",))
        with pytest.raises(SchemaError, match="Phone"):
            validate(Structure(sections=(Section(id="s", title="S", items=(field,)),)))

    def test_repeated_hidden_option(self):
        field = CheckboxGroupField(id="f", label="F", options=("A",), hidden_options=("A", "A"))
        with pytest.raises(SchemaError, match="duplicate hidden options"):
            validate(Structure(sections=(Section(id="s", title="S", items=(field,)),)))

    def test_selected_option_not_in_options(self):
        field = CheckboxGroupField(id="f", label="F", options=("Email",), value=("Email", "Fax"))
        with pytest.raises(SchemaError, match="selects unknown options: Fax"):
            validate(Structure(sections=(Section(id="s", title="S", items=(field,)),)))

    def test_value_type_mismatch(self):
        field = CheckboxField.model_construct(id="f", label="F", hidden=False, placeholder=None, value="yes")
        with pytest.raises(SchemaError, match="checkbox"):
            validate(Structure(sections=(Section(id="s", title="S", items=(field,)),)))


class TestParseStructure:

    def test_none_is_empty_structure(self):
        assert parse_structure(None) == Structure()

    def test_unknown_kind_is_schema_error(self):
        data = {"sections": [{"id": "s", "title": "S", "items": [{"id": "f", "label": "F", "type": "signature"}]}]}
        with pytest.raises(SchemaError, match="Malformed structure"):
            parse_structure(data)

    def test_authorisation_texts_are_kept(self):
        parsed = parse_structure({"sections": [], "authorisation_disclaimer": "Custom"})
        assert parsed.authorisation_disclaimer == "Custom"
        assert parsed.authorisation_confirmation is None
