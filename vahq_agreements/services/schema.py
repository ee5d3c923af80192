"""Structure shape validation and parsing"""

from pydantic import ValidationError

from vahq_agreements.errors import SchemaError
from vahq_agreements.models.structure import (
    CheckboxField,
    CheckboxGroupField,
    DateField,
    Structure,
    TextareaField,
    TextField,
)


def value_matches_kind(item, value) -> bool:
    """True if value has the shape the field's kind allows (None always does)."""
    if value is None:
        return True
    if isinstance(item, (TextField, TextareaField, DateField)):
        return isinstance(value, str)
    if isinstance(item, CheckboxField):
        return isinstance(value, bool)
    if isinstance(item, CheckboxGroupField):
        return isinstance(value, (tuple, list)) and all(isinstance(v, str) for v in value)
    raise SchemaError(f"Unknown field kind: {type(item).__name__}")


def validate(structure: Structure) -> Structure:
    """Check a structure's invariants. Returns it unchanged or raises SchemaError.

    - section ids are unique within the structure
    - field ids are unique within their section
    - hidden options are a subset of the field's options, without repeats
    - selected options are among the field's options
    - filled values match the field kind
    """
    section_ids = set()
    for section in structure.sections:
        if section.id in section_ids:
            raise SchemaError(f"Duplicate section id '{section.id}'")
        section_ids.add(section.id)

        item_ids = set()
        for item in section.items:
            if item.id in item_ids:
                raise SchemaError(f"Duplicate field id '{item.id}' in section '{section.id}'")
            item_ids.add(item.id)

            if not value_matches_kind(item, item.value):
                raise SchemaError(
                    f"Field '{section.id}/{item.id}' of kind {item.type} holds a "
                    f"{type(item.value).__name__} value"
                )

            if isinstance(item, CheckboxGroupField):
                if len(set(item.options)) != len(item.options):
                    raise SchemaError(f"Field '{section.id}/{item.id}' has duplicate options")
                if len(set(item.hidden_options)) != len(item.hidden_options):
                    raise SchemaError(f"Field '{section.id}/{item.id}' has duplicate hidden options")
                unknown = [opt for opt in item.hidden_options if opt not in item.options]
                if unknown:
                    raise SchemaError(
                        f"Field '{section.id}/{item.id}' hides unknown options: {', '.join(unknown)}"
                    )
                dangling = [v for v in (item.value or ()) if v not in item.options]
                if dangling:
                    raise SchemaError(
                        f"Field '{section.id}/{item.id}' selects unknown options: {', '.join(dangling)}"
                    )
    return structure


def parse_structure(data) -> Structure:
    """Build a Structure from stored JSON, reporting bad shapes as SchemaError."""
    if isinstance(data, Structure):
        return data
    if data is None:
        return Structure()
    try:
        return Structure.model_validate(data)
    except ValidationError as e:
        raise SchemaError(f"Malformed structure: {e}") from e
