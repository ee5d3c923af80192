"""Value filling: write operator or client answers onto a structure"""

from vahq_agreements.errors import InvalidOptionError, TypeMismatchError
from vahq_agreements.models.structure import (
    CheckboxField,
    CheckboxGroupField,
    DateField,
    Structure,
    TextareaField,
    TextField,
)
from vahq_agreements.services.customization import replace_item


def _coerce_value(item, value):
    """Check value against the field kind and return its stored form."""
    if value is None:
        return None

    if isinstance(item, (TextField, TextareaField, DateField)):
        if isinstance(value, str):
            return value
    elif isinstance(item, CheckboxField):
        if isinstance(value, bool):
            return value
    elif isinstance(item, CheckboxGroupField):
        if isinstance(value, (set, frozenset, list, tuple)) and all(isinstance(v, str) for v in value):
            unknown = [v for v in value if v not in item.options]
            if unknown:
                raise InvalidOptionError(
                    f"Not options of field '{item.id}': {', '.join(sorted(unknown))}"
                )
            if isinstance(value, (set, frozenset)):
                # Sets carry no order: follow the option order
                return tuple(opt for opt in item.options if opt in value)
            return tuple(dict.fromkeys(value))

    raise TypeMismatchError(
        f"Field '{item.id}' of kind {item.type} cannot hold {type(value).__name__} value"
    )


def set_field_value(structure: Structure, section_id: str, field_id: str, value) -> Structure:
    """Return a new structure with the field's value replaced.

    For checkbox_group fields, value is the complete selection, not a delta.
    None clears the value. Hidden fields may still be filled. Selecting a
    label the field does not offer raises InvalidOptionError.
    """
    def update(item):
        return item.model_copy(update={"value": _coerce_value(item, value)})

    return replace_item(structure, section_id, field_id, update)


def set_field_values(structure: Structure, values: list[tuple[str, str, object]]) -> Structure:
    """Apply several (section_id, field_id, value) writes; all or nothing."""
    for section_id, field_id, value in values:
        structure = set_field_value(structure, section_id, field_id, value)
    return structure
