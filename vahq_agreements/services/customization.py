"""Structure customization: pure show/hide and option editing operations

Each operation takes a structure and returns a new one; the input is never
modified. Callers validate, persist and audit the result.
"""

from typing import Callable

from vahq_agreements.errors import (
    InvalidOptionError,
    ItemNotFoundError,
    UnsupportedFieldKindError,
)
from vahq_agreements.models.operation import OperationType, StructureOperation
from vahq_agreements.models.structure import CheckboxGroupField, Section, Structure


def get_section(structure: Structure, section_id: str) -> Section:
    section = structure.find_section(section_id)
    if section is None:
        raise ItemNotFoundError(f"Section not found: {section_id}")
    return section


def get_item(structure: Structure, section_id: str, field_id: str):
    item = get_section(structure, section_id).find_item(field_id)
    if item is None:
        raise ItemNotFoundError(f"Field not found: {section_id}/{field_id}")
    return item


def replace_section(structure: Structure, section_id: str, update: Callable[[Section], Section]) -> Structure:
    get_section(structure, section_id)
    sections = tuple(
        update(section) if section.id == section_id else section
        for section in structure.sections
    )
    return structure.model_copy(update={"sections": sections})


def replace_item(structure: Structure, section_id: str, field_id: str, update: Callable) -> Structure:
    """Return a new structure with one field swapped for update(field)."""
    new_item = update(get_item(structure, section_id, field_id))

    def swap(section: Section) -> Section:
        items = tuple(new_item if item.id == field_id else item for item in section.items)
        return section.model_copy(update={"items": items})

    return replace_section(structure, section_id, swap)


def _option_field(item) -> CheckboxGroupField:
    if not isinstance(item, CheckboxGroupField):
        raise UnsupportedFieldKindError(
            f"Options apply to checkbox_group fields only, '{item.id}' is {item.type}"
        )
    return item


def _known_option(item: CheckboxGroupField, option_label: str) -> None:
    if option_label not in item.options:
        raise InvalidOptionError(f"'{option_label}' is not an option of field '{item.id}'")


# Field visibility

def hide_field(structure: Structure, section_id: str, field_id: str) -> Structure:
    """Hide a field from the client view. Its value and options are kept."""
    return replace_item(
        structure, section_id, field_id,
        lambda item: item.model_copy(update={"hidden": True}),
    )


def show_field(structure: Structure, section_id: str, field_id: str) -> Structure:
    return replace_item(
        structure, section_id, field_id,
        lambda item: item.model_copy(update={"hidden": False}),
    )


# Option visibility

def hide_option(structure: Structure, section_id: str, field_id: str, option_label: str) -> Structure:
    def update(item):
        field = _option_field(item)
        _known_option(field, option_label)
        if option_label in field.hidden_options:
            return field
        return field.model_copy(update={"hidden_options": field.hidden_options + (option_label,)})

    return replace_item(structure, section_id, field_id, update)


def show_option(structure: Structure, section_id: str, field_id: str, option_label: str) -> Structure:
    def update(item):
        field = _option_field(item)
        _known_option(field, option_label)
        hidden = tuple(opt for opt in field.hidden_options if opt != option_label)
        return field.model_copy(update={"hidden_options": hidden})

    return replace_item(structure, section_id, field_id, update)


# Option editing

def add_option(structure: Structure, section_id: str, field_id: str, new_label: str) -> Structure:
    """Append an option. A label that already exists is left as is."""
    label = (new_label or "").strip()

    def update(item):
        field = _option_field(item)
        if not label:
            raise InvalidOptionError("Option label must not be blank")
        if label in field.options:
            return field
        return field.model_copy(update={"options": field.options + (label,)})

    return replace_item(structure, section_id, field_id, update)


def remove_option(structure: Structure, section_id: str, field_id: str, option_label: str) -> Structure:
    """Delete an option, its hidden marker and any selection of it."""
    def update(item):
        field = _option_field(item)
        _known_option(field, option_label)
        changes = {
            "options": tuple(opt for opt in field.options if opt != option_label),
            "hidden_options": tuple(opt for opt in field.hidden_options if opt != option_label),
        }
        if field.value is not None:
            changes["value"] = tuple(v for v in field.value if v != option_label)
        return field.model_copy(update=changes)

    return replace_item(structure, section_id, field_id, update)


def remove_field(structure: Structure, section_id: str, field_id: str) -> Structure:
    """Delete a field from its section. Unlike hiding, this cannot be reinstated."""
    get_item(structure, section_id, field_id)
    return replace_section(
        structure, section_id,
        lambda section: section.model_copy(
            update={"items": tuple(item for item in section.items if item.id != field_id)}
        ),
    )


def reinstate_section(structure: Structure, section_id: str) -> Structure:
    """Show every field and every option in a section again.

    Removed fields and options stay removed.
    """
    def reset(item):
        changes = {"hidden": False}
        if isinstance(item, CheckboxGroupField):
            changes["hidden_options"] = ()
        return item.model_copy(update=changes)

    return replace_section(
        structure, section_id,
        lambda section: section.model_copy(update={"items": tuple(reset(i) for i in section.items)}),
    )


def apply_operation(structure: Structure, operation: StructureOperation) -> Structure:
    """Apply one serialized operation."""
    op = operation.op
    if op == OperationType.REINSTATE_SECTION:
        return reinstate_section(structure, operation.section_id)

    if not operation.field_id:
        raise ItemNotFoundError(f"{op.value} requires a field id")

    if op == OperationType.HIDE_FIELD:
        return hide_field(structure, operation.section_id, operation.field_id)
    if op == OperationType.SHOW_FIELD:
        return show_field(structure, operation.section_id, operation.field_id)
    if op == OperationType.REMOVE_FIELD:
        return remove_field(structure, operation.section_id, operation.field_id)

    option_ops = {
        OperationType.HIDE_OPTION: hide_option,
        OperationType.SHOW_OPTION: show_option,
        OperationType.ADD_OPTION: add_option,
        OperationType.REMOVE_OPTION: remove_option,
    }
    if operation.option is None:
        raise InvalidOptionError(f"{op.value} requires an option label")
    return option_ops[op](structure, operation.section_id, operation.field_id, operation.option)


def apply_operations(structure: Structure, operations: list[StructureOperation]) -> Structure:
    """Apply operations in order. Any failure discards the whole batch."""
    for operation in operations:
        structure = apply_operation(structure, operation)
    return structure
