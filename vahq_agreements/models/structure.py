"""Agreement structure models: fields, sections and the structure tree

Every model here is frozen and holds tuples, so a Structure is an immutable
value. Operations build new structures with ``model_copy(update=...)``.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FieldKind(str, Enum):
    """Kinds of agreement fields"""
    TEXT = "text"
    TEXTAREA = "textarea"                # long text
    DATE = "date"                        # ISO date string
    CHECKBOX = "checkbox"                # single yes/no
    CHECKBOX_GROUP = "checkbox_group"    # multi-option


class BaseField(BaseModel):
    """Attributes shared by every field kind"""
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    placeholder: Optional[str] = None
    hidden: bool = False

    @property
    def kind(self) -> FieldKind:
        return FieldKind(self.type)


class TextField(BaseField):
    type: Literal["text"] = "text"
    value: Optional[str] = None


class TextareaField(BaseField):
    type: Literal["textarea"] = "textarea"
    value: Optional[str] = None


class DateField(BaseField):
    type: Literal["date"] = "date"
    value: Optional[str] = None


class CheckboxField(BaseField):
    type: Literal["checkbox"] = "checkbox"
    value: Optional[bool] = None


class CheckboxGroupField(BaseField):
    """Multi-option field. hidden_options keeps insertion order."""
    type: Literal["checkbox_group"] = "checkbox_group"
    options: tuple[str, ...] = ()
    hidden_options: tuple[str, ...] = ()
    value: Optional[tuple[str, ...]] = None

    def visible_options(self) -> tuple[str, ...]:
        hidden = set(self.hidden_options)
        return tuple(opt for opt in self.options if opt not in hidden)


AgreementField = Annotated[
    Union[TextField, TextareaField, DateField, CheckboxField, CheckboxGroupField],
    Field(discriminator="type"),
]


class Section(BaseModel):
    """An ordered, titled group of fields"""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    items: tuple[AgreementField, ...] = ()

    def find_item(self, field_id: str) -> Optional[BaseField]:
        for item in self.items:
            if item.id == field_id:
                return item
        return None


class Structure(BaseModel):
    """The full client-facing document schema"""
    model_config = ConfigDict(frozen=True)

    sections: tuple[Section, ...] = ()
    authorisation_disclaimer: Optional[str] = None
    authorisation_confirmation: Optional[str] = None

    def find_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def to_json(self) -> dict:
        """Serialize to the stored JSON shape"""
        return self.model_dump(mode="json", exclude_none=True)
