"""Client-facing view of an agreement structure"""

import re
from typing import Optional, Union

from pydantic import BaseModel

from vahq_agreements.models.structure import CheckboxGroupField, Structure
from vahq_agreements.models.template import (
    DEFAULT_AUTHORISATION_CONFIRMATION,
    DEFAULT_AUTHORISATION_DISCLAIMER,
)

_SECTION_NUMBER = re.compile(r"^\s*\d+\.\s*")


class ClientField(BaseModel):
    """A visible field as shown to the client"""
    id: str
    label: str
    type: str
    placeholder: Optional[str] = None
    options: list[str] = []
    value: Union[str, bool, list[str], None] = None


class ClientSection(BaseModel):
    id: str
    title: str
    items: list[ClientField] = []


class ClientView(BaseModel):
    """What the client portal renders: hidden fields and options removed"""
    title: str = ""
    sections: list[ClientSection] = []
    authorisation_disclaimer: str = DEFAULT_AUTHORISATION_DISCLAIMER
    authorisation_confirmation: str = DEFAULT_AUTHORISATION_CONFIRMATION


def display_title(title: str) -> str:
    """Drop a leading 'N. ' section number."""
    return _SECTION_NUMBER.sub("", title)


def render_client_view(structure: Structure, title: str = "") -> ClientView:
    sections = []
    for section in structure.sections:
        items = []
        for item in section.items:
            if item.hidden:
                continue
            options: list[str] = []
            value = item.value
            if isinstance(item, CheckboxGroupField):
                options = list(item.visible_options())
                value = [v for v in (item.value or ()) if v in options]
            items.append(ClientField(
                id=item.id,
                label=item.label,
                type=item.type,
                placeholder=item.placeholder,
                options=options,
                value=value,
            ))
        sections.append(ClientSection(id=section.id, title=display_title(section.title), items=items))

    return ClientView(
        title=title,
        sections=sections,
        authorisation_disclaimer=structure.authorisation_disclaimer or DEFAULT_AUTHORISATION_DISCLAIMER,
        authorisation_confirmation=structure.authorisation_confirmation or DEFAULT_AUTHORISATION_CONFIRMATION,
    )
