"""Serializable structure customization operations"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class OperationType(str, Enum):
    """Customization operations that can be applied to a structure"""
    HIDE_FIELD = "hide_field"
    SHOW_FIELD = "show_field"
    HIDE_OPTION = "hide_option"
    SHOW_OPTION = "show_option"
    ADD_OPTION = "add_option"
    REMOVE_OPTION = "remove_option"
    REMOVE_FIELD = "remove_field"
    REINSTATE_SECTION = "reinstate_section"


class StructureOperation(BaseModel):
    """One customization step, e.g. from a CLI call or an API batch"""
    op: OperationType
    section_id: str
    field_id: Optional[str] = None   # not used by reinstate_section
    option: Optional[str] = None     # option operations only
