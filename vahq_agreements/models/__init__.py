"""Data models"""

from vahq_agreements.models.structure import (
    FieldKind,
    BaseField,
    TextField,
    TextareaField,
    DateField,
    CheckboxField,
    CheckboxGroupField,
    AgreementField,
    Section,
    Structure,
)
from vahq_agreements.models.template import (
    DEFAULT_AUTHORISATION_CONFIRMATION,
    DEFAULT_AUTHORISATION_DISCLAIMER,
    GuidanceSection,
    GuidanceContent,
    WorkflowTemplate,
)
from vahq_agreements.models.agreement import (
    AgreementStatus,
    AgreementInstance,
)
from vahq_agreements.models.audit import AuditEntry
from vahq_agreements.models.operation import (
    OperationType,
    StructureOperation,
)

__all__ = [
    "FieldKind",
    "BaseField",
    "TextField",
    "TextareaField",
    "DateField",
    "CheckboxField",
    "CheckboxGroupField",
    "AgreementField",
    "Section",
    "Structure",
    "DEFAULT_AUTHORISATION_CONFIRMATION",
    "DEFAULT_AUTHORISATION_DISCLAIMER",
    "GuidanceSection",
    "GuidanceContent",
    "WorkflowTemplate",
    "AgreementStatus",
    "AgreementInstance",
    "AuditEntry",
    "OperationType",
    "StructureOperation",
]
