"""Exception hierarchy for the agreement engine"""


class AgreementEngineError(Exception):
    """Base class for all engine errors"""


class NotFoundError(AgreementEngineError):
    """A template or agreement does not exist"""


class ItemNotFoundError(NotFoundError):
    """A section or field id does not exist in a structure"""


class SchemaError(AgreementEngineError):
    """A structure failed shape validation and must not be persisted"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidOptionError(AgreementEngineError):
    """An option label is not valid for the field"""


class UnsupportedFieldKindError(AgreementEngineError):
    """The operation does not apply to this kind of field"""


class TypeMismatchError(AgreementEngineError):
    """A filled value does not match the field kind"""


class InvalidTransitionError(AgreementEngineError):
    """The lifecycle status does not allow the requested action"""


class PersistenceError(AgreementEngineError):
    """The backing store is unavailable or rejected the write"""


class ConflictError(AgreementEngineError):
    """The stored agreement version no longer matches the version read"""

    def __init__(self, agreement_id: str, expected_version: int, actual_version: int | None = None):
        message = f"Agreement {agreement_id} was modified concurrently (expected version {expected_version}"
        if actual_version is not None:
            message += f", found {actual_version}"
        super().__init__(message + ")")
        self.agreement_id = agreement_id
        self.expected_version = expected_version
        self.actual_version = actual_version
