"""Agreement lifecycle state machine"""

from enum import Enum

from vahq_agreements.errors import InvalidTransitionError
from vahq_agreements.models.agreement import AgreementStatus


class LifecycleEvent(str, Enum):
    """Events that move an agreement between statuses"""
    PUBLISH = "publish"
    CLIENT_ACCEPT = "client_accept"
    CLIENT_FEEDBACK = "client_feedback"


TRANSITIONS: dict[tuple[AgreementStatus, LifecycleEvent], AgreementStatus] = {
    (AgreementStatus.DRAFT, LifecycleEvent.PUBLISH): AgreementStatus.PENDING_CLIENT,
    (AgreementStatus.FEEDBACK_RECEIVED, LifecycleEvent.PUBLISH): AgreementStatus.PENDING_CLIENT,
    (AgreementStatus.PENDING_CLIENT, LifecycleEvent.CLIENT_ACCEPT): AgreementStatus.ACCEPTED,
    (AgreementStatus.PENDING_CLIENT, LifecycleEvent.CLIENT_FEEDBACK): AgreementStatus.FEEDBACK_RECEIVED,
}

# Statuses in which the structure may still be written
EDITABLE_STATUSES = frozenset({
    AgreementStatus.DRAFT,
    AgreementStatus.PENDING_CLIENT,
    AgreementStatus.FEEDBACK_RECEIVED,
})

# Statuses in which the client portal may save progress
CLIENT_EDITABLE_STATUSES = frozenset({
    AgreementStatus.PENDING_CLIENT,
    AgreementStatus.FEEDBACK_RECEIVED,
})


def next_status(current: AgreementStatus, event: LifecycleEvent) -> AgreementStatus:
    """Return the status reached by event, or raise InvalidTransitionError."""
    try:
        return TRANSITIONS[(AgreementStatus(current), LifecycleEvent(event))]
    except KeyError:
        raise InvalidTransitionError(
            f"Cannot {LifecycleEvent(event).value} an agreement in status {AgreementStatus(current).value}"
        ) from None


def allowed_events(current: AgreementStatus) -> list[LifecycleEvent]:
    return [event for (status, event) in TRANSITIONS if status == current]


def is_terminal(status: AgreementStatus) -> bool:
    return not allowed_events(status)
