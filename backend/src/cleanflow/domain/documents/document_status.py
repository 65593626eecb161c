"""DocumentStatus state machine for the public document lifecycle.

State flow:
    draft → sent → viewed → accepted | rejected
    sent may also go straight to accepted or rejected.

Terminal states: accepted, rejected.

Public transitions (accept/reject) are additionally gated by the link expiry.
Guards are evaluated in a fixed order, expiry first and status second, so an
expired link always reports "expired" whatever its status, and a live link on
a terminal document reports "no longer actionable".
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from .document_kind import DocumentKind
from .errors import ExpiredLinkError, NotActionableError


class DocumentStatus(str, Enum):
    """Document lifecycle status."""
    DRAFT = "draft"          # Being prepared by staff
    SENT = "sent"            # Delivered to the customer
    VIEWED = "viewed"        # Opened through the public link
    ACCEPTED = "accepted"    # Signed by the customer (terminal)
    REJECTED = "rejected"    # Declined by the customer (terminal)


# State transition rules
ALLOWED_TRANSITIONS: Dict[DocumentStatus, List[DocumentStatus]] = {
    DocumentStatus.DRAFT: [DocumentStatus.SENT],
    DocumentStatus.SENT: [
        DocumentStatus.VIEWED,
        DocumentStatus.ACCEPTED,
        DocumentStatus.REJECTED,
    ],
    DocumentStatus.VIEWED: [
        DocumentStatus.ACCEPTED,
        DocumentStatus.REJECTED,
    ],
    DocumentStatus.ACCEPTED: [],  # Terminal state
    DocumentStatus.REJECTED: [],  # Terminal state
}

TERMINAL_STATUSES: FrozenSet[DocumentStatus] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Statuses from which a customer may accept or reject through the public link
ACTIONABLE_STATUSES: FrozenSet[DocumentStatus] = frozenset(
    {DocumentStatus.SENT, DocumentStatus.VIEWED}
)

_PUBLIC_VERBS = {
    DocumentStatus.ACCEPTED: "accepted",
    DocumentStatus.REJECTED: "rejected",
}

# Contracts are signed rather than accepted
_KIND_VERBS = {
    (DocumentKind.CONTRACT, DocumentStatus.ACCEPTED): "signed",
}


class StateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""
    pass


def can_transition(from_status: DocumentStatus, to_status: DocumentStatus) -> bool:
    """Check whether a status transition is allowed.

    Example:
        >>> can_transition(DocumentStatus.SENT, DocumentStatus.VIEWED)
        True
        >>> can_transition(DocumentStatus.ACCEPTED, DocumentStatus.REJECTED)
        False
    """
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


def validate_transition(from_status: DocumentStatus, to_status: DocumentStatus) -> None:
    """Validate that a status transition is allowed.

    Raises:
        StateTransitionError: If the transition is not in ALLOWED_TRANSITIONS
    """
    if not can_transition(from_status, to_status):
        allowed = [s.value for s in get_allowed_transitions(from_status)]
        raise StateTransitionError(
            f"Invalid transition: {from_status.value} -> {to_status.value}. "
            f"Allowed transitions from {from_status.value}: {allowed}"
        )


def get_allowed_transitions(from_status: DocumentStatus) -> List[DocumentStatus]:
    return ALLOWED_TRANSITIONS.get(from_status, [])


def is_terminal(status: DocumentStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_link_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    """Return True unless ``expires_at`` is strictly in the future.

    A missing expiry counts as expired: a link without an expiry was never
    properly issued.
    """
    return expires_at is None or expires_at <= now


def check_public_transition(
    kind: DocumentKind,
    status: DocumentStatus,
    expires_at: Optional[datetime],
    target: DocumentStatus,
    now: datetime,
) -> None:
    """Evaluate the guards for a customer-driven accept or reject.

    Guard order:
        1. Expiry: the link must not have expired.
        2. Status: the document must be sent or viewed.

    Args:
        kind: Document kind (for the error message)
        status: Current document status
        expires_at: Public token expiry timestamp
        target: ACCEPTED or REJECTED
        now: Evaluation time (timezone-aware)

    Raises:
        ExpiredLinkError: If the link has expired
        NotActionableError: If the status does not allow the transition
        ValueError: If target is not a public terminal transition
    """
    verb = _PUBLIC_VERBS.get(target)
    if verb is None:
        raise ValueError(f"{target.value} is not a public transition")

    if is_link_expired(expires_at, now):
        raise ExpiredLinkError(kind)

    if status not in ACTIONABLE_STATUSES or not can_transition(status, target):
        raise NotActionableError(kind, _KIND_VERBS.get((kind, target), verb))
