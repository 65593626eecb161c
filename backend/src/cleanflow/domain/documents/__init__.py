"""Documents domain - public lifecycle, status guards and domain errors."""

from .document_kind import DocumentKind
from .document_status import (
    ACTIONABLE_STATUSES,
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    DocumentStatus,
    StateTransitionError,
    can_transition,
    check_public_transition,
    get_allowed_transitions,
    is_link_expired,
    is_terminal,
    validate_transition,
)
from .errors import (
    ConversionFailedError,
    ExpiredLinkError,
    InvalidInputError,
    NotActionableError,
    NotFoundError,
    PublicDocumentError,
)

__all__ = [
    "DocumentKind",
    "DocumentStatus",
    "ALLOWED_TRANSITIONS",
    "ACTIONABLE_STATUSES",
    "TERMINAL_STATUSES",
    "StateTransitionError",
    "can_transition",
    "validate_transition",
    "get_allowed_transitions",
    "is_terminal",
    "is_link_expired",
    "check_public_transition",
    "PublicDocumentError",
    "NotFoundError",
    "ExpiredLinkError",
    "NotActionableError",
    "InvalidInputError",
    "ConversionFailedError",
]
