"""Domain errors raised by the public document lifecycle.

Every error carries a user-visible message that is safe to return to an
unauthenticated caller: no internal identifiers, no stack detail. The HTTP
layer maps ``error_code`` to a status code.
"""

from typing import Optional

from .document_kind import DocumentKind


class PublicDocumentError(Exception):
    """Base class for errors surfaced to public document callers."""

    error_code = "public_document_error"

    def __init__(self, message: str, kind: Optional[DocumentKind] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind


class NotFoundError(PublicDocumentError):
    """The token (or document id) does not resolve to any document."""

    error_code = "not_found"

    def __init__(self, kind: Optional[DocumentKind] = None):
        label = kind.label if kind else "Document"
        super().__init__(f"{label} not found", kind)


class ExpiredLinkError(PublicDocumentError):
    """The token resolved but its expiry timestamp has passed."""

    error_code = "link_expired"

    def __init__(self, kind: DocumentKind):
        super().__init__(f"This {kind.value} link has expired", kind)


class NotActionableError(PublicDocumentError):
    """The link is valid but the document status forbids the transition.

    Args:
        kind: Document kind, used to phrase the message
        verb: "accepted", "rejected", or "signed" for contracts
    """

    error_code = "not_actionable"

    def __init__(self, kind: DocumentKind, verb: str):
        super().__init__(f"This {kind.value} can no longer be {verb}", kind)
        self.verb = verb


class ConversionFailedError(PublicDocumentError):
    """The acceptance transaction failed and was rolled back.

    The document is left in its pre-accept state and the caller may retry.
    """

    error_code = "conversion_failed"

    def __init__(self, kind: Optional[DocumentKind] = None):
        label = kind.value if kind else "document"
        super().__init__(
            f"We could not process your acceptance of this {label}. Please try again.",
            kind,
        )


class InvalidInputError(PublicDocumentError):
    """A field supplied by the customer is missing or blank."""

    error_code = "invalid_input"

    def __init__(self, message: str, kind: Optional[DocumentKind] = None):
        super().__init__(message, kind)
