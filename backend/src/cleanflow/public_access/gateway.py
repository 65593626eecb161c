"""Public access gateway: resolve a bearer token to its document.

An unknown token, a superseded token, a token presented under the wrong
document kind and an expired token all resolve to None. Callers cannot tell
these apart, so the endpoint leaks nothing about whether a link ever existed.
"""

import re
from datetime import datetime
from typing import Optional

from ..audit.service import append_document_activity, describe_signer
from ..domain.documents.document_kind import DocumentKind
from ..domain.documents.document_status import DocumentStatus, is_link_expired
from ..domain.documents.ports import UnitOfWorkPort
from ..models.base import utc_now
from ..models.document import Document
from ..observability.logging_config import get_logger

logger = get_logger(__name__)

_TOKEN_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def is_well_formed_token(token: Optional[str]) -> bool:
    return bool(token) and _TOKEN_PATTERN.match(token) is not None


def find_by_token(
    uow: UnitOfWorkPort,
    token: str,
    kind: Optional[DocumentKind] = None,
    for_update: bool = False,
) -> Optional[Document]:
    """Look up a token inside an active unit of work, ignoring expiry.

    Used by the accept/reject pipeline, which must report an expired link
    differently from an unknown one once the caller holds a real token.
    """
    if not is_well_formed_token(token):
        return None

    document = uow.documents.get_by_token(token, for_update=for_update)
    if document is None or (kind is not None and document.kind != kind):
        return None
    return document


def _resolve_active(
    uow: UnitOfWorkPort,
    token: str,
    kind: Optional[DocumentKind],
    now: datetime,
) -> Optional[Document]:
    document = find_by_token(uow, token, kind)
    if document is None or is_link_expired(document.public_token_expires_at, now):
        return None
    return document


def resolve_by_token(
    uow: UnitOfWorkPort,
    token: str,
    kind: Optional[DocumentKind] = None,
    now: Optional[datetime] = None,
) -> Optional[Document]:
    """Resolve a public token to a live document.

    Args:
        uow: Unit of work (not yet entered)
        token: Public token from the link
        kind: Expected document kind, if the caller knows it
        now: Evaluation time override

    Returns:
        Document with services and generated job loaded, or None if the token
        is unknown, superseded, of another kind, or expired
    """
    now = now or utc_now()
    with uow:
        return _resolve_active(uow, token, kind, now)


def mark_viewed(
    uow: UnitOfWorkPort,
    token: str,
    kind: Optional[DocumentKind] = None,
    ip_address: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """Record the first customer view of a sent document.

    Moves sent → viewed and stamps viewed_at. Any other status, or a token
    that does not resolve, is a no-op, so viewed_at is written at most once.
    Two simultaneous first views may both write; they write the same state.
    """
    now = now or utc_now()
    with uow:
        document = _resolve_active(uow, token, kind, now)
        if document is None or document.status != DocumentStatus.SENT:
            return

        document.status = DocumentStatus.VIEWED
        document.viewed_at = now
        append_document_activity(
            uow,
            document.id,
            "public_viewed",
            actor_description=describe_signer(None, ip_address),
            ip_address=ip_address,
            now=now,
        )
        uow.commit()
        document_id, document_kind = document.id, document.kind

    logger.info(
        "Document viewed via public link",
        extra={"document_id": document_id, "document_kind": document_kind.value},
    )
