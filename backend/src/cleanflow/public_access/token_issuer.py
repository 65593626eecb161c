"""Public link token issuance.

A public token is 32 bytes from the OS CSPRNG rendered as 64 lowercase hex
characters. Issuing a token overwrites the document's previous token in the
same UPDATE, so the old link stops resolving the moment the new one is
committed. There is no overlap window.
"""

import secrets
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from ..config import settings
from ..domain.documents.errors import NotFoundError
from ..domain.documents.ports import UnitOfWorkPort
from ..models.base import utc_now
from ..observability.logging_config import get_logger

logger = get_logger(__name__)

PUBLIC_TOKEN_BYTES = 32
PUBLIC_TOKEN_LENGTH = PUBLIC_TOKEN_BYTES * 2


def generate_public_token() -> str:
    return secrets.token_hex(PUBLIC_TOKEN_BYTES)


def compute_token_expiry(now: datetime, ttl_days: Optional[int] = None) -> datetime:
    """Expiry timestamp for a token issued at ``now``."""
    if ttl_days is None:
        ttl_days = settings.PUBLIC_TOKEN_EXPIRY_DAYS
    return now + timedelta(days=ttl_days)


def issue_token(
    uow: UnitOfWorkPort,
    document_id: UUID,
    now: Optional[datetime] = None,
    ttl_days: Optional[int] = None,
) -> str:
    """Mint a new public token for a document, replacing any previous one.

    Args:
        uow: Unit of work (not yet entered)
        document_id: Document to share
        now: Issue time override (defaults to current UTC time)
        ttl_days: Lifetime override (defaults to PUBLIC_TOKEN_EXPIRY_DAYS)

    Returns:
        str: The new 64-character hex token

    Raises:
        NotFoundError: If the document does not exist
    """
    now = now or utc_now()
    token = generate_public_token()
    expires_at = compute_token_expiry(now, ttl_days)

    with uow:
        document = uow.documents.get(document_id)
        if document is None:
            raise NotFoundError()

        replaced = document.public_token is not None
        document.public_token = token
        document.public_token_expires_at = expires_at
        uow.commit()
        kind = document.kind

    logger.info(
        f"Public link {'reissued' if replaced else 'issued'}, expires {expires_at.isoformat()}",
        extra={"document_id": document_id, "document_kind": kind.value},
    )
    return token
