#!/usr/bin/env python
"""Issue a public link for a document and print the share URL.

Any previously issued link for the document stops working immediately.

Usage:
    DOCUMENT_ID=<uuid> python backend/scripts/issue_public_link.py

Environment Variables:
    DATABASE_URL: Database connection string
    DOCUMENT_ID: Document UUID (required)
    PUBLIC_BASE_URL: Base URL of the customer-facing web app
    PUBLIC_TOKEN_EXPIRY_DAYS: Link lifetime in days (default: 30)
"""

import os
import sys
from uuid import UUID

from cleanflow.config import settings
from cleanflow.database import SessionLocal
from cleanflow.domain.documents.errors import NotFoundError
from cleanflow.infrastructure.repositories import SqlAlchemyUnitOfWork
from cleanflow.public_access.token_issuer import issue_token


def build_share_url(base_url: str, kind: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/public/{kind}/{token}"


def main():
    """Issue a token and print the link."""
    document_id_str = os.getenv("DOCUMENT_ID")
    if not document_id_str:
        print("ERROR: DOCUMENT_ID environment variable is required")
        print("Example: DOCUMENT_ID=7c9e6679-7425-40de-944b-e07fc1f90ae7 python issue_public_link.py")
        sys.exit(1)

    try:
        document_id = UUID(document_id_str)
    except ValueError:
        print(f"ERROR: Invalid DOCUMENT_ID format: {document_id_str}")
        print("DOCUMENT_ID must be a valid UUID")
        sys.exit(1)

    uow = SqlAlchemyUnitOfWork(SessionLocal)

    try:
        token = issue_token(uow, document_id)
    except NotFoundError:
        print(f"ERROR: Document {document_id} not found")
        sys.exit(1)

    with uow:
        document = uow.documents.get(document_id)

    print("SUCCESS: Public link issued")
    label = " ".join(filter(None, [document.kind.value, document.document_number]))
    print(f"  Document: {document.id} ({label})")
    print(f"  Status:   {document.status.value}")
    print(f"  Expires:  {document.public_token_expires_at.isoformat()}")
    print(f"  URL:      {build_share_url(settings.PUBLIC_BASE_URL, document.kind.value, token)}")


if __name__ == "__main__":
    main()
