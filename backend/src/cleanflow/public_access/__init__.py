"""Tokenized public access to documents."""

from .gateway import find_by_token, is_well_formed_token, mark_viewed, resolve_by_token
from .token_issuer import (
    PUBLIC_TOKEN_LENGTH,
    compute_token_expiry,
    generate_public_token,
    issue_token,
)

__all__ = [
    "find_by_token",
    "is_well_formed_token",
    "mark_viewed",
    "resolve_by_token",
    "PUBLIC_TOKEN_LENGTH",
    "compute_token_expiry",
    "generate_public_token",
    "issue_token",
]
