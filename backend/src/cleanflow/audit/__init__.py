"""Append-only activity trail for jobs and documents."""

from .service import (
    SYSTEM_ACTOR,
    append_activity,
    append_document_activity,
    append_job_activity,
    describe_signer,
    extract_client_ip,
    list_activities,
)

__all__ = [
    "SYSTEM_ACTOR",
    "append_activity",
    "append_document_activity",
    "append_job_activity",
    "describe_signer",
    "extract_client_ip",
    "list_activities",
]
