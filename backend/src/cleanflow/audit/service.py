"""Activity logging service for jobs and documents.

This service provides a centralized interface for creating immutable activity
entries. Entries are written through the caller's unit of work so that an
activity record commits or rolls back together with the change it describes.

Actions written by the public document pipeline:
- job_created (job)
- public_viewed, public_accepted, public_rejected (document)

Other collaborators append their own actions through the same functions.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import Request

from ..domain.documents.ports import UnitOfWorkPort
from ..models.activity_log import ActivityEntityType, ActivityLog
from ..models.base import utc_now

SYSTEM_ACTOR = "system"


def append_activity(
    uow: UnitOfWorkPort,
    entity_type: ActivityEntityType,
    entity_id: UUID,
    action: str,
    actor_description: str = SYSTEM_ACTOR,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ActivityLog:
    """Create an activity entry inside the active unit of work.

    All parameters are stored as-is. This function does not validate action
    names; callers own their vocabulary.

    Args:
        uow: Active unit of work (inside its ``with`` block)
        entity_type: JOB or DOCUMENT
        entity_id: ID of the affected entity
        action: Event action (e.g. "job_created", "public_viewed")
        actor_description: Who did it, e.g. "Jane Doe (203.0.113.7)" or "system"
        metadata: Additional context as JSON
        ip_address: Client IP address, if the action came from a request
        now: Timestamp override (defaults to current UTC time)

    Returns:
        ActivityLog: The created entry
    """
    entry = ActivityLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_description=actor_description,
        metadata_json=metadata,
        ip_address=ip_address,
        created_at=now or utc_now(),
    )
    uow.activities.add(entry)
    return entry


def append_job_activity(
    uow: UnitOfWorkPort,
    job_id: UUID,
    action: str,
    actor_description: str = SYSTEM_ACTOR,
    metadata: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> ActivityLog:
    return append_activity(
        uow,
        ActivityEntityType.JOB,
        job_id,
        action,
        actor_description=actor_description,
        metadata=metadata,
        now=now,
    )


def append_document_activity(
    uow: UnitOfWorkPort,
    document_id: UUID,
    action: str,
    actor_description: str = SYSTEM_ACTOR,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ActivityLog:
    return append_activity(
        uow,
        ActivityEntityType.DOCUMENT,
        document_id,
        action,
        actor_description=actor_description,
        metadata=metadata,
        ip_address=ip_address,
        now=now,
    )


def list_activities(
    uow: UnitOfWorkPort,
    entity_type: ActivityEntityType,
    entity_id: UUID,
) -> List[ActivityLog]:
    """Return the activity trail for one entity, oldest first."""
    with uow:
        return uow.activities.list_for(entity_type, entity_id)


def describe_signer(name: Optional[str], ip_address: Optional[str]) -> str:
    """Actor description for a customer acting through a public link.

    Example:
        >>> describe_signer("Jane Doe", "203.0.113.7")
        'Jane Doe (203.0.113.7)'
    """
    name = (name or "").strip() or "public viewer"
    return f"{name} ({ip_address})" if ip_address else name


def extract_client_ip(request: Request) -> Optional[str]:
    """Client IP from a FastAPI request, honouring X-Forwarded-For.

    The first hop in X-Forwarded-For is the original client when the service
    runs behind a proxy; otherwise the socket peer address is used.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None
