"""Customer acceptance and rejection of public documents.

Acceptance converts the document into a job in one transaction:

1. Lock the document row and evaluate the guards (expiry, then status)
2. Mark the document accepted and record the signature
3. Allocate the next job number for the current period
4. Create the job and snapshot the service lines into job tasks
5. Append job_created (job) and public_accepted (document) activities

Either all of it commits or none of it does. A job number conflict with a
concurrent acceptance rolls the attempt back and the whole transaction is
retried with a freshly allocated number.
"""

import copy
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..audit.service import append_document_activity, append_job_activity, describe_signer
from ..config import settings
from ..domain.documents.document_kind import DocumentKind
from ..domain.documents.document_status import (
    DocumentStatus,
    check_public_transition,
    is_link_expired,
)
from ..domain.documents.errors import ConversionFailedError, InvalidInputError, NotFoundError
from ..domain.documents.ports import UnitOfWorkPort
from ..models.base import utc_now
from ..models.document import Document
from ..models.job import Job, JobStatus, JobTask
from ..observability.logging_config import get_logger
from ..public_access.gateway import find_by_token
from .sequence import JobNumber, allocate_job_number, current_period

logger = get_logger(__name__)


def _load_for_transition(
    uow: UnitOfWorkPort,
    token: str,
    kind: Optional[DocumentKind],
) -> Document:
    document = find_by_token(uow, token, kind, for_update=True)
    if document is None:
        raise NotFoundError(kind)
    return document


def _is_already_converted(document: Document, now: datetime) -> bool:
    return (
        document.status == DocumentStatus.ACCEPTED
        and document.generated_job is not None
        and not is_link_expired(document.public_token_expires_at, now)
    )


def build_job_notes(document: Document) -> str:
    """Human-readable provenance note for a generated job.

    Example:
        From quotation QT-2026-0007
        1. Office cleaning - Weekly, all floors
        2. Window cleaning
    """
    reference = document.document_number or document.title
    lines = [f"From {document.kind.value} {reference}"]
    for index, service in enumerate(document.services, start=1):
        line = f"{index}. {service.service_name}"
        if service.description:
            line += f" - {service.description}"
        lines.append(line)
    return "\n".join(lines)


def snapshot_tasks(document: Document) -> List[JobTask]:
    """Copy every service line into a new JobTask, one per service."""
    return [
        JobTask(
            task_name=service.service_name,
            description=service.description,
            included_tasks=copy.deepcopy(service.included_tasks or []),
            price=service.price,
            sort_order=index,
        )
        for index, service in enumerate(document.services)
    ]


def _create_job(document: Document, job_number: JobNumber, now: datetime) -> Job:
    return Job(
        job_number=job_number.job_number,
        sequence_key=job_number.sequence_key,
        sequence_number=job_number.sequence_number,
        status=JobStatus.SCHEDULED,
        title=document.title,
        description=document.description,
        notes=build_job_notes(document),
        account_id=document.account_id,
        facility_id=document.facility_id,
        scheduled_date=document.scheduled_date,
        scheduled_start_time=document.scheduled_start_time,
        scheduled_end_time=document.scheduled_end_time,
        source_document=document,
        tasks=snapshot_tasks(document),
        created_at=now,
    )


def accept_document(
    uow: UnitOfWorkPort,
    token: str,
    signer_name: str,
    signer_ip: Optional[str],
    kind: Optional[DocumentKind] = None,
    now: Optional[datetime] = None,
) -> Document:
    """Accept a document through its public link and convert it into a job.

    Accepting a document that was already converted through the same live
    link returns the existing result instead of converting twice, so a client
    retrying after a lost response sees success.

    Args:
        uow: Unit of work (not yet entered)
        token: Public token from the link
        signer_name: Name typed by the customer as signature
        signer_ip: Client IP address
        kind: Expected document kind, if the caller knows it
        now: Acceptance time override (defaults to current UTC time)

    Returns:
        Document: Refreshed document with generated_job and its tasks loaded

    Raises:
        NotFoundError: Token does not match a document of this kind
        ExpiredLinkError: The link has expired (checked before status)
        NotActionableError: Document is not sent or viewed
        InvalidInputError: signer_name is blank
        ConversionFailedError: The transaction failed and was rolled back
    """
    now = now or utc_now()
    signer_name = signer_name.strip()
    if not signer_name:
        raise InvalidInputError("Signature name is required", kind)
    actor = describe_signer(signer_name, signer_ip)
    period = current_period(now)
    max_attempts = max(1, settings.JOB_NUMBER_MAX_ATTEMPTS)
    document_id = None
    document_kind = kind
    last_error: Optional[Exception] = None

    for attempt in range(1, max_attempts + 1):
        try:
            with uow:
                document = _load_for_transition(uow, token, kind)
                document_id, document_kind = document.id, document.kind

                if _is_already_converted(document, now):
                    logger.info(
                        "Document already accepted, returning existing job",
                        extra={"document_id": document_id, "job_number": document.generated_job.job_number},
                    )
                    return document

                check_public_transition(
                    document.kind,
                    document.status,
                    document.public_token_expires_at,
                    DocumentStatus.ACCEPTED,
                    now,
                )

                document.status = DocumentStatus.ACCEPTED
                document.accepted_at = now
                document.signature_name = signer_name
                document.signature_date = now
                document.signature_ip = signer_ip

                job_number = allocate_job_number(uow, period)
                job = _create_job(document, job_number, now)
                uow.jobs.add(job)

                append_job_activity(
                    uow,
                    job.id,
                    "job_created",
                    actor_description=actor,
                    metadata={
                        "source_document_id": str(document.id),
                        "source_document_kind": document.kind.value,
                        "source_document_number": document.document_number,
                        "job_number": job.job_number,
                    },
                    now=now,
                )
                append_document_activity(
                    uow,
                    document.id,
                    "public_accepted",
                    actor_description=actor,
                    metadata={"signature_name": signer_name, "job_number": job.job_number},
                    ip_address=signer_ip,
                    now=now,
                )
                uow.commit()
                job_id = job.id
            break
        except IntegrityError as e:
            last_error = e
            logger.warning(
                f"Job number conflict on attempt {attempt}/{max_attempts}, retrying",
                extra={"document_id": document_id, "attempt": attempt},
            )
        except SQLAlchemyError as e:
            logger.error(
                "Document conversion failed, transaction rolled back",
                extra={"attempt": attempt},
                exc_info=True,
            )
            raise ConversionFailedError(document_kind) from e
    else:
        logger.error(
            f"Document conversion gave up after {max_attempts} attempts",
            extra={"attempt": max_attempts},
        )
        raise ConversionFailedError(document_kind) from last_error

    logger.info(
        "Document accepted and converted to job",
        extra={
            "document_id": document_id,
            "document_kind": document_kind.value,
            "job_id": job_id,
            "job_number": job_number.job_number,
        },
    )

    with uow:
        return uow.documents.get(document_id)


def reject_document(
    uow: UnitOfWorkPort,
    token: str,
    reason: str,
    signer_ip: Optional[str],
    kind: Optional[DocumentKind] = None,
    now: Optional[datetime] = None,
) -> Document:
    """Reject a document through its public link.

    Same lookup and guard order as acceptance. No job is created and no job
    number is allocated.

    Raises:
        NotFoundError: Token does not match a document of this kind
        ExpiredLinkError: The link has expired (checked before status)
        InvalidInputError: reason is blank
        NotActionableError: Document is not sent or viewed
    """
    now = now or utc_now()
    reason = reason.strip()
    if not reason:
        raise InvalidInputError("Rejection reason is required", kind)

    with uow:
        document = _load_for_transition(uow, token, kind)
        check_public_transition(
            document.kind,
            document.status,
            document.public_token_expires_at,
            DocumentStatus.REJECTED,
            now,
        )

        document.status = DocumentStatus.REJECTED
        document.rejected_at = now
        document.rejection_reason = reason

        append_document_activity(
            uow,
            document.id,
            "public_rejected",
            actor_description=describe_signer(None, signer_ip),
            metadata={"rejection_reason": reason},
            ip_address=signer_ip,
            now=now,
        )
        uow.commit()
        document_id, document_kind = document.id, document.kind

    logger.info(
        "Document rejected via public link",
        extra={"document_id": document_id, "document_kind": document_kind.value},
    )

    with uow:
        return uow.documents.get(document_id)
