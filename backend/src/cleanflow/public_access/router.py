"""Public document API router.

Unauthenticated endpoints reached through the link sent to the customer:

    GET  /public/{kind}/{token}          view (marks sent documents viewed)
    POST /public/{kind}/{token}/accept   sign and convert into a job
    POST /public/{kind}/{token}/reject   decline with a reason

Domain errors (not found, expired, not actionable, conversion failed) are
raised as PublicDocumentError and mapped to HTTP responses by the handler
registered in main.py.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..audit.service import extract_client_ip
from ..conversion.pipeline import accept_document, reject_document
from ..dependencies import get_unit_of_work
from ..domain.documents.document_kind import DocumentKind
from ..domain.documents.document_status import DocumentStatus
from ..domain.documents.ports import UnitOfWorkPort
from .gateway import mark_viewed, resolve_by_token
from .schemas import (
    AcceptRequest,
    ErrorResponse,
    PublicDocumentEnvelope,
    PublicDocumentResponse,
    RejectRequest,
)

router = APIRouter(prefix="/public", tags=["public_documents"])

_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Unknown token"},
    409: {"model": ErrorResponse, "description": "Document can no longer be acted on"},
    410: {"model": ErrorResponse, "description": "Link has expired"},
}


@router.get(
    "/{kind}/{token}",
    response_model=PublicDocumentEnvelope,
    responses={404: {"model": ErrorResponse, "description": "Unknown or expired link"}},
    summary="View a document through its public link",
    description="""
    Return the document behind a public link.

    The first view of a **sent** document moves it to **viewed** and records
    viewed_at. Unknown, superseded and expired links all return the same 404.
    """
)
def view_public_document(
    kind: DocumentKind,
    token: str,
    request: Request,
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
):
    document = resolve_by_token(uow, token, kind=kind)
    if document is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "not_found",
                "message": f"{kind.label} not found or link has expired",
            },
        )

    if document.status == DocumentStatus.SENT:
        mark_viewed(uow, token, kind=kind, ip_address=extract_client_ip(request))
        document = resolve_by_token(uow, token, kind=kind) or document

    return PublicDocumentEnvelope(data=PublicDocumentResponse.model_validate(document))


@router.post(
    "/{kind}/{token}/accept",
    response_model=PublicDocumentEnvelope,
    responses={**_ERROR_RESPONSES, 503: {"model": ErrorResponse, "description": "Conversion failed, retry"}},
    summary="Accept a document",
    description="""
    Sign the document and convert it into a scheduled job.

    **Guards (in order):** link not expired, then status is sent or viewed.

    **State Transition:** SENT | VIEWED → ACCEPTED

    Repeating an acceptance that already succeeded returns the same document
    and job.
    """
)
def accept_public_document(
    kind: DocumentKind,
    token: str,
    body: AcceptRequest,
    request: Request,
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
) -> PublicDocumentEnvelope:
    """Accept a document and return it with its generated job.

    Raises:
        404: Unknown token
        410: Link expired
        409: Document not sent or viewed
        503: Conversion failed and was rolled back
    """
    document = accept_document(
        uow,
        token,
        signer_name=body.signature_name,
        signer_ip=extract_client_ip(request),
        kind=kind,
    )
    return PublicDocumentEnvelope(
        data=PublicDocumentResponse.model_validate(document),
        message=f"{kind.label} accepted successfully",
    )


@router.post(
    "/{kind}/{token}/reject",
    response_model=PublicDocumentEnvelope,
    responses=_ERROR_RESPONSES,
    summary="Reject a document",
    description="""
    Decline the document with a reason.

    **Guards (in order):** link not expired, then status is sent or viewed.

    **State Transition:** SENT | VIEWED → REJECTED
    """
)
def reject_public_document(
    kind: DocumentKind,
    token: str,
    body: RejectRequest,
    request: Request,
    uow: UnitOfWorkPort = Depends(get_unit_of_work),
) -> PublicDocumentEnvelope:
    document = reject_document(
        uow,
        token,
        reason=body.rejection_reason,
        signer_ip=extract_client_ip(request),
        kind=kind,
    )
    return PublicDocumentEnvelope(
        data=PublicDocumentResponse.model_validate(document),
        message=f"{kind.label} rejected",
    )
