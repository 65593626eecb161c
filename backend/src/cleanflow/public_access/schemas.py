"""Pydantic schemas for the public document endpoints.

Responses are built from ORM objects with from_attributes. They deliberately
omit public_token, signature_ip and internal foreign keys: the caller already
holds the token, and nothing else about the account is theirs to see.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.documents.document_kind import DocumentKind
from ..domain.documents.document_status import DocumentStatus
from ..models.job import JobStatus


class AcceptRequest(BaseModel):
    """Body of POST /public/{kind}/{token}/accept."""
    signature_name: str = Field(..., min_length=1, max_length=200, description="Name typed as signature")

    model_config = ConfigDict(extra='forbid')

    @field_validator('signature_name')
    @classmethod
    def validate_signature_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("signature_name must not be blank")
        return v.strip()


class RejectRequest(BaseModel):
    """Body of POST /public/{kind}/{token}/reject."""
    rejection_reason: str = Field(..., min_length=1, max_length=2000)

    model_config = ConfigDict(extra='forbid')

    @field_validator('rejection_reason')
    @classmethod
    def validate_rejection_reason(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("rejection_reason must not be blank")
        return v.strip()


class DocumentServiceResponse(BaseModel):
    service_name: str
    description: Optional[str] = None
    price: Optional[Decimal] = None
    included_tasks: List[Any] = Field(default_factory=list)
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class JobTaskResponse(BaseModel):
    task_name: str
    description: Optional[str] = None
    included_tasks: List[Any] = Field(default_factory=list)
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class GeneratedJobResponse(BaseModel):
    """Job created when the customer accepted the document."""
    id: UUID
    job_number: str
    status: JobStatus
    title: str
    scheduled_date: Optional[date] = None
    scheduled_start_time: Optional[datetime] = None
    scheduled_end_time: Optional[datetime] = None
    tasks: List[JobTaskResponse] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicDocumentResponse(BaseModel):
    """Customer-facing view of a document."""
    id: UUID
    kind: DocumentKind
    document_number: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: DocumentStatus

    scheduled_date: Optional[date] = None
    scheduled_start_time: Optional[datetime] = None
    scheduled_end_time: Optional[datetime] = None

    public_token_expires_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    signature_name: Optional[str] = None
    signature_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    services: List[DocumentServiceResponse] = Field(default_factory=list)
    generated_job: Optional[GeneratedJobResponse] = None

    model_config = ConfigDict(from_attributes=True)


class PublicDocumentEnvelope(BaseModel):
    """Response wrapper used by every public document endpoint."""
    data: PublicDocumentResponse
    message: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": {
                    "id": "123e4567-e89b-12d3-a456-426614174000",
                    "kind": "quotation",
                    "document_number": "QT-2026-0007",
                    "title": "Office cleaning, 3rd floor",
                    "status": "accepted",
                    "signature_name": "Jane Doe",
                    "generated_job": {"job_number": "WO-2026-0002", "status": "scheduled"},
                },
                "message": "Quotation accepted successfully",
            }
        }
    )


class ErrorResponse(BaseModel):
    """Error body returned by the public endpoints."""
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="User-visible message")
