"""Document model for CleanFlow

A quotation, contract or proposal prepared by staff and shared with the
customer through a tokenized public link. Structurally identical across kinds
for the purposes of public access and acceptance.
"""

from uuid import uuid4

from sqlalchemy import (
    Column, Date, ForeignKey, Index, Integer, Numeric, String, Text, Uuid,
)
from sqlalchemy.orm import relationship

from ..domain.documents.document_kind import DocumentKind
from ..domain.documents.document_status import DocumentStatus
from .base import Base, PortableJSONB, UTCDateTime, enum_column_type, utc_now


class Document(Base):
    """Customer-facing document with a public acceptance lifecycle.

    Lifecycle:
    1. Created by staff (status=draft)
    2. Delivered to the customer (status=sent) and a public token issued
    3. Opened through the public link (status=viewed, viewed_at set once)
    4. Accepted (job generated) or rejected by the customer

    The public token is unique across all documents; issuing a new one
    overwrites the previous value, which then no longer resolves.
    """

    __tablename__ = 'document'
    __table_args__ = (
        Index('ix_document_account_id', 'account_id'),
        Index('ix_document_kind_status', 'kind', 'status'),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)

    kind = Column(enum_column_type(DocumentKind, 'document_kind'), nullable=False)
    document_number = Column(
        Text,
        nullable=True,
        comment="Human-readable number, e.g. QT-2026-0001"
    )
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)

    # Owning account and service location (managed elsewhere)
    account_id = Column(Uuid, nullable=False)
    facility_id = Column(Uuid, nullable=True)

    # Scheduling copied onto the generated job
    scheduled_date = Column(Date, nullable=True)
    scheduled_start_time = Column(UTCDateTime, nullable=True)
    scheduled_end_time = Column(UTCDateTime, nullable=True)

    # State machine
    status = Column(
        enum_column_type(DocumentStatus, 'document_status'),
        nullable=False,
        default=DocumentStatus.DRAFT,
        comment="draft → sent → viewed → accepted | rejected"
    )

    # Public access credential (64 hex chars), unique across documents
    public_token = Column(String(64), nullable=True, unique=True, index=True)
    public_token_expires_at = Column(UTCDateTime, nullable=True)

    # Lifecycle timestamps, each set at most once
    viewed_at = Column(UTCDateTime, nullable=True)
    accepted_at = Column(UTCDateTime, nullable=True)
    rejected_at = Column(UTCDateTime, nullable=True)

    # Populated only on terminal transitions
    signature_name = Column(Text, nullable=True)
    signature_date = Column(UTCDateTime, nullable=True)
    signature_ip = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)

    services = relationship(
        "DocumentService",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentService.sort_order",
    )
    generated_job = relationship(
        "Job",
        back_populates="source_document",
        uselist=False,
    )

    def __repr__(self):
        return f"<Document(id={self.id}, kind={self.kind}, status={self.status})>"


class DocumentService(Base):
    """Priced service line on a document.

    Resolved by the pricing services before the document is sent; read-only
    here and copied verbatim into job tasks on conversion.
    """

    __tablename__ = 'document_service'

    id = Column(Uuid, primary_key=True, default=uuid4)
    document_id = Column(
        Uuid,
        ForeignKey('document.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    service_name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=True)
    included_tasks = Column(PortableJSONB, nullable=False, default=list)
    sort_order = Column(Integer, nullable=False, default=0)

    document = relationship("Document", back_populates="services")

    def __repr__(self):
        return f"<DocumentService(id={self.id}, service_name={self.service_name!r})>"
