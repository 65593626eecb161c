"""Job (work order) and JobTask models

A Job is created exactly once per accepted document by the conversion
pipeline. Its tasks are an immutable snapshot of the document's service
lines at conversion time, not live references to pricing templates.
"""

from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    Column, Date, ForeignKey, Index, Integer, Numeric, Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB, UTCDateTime, enum_column_type, utc_now


class JobStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELED = "canceled"


class Job(Base):
    """Work order generated from an accepted document.

    job_number has the form <PREFIX>-<PERIOD>-<NNNN>. sequence_key holds
    <PREFIX>-<PERIOD> and sequence_number the integer NNNN so the current
    maximum for a period is an indexed MAX() rather than a string sort.
    """

    __tablename__ = 'job'
    __table_args__ = (
        UniqueConstraint('job_number', name='uq_job_job_number'),
        UniqueConstraint('source_document_id', name='uq_job_source_document_id'),
        Index('ix_job_sequence', 'sequence_key', 'sequence_number'),
        Index('ix_job_account_id', 'account_id'),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)

    job_number = Column(Text, nullable=False)
    sequence_key = Column(Text, nullable=False)
    sequence_number = Column(Integer, nullable=False)

    status = Column(
        enum_column_type(JobStatus, 'job_status'),
        nullable=False,
        default=JobStatus.SCHEDULED,
    )
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    account_id = Column(Uuid, nullable=False)
    facility_id = Column(Uuid, nullable=True)

    scheduled_date = Column(Date, nullable=True)
    scheduled_start_time = Column(UTCDateTime, nullable=True)
    scheduled_end_time = Column(UTCDateTime, nullable=True)

    source_document_id = Column(
        Uuid,
        ForeignKey('document.id', ondelete='RESTRICT'),
        nullable=False,
    )

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    source_document = relationship("Document", back_populates="generated_job")
    tasks = relationship(
        "JobTask",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="JobTask.sort_order",
    )
    activities = relationship(
        "ActivityLog",
        primaryjoin="and_(foreign(ActivityLog.entity_id) == Job.id, "
                    "ActivityLog.entity_type == 'job')",
        order_by="ActivityLog.created_at",
        viewonly=True,
    )

    def __repr__(self):
        return f"<Job(id={self.id}, job_number={self.job_number!r}, status={self.status})>"


class JobTask(Base):
    """Snapshot of one document service line, copied at conversion time."""

    __tablename__ = 'job_task'

    id = Column(Uuid, primary_key=True, default=uuid4)
    job_id = Column(
        Uuid,
        ForeignKey('job.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    task_name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    included_tasks = Column(PortableJSONB, nullable=False, default=list)
    price = Column(Numeric(12, 2), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    status = Column(Text, nullable=False, default='pending')

    job = relationship("Job", back_populates="tasks")

    def __repr__(self):
        return f"<JobTask(id={self.id}, task_name={self.task_name!r})>"
