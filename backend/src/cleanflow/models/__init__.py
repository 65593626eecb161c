"""SQLAlchemy models. Importing this package registers every table on Base."""

from .base import Base, PortableJSONB, UTCDateTime, utc_now
from .document import Document, DocumentService
from .job import Job, JobStatus, JobTask
from .activity_log import ActivityEntityType, ActivityLog, ActivityLogImmutableError

__all__ = [
    "Base",
    "PortableJSONB",
    "UTCDateTime",
    "utc_now",
    "Document",
    "DocumentService",
    "Job",
    "JobStatus",
    "JobTask",
    "ActivityEntityType",
    "ActivityLog",
    "ActivityLogImmutableError",
]
