"""Document acceptance and document-to-job conversion."""

from .pipeline import accept_document, build_job_notes, reject_document, snapshot_tasks
from .sequence import (
    JobNumber,
    allocate_job_number,
    current_period,
    format_job_number,
    next_job_number,
    parse_job_number,
)

__all__ = [
    "accept_document",
    "reject_document",
    "build_job_notes",
    "snapshot_tasks",
    "JobNumber",
    "allocate_job_number",
    "current_period",
    "format_job_number",
    "next_job_number",
    "parse_job_number",
]
