"""Job number allocation.

Job numbers have the form <PREFIX>-<PERIOD>-<NNNN>, e.g. WO-2026-0042. The
period is the calendar year in UTC. NNNN is the current maximum for the
prefix and period plus one, zero-padded to at least four digits; numbers past
9999 simply grow a fifth digit.

Allocation must run inside the same transaction that inserts the job. The
repository serializes allocators on the sequence key (advisory lock on
PostgreSQL, BEGIN IMMEDIATE on SQLite) and the UNIQUE constraint on
job.job_number catches anything that slips through; the conversion pipeline
retries on that conflict.
"""

import re
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from ..config import settings
from ..domain.documents.ports import UnitOfWorkPort

SEQUENCE_WIDTH = 4

JOB_NUMBER_PATTERN = re.compile(
    r"^(?P<prefix>[A-Z][A-Z0-9]*)-(?P<period>\d{4})-(?P<sequence>\d{4,})$"
)


class JobNumber(NamedTuple):
    """An allocated job number and the columns it is stored under."""
    job_number: str
    sequence_key: str
    sequence_number: int


def current_period(now: datetime) -> str:
    """Allocation period for ``now``: the UTC calendar year."""
    return f"{now.astimezone(timezone.utc).year:04d}"


def build_sequence_key(prefix: str, period: str) -> str:
    return f"{prefix}-{period}"


def format_job_number(prefix: str, period: str, sequence_number: int) -> str:
    """Render a job number.

    Example:
        >>> format_job_number("WO", "2026", 2)
        'WO-2026-0002'
    """
    if sequence_number < 1:
        raise ValueError(f"Sequence number must be positive, got {sequence_number}")
    return f"{build_sequence_key(prefix, period)}-{sequence_number:0{SEQUENCE_WIDTH}d}"


def parse_job_number(job_number: str) -> JobNumber:
    """Split a job number into its stored parts.

    Raises:
        ValueError: If job_number is not <PREFIX>-<YYYY>-<NNNN>
    """
    match = JOB_NUMBER_PATTERN.match(job_number or "")
    if match is None:
        raise ValueError(f"Malformed job number: {job_number!r}")
    return JobNumber(
        job_number=job_number,
        sequence_key=build_sequence_key(match.group("prefix"), match.group("period")),
        sequence_number=int(match.group("sequence")),
    )


def allocate_job_number(
    uow: UnitOfWorkPort,
    period: str,
    prefix: Optional[str] = None,
) -> JobNumber:
    """Claim the next job number for ``prefix`` and ``period``.

    Must be called inside an active unit of work; the number is only reserved
    once the job row carrying it is committed.
    """
    prefix = prefix or settings.JOB_NUMBER_PREFIX
    sequence_key = build_sequence_key(prefix, period)

    uow.jobs.lock_sequence(sequence_key)
    current = uow.jobs.max_sequence_number(sequence_key) or 0
    sequence_number = current + 1

    return JobNumber(
        job_number=format_job_number(prefix, period, sequence_number),
        sequence_key=sequence_key,
        sequence_number=sequence_number,
    )


def next_job_number(
    uow: UnitOfWorkPort,
    period: str,
    prefix: Optional[str] = None,
) -> str:
    return allocate_job_number(uow, period, prefix).job_number
