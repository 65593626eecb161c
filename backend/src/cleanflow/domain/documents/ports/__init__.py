"""Ports for persistence of documents, jobs and activity records."""

from .unit_of_work_port import (
    ActivityLogRepositoryPort,
    DocumentRepositoryPort,
    JobRepositoryPort,
    UnitOfWorkPort,
)

__all__ = [
    "ActivityLogRepositoryPort",
    "DocumentRepositoryPort",
    "JobRepositoryPort",
    "UnitOfWorkPort",
]
