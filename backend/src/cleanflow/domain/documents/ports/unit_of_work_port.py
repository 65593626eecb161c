"""Unit of Work Port - Domain interface for transactional persistence.

The public document operations never reach for a global database handle.
Each operation receives a UnitOfWorkPort, enters it to open a transaction
scope, works through the repositories it exposes, and commits explicitly.

Architecture: Hexagonal - Port interface in domain layer

Example Usage:
    uow = SqlAlchemyUnitOfWork(SessionLocal)

    with uow:
        document = uow.documents.get_by_token(token, for_update=True)
        document.status = DocumentStatus.ACCEPTED
        uow.jobs.add(job)
        uow.commit()
    # leaving the block without commit() discards the work;
    # leaving it with an exception rolls back
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
from uuid import UUID


class DocumentRepositoryPort(ABC):
    """Access to documents by id or by public token."""

    @abstractmethod
    def get(self, document_id: UUID) -> Optional[Any]:
        """Load a document by primary key, or None."""
        pass

    @abstractmethod
    def get_by_token(self, token: str, for_update: bool = False) -> Optional[Any]:
        """Load the document currently holding ``token``, or None.

        Does not evaluate expiry; that is the caller's guard. The returned
        document has its services and generated job (with tasks) loaded so it
        stays usable after the unit of work closes.

        Args:
            token: Public token value
            for_update: Lock the document row until the transaction ends
        """
        pass


class JobRepositoryPort(ABC):
    """Persistence of jobs and the job-number sequence query."""

    @abstractmethod
    def add(self, job: Any) -> None:
        """Stage a new job (and its tasks) for insert and flush it."""
        pass

    @abstractmethod
    def get_by_source_document(self, document_id: UUID) -> Optional[Any]:
        pass

    @abstractmethod
    def max_sequence_number(self, sequence_key: str) -> Optional[int]:
        """Current maximum sequence number for ``<PREFIX>-<PERIOD>``, or None."""
        pass

    @abstractmethod
    def lock_sequence(self, sequence_key: str) -> None:
        """Serialize allocation for ``sequence_key`` until the transaction ends.

        Implementations that cannot lock may no-op; the UNIQUE constraint on
        job_number and the caller's retry remain the backstop.
        """
        pass


class ActivityLogRepositoryPort(ABC):
    """Append-only activity storage. There is no update or delete."""

    @abstractmethod
    def add(self, entry: Any) -> None:
        pass

    @abstractmethod
    def list_for(self, entity_type: Any, entity_id: UUID) -> List[Any]:
        """Entries for one entity, oldest first."""
        pass


class UnitOfWorkPort(ABC):
    """Transaction scope spanning documents, jobs and activity records.

    A unit of work may be entered repeatedly; every entry opens a fresh
    transaction. This lets a caller retry a whole conversion after a
    conflict without sharing state between attempts.
    """

    documents: DocumentRepositoryPort
    jobs: JobRepositoryPort
    activities: ActivityLogRepositoryPort

    @abstractmethod
    def __enter__(self) -> "UnitOfWorkPort":
        pass

    @abstractmethod
    def __exit__(self, exc_type, exc_value, traceback) -> None:
        """Roll back if an exception escaped, then release resources."""
        pass

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass
