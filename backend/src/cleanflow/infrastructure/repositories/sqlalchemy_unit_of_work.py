"""SQLAlchemy unit of work and repositories for documents, jobs and activity"""

from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy import func, select, text
from sqlalchemy.orm import Session, selectinload

from ...domain.documents.ports import (
    ActivityLogRepositoryPort,
    DocumentRepositoryPort,
    JobRepositoryPort,
    UnitOfWorkPort,
)
from ...models.activity_log import ActivityEntityType, ActivityLog
from ...models.document import Document
from ...models.job import Job


def _document_load_options():
    return (
        selectinload(Document.services),
        selectinload(Document.generated_job).selectinload(Job.tasks),
    )


class SqlAlchemyDocumentRepository(DocumentRepositoryPort):
    """Repository for document lookups.

    Documents are created and edited by staff-facing services; this
    repository only reads them and relies on the session to flush changes
    made to loaded instances.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, document_id: UUID) -> Optional[Document]:
        query = (
            select(Document)
            .where(Document.id == document_id)
            .options(*_document_load_options())
        )
        return self.db.execute(query).scalars().first()

    def get_by_token(self, token: str, for_update: bool = False) -> Optional[Document]:
        """Load the document holding ``token``.

        Args:
            token: Public token value
            for_update: Issue SELECT ... FOR UPDATE OF document. Relationships
                are loaded with separate SELECTs so the lock never touches an
                outer join.

        Returns:
            Document or None
        """
        query = (
            select(Document)
            .where(Document.public_token == token)
            .options(*_document_load_options())
        )
        if for_update:
            query = query.with_for_update(of=Document)

        return self.db.execute(query).scalars().first()


class SqlAlchemyJobRepository(JobRepositoryPort):
    """Repository for job persistence and job-number sequence queries."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, job: Job) -> None:
        """Stage a job for insert and flush immediately.

        Flushing here makes a duplicate job_number or source_document_id
        surface as IntegrityError at the point of allocation.
        """
        self.db.add(job)
        self.db.flush()

    def get_by_source_document(self, document_id: UUID) -> Optional[Job]:
        query = (
            select(Job)
            .where(Job.source_document_id == document_id)
            .options(selectinload(Job.tasks))
        )
        return self.db.execute(query).scalars().first()

    def max_sequence_number(self, sequence_key: str) -> Optional[int]:
        query = select(func.max(Job.sequence_number)).where(Job.sequence_key == sequence_key)
        return self.db.execute(query).scalar()

    def lock_sequence(self, sequence_key: str) -> None:
        """Take a transaction-scoped advisory lock on PostgreSQL.

        On SQLite the engine opens every transaction with BEGIN IMMEDIATE,
        which already serializes writers, so there is nothing to do here.
        """
        if self.db.get_bind().dialect.name != "postgresql":
            return
        self.db.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:sequence_key))"),
            {"sequence_key": sequence_key},
        )


class SqlAlchemyActivityLogRepository(ActivityLogRepositoryPort):
    """Append-only repository for activity_log."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, entry: ActivityLog) -> None:
        self.db.add(entry)
        self.db.flush()

    def list_for(self, entity_type: ActivityEntityType, entity_id: UUID) -> List[ActivityLog]:
        query = (
            select(ActivityLog)
            .where(
                ActivityLog.entity_type == entity_type,
                ActivityLog.entity_id == entity_id,
            )
            .order_by(ActivityLog.created_at, ActivityLog.id)
        )
        return list(self.db.execute(query).scalars().all())


class SqlAlchemyUnitOfWork(UnitOfWorkPort):
    """Unit of work backed by a SQLAlchemy session factory.

    Each ``with`` block gets its own session and therefore its own
    transaction. The instance is not thread-safe; create one per request or
    per worker thread.

    Args:
        session_factory: Callable returning a new Session (a sessionmaker)
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory
        self.session: Optional[Session] = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        if self.session is not None:
            raise RuntimeError("Unit of work is already active")

        self.session = self.session_factory()
        self.documents = SqlAlchemyDocumentRepository(self.session)
        self.jobs = SqlAlchemyJobRepository(self.session)
        self.activities = SqlAlchemyActivityLogRepository(self.session)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        try:
            if exc_type is not None:
                self.session.rollback()
        finally:
            # close() ends any uncommitted transaction without expiring
            # instances, so read-only results stay usable.
            self.session.close()
            self.session = None

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
