"""Pytest fixtures for the public document pipeline.

Provides reusable test fixtures for:
- A throwaway SQLite file database per test (real transactions, usable from
  several threads at once)
- A unit of work bound to that database
- Factories for documents and pre-existing jobs
- A FastAPI TestClient wired to the same database

Fixtures never hold a session open across a pipeline call: every SQLite
transaction starts with BEGIN IMMEDIATE, so an idle open transaction in the
test would block the code under test.

Usage:
    def test_accept(uow, make_document, now):
        document = make_document(status=DocumentStatus.VIEWED)
        accepted = accept_document(uow, document.public_token, "Jane Doe", "203.0.113.7", now=now)
        assert accepted.generated_job is not None
"""

import os

# Set environment variables BEFORE any cleanflow imports; the application
# engine is created at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator, List, Optional
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from cleanflow.database import create_db_engine, create_session_factory, get_db
from cleanflow.dependencies import get_unit_of_work
from cleanflow.domain.documents import DocumentKind, DocumentStatus
from cleanflow.infrastructure.repositories import SqlAlchemyUnitOfWork
from cleanflow.models import Base, Document, DocumentService, Job, utc_now
from cleanflow.conversion.sequence import parse_job_number
from cleanflow.public_access.token_issuer import generate_public_token


@pytest.fixture(scope="function")
def engine(tmp_path) -> Generator[Engine, None, None]:
    """Create a fresh SQLite database file for each test.

    Creates all tables before the test and disposes of the engine after.
    """
    engine = create_db_engine(f"sqlite:///{tmp_path / 'cleanflow-test.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine: Engine) -> sessionmaker:
    return create_session_factory(engine)


@pytest.fixture(scope="function")
def uow(session_factory: sessionmaker) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory)


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation time inside period 2026."""
    return datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


def default_services() -> List[dict]:
    return [
        {
            "service_name": "Office cleaning",
            "description": "Weekly, all floors",
            "price": Decimal("450.00"),
            "included_tasks": [{"name": "Vacuum carpets"}, {"name": "Empty bins"}],
        },
        {
            "service_name": "Window cleaning",
            "description": None,
            "price": Decimal("120.00"),
            "included_tasks": [],
        },
    ]


@pytest.fixture
def make_document(session_factory: sessionmaker):
    """Factory inserting a document with a live public token.

    The returned instance is detached; reload it through a unit of work to
    observe changes made by the code under test.
    """

    def _make(
        status: DocumentStatus = DocumentStatus.SENT,
        kind: DocumentKind = DocumentKind.QUOTATION,
        token: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        services: Optional[List[dict]] = None,
        document_number: Optional[str] = "QT-2026-0007",
        with_token: bool = True,
    ) -> Document:
        document = Document(
            kind=kind,
            document_number=document_number,
            title="Office cleaning, 3rd floor",
            description="Recurring cleaning for the Berlin office",
            account_id=uuid4(),
            facility_id=uuid4(),
            scheduled_date=date(2026, 3, 2),
            scheduled_start_time=datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc),
            scheduled_end_time=datetime(2026, 3, 2, 21, 0, tzinfo=timezone.utc),
            status=status,
        )
        if with_token:
            document.public_token = token or generate_public_token()
            document.public_token_expires_at = expires_at or (utc_now() + timedelta(days=30))

        for index, service in enumerate(default_services() if services is None else services):
            document.services.append(DocumentService(sort_order=index, **service))

        with session_factory() as session:
            session.add(document)
            session.commit()
        return document

    return _make


@pytest.fixture
def make_job(session_factory: sessionmaker):
    """Factory inserting an existing job (and its accepted source document)."""

    def _make(job_number: str) -> Job:
        parsed = parse_job_number(job_number)
        source = Document(
            kind=DocumentKind.QUOTATION,
            title="Earlier quotation",
            account_id=uuid4(),
            status=DocumentStatus.ACCEPTED,
        )
        job = Job(
            job_number=parsed.job_number,
            sequence_key=parsed.sequence_key,
            sequence_number=parsed.sequence_number,
            title=source.title,
            account_id=source.account_id,
            source_document=source,
        )
        with session_factory() as session:
            session.add_all([source, job])
            session.commit()
        return job

    return _make


@pytest.fixture
def count_rows(session_factory: sessionmaker):
    """Count rows of a model in a short-lived session."""

    def _count(model, *criteria) -> int:
        with session_factory() as session:
            query = select(func.count()).select_from(model)
            if criteria:
                query = query.where(*criteria)
            return session.execute(query).scalar_one()

    return _count


@pytest.fixture
def load_document(uow: SqlAlchemyUnitOfWork):
    """Reload a document (with services and generated job) by id."""

    def _load(document_id) -> Document:
        with uow:
            return uow.documents.get(document_id)

    return _load


@pytest.fixture(scope="function")
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    """TestClient with the unit of work and session bound to the test database."""
    from cleanflow.main import app

    def _get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_unit_of_work] = lambda: SqlAlchemyUnitOfWork(session_factory)
    app.dependency_overrides[get_db] = _get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
