"""Integration tests for the SQLAlchemy unit of work"""

import pytest

from cleanflow.conversion.pipeline import accept_document
from cleanflow.domain.documents import DocumentStatus


class TestSqlAlchemyUnitOfWork:
    """Test transaction scoping of the unit of work"""

    def test_nested_entry_is_rejected(self, uow):
        with uow:
            with pytest.raises(RuntimeError):
                uow.__enter__()

    def test_uncommitted_changes_are_discarded(self, uow, make_document, load_document):
        document = make_document(status=DocumentStatus.SENT)

        with uow:
            stored = uow.documents.get(document.id)
            stored.status = DocumentStatus.VIEWED

        assert load_document(document.id).status == DocumentStatus.SENT

    def test_each_entry_is_a_fresh_transaction(self, uow, make_document, load_document):
        document = make_document(status=DocumentStatus.SENT)

        with uow:
            uow.documents.get(document.id).status = DocumentStatus.VIEWED
            uow.commit()
        with uow:
            assert uow.documents.get(document.id).status == DocumentStatus.VIEWED

    def test_get_by_token_eager_loads_relationships(self, uow, make_document):
        document = make_document()

        with uow:
            loaded = uow.documents.get_by_token(document.public_token, for_update=True)

        # Session is closed; loaded relationships stay usable
        assert len(loaded.services) == 2
        assert loaded.generated_job is None

    def test_results_survive_session_close(self, uow, make_document):
        document = make_document()

        with uow:
            loaded = uow.documents.get(document.id)

        assert loaded.title == document.title
        assert uow.session is None

    def test_job_lookup_by_source_document(self, uow, make_document, now):
        document = make_document(status=DocumentStatus.VIEWED)
        accept_document(uow, document.public_token, "Jane Doe", "203.0.113.7", now=now)

        with uow:
            job = uow.jobs.get_by_source_document(document.id)
            actions = [entry.action for entry in job.activities]

        assert job.job_number == "WO-2026-0001"
        assert len(job.tasks) == 2
        assert actions == ["job_created"]
