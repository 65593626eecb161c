"""Integration tests for token resolution and view tracking"""

from datetime import datetime, timedelta, timezone

from cleanflow.audit.service import list_activities
from cleanflow.domain.documents import DocumentKind, DocumentStatus
from cleanflow.models import ActivityEntityType
from cleanflow.public_access.gateway import mark_viewed, resolve_by_token
from cleanflow.public_access.token_issuer import generate_public_token


class TestResolveByToken:
    """Test that every failure mode resolves to None"""

    def test_live_token_resolves_with_services(self, uow, make_document):
        document = make_document()

        resolved = resolve_by_token(uow, document.public_token)

        assert resolved.id == document.id
        assert [s.service_name for s in resolved.services] == ["Office cleaning", "Window cleaning"]
        assert resolved.generated_job is None

    def test_unknown_token_is_none(self, uow, make_document):
        make_document()
        assert resolve_by_token(uow, generate_public_token()) is None

    def test_malformed_token_is_none(self, uow):
        assert resolve_by_token(uow, "not-a-token") is None
        assert resolve_by_token(uow, "") is None

    def test_expired_token_is_none(self, uow, make_document, now):
        """Test an expired link is indistinguishable from an unknown one"""
        document = make_document(expires_at=now - timedelta(seconds=1))
        assert resolve_by_token(uow, document.public_token, now=now) is None

    def test_token_expiring_exactly_now_is_none(self, uow, make_document, now):
        document = make_document(expires_at=now)
        assert resolve_by_token(uow, document.public_token, now=now) is None

    def test_wrong_kind_is_none(self, uow, make_document):
        document = make_document(kind=DocumentKind.CONTRACT)

        assert resolve_by_token(uow, document.public_token, kind=DocumentKind.QUOTATION) is None
        assert resolve_by_token(uow, document.public_token, kind=DocumentKind.CONTRACT) is not None

    def test_terminal_documents_still_resolve(self, uow, make_document):
        """Test resolution ignores status; customers can revisit a signed document"""
        document = make_document(status=DocumentStatus.REJECTED)
        assert resolve_by_token(uow, document.public_token).status == DocumentStatus.REJECTED


class TestMarkViewed:
    """Test the sent → viewed transition"""

    def test_first_view_moves_sent_to_viewed(self, uow, make_document, load_document, now):
        document = make_document(status=DocumentStatus.SENT)

        mark_viewed(uow, document.public_token, ip_address="203.0.113.7", now=now)

        stored = load_document(document.id)
        assert stored.status == DocumentStatus.VIEWED
        assert stored.viewed_at == now

    def test_second_view_keeps_first_timestamp(self, uow, make_document, load_document, now):
        """Test viewed_at is set exactly once"""
        document = make_document(status=DocumentStatus.SENT)

        mark_viewed(uow, document.public_token, now=now)
        mark_viewed(uow, document.public_token, now=now + timedelta(hours=3))

        stored = load_document(document.id)
        assert stored.status == DocumentStatus.VIEWED
        assert stored.viewed_at == now

    def test_first_view_is_logged_once(self, uow, make_document, now):
        document = make_document(status=DocumentStatus.SENT)

        mark_viewed(uow, document.public_token, ip_address="203.0.113.7", now=now)
        mark_viewed(uow, document.public_token, ip_address="203.0.113.7", now=now)

        entries = list_activities(uow, ActivityEntityType.DOCUMENT, document.id)
        assert [e.action for e in entries] == ["public_viewed"]
        assert entries[0].actor_description == "public viewer (203.0.113.7)"
        assert entries[0].ip_address == "203.0.113.7"

    def test_terminal_document_is_untouched(self, uow, make_document, load_document, now):
        document = make_document(status=DocumentStatus.ACCEPTED)

        mark_viewed(uow, document.public_token, now=now)

        stored = load_document(document.id)
        assert stored.status == DocumentStatus.ACCEPTED
        assert stored.viewed_at is None

    def test_expired_link_is_noop(self, uow, make_document, load_document, now):
        document = make_document(
            status=DocumentStatus.SENT,
            expires_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )

        mark_viewed(uow, document.public_token, now=now)

        stored = load_document(document.id)
        assert stored.status == DocumentStatus.SENT
        assert stored.viewed_at is None

    def test_unknown_token_is_noop(self, uow):
        mark_viewed(uow, generate_public_token())
