"""Integration tests for the public document HTTP endpoints"""

from datetime import timedelta

from cleanflow.domain.documents import DocumentKind, DocumentStatus
from cleanflow.models import Job, utc_now
from cleanflow.public_access.token_issuer import generate_public_token


def url(kind, token, action=None):
    path = f"/api/v1/public/{kind}/{token}"
    return f"{path}/{action}" if action else path


class TestViewEndpoint:
    """Test GET /api/v1/public/{kind}/{token}"""

    def test_view_returns_document_and_marks_viewed(self, client, make_document, load_document):
        document = make_document(status=DocumentStatus.SENT)

        response = client.get(url("quotation", document.public_token))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == str(document.id)
        assert data["status"] == "viewed"
        assert data["viewed_at"] is not None
        assert [s["service_name"] for s in data["services"]] == ["Office cleaning", "Window cleaning"]
        assert load_document(document.id).status == DocumentStatus.VIEWED

    def test_view_never_exposes_token_or_ip(self, client, make_document):
        document = make_document(status=DocumentStatus.SENT)

        data = client.get(url("quotation", document.public_token)).json()["data"]

        assert "public_token" not in data
        assert "signature_ip" not in data
        assert document.public_token not in client.get(url("quotation", document.public_token)).text

    def test_unknown_and_expired_links_look_identical(self, client, make_document):
        """Test an expired link returns the same 404 as an unknown one"""
        expired = make_document(expires_at=utc_now() - timedelta(days=1))

        unknown_response = client.get(url("quotation", generate_public_token()))
        expired_response = client.get(url("quotation", expired.public_token))

        assert unknown_response.status_code == expired_response.status_code == 404
        assert unknown_response.json() == expired_response.json() == {
            "error": "not_found",
            "message": "Quotation not found or link has expired",
        }

    def test_wrong_kind_is_404(self, client, make_document):
        document = make_document(kind=DocumentKind.CONTRACT)

        response = client.get(url("proposal", document.public_token))

        assert response.status_code == 404
        assert response.json()["message"] == "Proposal not found or link has expired"

    def test_unsupported_kind_is_422(self, client):
        response = client.get(url("invoice", generate_public_token()))
        assert response.status_code == 422

    def test_request_id_is_echoed(self, client, make_document):
        document = make_document()

        response = client.get(url("quotation", document.public_token), headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"


class TestAcceptEndpoint:
    """Test POST /api/v1/public/{kind}/{token}/accept"""

    def test_accept_returns_document_with_job(self, client, make_document):
        document = make_document(status=DocumentStatus.VIEWED)

        response = client.post(
            url("quotation", document.public_token, "accept"),
            json={"signature_name": "Jane Doe"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Quotation accepted successfully"
        assert body["data"]["status"] == "accepted"
        assert body["data"]["signature_name"] == "Jane Doe"
        job = body["data"]["generated_job"]
        assert job["job_number"] == f"WO-{utc_now().year}-0001"
        assert job["status"] == "scheduled"
        assert [t["task_name"] for t in job["tasks"]] == ["Office cleaning", "Window cleaning"]

    def test_accept_records_forwarded_ip(self, client, make_document, load_document):
        document = make_document(status=DocumentStatus.VIEWED)

        client.post(
            url("quotation", document.public_token, "accept"),
            json={"signature_name": "Jane Doe"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        )

        assert load_document(document.id).signature_ip == "203.0.113.7"

    def test_accept_expired_link_is_410(self, client, make_document, count_rows):
        document = make_document(expires_at=utc_now() - timedelta(minutes=1))

        response = client.post(
            url("quotation", document.public_token, "accept"),
            json={"signature_name": "Jane Doe"},
        )

        assert response.status_code == 410
        assert response.json() == {
            "error": "link_expired",
            "message": "This quotation link has expired",
        }
        assert count_rows(Job) == 0

    def test_accept_rejected_document_is_409(self, client, make_document):
        document = make_document(status=DocumentStatus.REJECTED)

        response = client.post(
            url("quotation", document.public_token, "accept"),
            json={"signature_name": "Jane Doe"},
        )

        assert response.status_code == 409
        assert response.json() == {
            "error": "not_actionable",
            "message": "This quotation can no longer be accepted",
        }

    def test_accept_unknown_token_is_404(self, client):
        response = client.post(
            url("contract", generate_public_token(), "accept"),
            json={"signature_name": "Jane Doe"},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "message": "Contract not found"}

    def test_accept_requires_signature_name(self, client, make_document):
        document = make_document()

        for body in ({}, {"signature_name": ""}, {"signature_name": "   "}, {"signature_name": "x" * 201}):
            response = client.post(url("quotation", document.public_token, "accept"), json=body)
            assert response.status_code == 422
            assert response.json()["error"] == "validation_error"

    def test_accept_twice_returns_same_job(self, client, make_document, count_rows):
        document = make_document(status=DocumentStatus.VIEWED)
        accept_url = url("quotation", document.public_token, "accept")

        first = client.post(accept_url, json={"signature_name": "Jane Doe"}).json()
        second = client.post(accept_url, json={"signature_name": "Jane Doe"})

        assert second.status_code == 200
        assert second.json()["data"]["generated_job"]["id"] == first["data"]["generated_job"]["id"]
        assert count_rows(Job) == 1


class TestRejectEndpoint:
    """Test POST /api/v1/public/{kind}/{token}/reject"""

    def test_reject_returns_document(self, client, make_document):
        document = make_document(status=DocumentStatus.SENT)

        response = client.post(
            url("quotation", document.public_token, "reject"),
            json={"rejection_reason": "Budget was cut"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Quotation rejected"
        assert body["data"]["status"] == "rejected"
        assert body["data"]["rejection_reason"] == "Budget was cut"
        assert body["data"]["generated_job"] is None

    def test_reject_after_accept_is_409(self, client, make_document):
        document = make_document(status=DocumentStatus.VIEWED)
        client.post(url("quotation", document.public_token, "accept"), json={"signature_name": "Jane Doe"})

        response = client.post(
            url("quotation", document.public_token, "reject"),
            json={"rejection_reason": "Changed my mind"},
        )

        assert response.status_code == 409
        assert response.json()["message"] == "This quotation can no longer be rejected"

    def test_reject_requires_reason(self, client, make_document):
        document = make_document()

        response = client.post(url("quotation", document.public_token, "reject"), json={})

        assert response.status_code == 422


class TestHealthEndpoint:

    def test_health_reports_database(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["components"]["database"]["status"] == "healthy"
