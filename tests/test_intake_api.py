from __future__ import annotations

import json
import re
import sys
from email.message import EmailMessage
from pathlib import Path

import aiosmtplib
import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.core.settings import Settings


class RecordingTransport:
    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []
        self.failures: dict[str, Exception] = {}

    async def send(self, message: EmailMessage) -> None:
        error = self.failures.get(message["To"])
        if error is not None:
            raise error
        self.sent.append(message)

    @property
    def recipients(self) -> list[str]:
        return [message["To"] for message in self.sent]


def _settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "environment": "test",
        "data_file": tmp_path / "storage.json",
        "smtp_user": "sales@websutech.com",
        "smtp_password": "secret",
        "ops_email": "ops@websutech.com",
        "cors_origins": ["http://localhost:3000"],
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def client(tmp_path, transport):
    from backend.app import create_app

    app = create_app(_settings(tmp_path), mail_transport=transport)
    with TestClient(app) as test_client:
        yield test_client


CONTACT = {
    "name": "Ada Buyer",
    "email": "Ada@Example.com",
    "subject": "Diesel pricing",
    "message": "Please send your latest EN590 price list.",
    "category": "sales",
}

BUYER = {
    "companyName": "Acme Energy",
    "contactPerson": "Ada Buyer",
    "email": "ada@example.com",
    "phone": "+442071234567",
    "country": "UK",
    "productCategory": "petroleum",
    "specificProduct": "EN590 Diesel",
    "quantity": "50,000 MT",
    "ndaAgreed": True,
}

SELLER = {
    "companyName": "Gulf Refining",
    "contactPerson": "Sam Seller",
    "email": "sam@example.com",
    "phone": "97141234567",
    "productDescription": "Jet A1",
    "quantityAvailable": "100,000 BBL",
}

MANDATE = {
    "companyName": "Bridge Partners",
    "contactPerson": "Max Mandate",
    "email": "max@example.com",
    "country": "Nigeria",
}


def test_contact_submission_is_stored_and_acknowledged(client, transport):
    response = client.post("/api/contact/submit", json=CONTACT)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["emailSent"] is True
    assert body["nextSteps"]
    message_id = body["messageId"]
    assert re.fullmatch(r"CONTACT-\d+-[0-9a-f]{8}", message_id)

    assert transport.recipients == ["ada@example.com", "ops@websutech.com"]
    repository = client.app.state.repository
    stored = repository.get("contacts", message_id)
    assert stored["email"] == "ada@example.com"
    assert stored["status"] == "new"
    assert stored["category"] == "sales"


def test_duplicate_contact_returns_original_id(client, transport):
    first = client.post("/api/contact/submit", json=CONTACT).json()
    second = client.post("/api/contact/submit", json=CONTACT).json()

    assert second["success"] is True
    assert second["duplicate"] is True
    assert second["messageId"] == first["messageId"]
    assert second["message"] == "Your message was already received successfully!"
    assert client.app.state.repository.stats()["totalContacts"] == 1
    assert len(transport.sent) == 2


def test_contact_validation_errors(client, transport):
    payload = {**CONTACT, "name": "A", "email": "not-an-email", "category": "gossip"}

    response = client.post("/api/contact/submit", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    fields = {item["field"] for item in body["errors"]}
    assert {"name", "email", "category"} <= fields
    assert transport.sent == []
    assert client.app.state.repository.stats()["totalContacts"] == 0


def test_non_object_body_is_rejected(client):
    response = client.post("/api/contact/submit", json=["not", "an", "object"])

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_operations_alert_failure_still_succeeds(client, transport):
    transport.failures["ops@websutech.com"] = aiosmtplib.SMTPServerDisconnected("gone")

    response = client.post("/api/inquiries/buyer", json=BUYER)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert transport.recipients == ["ada@example.com"]


def test_acknowledgment_failure_returns_500_but_keeps_record(client, transport):
    transport.failures["ada@example.com"] = aiosmtplib.SMTPAuthenticationError(535, "bad credentials")

    response = client.post("/api/inquiries/buyer", json=BUYER)

    assert response.status_code == 500
    body = response.json()
    assert body == {"success": False, "message": "Failed to submit buyer inquiry"}
    assert client.app.state.repository.stats()["totalInquiries"] == 1
    assert transport.recipients == ["ops@websutech.com"]


def test_development_errors_include_detail(tmp_path, transport):
    from backend.app import create_app

    transport.failures["ada@example.com"] = aiosmtplib.SMTPAuthenticationError(535, "bad credentials")
    app = create_app(_settings(tmp_path, environment="development"), mail_transport=transport)
    with TestClient(app) as test_client:
        response = test_client.post("/api/contact/submit", json=CONTACT)

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to send contact message"
    assert "error" in response.json()


def test_dev_mode_without_smtp_credentials(tmp_path, transport):
    from backend.app import create_app

    app = create_app(_settings(tmp_path, smtp_user=None, smtp_password=None), mail_transport=transport)
    with TestClient(app) as test_client:
        response = test_client.post("/api/contact/newsletter", json={"email": "reader@example.com"})
        subscription_id = response.json()["subscriptionId"]
        stored = app.state.repository.get("users", subscription_id)

    assert response.status_code == 200
    assert subscription_id.startswith("NEWS-")
    assert stored["email"] == "reader@example.com"
    assert transport.sent == []


def test_newsletter_subscription_creates_user(client, transport):
    response = client.post("/api/contact/newsletter", json={"email": "Reader@Example.com", "name": "Reader"})

    assert response.status_code == 200
    subscription_id = response.json()["subscriptionId"]
    user = client.app.state.repository.get("users", subscription_id)
    assert user["email"] == "reader@example.com"
    assert user["type"] == "newsletter"
    assert user["active"] is True
    assert user["subscribedAt"]
    assert transport.sent[0]["Subject"] == "Welcome to the Websutech Newsletter"


def test_buyer_inquiry_status_projection(client):
    payload = {**BUYER, "specificProduct": None, "specificProducts": ["EN590 Diesel", "Jet A1"], "ndaAgreed": "true"}
    inquiry_id = client.post("/api/inquiries/buyer", json=payload).json()["inquiryId"]
    assert inquiry_id.startswith("BUY-")

    response = client.get(f"/api/inquiries/status/{inquiry_id}")

    assert response.status_code == 200
    inquiry = response.json()["inquiry"]
    assert inquiry == {
        "id": inquiry_id,
        "kind": "buyer",
        "status": "new",
        "createdAt": inquiry["createdAt"],
        "product": "EN590 Diesel; Jet A1",
        "company": "Acme Energy",
    }
    assert "email" not in inquiry


@pytest.mark.parametrize(
    ("changes", "field"),
    [
        ({"ndaAgreed": False}, "ndaAgreed"),
        ({"phone": "0123"}, "phone"),
        ({"productCategory": "grain"}, "productCategory"),
        ({"specificProduct": ""}, "payload"),
    ],
)
def test_buyer_inquiry_validation(client, changes, field):
    response = client.post("/api/inquiries/buyer", json={**BUYER, **changes})

    assert response.status_code == 400
    assert field in [item["field"] for item in response.json()["errors"]]


def test_seller_and_mandate_inquiries(client, transport):
    seller = client.post("/api/inquiries/seller", json=SELLER)
    mandate = client.post("/api/inquiries/mandate", json=MANDATE)

    assert seller.status_code == 200
    assert mandate.status_code == 200
    seller_id = seller.json()["inquiryId"]
    mandate_id = mandate.json()["mandateId"]
    assert seller_id.startswith("SELL-")
    assert mandate_id.startswith("MANDATE-")

    assert client.get(f"/api/inquiries/status/{seller_id}").json()["inquiry"]["product"] == "Jet A1"
    assert client.get(f"/api/inquiries/status/{mandate_id}").json()["inquiry"]["status"] == "pending_review"

    service = client.app.state.intake_service
    assert [item["id"] for item in service.list_inquiries(status="pending_review")] == [mandate_id]
    assert [item["id"] for item in service.list_inquiries(kind="seller")] == [seller_id]


def test_mandate_requires_contact_details(client):
    response = client.post("/api/inquiries/mandate", json={"companyName": "Bridge Partners"})

    assert response.status_code == 400
    fields = [item["field"] for item in response.json()["errors"]]
    assert "contactPerson" in fields
    assert "email" in fields


def test_inquiry_listing_is_newest_first_and_limited(client):
    ids = [client.post("/api/inquiries/seller", json=SELLER).json()["inquiryId"] for _ in range(3)]

    listing = client.app.state.intake_service.list_inquiries(limit=2)

    assert len(listing) == 2
    created = [item["createdAt"] for item in listing]
    assert created == sorted(created, reverse=True)
    assert set(item["id"] for item in listing) <= set(ids)


def test_inquiries_are_not_listed_publicly(client):
    client.post("/api/inquiries/seller", json=SELLER)

    response = client.get("/api/inquiries")

    assert response.status_code == 404
    assert "Gulf Refining" not in response.text


def test_unknown_inquiry_returns_404(client):
    response = client.get("/api/inquiries/status/BUY-0-missing")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Inquiry not found"}


def test_records_survive_restart(tmp_path, transport):
    from backend.app import create_app

    settings = _settings(tmp_path)
    with TestClient(create_app(settings, mail_transport=transport)) as first:
        inquiry_id = first.post("/api/inquiries/buyer", json=BUYER).json()["inquiryId"]

    snapshot = json.loads(settings.data_file.read_text(encoding="utf-8"))
    assert inquiry_id in snapshot["inquiries"]

    with TestClient(create_app(settings, mail_transport=transport)) as second:
        response = second.get(f"/api/inquiries/status/{inquiry_id}")
    assert response.status_code == 200
    assert response.json()["inquiry"]["company"] == "Acme Energy"


def test_document_catalog_and_requests(client):
    listing = client.get("/api/documents/list").json()
    assert set(listing["documents"]) == {"ndas", "agreements", "compliance", "company"}

    category = client.get("/api/documents/category/compliance").json()
    assert [doc["id"] for doc in category["documents"]] == ["kyc-policy", "aml-policy", "sanctions-policy"]
    assert client.get("/api/documents/category/recipes").status_code == 404

    response = client.post(
        "/api/documents/request/kyc-policy",
        json={"name": "Ada Buyer", "email": "ada@example.com", "company": "Acme Energy"},
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["document"] == "KYC Policy"
    assert body["reference"].startswith("DOC-")

    stored = client.app.state.repository.get("documents", body["reference"])
    assert stored["requesterEmail"] == "ada@example.com"
    assert stored["clientIp"] == "203.0.113.7"

    missing = client.post("/api/documents/request/unknown", json={"name": "Ada", "email": "ada@example.com"})
    assert missing.status_code == 404
    assert missing.json()["message"] == "Document not found"


def test_security_log_accepts_events(client):
    response = client.post("/api/security/log", json={"type": "xss_attempt", "message": "x" * 5000})

    assert response.status_code == 201
    assert response.json()["success"] is True


def test_health_stats_and_test_endpoints(client):
    health = client.get("/api/health").json()
    assert health["status"] == "healthy"
    assert health["uptime"] >= 0
    assert health["timestamp"].endswith("Z")

    client.post("/api/contact/submit", json=CONTACT)
    stats = client.get("/api/stats").json()["stats"]
    assert stats["totalContacts"] == 1

    for prefix in ("contact", "inquiries", "documents", "security"):
        assert client.get(f"/api/{prefix}/test").json()["success"] is True
    assert client.get("/").json()["health"] == "/api/health"


class FakeClock:
    def __init__(self) -> None:
        self.now = 500.0

    def __call__(self) -> float:
        return self.now


def test_line_breaks_in_subject_do_not_fail_the_request(client, transport):
    response = client.post("/api/contact/submit", json={**CONTACT, "subject": "Pricing\nfor EN590"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert transport.recipients == ["ada@example.com", "ops@websutech.com"]
    assert transport.sent[1]["Subject"] == "New Contact Message: Pricing for EN590"


def test_line_breaks_in_acknowledgment_subject_values(client, transport):
    response = client.post("/api/inquiries/buyer", json={**BUYER, "specificProduct": "EN590\r\nDiesel"})

    assert response.status_code == 200
    assert "\n" not in transport.sent[0]["Subject"]


def test_each_submission_gets_a_distinct_id(client):
    ids = [client.post("/api/inquiries/buyer", json=BUYER).json()["inquiryId"] for _ in range(5)]

    assert len(set(ids)) == 5
    repository = client.app.state.repository
    assert all(repository.get("inquiries", inquiry_id) is not None for inquiry_id in ids)


def test_contact_resubmitted_after_window_is_stored_again(client, transport):
    clock = FakeClock()
    client.app.state.duplicate_filter.clock = clock

    first = client.post("/api/contact/submit", json=CONTACT).json()
    clock.now += 6
    second = client.post("/api/contact/submit", json=CONTACT).json()

    assert "duplicate" not in second
    assert second["messageId"] != first["messageId"]
    repository = client.app.state.repository
    assert repository.get("contacts", first["messageId"]) is not None
    assert repository.get("contacts", second["messageId"]) is not None
    assert len(transport.sent) == 4


def test_error_detail_hidden_unless_development(tmp_path, transport, monkeypatch):
    from backend.app import create_app

    monkeypatch.delenv("APP_ENV", raising=False)
    settings = Settings.from_env()
    settings.data_file = tmp_path / "storage.json"
    settings.smtp_user = "sales@websutech.com"
    settings.smtp_password = "secret"
    assert settings.environment == "production"

    transport.failures["ada@example.com"] = aiosmtplib.SMTPAuthenticationError(535, "bad credentials")
    app = create_app(settings, mail_transport=transport)
    with TestClient(app) as test_client:
        response = test_client.post("/api/contact/submit", json=CONTACT)

    assert response.status_code == 500
    assert "error" not in response.json()
