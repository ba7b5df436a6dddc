"""
Contact form delivery through Postmark.
"""
from types import SimpleNamespace

import pytest

from services.email_service import email_service

FORM = {
    "name": "Grace Hopper",
    "email": "grace@example.com",
    "reason": "Billing",
    "message": "Please send my <invoice>.",
}


class FakeEmails:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, **kwargs):
        if self.fail:
            raise RuntimeError("Postmark rejected the message")
        self.sent.append(kwargs)
        return {"MessageID": "pm-1", "ErrorCode": 0}


@pytest.fixture
def postmark(monkeypatch):
    def install(fail=False):
        emails = FakeEmails(fail)
        monkeypatch.setattr(email_service, "client", SimpleNamespace(emails=emails))
        return emails
    return install


@pytest.fixture
def no_postmark(monkeypatch):
    monkeypatch.setattr(email_service, "client", None)


class TestContactForm:
    @pytest.mark.parametrize("missing", ["name", "email", "reason", "message"])
    def test_missing_field(self, client, missing, no_postmark):
        form = {**FORM, missing: "  "}
        response = client.post("/api/contact", json=form)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    def test_non_object_body(self, client, no_postmark):
        response = client.post("/api/contact", json=["not", "an", "object"])
        assert response.status_code == 400

    def test_without_postmark_token_message_is_logged(self, client, fake_db, no_postmark):
        response = client.post("/api/contact", json=FORM)

        assert response.status_code == 200
        assert response.json() == {"message": "Email sent successfully"}
        record = fake_db.contact_messages.docs[0]
        assert record["status"] == "logged"
        assert record["postmark_message_id"] is None

    def test_delivered_through_postmark(self, client, fake_db, postmark):
        """The message goes to the support inbox with the sender as reply-to."""
        emails = postmark()
        response = client.post("/api/contact", json=FORM)

        assert response.status_code == 200
        sent = emails.sent[0]
        assert sent["Subject"] == "Contact Us - Billing"
        assert sent["ReplyTo"] == "grace@example.com"
        assert sent["Tag"] == "contact"
        assert "&lt;invoice&gt;" in sent["HtmlBody"]
        assert "Name: Grace Hopper" in sent["TextBody"]

        record = fake_db.contact_messages.docs[0]
        assert record["status"] == "sent"
        assert record["postmark_message_id"] == "pm-1"
        assert any(a["action"] == "CONTACT_MESSAGE" for a in fake_db.audit_logs.docs)

    def test_postmark_failure(self, client, fake_db, postmark):
        postmark(fail=True)
        response = client.post("/api/contact", json=FORM)

        assert response.status_code == 500
        assert response.json() == {"error": "Postmark rejected the message"}
        record = fake_db.contact_messages.docs[0]
        assert record["status"] == "failed"
        assert record["error"] == "Postmark rejected the message"

    def test_rate_limited_per_sender(self, client, no_postmark):
        """Five messages per 15 minutes per email address."""
        for _ in range(5):
            assert client.post("/api/contact", json=FORM).status_code == 200

        response = client.post("/api/contact", json=FORM)
        assert response.status_code == 429
        assert response.json()["error"].startswith("Rate limit exceeded")

        other = {**FORM, "email": "someone@example.com"}
        assert client.post("/api/contact", json=other).status_code == 200
