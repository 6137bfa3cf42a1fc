import base64
from datetime import datetime
from typing import Any

import requests

from auto_invoice.config import Settings
from auto_invoice.mailer import MailPaceMailer


class DummyResp:
    def __init__(self, status_code: int = 200, text: str = "{}"):
        self.status_code = status_code
        self._text = text

    @property
    def text(self) -> str:
        return self._text


def test_send_invoice_email_payload(monkeypatch, settings):
    captured: dict = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(url=url, headers=headers, json=json, timeout=timeout)
        return DummyResp(200)

    monkeypatch.setattr("requests.post", fake_post)

    mailer = MailPaceMailer(settings)
    ok = mailer.send_invoice_email(
        b"%PDF-1.4 bytes",
        ["ap@acme.test", "cto@acme.test"],
        ["cfo@acme.test"],
        1001,
        now=datetime(2026, 3, 15),
    )

    assert ok is True
    assert captured["url"] == "https://app.mailpace.com/api/v1/send"
    assert captured["headers"]["MailPace-Server-Token"] == "token-123"
    assert captured["headers"]["Content-Type"] == "application/json"
    assert captured["timeout"] == 30.0

    msg: Any = captured["json"]
    assert msg["from"] == "billing@techops.test"
    assert msg["to"] == "ap@acme.test, cto@acme.test"
    assert msg["cc"] == "cfo@acme.test"
    assert msg["bcc"] == "billing@techops.test"
    assert msg["subject"] == "Invoice for March 2026"
    assert "invoice for March 2026" in msg["textbody"]
    assert msg["textbody"].endswith("Santiago")

    (attachment,) = msg["attachments"]
    assert attachment["name"] == "techops-invoice-1001.pdf"
    assert attachment["content_type"] == "application/pdf"
    assert base64.b64decode(attachment["content"]) == b"%PDF-1.4 bytes"


def test_non_200_is_a_failure(monkeypatch, settings):
    monkeypatch.setattr("requests.post", lambda *a, **k: DummyResp(202, "queued"))
    assert MailPaceMailer(settings).send_invoice_email(b"%PDF", ["a@b.test"], [], 1) is False


def test_transport_error_is_a_failure(monkeypatch, settings):
    def fake_post(*args, **kwargs):
        raise requests.Timeout("timed out")

    monkeypatch.setattr("requests.post", fake_post)
    assert MailPaceMailer(settings).send_invoice_email(b"%PDF", ["a@b.test"], [], 1) is False


def test_missing_credentials_never_calls_provider(monkeypatch):
    calls = []
    monkeypatch.setattr("requests.post", lambda *a, **k: calls.append(a) or DummyResp(200))

    mailer = MailPaceMailer(Settings(from_email="billing@techops.test"))

    assert mailer.send_invoice_email(b"%PDF", ["a@b.test"], [], 1) is False
    assert mailer.send_system_error_notification("boom") is False
    assert calls == []


def test_invoice_error_notification(monkeypatch, settings):
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(json)
        return DummyResp(200)

    monkeypatch.setattr("requests.post", fake_post)

    assert MailPaceMailer(settings).send_error_notification("font missing", 1001, "Acme Corp") is True
    assert captured["to"] == "billing@techops.test"
    assert captured["subject"] == "Invoice Generation Error - Invoice 1001"
    assert "invoice 1001 (Acme Corp)" in captured["textbody"]
    assert "Error: font missing" in captured["textbody"]


def test_system_error_notification_survives_provider_outage(monkeypatch, settings):
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr("requests.post", fake_post)
    assert MailPaceMailer(settings).send_system_error_notification("disk full") is False


def test_system_error_notification_message(monkeypatch, settings):
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(json)
        return DummyResp(200)

    monkeypatch.setattr("requests.post", fake_post)

    MailPaceMailer(settings).send_system_error_notification("disk full")
    assert captured["subject"] == "Critical System Error - Invoice Worker"
    assert "Error: disk full" in captured["textbody"]
    assert "stopped execution" in captured["textbody"]


def test_settings_from_env():
    s = Settings.from_env(
        {
            "FROM_EMAIL": "me@x.test",
            "MAILPACE_API_TOKEN": "t",
            "AUTO_INVOICE_ARTIFACT_PREFIX": "acme",
            "AUTO_INVOICE_HTTP_TIMEOUT": "5",
        }
    )
    assert s.from_email == "me@x.test"
    assert s.artifact_name == "acme-invoice"
    assert s.http_timeout == 5.0
    assert s.state_dir == "state"
