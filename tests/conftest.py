import copy
from typing import Any, Dict, List

import pytest

from auto_invoice.config import Settings


BASE_CONFIG: Dict[str, Any] = {
    "company": {
        "name": "TechOps LLC",
        "details": ["123 Market Street", "San Francisco, CA"],
    },
    "clients": [
        {
            "name": "Acme Corp",
            "details": ["1 Acme Way"],
            "email_to": ["ap@acme.test"],
            "email_cc": ["cfo@acme.test"],
            "payment_details": ["IBAN: XX00 1234"],
            "services": [
                {"description": "Support", "period": "March", "quantity": 2, "unit_price": 100.0, "tax_rate": 0.1},
            ],
        },
        {
            "name": "Globex",
            "details": ["2 Globex Road"],
            "email_to": ["billing@globex.test", "ops@globex.test"],
            "email_cc": [],
            "payment_details": ["IBAN: XX00 5678"],
            "services": [
                {"description": "Hosting", "quantity": 1, "unit_price": 50.0, "tax_rate": 0.0},
            ],
        },
        {
            "name": "Initech",
            "details": [],
            "email_to": ["finance@initech.test"],
            "email_cc": [],
            "payment_details": [],
            "services": [],
        },
    ],
}


@pytest.fixture
def raw_config() -> Dict[str, Any]:
    return copy.deepcopy(BASE_CONFIG)


@pytest.fixture
def settings() -> Settings:
    return Settings(from_email="billing@techops.test", mailpace_api_token="token-123")


class FakeMailer:
    def __init__(self, fail_for: tuple = ()):
        # invoice numbers whose email should "fail"
        self.fail_for = set(fail_for)
        self.sent: List[int] = []
        self.invoice_alerts: List[tuple] = []
        self.system_alerts: List[str] = []

    def send_invoice_email(self, pdf_content, to_emails, cc_emails, invoice_number, now=None):
        if invoice_number in self.fail_for:
            return False
        self.sent.append(invoice_number)
        return True

    def send_error_notification(self, error_message, invoice_number, client_name):
        self.invoice_alerts.append((invoice_number, client_name, error_message))
        return True

    def send_system_error_notification(self, error_message):
        self.system_alerts.append(error_message)
        return True


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


def fake_renderer(invoice_number, company, client_name, *args, **kwargs) -> bytes:
    return f"%PDF-1.4 invoice {invoice_number} for {client_name}".encode()
