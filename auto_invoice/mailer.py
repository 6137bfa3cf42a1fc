# auto_invoice/mailer.py
"""MailPace transport for invoice emails and operator alerts.

Public surface:
- MailPaceMailer.send_invoice_email(...) -> bool   (True only on HTTP 200)
- MailPaceMailer.send_error_notification(...)      (per-invoice alert)
- MailPaceMailer.send_system_error_notification(...) (run halted alert)

Alerts never raise; a failed alert is logged and the run carries on.
"""
from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

import requests

from .config import Settings
from .errors import MailerConfigurationError

logger = logging.getLogger(__name__)


def invoice_subject(now: datetime) -> str:
    return f"Invoice for {now.strftime('%B')} {now.year}"


def invoice_body(now: datetime, sender_name: str) -> str:
    return (
        f"Hi.\n\nAttached to this email is the invoice for {now.strftime('%B')} {now.year}."
        f"\n\nThanks!\n\n--\n\n{sender_name}"
    )


class MailPaceMailer:
    def __init__(self, settings: Settings):
        self.settings = settings

    def require_settings(self) -> None:
        missing = [
            name
            for name, value in (
                ("FROM_EMAIL", self.settings.from_email),
                ("MAILPACE_API_TOKEN", self.settings.mailpace_api_token),
            )
            if not value
        ]
        if missing:
            raise MailerConfigurationError(
                "Missing required environment variable(s): " + ", ".join(missing)
            )

    def _post(self, message: Dict[str, Any]) -> requests.Response:
        self.require_settings()
        return requests.post(
            self.settings.mailpace_api_url,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "MailPace-Server-Token": self.settings.mailpace_api_token,
            },
            json=message,
            timeout=self.settings.http_timeout,
        )

    def attachment_name(self, invoice_number: int) -> str:
        return f"{self.settings.artifact_name}-{invoice_number}.pdf"

    def build_invoice_message(
        self,
        pdf_content: bytes,
        to_emails: Sequence[str],
        cc_emails: Sequence[str],
        invoice_number: int,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or datetime.now()
        return {
            "from": self.settings.from_email,
            "to": ", ".join(to_emails),
            "cc": ", ".join(cc_emails),
            "bcc": self.settings.from_email,
            "subject": invoice_subject(now),
            "textbody": invoice_body(now, self.settings.sender_name),
            "attachments": [
                {
                    "name": self.attachment_name(invoice_number),
                    "content": base64.b64encode(pdf_content).decode("ascii"),
                    "content_type": "application/pdf",
                }
            ],
        }

    def send_invoice_email(
        self,
        pdf_content: bytes,
        to_emails: Sequence[str],
        cc_emails: Sequence[str],
        invoice_number: int,
        now: Optional[datetime] = None,
    ) -> bool:
        """Send one invoice. Any status other than 200, or any error, is a failure."""
        message = self.build_invoice_message(pdf_content, to_emails, cc_emails, invoice_number, now)
        try:
            resp = self._post(message)
        except (requests.RequestException, MailerConfigurationError) as e:
            logger.error("Failed to send email for invoice %s: %s", invoice_number, e)
            return False

        if resp.status_code == 200:
            logger.info("Email for invoice %s sent successfully", invoice_number)
            return True

        logger.error(
            "Failed to send email for invoice %s. Status: %s, Body: %s",
            invoice_number,
            resp.status_code,
            (resp.text or "")[:500],
        )
        return False

    def _send_alert(self, message: Dict[str, Any], label: str) -> bool:
        try:
            resp = self._post(message)
        except (requests.RequestException, MailerConfigurationError) as e:
            logger.error("Failed to send %s: %s", label, e)
            return False

        if resp.status_code == 200:
            logger.info("%s sent", label.capitalize())
            return True
        logger.error("Failed to send %s (status %s)", label, resp.status_code)
        return False

    def send_error_notification(
        self, error_message: str, invoice_number: int, client_name: str
    ) -> bool:
        timestamp = datetime.now(timezone.utc).isoformat()
        message = {
            "from": self.settings.from_email,
            "to": self.settings.from_email,
            "subject": f"Invoice Generation Error - Invoice {invoice_number}",
            "textbody": (
                f"PDF generation failed for invoice {invoice_number} ({client_name}) at {timestamp}."
                f"\n\nError: {error_message}"
                "\n\nPlease investigate and manually generate the invoice if needed."
            ),
        }
        return self._send_alert(message, f"error notification for invoice {invoice_number}")

    def send_system_error_notification(self, error_message: str) -> bool:
        timestamp = datetime.now(timezone.utc).isoformat()
        message = {
            "from": self.settings.from_email,
            "to": self.settings.from_email,
            "subject": "Critical System Error - Invoice Worker",
            "textbody": (
                f"A critical system error occurred in the invoice worker at {timestamp}."
                f"\n\nError: {error_message}"
                "\n\nThe worker has stopped execution to prevent data corruption. "
                "Please investigate immediately."
            ),
        }
        return self._send_alert(message, "system error notification")


__all__ = [
    "MailPaceMailer",
    "invoice_subject",
    "invoice_body",
]
