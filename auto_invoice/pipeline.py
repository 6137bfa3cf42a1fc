# auto_invoice/pipeline.py
"""One scheduled invoice run.

validate config -> reserve one block of numbers -> for each client:
render -> send -> archive under ``sent/`` or ``failed/``.

Only a bad config or a counter failure stops the run, and both stop it
before any client is touched. Everything after the reservation is local to
one client: a render failure alerts the operator, a send failure is
archived under ``failed/`` for manual follow-up, an archive failure is
logged. Numbers are never handed back.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from .allocator import reserve
from .config import Settings
from .errors import ConfigurationError
from .models import Client, Company, DeliveryOutcome, DeliveryResult, RunReport
from .renderer import render_invoice_pdf
from .storage import artifact_path
from .validator import parse_config

logger = logging.getLogger(__name__)

Renderer = Callable[..., bytes]


def store_invoice(archive, settings: Settings, outcome: DeliveryOutcome, invoice_number: int,
                  pdf_content: bytes) -> Optional[str]:
    """Archive the PDF; failures are logged and never raised."""
    path = artifact_path(outcome, settings.artifact_name, invoice_number)
    try:
        archive.put(path, pdf_content)
    except Exception as e:
        logger.error("Failed to store invoice %s at %s: %s", invoice_number, path, e)
        return None
    logger.info("Stored **%s** invoice %s at %s", outcome.value, invoice_number, path)
    return path


def deliver_invoice(
    client: Client,
    invoice_number: int,
    company: Company,
    mailer,
    archive,
    settings: Settings,
    renderer: Renderer = render_invoice_pdf,
    now: Optional[datetime] = None,
) -> DeliveryResult:
    now = now or datetime.now()

    try:
        pdf_bytes = renderer(
            invoice_number,
            company,
            client.name,
            client.details,
            client.payment_details,
            client.services,
            issued_on=now.date(),
            due_days=settings.due_days,
        )
    except Exception as e:
        logger.exception("Failed to generate PDF for invoice %s (%s)", invoice_number, client.name)
        mailer.send_error_notification(str(e), invoice_number, client.name)
        return DeliveryResult(
            client_name=client.name,
            invoice_number=invoice_number,
            outcome="render_failed",
            error=str(e),
        )

    error: Optional[str] = None
    try:
        sent = mailer.send_invoice_email(
            pdf_bytes, client.email_to, client.email_cc, invoice_number, now=now
        )
    except Exception as e:
        sent = False
        error = str(e)

    if sent:
        logger.info("Successfully sent invoice %s for %s.", invoice_number, client.name)
        outcome = DeliveryOutcome.SENT
    else:
        logger.error(
            "Failed to send invoice %s for %s. The invoice number has been used and will not be reused.",
            invoice_number,
            client.name,
        )
        outcome = DeliveryOutcome.FAILED
        error = error or "email provider did not accept the message"

    path = store_invoice(archive, settings, outcome, invoice_number, pdf_bytes)
    return DeliveryResult(
        client_name=client.name,
        invoice_number=invoice_number,
        outcome=outcome.value,
        artifact_path=path,
        error=error,
    )


def run_batch(
    raw_config: Mapping[str, Any],
    counter_store,
    archive,
    mailer,
    settings: Settings,
    renderer: Renderer = render_invoice_pdf,
    now: Optional[datetime] = None,
    max_workers: Optional[int] = None,
) -> RunReport:
    try:
        config = parse_config(raw_config)
    except ConfigurationError as e:
        logger.error("%s", e)
        return RunReport(status="config_error", errors=e.errors)

    try:
        reservation = reserve(counter_store, len(config.clients))
    except Exception as e:
        message = (
            f"Failed to reserve invoice numbers: {e}. "
            "Cannot proceed to prevent duplicate invoice numbers."
        )
        logger.error(message)
        mailer.send_system_error_notification(message)
        return RunReport(status="counter_error", errors=[message])

    now = now or datetime.now()
    jobs = list(zip(config.clients, reservation.numbers()))

    def _deliver(job) -> DeliveryResult:
        client, number = job
        return deliver_invoice(client, number, config.company, mailer, archive, settings,
                               renderer=renderer, now=now)

    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results: List[DeliveryResult] = list(pool.map(_deliver, jobs))
    else:
        results = [_deliver(job) for job in jobs]

    sent = sum(1 for r in results if r.outcome == DeliveryOutcome.SENT.value)
    logger.info(
        "Run finished: invoices %d-%d, %d sent, %d not sent",
        reservation.start,
        reservation.end,
        sent,
        len(results) - sent,
    )
    return RunReport(status="ok", reservation=reservation, results=results)
