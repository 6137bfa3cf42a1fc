from datetime import date

import pytest

from auto_invoice.extractor import extract_text_from_pdf_bytes, parse_archived_invoice, scan_archive
from auto_invoice.models import Company, DeliveryOutcome, ServiceLine
from auto_invoice.renderer import format_invoice_number, render_invoice_pdf
from auto_invoice.storage import DirectoryArtifactStore

COMPANY = Company(name="TechOps LLC", details=["123 Market Street", "San Francisco, CA"])
SERVICES = [
    ServiceLine(description="Support", period="March 2026", quantity=2, unit_price=100.0, tax_rate=0.1),
    ServiceLine(description="Hosting", quantity=1, unit_price=50.0, tax_rate=0.0),
]


def _render(number=7, services=SERVICES):
    return render_invoice_pdf(
        number,
        COMPANY,
        "Acme Corp",
        ["1 Acme Way", "Springfield"],
        ["IBAN: XX00 1234"],
        services,
        issued_on=date(2026, 3, 1),
    )


def test_format_invoice_number():
    assert format_invoice_number(7) == "0007"
    assert format_invoice_number(12345) == "12345"


def test_render_produces_pdf_with_invoice_content():
    pdf_bytes = _render()
    assert pdf_bytes.startswith(b"%PDF")

    parsed = parse_archived_invoice("sent/techops-invoice-7.pdf", pdf_bytes)
    assert parsed.invoice_number == 7
    assert parsed.outcome == "sent"
    assert parsed.subtotal == pytest.approx(250.0)
    assert parsed.tax == pytest.approx(20.0)
    assert parsed.total == pytest.approx(270.0)


def test_render_rejects_non_positive_number():
    with pytest.raises(ValueError):
        _render(number=0)


def test_render_without_services():
    parsed = parse_archived_invoice("failed/techops-invoice-3.pdf", _render(number=3, services=[]))
    assert parsed.total == pytest.approx(0.0)


def test_scan_archive_by_outcome(tmp_path):
    archive = DirectoryArtifactStore(tmp_path)
    archive.put("sent/techops-invoice-8.pdf", _render(number=8))
    archive.put("failed/techops-invoice-9.pdf", _render(number=9))

    everything = scan_archive(archive)
    assert [(i.outcome, i.invoice_number) for i in everything] == [("sent", 8), ("failed", 9)]

    failed = scan_archive(archive, DeliveryOutcome.FAILED)
    assert [i.path for i in failed] == ["failed/techops-invoice-9.pdf"]


def test_render_non_latin1_text():
    pdf_bytes = render_invoice_pdf(
        11,
        COMPANY,
        "Globex — EMEA",
        ["Рога и Копыта", "Αθήνα"],
        ["Amount due in €, IBAN DE00"],
        [ServiceLine(description="Support – Q1", quantity=1, unit_price=10.0, tax_rate=0.0)],
        issued_on=date(2026, 3, 1),
    )

    text = extract_text_from_pdf_bytes(pdf_bytes)
    assert "Globex — EMEA" in text
    assert "Рога и Копыта" in text
    assert "Αθήνα" in text
    assert "Amount due in €, IBAN DE00" in text
    assert "Support – Q1" in text
