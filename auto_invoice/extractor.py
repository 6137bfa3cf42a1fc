# auto_invoice/extractor.py
"""Read archived invoices back for reconciliation.

Only understands documents produced by :mod:`auto_invoice.renderer`.
"""
from __future__ import annotations

import io
import re
from dataclasses import dataclass
from typing import List, Optional

import pdfplumber

from .models import DeliveryOutcome

INVOICE_NUMBER_RE = re.compile(r"Invoice\s*#\s*(\d+)")
FILENAME_NUMBER_RE = re.compile(r"-(\d+)\.pdf$")
SUMMARY_RE = {
    "subtotal": re.compile(r"^Subtotal\s+\$\s*([-\d.,]+)", re.M),
    "tax": re.compile(r"^Tax\s+\$\s*([-\d.,]+)", re.M),
    "total": re.compile(r"^Total\s+\$\s*([-\d.,]+)", re.M),
}


@dataclass
class ArchivedInvoice:
    path: str
    outcome: str
    invoice_number: Optional[int]
    subtotal: Optional[float] = None
    tax: Optional[float] = None
    total: Optional[float] = None


def extract_text_from_pdf_bytes(content: bytes) -> str:
    parts: List[str] = []
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        for page in pdf.pages:
            parts.append(page.extract_text() or "")
    return "\n".join(parts)


def _parse_amount(s: Optional[str]) -> Optional[float]:
    if not s:
        return None
    try:
        return float(s.replace(",", ""))
    except ValueError:
        return None


def parse_archived_invoice(path: str, content: bytes) -> ArchivedInvoice:
    text = extract_text_from_pdf_bytes(content)

    number: Optional[int] = None
    m = INVOICE_NUMBER_RE.search(text) or FILENAME_NUMBER_RE.search(path)
    if m:
        number = int(m.group(1))

    amounts = {}
    for key, pattern in SUMMARY_RE.items():
        found = pattern.search(text)
        amounts[key] = _parse_amount(found.group(1)) if found else None

    outcome = path.split("/", 1)[0] if "/" in path else ""
    return ArchivedInvoice(path=path, outcome=outcome, invoice_number=number, **amounts)


def scan_archive(archive, outcome: Optional[DeliveryOutcome] = None) -> List[ArchivedInvoice]:
    """Parse every archived PDF, optionally limited to one outcome folder."""
    prefix = f"{outcome.value}/" if outcome else ""
    invoices = [parse_archived_invoice(p, archive.get(p)) for p in archive.list(prefix)]
    return sorted(invoices, key=lambda inv: (inv.invoice_number or 0, inv.path))
