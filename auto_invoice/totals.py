# auto_invoice/totals.py
from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel

from .models import ServiceLine


class InvoiceTotals(BaseModel):
    subtotal: float
    total_tax: float

    @property
    def grand_total(self) -> float:
        return self.subtotal + self.total_tax


def compute_totals(services: Iterable[ServiceLine]) -> InvoiceTotals:
    """Sum one client's service lines.

    Values are kept unrounded; use :func:`format_money` for display only.
    """
    subtotal = 0.0
    total_tax = 0.0
    for service in services:
        subtotal += service.line_total
        total_tax += service.tax
    return InvoiceTotals(subtotal=subtotal, total_tax=total_tax)


def format_money(amount: float, symbol: str = "$") -> str:
    return f"{symbol} {amount:.2f}"
