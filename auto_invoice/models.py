# auto_invoice/models.py
from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class Company(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    details: List[str] = []


class ServiceLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    period: Optional[str] = None
    quantity: float
    unit_price: float
    tax_rate: float  # fraction, 0.1 == 10%

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price

    @property
    def tax(self) -> float:
        return self.line_total * self.tax_rate

    @property
    def total(self) -> float:
        return self.line_total + self.tax


class Client(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    details: List[str]
    email_to: List[str]
    email_cc: List[str]
    payment_details: List[str]
    services: List[ServiceLine]


class InvoiceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    company: Company
    clients: List[Client]


class Reservation(BaseModel):
    """Contiguous block of invoice numbers handed out to one batch."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    def numbers(self) -> List[int]:
        return list(range(self.start, self.end + 1))


class DeliveryOutcome(str, Enum):
    SENT = "sent"
    FAILED = "failed"


class DeliveryResult(BaseModel):
    client_name: str
    invoice_number: int
    outcome: Literal["sent", "failed", "render_failed"]
    artifact_path: Optional[str] = None
    error: Optional[str] = None


class RunReport(BaseModel):
    status: Literal["ok", "config_error", "counter_error"]
    reservation: Optional[Reservation] = None
    results: List[DeliveryResult] = []
    errors: List[str] = []

    @property
    def ok(self) -> bool:
        return self.status == "ok"
