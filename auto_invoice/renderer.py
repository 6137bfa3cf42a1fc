# auto_invoice/renderer.py
from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import Optional, Sequence

from fpdf import FPDF

from .config import DEFAULT_DUE_DAYS, INVOICE_NUMBER_WIDTH
from .models import Company, ServiceLine
from .totals import compute_totals, format_money

# Services table columns (mm): Product, Quantity, Unit Price, Tax, Total
COLUMN_WIDTHS = (80, 22, 30, 28, 30)
TABLE_HEADERS = ("Product", "Quantity", "Unit Price", "Tax", "Total")
ROW_HEIGHT = 6
HEADER_FILL = (230, 230, 230)
ROW_FILL = (250, 250, 250)
PERIOD_COLOR = (128, 128, 128)

# DejaVu Sans covers Latin, Greek, Cyrillic and typographic symbols (EUR sign, dashes)
FONT_DIR = Path(__file__).resolve().parent / "fonts"
FONT_FAMILY = "DejaVuSans"
FONT_FILES = {"": "DejaVuSans.ttf", "B": "DejaVuSans-Bold.ttf"}


def format_invoice_number(invoice_number: int) -> str:
    return str(invoice_number).zfill(INVOICE_NUMBER_WIDTH)


def _format_quantity(quantity: float) -> str:
    return f"{quantity:g}"


def render_invoice_pdf(
    invoice_number: int,
    company: Company,
    client_name: str,
    client_details: Sequence[str],
    payment_details: Sequence[str],
    services: Sequence[ServiceLine] = (),
    issued_on: Optional[date] = None,
    due_days: int = DEFAULT_DUE_DAYS,
) -> bytes:
    """Render a one-client invoice and return the PDF bytes."""
    if invoice_number < 1:
        raise ValueError(f"invoice_number must be positive, got {invoice_number}")

    issued_on = issued_on or date.today()
    due_on = issued_on + timedelta(days=due_days)

    pdf = FPDF(format="A4")
    for style, filename in FONT_FILES.items():
        pdf.add_font(FONT_FAMILY, style, str(FONT_DIR / filename))
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    # --- Header ---
    pdf.set_font(FONT_FAMILY, "B", 18)
    pdf.cell(110, 10, company.name)
    pdf.cell(0, 10, f"Invoice #{format_invoice_number(invoice_number)}", align="R",
             new_x="LMARGIN", new_y="NEXT")
    pdf.set_font(FONT_FAMILY, "", 11)
    pdf.cell(0, 6, f"Issued on: {issued_on.isoformat()}", align="R", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(0, 6, f"Due by: {due_on.isoformat()}", align="R", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(8)

    # --- From / To ---
    top = pdf.get_y()
    half = (pdf.w - pdf.l_margin - pdf.r_margin) / 2
    for x, title, name, lines in (
        (pdf.l_margin, "From", company.name, company.details),
        (pdf.l_margin + half, "To", client_name, client_details),
    ):
        pdf.set_xy(x, top)
        pdf.set_font(FONT_FAMILY, "B", 11)
        pdf.cell(half, 6, title, new_x="LEFT", new_y="NEXT")
        pdf.set_font(FONT_FAMILY, "", 11)
        pdf.cell(half, 6, name, new_x="LEFT", new_y="NEXT")
        for line in lines:
            pdf.cell(half, 5, line, new_x="LEFT", new_y="NEXT")
    bottom = top + 12 + 5 * max(len(company.details), len(client_details))
    pdf.set_xy(pdf.l_margin, bottom)
    pdf.ln(10)

    # --- Services table ---
    pdf.set_fill_color(*HEADER_FILL)
    pdf.set_font(FONT_FAMILY, "B", 10)
    for width, header in zip(COLUMN_WIDTHS, TABLE_HEADERS):
        pdf.cell(width, 8, header, fill=True)
    pdf.ln(8)

    pdf.set_fill_color(*ROW_FILL)
    for row_index, service in enumerate(services):
        fill = row_index % 2 == 0
        pdf.set_font(FONT_FAMILY, "", 10)
        pdf.cell(COLUMN_WIDTHS[0], ROW_HEIGHT, service.description, fill=fill)
        pdf.cell(COLUMN_WIDTHS[1], ROW_HEIGHT, _format_quantity(service.quantity), fill=fill)
        pdf.cell(COLUMN_WIDTHS[2], ROW_HEIGHT, format_money(service.unit_price), fill=fill)
        pdf.cell(COLUMN_WIDTHS[3], ROW_HEIGHT, format_money(service.tax), fill=fill)
        pdf.cell(COLUMN_WIDTHS[4], ROW_HEIGHT, format_money(service.total), fill=fill,
                 new_x="LMARGIN", new_y="NEXT")
        # period label sits under the description
        pdf.set_font(FONT_FAMILY, "", 8)
        pdf.set_text_color(*PERIOD_COLOR)
        pdf.cell(sum(COLUMN_WIDTHS), 4, service.period or "", fill=fill, new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)
    pdf.ln(8)

    # --- Invoice summary ---
    totals = compute_totals(services)
    summary_x = pdf.l_margin + 100
    pdf.set_x(summary_x)
    pdf.set_font(FONT_FAMILY, "B", 12)
    pdf.cell(0, 8, "Invoice Summary", new_x="LMARGIN", new_y="NEXT")
    for label, amount, style in (
        ("Subtotal", totals.subtotal, ""),
        ("Tax", totals.total_tax, ""),
        ("Total", totals.grand_total, "B"),
    ):
        pdf.set_x(summary_x)
        pdf.set_font(FONT_FAMILY, style, 10)
        pdf.cell(35, 6, label)
        pdf.cell(0, 6, format_money(amount), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(10)

    # --- Payment details ---
    pdf.set_font(FONT_FAMILY, "B", 12)
    pdf.cell(0, 8, "Payment details", new_x="LMARGIN", new_y="NEXT")
    pdf.set_font(FONT_FAMILY, "", 10)
    for line in payment_details:
        pdf.cell(0, 5, line, new_x="LMARGIN", new_y="NEXT")

    return bytes(pdf.output())
