"""Quote export: printable PDF and WhatsApp share link.

Pure formatting: the caller passes the finalized lines and total.
"""

from __future__ import annotations

import io
import random
import re
from datetime import datetime
from typing import Optional, Sequence
from urllib.parse import quote

import pytz
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from app.config import get_settings
from app.domain.schemas.cart import CartLine

ORANGE = (228 / 255, 124 / 255, 0)
GRAY_DARK = (60 / 255, 60 / 255, 60 / 255)
GRAY_LIGHT = (240 / 255, 240 / 255, 240 / 255)
GRAY_RULE = (220 / 255, 220 / 255, 220 / 255)

DEFAULT_CLIENT = "Consumidor Final"
FOOTER_LINES = (
    "Este documento es un presupuesto no válido como factura fiscal.",
    "Los precios están sujetos a cambios sin previo aviso.",
)

MARGIN = 40
ROW_HEIGHT = 18
LINE_HEIGHT = 11
CODE_WIDTH = 68
TABLE_BOTTOM = 90  # keep rows above the footer

# Characters encodeURIComponent leaves as-is besides letters, digits and -_.~
URI_COMPONENT_SAFE = "!*'()"


def format_money(value: float) -> str:
    """Money in es-AR style: '$1.234,5'."""
    rounded = round(float(value), 2)
    integer, _, decimals = f"{abs(rounded):,.2f}".partition(".")
    decimals = decimals.rstrip("0")
    text = integer.replace(",", ".") + (f",{decimals}" if decimals else "")
    return f"-${text}" if rounded < 0 else f"${text}"


def _now() -> datetime:
    return datetime.now(pytz.timezone(get_settings().TIMEZONE))


def generate_quote_number(issued_at: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """Quote number 'YYYYMM-DD-NNN' with a random suffix."""
    issued_at = issued_at or _now()
    suffix = (rng or random).randint(0, 999)
    return f"{issued_at:%Y%m}-{issued_at:%d}-{suffix:03d}"


def quote_filename(client_name: Optional[str], quote_number: str) -> str:
    safe_name = re.sub(r"[^a-z0-9]", "_", client_name or "", flags=re.IGNORECASE)[:15]
    return f"Presupuesto_{safe_name}_{quote_number}.pdf"


def _draw_header(c: canvas.Canvas, width: float, height: float, quote_number: str, issued_at: datetime) -> float:
    settings = get_settings()
    top = height - 30

    c.setFillColorRGB(*GRAY_LIGHT)
    c.rect(MARGIN, top - 110, width - 2 * MARGIN, 110, stroke=0, fill=1)

    c.setFillColorRGB(*ORANGE)
    c.setFont("Helvetica-Bold", 26)
    c.drawString(MARGIN + 15, top - 40, settings.COMPANY_NAME)

    c.setFillColorRGB(*GRAY_DARK)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN + 15, top - 60, settings.COMPANY_TAGLINE)
    c.setFont("Helvetica", 10)
    c.drawString(MARGIN + 15, top - 74, settings.COMPANY_DESCRIPTION)
    c.drawString(MARGIN + 15, top - 88, settings.COMPANY_EMAIL)

    box_left = width - MARGIN - 215
    c.setStrokeColorRGB(0.78, 0.78, 0.78)
    c.setLineWidth(0.5)
    c.rect(box_left, top - 110, 215, 110, stroke=1, fill=0)

    c.setFillColorRGB(0, 0, 0)
    c.setFont("Helvetica-Bold", 14)
    c.drawCentredString(box_left + 107, top - 30, "PRESUPUESTO")
    c.setFont("Helvetica-Bold", 10)
    c.drawString(box_left + 15, top - 58, f"N°: {quote_number}")
    c.drawString(box_left + 15, top - 74, f"Fecha: {issued_at:%d/%m/%Y}")
    c.drawString(box_left + 15, top - 90, f"Hora: {issued_at:%H:%M}")

    return top - 130


def _draw_client(c: canvas.Canvas, width: float, y: float, client_name: str) -> float:
    c.setStrokeColorRGB(*ORANGE)
    c.setLineWidth(1)
    c.line(MARGIN, y, width - MARGIN, y)
    y -= 22
    c.setFillColorRGB(0, 0, 0)
    c.setFont("Helvetica-Bold", 11)
    c.drawString(MARGIN, y, "CLIENTE:")
    c.setFont("Helvetica", 11)
    c.drawString(MARGIN + 70, y, client_name)
    return y - 28


def _draw_table_header(c: canvas.Canvas, width: float, y: float) -> float:
    c.setFillColorRGB(*ORANGE)
    c.rect(MARGIN, y - 6, width - 2 * MARGIN, ROW_HEIGHT, stroke=0, fill=1)
    c.setFillColorRGB(1, 1, 1)
    c.setFont("Helvetica-Bold", 9)
    c.drawString(MARGIN + 6, y, "CÓDIGO")
    c.drawString(MARGIN + 80, y, "DESCRIPCIÓN")
    c.drawCentredString(width - MARGIN - 175, y, "CANT.")
    c.drawRightString(width - MARGIN - 90, y, "UNITARIO")
    c.drawRightString(width - MARGIN - 6, y, "SUBTOTAL")
    return y - ROW_HEIGHT - 4


def wrap_cell(text: str, width: float, font: str = "Helvetica", size: int = 9) -> list[str]:
    """
    Split `text` into lines that fit `width` points.

    Breaks on spaces first; a single word wider than the cell (long product
    codes) is broken by characters. Never returns an empty list.
    """
    lines = []
    for piece in simpleSplit(text or "", font, size, width):
        while len(piece) > 1 and stringWidth(piece, font, size) > width:
            cut = len(piece) - 1
            while cut > 1 and stringWidth(piece[:cut], font, size) > width:
                cut -= 1
            lines.append(piece[:cut])
            piece = piece[cut:]
        lines.append(piece)
    return lines or [""]


def _row_cells(line: CartLine, width: float) -> tuple[list[str], list[str]]:
    name_width = (width - MARGIN - 175 - 20) - (MARGIN + 80)
    return wrap_cell(line.id, CODE_WIDTH), wrap_cell(line.name, name_width)


def _row_height(line: CartLine, width: float) -> float:
    code_lines, name_lines = _row_cells(line, width)
    return max(ROW_HEIGHT, LINE_HEIGHT * max(len(code_lines), len(name_lines)) + 7)


def _draw_row(c: canvas.Canvas, width: float, y: float, line: CartLine) -> float:
    code_lines, name_lines = _row_cells(line, width)
    height = _row_height(line, width)

    c.setFillColorRGB(0, 0, 0)
    c.setFont("Helvetica", 9)
    for i, text in enumerate(code_lines):
        c.drawString(MARGIN + 6, y - i * LINE_HEIGHT, text)
    for i, text in enumerate(name_lines):
        c.drawString(MARGIN + 80, y - i * LINE_HEIGHT, text)
    c.drawCentredString(width - MARGIN - 175, y, str(line.quantity))
    c.drawRightString(width - MARGIN - 90, y, format_money(line.selected_price))
    c.drawRightString(width - MARGIN - 6, y, format_money(line.subtotal))

    rule_y = y - height + ROW_HEIGHT - 6
    c.setStrokeColorRGB(*GRAY_RULE)
    c.setLineWidth(0.3)
    c.line(MARGIN, rule_y, width - MARGIN, rule_y)
    return y - height


def _draw_footer(c: canvas.Canvas, width: float) -> None:
    c.setFillColorRGB(120 / 255, 120 / 255, 120 / 255)
    c.setFont("Helvetica", 9)
    for i, text in enumerate(FOOTER_LINES):
        c.drawCentredString(width / 2, 50 - i * 14, text)


def render_quote_pdf(
    lines: Sequence[CartLine],
    client_name: Optional[str],
    total: float,
    quote_number: Optional[str] = None,
    issued_at: Optional[datetime] = None,
) -> bytes:
    """
    Render the quote as a PDF.

    Layout: company/quote header, client line, item table (continued on new
    pages as needed), totals box and a disclaimer footer on every page.
    """
    issued_at = issued_at or _now()
    quote_number = quote_number or generate_quote_number(issued_at)

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Presupuesto {quote_number}")
    width, height = A4

    y = _draw_header(c, width, height, quote_number, issued_at)
    y = _draw_client(c, width, y, (client_name or "").strip() or DEFAULT_CLIENT)
    y = _draw_table_header(c, width, y)

    for line in lines:
        if y - _row_height(line, width) + ROW_HEIGHT < TABLE_BOTTOM:
            _draw_footer(c, width)
            c.showPage()
            y = _draw_table_header(c, width, height - 50)
        y = _draw_row(c, width, y, line)

    # Totals box needs ~40pt above the footer
    if y - 40 < TABLE_BOTTOM:
        _draw_footer(c, width)
        c.showPage()
        y = height - 50

    box_left = width - MARGIN - 190
    c.setFillColorRGB(*GRAY_LIGHT)
    c.rect(box_left, y - 30, 190, 34, stroke=0, fill=1)
    c.setFillColorRGB(0, 0, 0)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(box_left + 10, y - 18, "TOTAL:")
    c.drawRightString(width - MARGIN - 8, y - 18, format_money(total))

    _draw_footer(c, width)
    c.save()
    return buffer.getvalue()


def build_share_message(lines: Sequence[CartLine], total: float) -> str:
    """Plain-text order summary (WhatsApp markup)."""
    settings = get_settings()
    message = f"*{settings.SHARE_TITLE}*\n\n"
    for line in lines:
        message += f"• *({line.quantity})* {line.name} | {format_money(line.subtotal)}\n"
    message += f"\n*TOTAL FINAL: {format_money(total)}*"
    return message


def build_share_link(lines: Sequence[CartLine], total: float) -> tuple[str, str]:
    """Share URL with the order summary as its text. Returns (url, message)."""
    message = build_share_message(lines, total)
    url = f"{get_settings().SHARE_BASE_URL}?text={quote(message, safe=URI_COMPONENT_SAFE)}"
    return url, message
