"""Tests for quote PDF and share-link formatting."""

import random
from datetime import datetime
from urllib.parse import parse_qs, urlparse

from reportlab.pdfbase.pdfmetrics import stringWidth

from app.application.services.cart_service import _line_for
from app.application.services.quote_formatter import (
    build_share_link,
    build_share_message,
    format_money,
    generate_quote_number,
    quote_filename,
    render_quote_pdf,
    wrap_cell,
)
from app.domain.pricing import PriceTier
from conftest import make_product


def _lines():
    return [
        _line_for(make_product("A1", name="Vino Tinto"), 2, PriceTier.LIST_2),
        _line_for(make_product("B2", name="Aceite & Oliva"), 1, PriceTier.LIST_1),
    ]


class TestFormatMoney:
    def test_thousands_and_decimals(self):
        assert format_money(1234.5) == "$1.234,5"
        assert format_money(1000000) == "$1.000.000"
        assert format_money(0) == "$0"


class TestQuoteNumber:
    def test_format(self):
        number = generate_quote_number(datetime(2026, 3, 7, 10, 30), rng=random.Random(1))

        assert number.startswith("202603-07-")
        assert len(number.split("-")[2]) == 3

    def test_filename_sanitizes_client(self):
        name = quote_filename("José Pérez & Hijos S.A.", "202603-07-042")

        assert name == "Presupuesto_Jos__P_rez___Hi_202603-07-042.pdf"

    def test_filename_without_client(self):
        assert quote_filename(None, "202603-07-042") == "Presupuesto__202603-07-042.pdf"


class TestWrapCell:
    def test_long_description_wraps_on_spaces(self):
        """Nothing is cut: the wrapped lines join back into the full text."""
        text = "Vino Tinto Malbec Reserva Especial Edición Limitada Bodega Los Andes 750 ml caja x 6"

        lines = wrap_cell(text, 120)

        assert len(lines) > 1
        assert " ".join(lines) == text
        assert all(stringWidth(part, "Helvetica", 9) <= 120 for part in lines)

    def test_long_code_breaks_by_characters(self):
        code = "ART-0000123456789-ABCDEFGHIJ"

        lines = wrap_cell(code, 68)

        assert len(lines) > 1
        assert "".join(lines) == code
        assert all(stringWidth(part, "Helvetica", 9) <= 68 for part in lines)

    def test_empty_text(self):
        assert wrap_cell("", 68) == [""]


class TestRenderPdf:
    def test_produces_pdf_bytes(self):
        pdf = render_quote_pdf(_lines(), "Cliente", 280, quote_number="202603-07-042")

        assert pdf.startswith(b"%PDF")

    def test_long_code_and_description_render(self):
        """Rows with wrapped cells still produce a valid document."""
        product = make_product(
            "ART-0000123456789-ABCDEFGHIJ",
            name="Vino Tinto Malbec Reserva Especial Edición Limitada " * 4,
        )
        lines = [_line_for(product, 1, PriceTier.LIST_1) for _ in range(40)]

        pdf = render_quote_pdf(lines, "Cliente", 4000)

        assert pdf.startswith(b"%PDF")
        pages = pdf.count(b"/Type /Page") - pdf.count(b"/Type /Pages")
        assert pages >= 2

    def test_long_quote_spans_pages(self):
        """Many lines continue on extra pages."""
        lines = [
            _line_for(make_product(f"P{i:03d}"), 1, PriceTier.LIST_1)
            for i in range(120)
        ]

        pdf = render_quote_pdf(lines, None, 12000)

        pages = pdf.count(b"/Type /Page") - pdf.count(b"/Type /Pages")
        assert pages >= 2


class TestShareLink:
    def test_message_layout(self):
        message = build_share_message(_lines(), 280)

        assert message.startswith("*PEDIDO ALFONSA DISTRIBUIDORA*\n\n")
        assert "• *(2)* Vino Tinto | $180\n" in message
        assert "• *(1)* Aceite & Oliva | $100\n" in message
        assert message.endswith("*TOTAL FINAL: $280*")

    def test_link_encodes_message(self):
        url, message = build_share_link(_lines(), 280)

        parsed = urlparse(url)
        assert parsed.netloc == "wa.me"
        assert "&" not in parsed.query.split("text=", 1)[1]
        assert parse_qs(parsed.query)["text"][0] == message
