"""Tests for the article and stock spreadsheet parsers."""

import pytest

from app.application.services.spreadsheet_parser import (
    DEFAULT_FAMILY,
    DEFAULT_NAME,
    parse_articles,
    parse_stock,
)
from app.core.exceptions import SpreadsheetParseError
from conftest import make_articles_xlsx, make_stock_xlsx


class TestParseArticles:
    def test_maps_columns_to_fields(self):
        """Each article row becomes a product with its four prices and stock 0."""
        content = make_articles_xlsx([
            ["A1", "Vino Tinto", "Bebidas", "Vinos", 100, 90, 80, 70],
        ])

        products = parse_articles(content)

        assert len(products) == 1
        product = products[0]
        assert product.id == "A1"
        assert product.name == "Vino Tinto"
        assert product.family == "Bebidas"
        assert product.subfamily == "Vinos"
        assert [product.price_1, product.price_2, product.price_3, product.price_4] == [100, 90, 80, 70]
        assert product.stock == 0

    def test_numeric_codes_become_text(self):
        """A code typed as a number keeps its digits and loses any '.0'."""
        content = make_articles_xlsx([
            [1001, "Aceite", "Almacén", None, 10, 9, 8, 7],
            [2002.0, "Arroz", "Almacén", None, 10, 9, 8, 7],
        ])

        products = parse_articles(content)

        assert [p.id for p in products] == ["1001", "2002"]

    def test_blank_codes_are_dropped(self):
        """Rows without a code are skipped."""
        content = make_articles_xlsx([
            ["A1", "Vino", "Bebidas", None, 1, 1, 1, 1],
            [None, "Huérfano", "Bebidas", None, 1, 1, 1, 1],
            ["   ", "Espacios", "Bebidas", None, 1, 1, 1, 1],
        ])

        products = parse_articles(content)

        assert [p.id for p in products] == ["A1"]

    def test_missing_name_and_family_get_placeholders(self):
        """Description and family fall back to placeholder values."""
        content = make_articles_xlsx([
            ["A1", None, None, None, 1, 1, 1, 1],
        ])

        product = parse_articles(content)[0]

        assert product.name == DEFAULT_NAME
        assert product.family == DEFAULT_FAMILY
        assert product.subfamily == ""

    def test_invalid_prices_become_zero(self):
        """Prices that are not numbers are stored as 0."""
        content = make_articles_xlsx([
            ["A1", "Vino", "Bebidas", None, "consultar", None, "", 55.5],
        ])

        product = parse_articles(content)[0]

        assert product.price_1 == 0
        assert product.price_2 == 0
        assert product.price_3 == 0
        assert product.price_4 == 55.5

    def test_header_names_are_case_insensitive(self):
        """Upper-case headers map the same way."""
        from io import BytesIO

        from openpyxl import Workbook

        wb = Workbook()
        ws = wb.active
        ws.append(["CODART", "DesArt", "FAMILIA", "SUBFAMILIA", "PVENTA_1", "PVENTA_2", "PVENTA_3", "PVENTA_4"])
        ws.append(["Z9", "Yerba", "Almacén", "Infusiones", 5, 4, 3, 2])
        buffer = BytesIO()
        wb.save(buffer)

        product = parse_articles(buffer.getvalue())[0]

        assert product.id == "Z9"
        assert product.subfamily == "Infusiones"
        assert product.price_4 == 2

    def test_corrupt_file_raises(self):
        """Bytes that are not a workbook fail the whole parse."""
        with pytest.raises(SpreadsheetParseError):
            parse_articles(b"this is not an excel file")


class TestParseStock:
    def test_header_after_banner_rows(self):
        """The stock header is found on row 8, below the report banner."""
        content = make_stock_xlsx([
            ["A1", "Vino Tinto", 7],
            ["B2", "Aceite", 3],
        ])

        records = parse_stock(content)

        assert [(r.id, r.stock) for r in records] == [("A1", 7), ("B2", 3)]

    def test_comma_decimal_rounds_half_up(self):
        """'12,5' is read as 12.5 and rounded to 13."""
        content = make_stock_xlsx([
            ["A1", "Vino", "12,5"],
            ["B2", "Aceite", "7"],
            ["C3", "Cerveza", 2.4],
        ])

        records = parse_stock(content)

        assert [r.stock for r in records] == [13, 7, 2]

    def test_garbage_and_negative_stock_become_zero(self):
        """Unparseable or negative counts are stored as 0."""
        content = make_stock_xlsx([
            ["A1", "Vino", "sin dato"],
            ["B2", "Aceite", -4],
            ["C3", "Cerveza", None],
        ])

        records = parse_stock(content)

        assert [r.stock for r in records] == [0, 0, 0]

    def test_blank_codes_are_dropped(self):
        content = make_stock_xlsx([
            [None, "Sin código", 5],
            ["A1", "Vino", 5],
        ])

        records = parse_stock(content)

        assert [r.id for r in records] == ["A1"]

    def test_missing_code_column_raises(self):
        """A stock sheet without the code column is rejected."""
        content = make_stock_xlsx([["A1", 5]], header=["Artículo", "Stock"])

        with pytest.raises(SpreadsheetParseError):
            parse_stock(content)

    def test_corrupt_file_raises(self):
        with pytest.raises(SpreadsheetParseError):
            parse_stock(b"\x00\x01garbage")
