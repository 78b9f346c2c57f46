"""Spreadsheet parser for the two catalog feeds.

Handles:
- Article file: first sheet, header on the first row (codart, desart, familia,
  subfamilia, pventa_1..pventa_4)
- Stock file: first sheet, seven banner rows before the header (Código, Stock)
- Stock counts written with a comma decimal separator ("12,5")

A file that cannot be decoded fails as a whole with SpreadsheetParseError.
"""

import io
from typing import BinaryIO, Optional, Union

import pandas as pd
import structlog

from app.application.services.normalization import (
    clean_text,
    parse_stock_value,
    to_number,
)
from app.config import get_settings
from app.core.exceptions import SpreadsheetParseError
from app.domain.schemas.product import ProductBase, StockRecord

logger = structlog.get_logger(__name__)

# Column mapping: spreadsheet column name (case-insensitive) → field name
ARTICLE_COLUMN_MAP = {
    "codart": "id",
    "desart": "name",
    "familia": "family",
    "subfamilia": "subfamily",
    "pventa_1": "price_1",
    "pventa_2": "price_2",
    "pventa_3": "price_3",
    "pventa_4": "price_4",
}

STOCK_COLUMN_MAP = {
    "código": "id",
    "codigo": "id",
    "stock": "stock",
}

DEFAULT_NAME = "Sin Nombre"
DEFAULT_FAMILY = "General"

SpreadsheetSource = Union[bytes, BinaryIO]


def _read_first_sheet(source: SpreadsheetSource, header: int, label: str) -> pd.DataFrame:
    """Read the first sheet as raw objects (no dtype inference on codes)."""
    data = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        df = pd.read_excel(data, sheet_name=0, header=header, dtype=object)
    except Exception as e:
        # openpyxl/zipfile raise a wide range of errors on corrupt files
        logger.warning("Spreadsheet could not be read", file=label, error=str(e))
        raise SpreadsheetParseError(
            f"No se pudo leer el archivo de {label}: {e}",
            details={"file": label},
        ) from e
    return df.dropna(how="all")


def _rename_columns(df: pd.DataFrame, column_map: dict[str, str]) -> pd.DataFrame:
    """Rename spreadsheet columns to field names, ignoring case and padding."""
    rename_map = {}
    for df_col in df.columns:
        field = column_map.get(clean_text(df_col).lower())
        if field and field not in rename_map.values():
            rename_map[df_col] = field
    df = df.rename(columns=rename_map)
    return df[list(rename_map.values())]


def _require_code_column(df: pd.DataFrame, label: str, expected: str) -> None:
    if "id" not in df.columns:
        raise SpreadsheetParseError(
            f"El archivo de {label} no tiene la columna '{expected}'",
            details={"file": label, "missing_column": expected},
        )


def _cell(row: dict, field: str):
    value = row.get(field)
    return None if value is None or (isinstance(value, float) and pd.isna(value)) else value


def parse_articles(source: SpreadsheetSource) -> list[ProductBase]:
    """
    Parse the article (price list) spreadsheet.

    Rows whose code is blank are dropped. Stock is always 0 here; it comes
    from the stock file during consolidation.
    """
    df = _read_first_sheet(source, header=0, label="artículos")
    df = _rename_columns(df, ARTICLE_COLUMN_MAP)
    _require_code_column(df, "artículos", "codart")

    products = []
    for row in df.to_dict(orient="records"):
        code = clean_text(_cell(row, "id"))
        if not code:
            continue
        products.append(ProductBase(
            id=code,
            name=clean_text(_cell(row, "name")) or DEFAULT_NAME,
            family=clean_text(_cell(row, "family")) or DEFAULT_FAMILY,
            subfamily=clean_text(_cell(row, "subfamily")),
            price_1=to_number(_cell(row, "price_1")),
            price_2=to_number(_cell(row, "price_2")),
            price_3=to_number(_cell(row, "price_3")),
            price_4=to_number(_cell(row, "price_4")),
            stock=0,
        ))

    logger.info("Article spreadsheet parsed", rows=len(df), products=len(products))
    return products


def parse_stock(source: SpreadsheetSource, header_row: Optional[int] = None) -> list[StockRecord]:
    """
    Parse the stock spreadsheet.

    Args:
        source: File content or file-like object
        header_row: 0-indexed header row; defaults to STOCK_HEADER_ROW (row 8 in Excel)

    Returns:
        One StockRecord per row with a non-blank code
    """
    if header_row is None:
        header_row = get_settings().STOCK_HEADER_ROW

    df = _read_first_sheet(source, header=header_row, label="stock")
    df = _rename_columns(df, STOCK_COLUMN_MAP)
    _require_code_column(df, "stock", "Código")

    records = []
    for row in df.to_dict(orient="records"):
        code = clean_text(_cell(row, "id"))
        if not code:
            continue
        records.append(StockRecord(id=code, stock=parse_stock_value(_cell(row, "stock"))))

    logger.info("Stock spreadsheet parsed", rows=len(df), records=len(records))
    return records
