"""Value cleaning shared by the spreadsheet parser and the product writers.

Every product that reaches storage, by import or by a single edit, goes
through `normalize_product` / `normalize_changes`.
"""

import math
from typing import Any, Dict, Mapping

PRICE_FIELDS = ("price_1", "price_2", "price_3", "price_4")
OPTIONAL_TEXT_FIELDS = ("family", "subfamily", "supplier")

PRODUCT_FIELDS = ("id", "name", *OPTIONAL_TEXT_FIELDS, *PRICE_FIELDS, "stock", "is_dollar", "exchange_rate")

_TRUE_STRINGS = {"true", "1", "yes", "si", "sí", "y", "s"}


def clean_text(value: Any) -> str:
    """Cell/field value as a trimmed string. Whole floats lose their '.0'."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def to_number(value: Any) -> float:
    """Numeric value or 0 when missing / not a number."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity (12.5 → 13)."""
    return int(math.floor(value + 0.5))


def parse_stock_value(value: Any) -> int:
    """Stock count from a spreadsheet cell.

    Accepts numbers or strings with a comma decimal separator ("12,5").
    Always returns a non-negative integer; anything unparseable is 0.
    """
    if isinstance(value, str):
        value = value.strip().replace(",", ".", 1)
    return to_stock(value)


def to_stock(value: Any) -> int:
    return max(0, round_half_up(to_number(value)))


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def _normalize_field(field: str, value: Any) -> Any:
    if field in ("id", "name"):
        return clean_text(value)
    if field in OPTIONAL_TEXT_FIELDS:
        return clean_text(value) or None
    if field in PRICE_FIELDS:
        return to_number(value)
    if field == "stock":
        return to_stock(value)
    if field == "is_dollar":
        return to_bool(value)
    if field == "exchange_rate":
        return to_number(value) or None
    return value


def normalize_product(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Full product row ready to be written."""
    return {field: _normalize_field(field, record.get(field)) for field in PRODUCT_FIELDS}


def normalize_changes(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalize only the fields present in a partial update.

    Unknown fields are dropped.
    """
    return {
        field: _normalize_field(field, value)
        for field, value in values.items()
        if field in PRODUCT_FIELDS
    }
