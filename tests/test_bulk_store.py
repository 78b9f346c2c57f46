"""Tests for normalization and bulk writes of the product set."""

import pytest

from app.application.services.bulk_store import (
    delete_all_products,
    normalize_products,
    replace_products,
    upsert_products,
)
from app.application.services.normalization import normalize_changes, parse_stock_value
from app.core.exceptions import BatchWriteError, ProductDeleteError
from conftest import FakeProductStore, make_product


def _products(count: int):
    return [make_product(f"P{i:05d}", name=f"Producto {i:05d}") for i in range(count)]


class TestNormalization:
    def test_stock_rounded_and_blank_text_nulled(self):
        """Fractional stock is rounded, blank optional text becomes null."""
        rows = normalize_products([
            {"id": " A1 ", "name": "Vino", "family": "  ", "subfamily": "", "stock": 4.6},
        ])

        row = rows[0]
        assert row["id"] == "A1"
        assert row["stock"] == 5
        assert row["family"] is None
        assert row["subfamily"] is None
        assert row["supplier"] is None

    def test_prices_coerced_to_numbers(self):
        rows = normalize_products([
            {"id": "A1", "name": "Vino", "price_1": "120.5", "price_2": "n/a", "price_3": None},
        ])

        row = rows[0]
        assert row["price_1"] == 120.5
        assert row["price_2"] == 0
        assert row["price_3"] == 0
        assert row["price_4"] == 0

    def test_negative_stock_clamped(self):
        rows = normalize_products([{"id": "A1", "name": "Vino", "stock": -3}])

        assert rows[0]["stock"] == 0

    def test_dollar_flag_and_rate(self):
        rows = normalize_products([
            {"id": "A1", "name": "Vino", "is_dollar": "si", "exchange_rate": "0"},
        ])

        assert rows[0]["is_dollar"] is True
        assert rows[0]["exchange_rate"] is None

    def test_partial_changes_keep_only_known_fields(self):
        """A single edit normalizes the fields it carries and drops unknown ones."""
        values = normalize_changes({"stock": "7", "family": "", "color": "rojo"})

        assert values == {"stock": 7, "family": None}

    @pytest.mark.parametrize("raw,expected", [
        ("12,5", 13),
        ("7", 7),
        ("abc", 0),
        ("", 0),
        (None, 0),
        (3.49, 3),
        ("-2", 0),
    ])
    def test_stock_values(self, raw, expected):
        assert parse_stock_value(raw) == expected


class TestUpsertProducts:
    def test_batches_in_order(self):
        """1200 products are written as 500, 500 and 200."""
        store = FakeProductStore()

        batches = upsert_products(store, _products(1200), batch_size=500)

        assert batches == 3
        assert [len(call) for call in store.write_calls] == [500, 500, 200]
        assert store.write_calls[1][0]["id"] == "P00500"
        assert len(store.rows) == 1200

    def test_empty_input_writes_nothing(self):
        store = FakeProductStore()

        assert upsert_products(store, [], batch_size=500) == 0
        assert store.write_calls == []

    def test_failed_batch_reports_offset(self):
        """A failure in the second batch names offset 500 and keeps the first batch."""
        store = FakeProductStore()
        store.fail_write_on_call = 2

        with pytest.raises(BatchWriteError) as exc_info:
            upsert_products(store, _products(1200), batch_size=500)

        assert exc_info.value.offset == 500
        assert "Error subiendo lote 500" in exc_info.value.message
        assert len(store.write_calls) == 2
        assert len(store.rows) == 500

    def test_upsert_keeps_existing_rows(self):
        """Products not in the import stay untouched."""
        store = FakeProductStore()
        store.seed(make_product("OLD", name="Viejo"))

        upsert_products(store, [make_product("A1")], batch_size=500)

        assert set(store.rows) == {"OLD", "A1"}

    def test_single_write_without_batching(self):
        """Snapshot stores receive the whole list at once."""
        store = FakeProductStore(supports_batches=False)

        batches = upsert_products(store, _products(1200), batch_size=500)

        assert batches == 1
        assert [len(call) for call in store.write_calls] == [1200]

    def test_snapshot_write_failure(self):
        store = FakeProductStore(supports_batches=False)
        store.fail_write_on_call = 1

        with pytest.raises(BatchWriteError) as exc_info:
            upsert_products(store, _products(3))

        assert exc_info.value.offset == 0


class TestReplaceProducts:
    def test_replace_removes_old_rows(self):
        store = FakeProductStore()
        store.seed(make_product("OLD"))

        replace_products(store, [make_product("A1")], batch_size=500)

        assert set(store.rows) == {"A1"}

    def test_delete_failure_aborts_before_writing(self):
        """If the delete fails nothing is upserted."""
        store = FakeProductStore()
        store.seed(make_product("OLD"))
        store.fail_delete = True

        with pytest.raises(ProductDeleteError):
            replace_products(store, [make_product("A1")], batch_size=500)

        assert store.write_calls == []
        assert set(store.rows) == {"OLD"}

    def test_delete_all_returns_count(self):
        store = FakeProductStore()
        store.seed(make_product("A1"), make_product("B2"))

        assert delete_all_products(store) == 2
        assert store.rows == {}


class TestLocalSnapshot:
    def test_write_overwrites_snapshot(self, local_store):
        """Each write of the local store replaces the whole snapshot."""
        upsert_products(local_store, [make_product("A1"), make_product("B2")])
        upsert_products(local_store, [make_product("C3")])

        rows = local_store.select_page(0, 100)

        assert [r["id"] for r in rows] == ["C3"]
