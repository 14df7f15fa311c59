import pytest

from asel.records import InvoiceItemRecord, InvoiceRecord, ProductRecord
from asel.services.pricing_service import (
    calculate_average_purchase_price,
    get_average_purchase_price,
    normalized_quantity,
)
from tests.conftest import add_purchase


CARTON = ProductRecord.from_mapping({"id": 1, "code": "PRD-00001", "conversion_factor": 12})


def _invoice(id, date):
    return InvoiceRecord.from_mapping({"id": id, "date": date})


def _item(invoice_id, quantity, unit, price, product_id=1, id=None):
    return InvoiceItemRecord.from_mapping({
        "id": id,
        "invoice_id": invoice_id,
        "product_id": product_id,
        "quantity": quantity,
        "unit": unit,
        "price": price,
    })


class TestCalculateAveragePurchasePrice:
    def test_largest_unit_purchase(self):
        price = calculate_average_purchase_price(
            1, None, [CARTON],
            [_invoice(10, "2024-01-10T09:00:00")],
            [_item(10, 10, "largest", 100)],
        )
        assert price == pytest.approx(1000 / 120)
        assert round(price, 4) == 8.3333

    def test_mixed_units(self):
        price = calculate_average_purchase_price(
            1, None, [CARTON],
            [_invoice(10, "2024-01-10"), _invoice(11, "2024-01-12")],
            [_item(10, 50, "smallest", 8), _item(11, 5, "largest", 100)],
        )
        assert price == pytest.approx(900 / 110)
        assert round(price, 4) == 8.1818

    def test_unknown_product(self):
        price = calculate_average_purchase_price(
            99, None, [CARTON],
            [_invoice(10, "2024-01-10")],
            [_item(10, 5, "smallest", 8, product_id=99)],
        )
        assert price == 0

    def test_no_purchase_items(self):
        assert calculate_average_purchase_price(1, None, [CARTON], [], []) == 0

    def test_other_products_ignored(self):
        price = calculate_average_purchase_price(
            1, None, [CARTON],
            [_invoice(10, "2024-01-10")],
            [_item(10, 4, "smallest", 5), _item(10, 100, "smallest", 1000, product_id=2)],
        )
        assert price == 5

    def test_cutoff_is_inclusive(self):
        invoices = [_invoice(10, "2024-01-15T18:30:00")]
        items = [_item(10, 4, "smallest", 5)]
        assert calculate_average_purchase_price(1, "2024-01-15", [CARTON], invoices, items) == 5
        assert calculate_average_purchase_price(1, "2024-01-14", [CARTON], invoices, items) == 0

    def test_cutoff_excludes_later_purchases_only(self):
        invoices = [_invoice(10, "2024-01-10"), _invoice(11, "2024-02-01")]
        items = [_item(10, 10, "smallest", 6), _item(11, 10, "smallest", 10)]
        assert calculate_average_purchase_price(1, "2024-01-31", [CARTON], invoices, items) == 6
        assert calculate_average_purchase_price(1, "", [CARTON], invoices, items) == 8

    def test_item_with_missing_invoice_skipped(self):
        price = calculate_average_purchase_price(
            1, None, [CARTON],
            [_invoice(10, "2024-01-10")],
            [_item(10, 2, "smallest", 4), _item(404, 100, "smallest", 1)],
        )
        assert price == 4

    def test_undated_invoice_excluded_by_cutoff(self):
        price = calculate_average_purchase_price(
            1, "2024-12-31", [CARTON],
            [_invoice(10, None)],
            [_item(10, 2, "smallest", 4)],
        )
        assert price == 0

    def test_missing_quantity_counts_as_zero(self):
        price = calculate_average_purchase_price(
            1, None, [CARTON],
            [_invoice(10, "2024-01-10")],
            [_item(10, None, "smallest", 4), _item(10, 2, "smallest", 6)],
        )
        assert price == 6

    def test_unknown_unit_taken_as_smallest(self):
        price = calculate_average_purchase_price(
            1, None, [CARTON],
            [_invoice(10, "2024-01-10")],
            [_item(10, 3, "dozen", 9)],
        )
        assert price == 9


class TestNormalizedQuantity:
    def test_largest_multiplies_by_conversion_factor(self):
        assert normalized_quantity(_item(1, 2, "largest", 0), CARTON) == 24

    def test_smallest_unchanged(self):
        assert normalized_quantity(_item(1, 2, "smallest", 0), CARTON) == 2

    def test_missing_conversion_factor_defaults_to_one(self):
        product = ProductRecord.from_mapping({"id": 1, "conversion_factor": None})
        assert normalized_quantity(_item(1, 2, "largest", 0), product) == 2


class TestGetAveragePurchasePrice:
    def test_reads_posted_purchases(self, db_session, carton_product):
        add_purchase(db_session, carton_product, date="2024-01-10T10:00:00",
                     lines=[(50, "smallest", 8)], number="PUR-2024-001")
        add_purchase(db_session, carton_product, date="2024-01-20T10:00:00",
                     lines=[(5, "largest", 100)], number="PUR-2024-002")

        assert get_average_purchase_price(carton_product.id) == pytest.approx(900 / 110)
        assert get_average_purchase_price(carton_product.id, "2024-01-15") == 8

    def test_unknown_product(self, db_session):
        assert get_average_purchase_price(12345) == 0
