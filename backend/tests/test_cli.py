import pytest

from asel.services.counter_store import INVOICE_COUNTER_KEY, SqlCounterStore
from asel.time_utils import current_year
from tests.conftest import add_purchase


@pytest.fixture
def runner(app, db_session):
    return app.test_cli_runner()


def test_next_product_code(runner, carton_product):
    result = runner.invoke(args=["sequences", "next-product-code"])
    assert result.exit_code == 0
    assert result.output.strip() == "PRD-00002"


def test_next_invoice_number_consumes_counter(runner, db_session):
    first = runner.invoke(args=["sequences", "next-invoice-number"])
    second = runner.invoke(args=["sequences", "next-invoice-number", "--prefix", "RET"])

    year = current_year()
    assert first.output.strip() == f"INV-{year}-001"
    assert second.output.strip() == f"RET-{year}-002"
    assert SqlCounterStore(db_session).get(INVOICE_COUNTER_KEY) == "2"


def test_average_price(runner, db_session, carton_product):
    add_purchase(db_session, carton_product, date="2024-01-10T10:00:00",
                 lines=[(50, "smallest", 8), (5, "largest", 100)], number="PUR-2024-001")

    raw = runner.invoke(args=["reports", "average-price", str(carton_product.id), "--raw"])
    assert raw.output.strip() == "8.1818"

    formatted = runner.invoke(args=["reports", "average-price", str(carton_product.id)])
    assert formatted.output.strip() == "٨٫١٨ ج.م"


def test_reset_db_requires_confirmation(runner):
    result = runner.invoke(args=["system", "reset-db"])
    assert result.exit_code == 1
    assert "Refusing" in result.output
