from decimal import Decimal

import pytest

from grocer.catalog import Catalog
from grocer.purchase import PurchaseRecord


@pytest.fixture(autouse=True)
def clear_grocer_env(monkeypatch):
    for key in [
        "GROCER_CURRENCY",
        "GROCER_BULK_THRESHOLD",
        "GROCER_BULK_REBATE",
        "GROCER_CATALOG",
        "GROCER_LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def catalog():
    return Catalog.default()


@pytest.fixture
def purchase(catalog):
    return PurchaseRecord(catalog)


@pytest.fixture
def priced_catalog():
    """Build a catalog holding one product ``ITEM`` at the given price."""

    def _build(price):
        return Catalog().add("ITEM", "Item", Decimal(price))

    return _build
