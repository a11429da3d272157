from decimal import Decimal

import pytest

from grocer.catalog import Catalog
from grocer.errors import InvalidArgumentError, ProductNotFoundError
from grocer.purchase import PurchaseRecord


def test_add_quantity_accumulates(purchase):
    purchase.add_quantity("APPLE", 2).add_quantity("APPLE", 3)
    assert purchase.get_quantity("APPLE") == 5


def test_set_quantity_is_absolute(purchase):
    purchase.add_quantity("APPLE", 2)
    purchase.set_quantity("APPLE", 7)
    assert purchase.get_quantity("APPLE") == 7


def test_set_zero_removes_entry(purchase):
    purchase.set_quantity("MANGO", 4)
    purchase.set_quantity("MANGO", 0)

    assert purchase.get_quantity("MANGO") == 0
    assert "MANGO" not in purchase.list_product_ids()
    assert purchase.is_empty()


def test_zero_quantities_are_never_stored(purchase):
    purchase.add_quantity("APPLE", 0)
    purchase.set_quantity("STRAWBERRY", 0)
    assert purchase.is_empty()
    assert purchase.as_dict() == {}


def test_unknown_product_quantity_is_zero(purchase):
    assert purchase.get_quantity("KIWI") == 0


@pytest.mark.parametrize("quantity", [-1, -100])
def test_negative_quantity_rejected(purchase, quantity):
    with pytest.raises(InvalidArgumentError):
        purchase.add_quantity("APPLE", quantity)
    with pytest.raises(InvalidArgumentError):
        purchase.set_quantity("APPLE", quantity)
    assert purchase.is_empty()


@pytest.mark.parametrize("quantity", [1.5, "2", None, True])
def test_non_integer_quantity_rejected(purchase, quantity):
    with pytest.raises(InvalidArgumentError):
        purchase.add_quantity("APPLE", quantity)


@pytest.mark.parametrize("product_id", ["", "  ", None])
def test_blank_product_id_rejected(purchase, product_id):
    with pytest.raises(InvalidArgumentError):
        purchase.add_quantity(product_id, 1)


def test_catalog_bound_record_rejects_unknown_product(purchase):
    with pytest.raises(InvalidArgumentError) as excinfo:
        purchase.add_quantity("KIWI", 1)
    assert "KIWI" in excinfo.value.explanation


def test_unbound_record_accepts_any_identifier():
    purchase = PurchaseRecord()
    purchase.add_quantity("ANYTHING", 3)
    assert purchase.list_product_ids() == ["ANYTHING"]


def test_as_dict_is_a_copy(purchase):
    purchase.add_quantity("APPLE", 1)
    snapshot = purchase.as_dict()
    snapshot["APPLE"] = 99
    assert purchase.get_quantity("APPLE") == 1


def test_base_total(purchase):
    purchase.add_quantity("APPLE", 2).add_quantity("STRAWBERRY", 1)
    assert purchase.base_total() == Decimal("29.00")


def test_base_total_requires_catalog():
    with pytest.raises(InvalidArgumentError):
        PurchaseRecord().add_quantity("APPLE", 1).base_total()


def test_base_total_fails_when_product_removed():
    catalog = Catalog.default()
    purchase = PurchaseRecord(catalog).add_quantity("MANGO", 1)
    catalog.remove_product("MANGO")

    with pytest.raises(ProductNotFoundError) as excinfo:
        purchase.base_total()
    assert excinfo.value.product_id == "MANGO"
