"""Product catalog keyed by string identifier."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .errors import InvalidArgumentError
from .schema import validate_product_entry
from .types import Product

logger = logging.getLogger(__name__)

__all__ = ["Catalog", "DEFAULT_PRODUCTS", "EXTENDED_PRODUCTS"]

FRUIT = "fruit"

DEFAULT_PRODUCTS: tuple[Product, ...] = (
    Product("APPLE", "Apple", Decimal("8.00"), FRUIT, "苹果"),
    Product("STRAWBERRY", "Strawberry", Decimal("13.00"), FRUIT, "草莓"),
    Product("MANGO", "Mango", Decimal("20.00"), FRUIT, "芒果"),
)

EXTENDED_PRODUCTS: tuple[Product, ...] = (
    Product("ORANGE", "Orange", Decimal("12.00"), FRUIT, "橙子"),
    Product("BANANA", "Banana", Decimal("6.00"), FRUIT, "香蕉"),
    Product("GRAPE", "Grape", Decimal("15.00"), FRUIT, "葡萄"),
    Product("PEAR", "Pear", Decimal("9.00"), FRUIT, "梨"),
    Product("WATERMELON", "Watermelon", Decimal("3.00"), FRUIT, "西瓜"),
)


class Catalog:
    """Mutable mapping from product id to immutable ``Product``.

    Not thread-safe. Callers sharing a catalog across threads must synchronize
    mutation themselves.
    """

    def __init__(self, products: Iterable[Product] = ()):
        self._products: Dict[str, Product] = {}
        for product in products:
            self.add_product(product)

    @classmethod
    def default(cls) -> "Catalog":
        """Catalog seeded with apple, strawberry and mango."""
        return cls(DEFAULT_PRODUCTS)

    @classmethod
    def extended(cls) -> "Catalog":
        return cls(DEFAULT_PRODUCTS + EXTENDED_PRODUCTS)

    @classmethod
    def from_entries(cls, entries: Iterable[Dict[str, Any]], base: Iterable[Product] = ()) -> "Catalog":
        catalog = cls(base)
        for entry in entries:
            product = validate_product_entry(entry)
            if catalog.has_product(product.product_id):
                logger.warning("Configured product %s overrides an existing entry", product.product_id)
            catalog.add_product(product)
        return catalog

    def add_product(self, product: Product) -> "Catalog":
        """Insert or overwrite ``product`` by identifier."""
        if not isinstance(product, Product):
            raise InvalidArgumentError(f"Expected a Product, got {type(product).__name__}")
        self._products[product.product_id] = product
        logger.debug("catalog: set %s at %s", product.product_id, product.unit_price)
        return self

    def add(
        self,
        product_id: str,
        name: str,
        unit_price: Any,
        category: Optional[str] = None,
        local_name: Optional[str] = None,
    ) -> "Catalog":
        return self.add_product(Product(product_id, name, unit_price, category, local_name))

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def has_product(self, product_id: str) -> bool:
        return product_id in self._products

    def remove_product(self, product_id: str) -> Optional[Product]:
        removed = self._products.pop(product_id, None)
        if removed is not None:
            logger.debug("catalog: removed %s", product_id)
        return removed

    def update_product_price(self, product_id: str, new_price: Any) -> bool:
        """Replace the product with a copy carrying ``new_price``.

        Returns False and changes nothing when ``product_id`` is unknown.
        """
        existing = self._products.get(product_id)
        if existing is None:
            return False
        self._products[product_id] = existing.with_price(new_price)
        logger.debug("catalog: repriced %s %s -> %s", product_id, existing.unit_price, self._products[product_id].unit_price)
        return True

    def count(self) -> int:
        return len(self._products)

    def clear(self) -> None:
        self._products.clear()

    def list_all(self) -> List[Product]:
        return list(self._products.values())

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def __iter__(self) -> Iterator[Product]:
        return iter(list(self._products.values()))

    def __repr__(self) -> str:
        return f"Catalog({sorted(self._products)!r})"
