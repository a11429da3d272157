"""Per-transaction purchase record: product id -> quantity."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Optional

from .errors import InvalidArgumentError, ProductNotFoundError
from .money import ZERO, to_money

if TYPE_CHECKING:
    from .catalog import Catalog

logger = logging.getLogger(__name__)


class PurchaseRecord:
    """Sparse quantities keyed by product id.

    Only non-zero quantities are stored. When bound to a catalog, every mutation
    checks that the product exists in it. The record holds identifiers, not
    products, so prices are always read from the catalog at calculation time.
    """

    def __init__(self, catalog: Optional["Catalog"] = None):
        self.catalog = catalog
        self._quantities: Dict[str, int] = {}

    def add_quantity(self, product_id: str, delta: int) -> "PurchaseRecord":
        """Accumulate ``delta`` onto the current quantity."""
        self._validate(product_id, delta)
        total = self._quantities.get(product_id, 0) + delta
        if total:
            self._quantities[product_id] = total
        logger.debug("purchase: %s +%d -> %d", product_id, delta, total)
        return self

    def set_quantity(self, product_id: str, value: int) -> "PurchaseRecord":
        """Set an absolute quantity. Zero removes the entry."""
        self._validate(product_id, value)
        if value == 0:
            self._quantities.pop(product_id, None)
        else:
            self._quantities[product_id] = value
        logger.debug("purchase: %s = %d", product_id, value)
        return self

    def get_quantity(self, product_id: str) -> int:
        return self._quantities.get(product_id, 0)

    def is_empty(self) -> bool:
        return not self._quantities

    def list_product_ids(self) -> List[str]:
        return list(self._quantities)

    def as_dict(self) -> Dict[str, int]:
        return dict(self._quantities)

    def base_total(self) -> Decimal:
        """Undiscounted total against the bound catalog."""
        if self.catalog is None:
            raise InvalidArgumentError("Purchase record is not bound to a catalog")
        total = ZERO
        for product_id, quantity in self._quantities.items():
            product = self.catalog.get_product(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            total += product.line_amount(quantity)
        return to_money(total)

    def _validate(self, product_id: str, quantity: int) -> None:
        if not isinstance(product_id, str) or not product_id.strip():
            raise InvalidArgumentError(f"Product id must be a non-empty string, got {product_id!r}")
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidArgumentError(f"Quantity must be an integer, got {quantity!r}")
        if quantity < 0:
            raise InvalidArgumentError(f"Quantity must not be negative: {quantity}")
        if self.catalog is not None and not self.catalog.has_product(product_id):
            raise InvalidArgumentError(f"Product '{product_id}' is not in the catalog")

    def __len__(self) -> int:
        return len(self._quantities)

    def __repr__(self) -> str:
        return f"PurchaseRecord({self._quantities!r})"
