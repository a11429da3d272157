"""Data contracts shared by the catalog, the pricing rules and the CLI.

``Product`` is immutable: catalog updates replace an entry by identifier instead of
mutating it. The TypedDicts describe the explanation payload returned by
``PricingRule.explain`` and printed by ``grocer quote --json``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, List, Optional, TypedDict

from .errors import InvalidArgumentError
from .money import ONE, ZERO, to_decimal, to_money


@dataclass(frozen=True)
class Product:
    """A sellable product priced per unit.

    Invariant:
    - ``product_id`` and ``name`` are non-empty strings.
    - ``unit_price`` is a Decimal > 0, stored quantized to two places.

    Two products are equal when their identifiers are equal.
    """

    product_id: str
    name: str = field(compare=False)
    unit_price: Decimal = field(compare=False)
    category: Optional[str] = field(default=None, compare=False)
    local_name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.product_id, str) or not self.product_id.strip():
            raise InvalidArgumentError(f"Product id must be a non-empty string, got {self.product_id!r}")
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgumentError(f"Product '{self.product_id}' needs a non-empty name")
        if self.local_name is not None and (not isinstance(self.local_name, str) or not self.local_name.strip()):
            raise InvalidArgumentError(f"Product '{self.product_id}' local name must be non-empty when given")
        price = to_decimal(self.unit_price, "unit_price")
        if price <= ZERO:
            raise InvalidArgumentError(f"Product '{self.product_id}' price must be greater than 0, got {price}")
        object.__setattr__(self, "unit_price", to_money(price))

    @property
    def display_name(self) -> str:
        return self.name

    def with_price(self, new_price: Any) -> "Product":
        return replace(self, unit_price=new_price)

    def subtotal(self, quantity: int) -> Decimal:
        """Undiscounted line amount, rounded to two places."""
        return self.discounted_subtotal(quantity, ONE)

    def discounted_subtotal(self, quantity: int, rate: Any) -> Decimal:
        """Line amount after applying a discount multiplier in (0, 1], rounded to two places."""
        return to_money(self.line_amount(quantity, rate))

    def line_amount(self, quantity: int, rate: Any = ONE) -> Decimal:
        """Exact, unrounded ``unit_price * quantity * rate``."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise InvalidArgumentError(f"Quantity must be a non-negative integer, got {quantity!r}")
        multiplier = to_decimal(rate, "discount rate")
        if multiplier <= ZERO or multiplier > ONE:
            raise InvalidArgumentError(f"Discount rate must be in (0, 1], got {multiplier}")
        return self.unit_price * quantity * multiplier


class PriceLine(TypedDict):
    """One purchased product as priced by a rule. ``amount`` is exact (unrounded)."""

    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    discount_rate: Decimal
    amount: Decimal


class PriceAdjustment(TypedDict):
    """A total-level change such as a bulk rebate. ``delta`` is negative for rebates."""

    code: str
    description: str
    delta: Decimal


class PriceBreakdown(TypedDict):
    """Explanation payload for one calculation.

    Invariant:
    - ``subtotal`` is the sum of line amounts rounded once to two places.
    - ``total`` equals ``subtotal`` plus every adjustment delta, rounded to two places.
    """

    rule: str
    lines: List[PriceLine]
    subtotal: Decimal
    adjustments: List[PriceAdjustment]
    total: Decimal
