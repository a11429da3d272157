"""Per-product discount multipliers and the built-in promotion profiles."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Mapping

from .errors import InvalidArgumentError
from .money import ONE, ZERO, to_decimal

# name -> {description, rates}; rates are strings so they survive TOML/JSON round trips
BUILTIN_PROFILES: Dict[str, Dict[str, Any]] = {
    "strawberry": {
        "description": "Strawberry promotion",
        "rates": {"STRAWBERRY": "0.8"},
    },
    "multi-fruit": {
        "description": "Multi-fruit promotion",
        "rates": {"STRAWBERRY": "0.8", "MANGO": "0.9"},
    },
    "black-friday": {
        "description": "Black Friday sale",
        "rates": {"APPLE": "0.5", "STRAWBERRY": "0.6", "MANGO": "0.7", "ORANGE": "0.55", "BANANA": "0.4"},
    },
    "member": {
        "description": "Member exclusive",
        "rates": {"APPLE": "0.85", "STRAWBERRY": "0.85", "MANGO": "0.85"},
    },
}


def _validate_rate(product_id: str, rate: Any) -> Decimal:
    if not isinstance(product_id, str) or not product_id.strip():
        raise InvalidArgumentError(f"Product id must be a non-empty string, got {product_id!r}")
    value = to_decimal(rate, "discount rate")
    if value <= ZERO or value > ONE:
        raise InvalidArgumentError(f"Discount rate for '{product_id}' must be in (0, 1], got {value}")
    return value


class DiscountConfig:
    """Discount multipliers keyed by product id.

    Unlisted products have a rate of 1 (full price). A config is independent of any
    purchase and can be reused across calculations.
    """

    def __init__(self, description: str = "", rates: Mapping[str, Any] | None = None):
        self.description = description
        self._rates: Dict[str, Decimal] = {}
        if rates:
            self.update(rates)

    @classmethod
    def from_profile(cls, profile: Mapping[str, Any]) -> "DiscountConfig":
        return cls(str(profile.get("description", "")), profile.get("rates") or {})

    def set_discount(self, product_id: str, rate: Any) -> "DiscountConfig":
        self._rates[product_id] = _validate_rate(product_id, rate)
        return self

    def update(self, rates: Mapping[str, Any]) -> "DiscountConfig":
        # validate everything first so a bad entry leaves the config untouched
        validated = {product_id: _validate_rate(product_id, rate) for product_id, rate in rates.items()}
        self._rates.update(validated)
        return self

    def get_discount_rate(self, product_id: str) -> Decimal:
        return self._rates.get(product_id, ONE)

    def remove_discount(self, product_id: str) -> Decimal | None:
        return self._rates.pop(product_id, None)

    def has_discount(self, product_id: str) -> bool:
        return product_id in self._rates

    def clear(self) -> None:
        self._rates.clear()

    def discounted_ids(self) -> List[str]:
        return list(self._rates)

    def as_dict(self) -> Dict[str, Decimal]:
        return dict(self._rates)

    def describe(self) -> str:
        if not self._rates:
            return f"{self.description} - no discounts" if self.description else "no discounts"
        parts = ", ".join(f"{product_id}x{rate}" for product_id, rate in sorted(self._rates.items()))
        return f"{self.description} - {parts}" if self.description else parts

    def __len__(self) -> int:
        return len(self._rates)

    def __bool__(self) -> bool:
        return bool(self._rates)

    def __repr__(self) -> str:
        return f"DiscountConfig({self.description!r}, {self._rates!r})"
