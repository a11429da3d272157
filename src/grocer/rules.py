"""Pricing rules: a base strategy plus a bulk-rebate decorator that wraps any rule.

Every rule exposes ``calculate_total(purchase, catalog=None, discounts=None)``.
``explain`` returns the same total together with its per-line breakdown, and
``calculate_total`` is defined in terms of it so the two cannot drift apart.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple, Type

from .catalog import Catalog
from .discounts import DiscountConfig
from .errors import InvalidArgumentError, ProductNotFoundError
from .money import D, ONE, ZERO, to_decimal, to_money
from .purchase import PurchaseRecord
from .types import PriceAdjustment, PriceBreakdown, PriceLine

logger = logging.getLogger(__name__)

DEFAULT_BULK_THRESHOLD = D("100.00")
DEFAULT_BULK_REBATE = D("10.00")

ADJUSTMENT_BULK_REBATE = "BULK_REBATE"


class PricingRule:
    """Base class for all rules. Subclasses implement ``explain``."""

    type_name: str = "base"

    @property
    def description(self) -> str:
        return "Base pricing rule"

    def explain(
        self,
        purchase: PurchaseRecord,
        catalog: Optional[Catalog] = None,
        discounts: Optional[DiscountConfig] = None,
    ) -> PriceBreakdown:
        raise NotImplementedError

    def calculate_total(
        self,
        purchase: PurchaseRecord,
        catalog: Optional[Catalog] = None,
        discounts: Optional[DiscountConfig] = None,
    ) -> Decimal:
        return self.explain(purchase, catalog, discounts)["total"]

    def is_applicable(self, purchase: Optional[PurchaseRecord]) -> bool:
        return purchase is not None and not purchase.is_empty()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description!r}>"


# Registry: type_name -> rule class, used by build_rule
rule_registry: Dict[str, Type[PricingRule]] = {}


def register(rule_cls: Type[PricingRule]) -> Type[PricingRule]:
    """Class decorator registering a rule under its ``type_name``."""
    key = getattr(rule_cls, "type_name", None)
    if not key:
        raise ValueError(f"Rule class {rule_cls.__name__} has no type_name")
    if key in rule_registry and rule_registry[key] is not rule_cls:
        raise ValueError(
            f"Duplicate rule registration for type '{key}': "
            f"{rule_registry[key].__name__} vs {rule_cls.__name__}"
        )
    rule_registry[key] = rule_cls
    return rule_cls


@register
class StandardPricingRule(PricingRule):
    """Unit price x quantity x discount rate, summed exactly and rounded once.

    With no discount configuration every rate is 1. A configuration passed to
    ``calculate_total`` takes precedence over the one held by the rule.
    """

    type_name = "standard"

    def __init__(self, discounts: Optional[DiscountConfig] = None):
        if discounts is not None and not isinstance(discounts, DiscountConfig):
            raise InvalidArgumentError(f"Expected a DiscountConfig, got {type(discounts).__name__}")
        self.discounts = discounts

    @property
    def description(self) -> str:
        return "Standard pricing"

    def explain(self, purchase, catalog=None, discounts=None) -> PriceBreakdown:
        if not isinstance(purchase, PurchaseRecord):
            raise InvalidArgumentError(f"Expected a PurchaseRecord, got {type(purchase).__name__}")
        catalog = catalog if catalog is not None else purchase.catalog
        if not isinstance(catalog, Catalog):
            raise InvalidArgumentError("A catalog is required: pass one or bind it to the purchase record")
        if discounts is not None and not isinstance(discounts, DiscountConfig):
            raise InvalidArgumentError(f"Expected a DiscountConfig, got {type(discounts).__name__}")
        config = discounts if discounts is not None else self.discounts

        lines = []
        running = ZERO
        for product_id, quantity in purchase.as_dict().items():
            product = catalog.get_product(product_id)
            if product is None:
                raise ProductNotFoundError(
                    product_id,
                    f"Purchase references '{product_id}' which is no longer in the catalog",
                )
            rate = config.get_discount_rate(product_id) if config is not None else ONE
            amount = product.line_amount(quantity, rate)
            running += amount
            lines.append(
                PriceLine(
                    product_id=product_id,
                    name=product.display_name,
                    quantity=quantity,
                    unit_price=product.unit_price,
                    discount_rate=rate,
                    amount=amount,
                )
            )

        subtotal = to_money(running)
        logger.debug("%s: %d line(s), subtotal %s", self.type_name, len(lines), subtotal)
        return PriceBreakdown(
            rule=self.description,
            lines=lines,
            subtotal=subtotal,
            adjustments=[],
            total=subtotal,
        )


@register
class PromotionPricingRule(StandardPricingRule):
    """Standard pricing bound to a required discount configuration."""

    type_name = "promotion"

    def __init__(self, discounts: DiscountConfig):
        if not isinstance(discounts, DiscountConfig):
            raise InvalidArgumentError("A promotion rule requires a DiscountConfig")
        super().__init__(discounts)

    @property
    def description(self) -> str:
        return f"Promotion pricing ({self.discounts.describe()})"


class BulkDiscountRule(PricingRule):
    """Subtracts ``rebate`` once the wrapped rule's total reaches ``threshold``.

    The comparison is inclusive: a total exactly equal to the threshold earns the
    rebate. Rules can be stacked; each layer compares against the total of the
    layer it wraps.
    """

    type_name = "bulk"

    def __init__(self, base: PricingRule, threshold: Any = DEFAULT_BULK_THRESHOLD, rebate: Any = DEFAULT_BULK_REBATE):
        if not isinstance(base, PricingRule):
            raise InvalidArgumentError(f"Bulk discount needs a base PricingRule, got {type(base).__name__}")
        threshold = to_decimal(threshold, "bulk threshold")
        rebate = to_decimal(rebate, "bulk rebate")
        if threshold <= ZERO:
            raise InvalidArgumentError(f"Bulk threshold must be greater than 0, got {threshold}")
        if rebate <= ZERO:
            raise InvalidArgumentError(f"Bulk rebate must be greater than 0, got {rebate}")
        self.base = base
        self.threshold = threshold
        self.rebate = rebate

    @property
    def description(self) -> str:
        return f"{self.base.description}; {self.rebate} off at {self.threshold}"

    def is_eligible(self, amount: Decimal) -> bool:
        return amount >= self.threshold

    def explain(self, purchase, catalog=None, discounts=None) -> PriceBreakdown:
        if not isinstance(purchase, PurchaseRecord):
            raise InvalidArgumentError(f"Expected a PurchaseRecord, got {type(purchase).__name__}")
        inner = self.base.explain(purchase, catalog, discounts)
        if not self.is_eligible(inner["total"]):
            return PriceBreakdown(
                rule=self.description,
                lines=inner["lines"],
                subtotal=inner["subtotal"],
                adjustments=inner["adjustments"],
                total=inner["total"],
            )

        total = to_money(inner["total"] - self.rebate)
        logger.debug("bulk: %s >= %s, rebate %s -> %s", inner["total"], self.threshold, self.rebate, total)
        return PriceBreakdown(
            rule=self.description,
            lines=inner["lines"],
            subtotal=inner["subtotal"],
            adjustments=[
                *inner["adjustments"],
                PriceAdjustment(
                    code=ADJUSTMENT_BULK_REBATE,
                    description=f"{self.rebate} off orders of {self.threshold} or more",
                    delta=-self.rebate,
                ),
            ],
            total=total,
        )


def build_rule(
    kind: str = "standard",
    discounts: Optional[DiscountConfig] = None,
    bulk: Optional[Tuple[Any, Any]] = None,
) -> PricingRule:
    """Construct a registered base rule, optionally wrapped in a bulk discount.

    ``bulk`` is a ``(threshold, rebate)`` pair.
    """
    rule_cls = rule_registry.get(kind)
    if rule_cls is None:
        known = ", ".join(sorted(rule_registry))
        raise InvalidArgumentError(f"Unknown rule kind '{kind}' (known: {known})")
    rule: PricingRule = rule_cls(discounts)
    if bulk is not None:
        threshold, rebate = bulk
        rule = BulkDiscountRule(rule, threshold, rebate)
    return rule
