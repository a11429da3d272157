"""Façade binding catalog, rules and purchase records for named customer scenarios."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from .catalog import Catalog
from .discounts import BUILTIN_PROFILES, DiscountConfig
from .errors import InvalidArgumentError
from .purchase import PurchaseRecord
from .rules import (
    DEFAULT_BULK_REBATE,
    DEFAULT_BULK_THRESHOLD,
    BulkDiscountRule,
    PricingRule,
    PromotionPricingRule,
    StandardPricingRule,
)


class PricingService:
    """Prices fixed fruit baskets against a catalog.

    Defaults to the apple/strawberry/mango catalog, the strawberry promotion and a
    100.00 / 10.00 bulk rebate.
    """

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        promotion: Optional[DiscountConfig] = None,
        bulk_threshold=DEFAULT_BULK_THRESHOLD,
        bulk_rebate=DEFAULT_BULK_REBATE,
    ):
        self.catalog = catalog if catalog is not None else Catalog.default()
        self.standard_rule = StandardPricingRule()
        self.promotion_rule = PromotionPricingRule(
            promotion if promotion is not None else DiscountConfig.from_profile(BUILTIN_PROFILES["strawberry"])
        )
        self.bulk_rule = BulkDiscountRule(self.promotion_rule, bulk_threshold, bulk_rebate)

    def new_purchase(self, **quantities: int) -> PurchaseRecord:
        purchase = PurchaseRecord(self.catalog)
        for product_id, quantity in quantities.items():
            purchase.set_quantity(product_id.upper(), quantity)
        return purchase

    def standard_customer_total(self, apple: int, strawberry: int) -> Decimal:
        return self.calculate(self.new_purchase(apple=apple, strawberry=strawberry), self.standard_rule)

    def extended_customer_total(self, apple: int, strawberry: int, mango: int) -> Decimal:
        purchase = self.new_purchase(apple=apple, strawberry=strawberry, mango=mango)
        return self.calculate(purchase, self.standard_rule)

    def promotional_customer_total(self, apple: int, strawberry: int, mango: int) -> Decimal:
        purchase = self.new_purchase(apple=apple, strawberry=strawberry, mango=mango)
        return self.calculate(purchase, self.promotion_rule)

    def bulk_customer_total(self, apple: int, strawberry: int, mango: int) -> Decimal:
        purchase = self.new_purchase(apple=apple, strawberry=strawberry, mango=mango)
        return self.calculate(purchase, self.bulk_rule)

    def calculate(self, purchase: PurchaseRecord, rule: PricingRule) -> Decimal:
        if purchase is None:
            raise InvalidArgumentError("Purchase record is required")
        if not isinstance(rule, PricingRule):
            raise InvalidArgumentError("Pricing rule is required")
        return rule.calculate_total(purchase, self.catalog)
