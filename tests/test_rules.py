from decimal import Decimal

import pytest

from grocer.catalog import Catalog
from grocer.discounts import BUILTIN_PROFILES, DiscountConfig
from grocer.errors import InvalidArgumentError, ProductNotFoundError
from grocer.purchase import PurchaseRecord
from grocer.rules import (
    ADJUSTMENT_BULK_REBATE,
    BulkDiscountRule,
    PricingRule,
    PromotionPricingRule,
    StandardPricingRule,
    build_rule,
    register,
    rule_registry,
)


def _strawberry_promo():
    return DiscountConfig.from_profile(BUILTIN_PROFILES["strawberry"])


class TestStandardPricing:
    def test_apple_and_strawberry(self, purchase):
        purchase.add_quantity("APPLE", 2).add_quantity("STRAWBERRY", 1)
        assert StandardPricingRule().calculate_total(purchase) == Decimal("29.00")

    def test_empty_purchase_totals_zero(self, purchase):
        total = StandardPricingRule().calculate_total(purchase)
        assert total == Decimal("0")
        assert str(total) == "0.00"

    def test_zero_quantities_total_zero(self, purchase):
        purchase.set_quantity("APPLE", 0).add_quantity("MANGO", 0)
        assert StandardPricingRule().calculate_total(purchase) == Decimal("0.00")

    def test_explicit_catalog_overrides_bound_one(self, purchase):
        purchase.add_quantity("APPLE", 1)
        cheaper = Catalog().add("APPLE", "Apple", "5.00")
        assert StandardPricingRule().calculate_total(purchase, cheaper) == Decimal("5.00")

    def test_unbound_purchase_needs_catalog(self):
        purchase = PurchaseRecord().add_quantity("APPLE", 1)
        with pytest.raises(InvalidArgumentError):
            StandardPricingRule().calculate_total(purchase)
        assert StandardPricingRule().calculate_total(purchase, Catalog.default()) == Decimal("8.00")

    @pytest.mark.parametrize("bad", [None, {}, "purchase"])
    def test_missing_purchase_rejected(self, bad):
        with pytest.raises(InvalidArgumentError):
            StandardPricingRule().calculate_total(bad, Catalog.default())

    def test_call_time_discounts_are_applied(self, purchase):
        purchase.add_quantity("STRAWBERRY", 2)
        assert StandardPricingRule().calculate_total(purchase, discounts=_strawberry_promo()) == Decimal("20.80")

    def test_subtotals_sum_to_total_without_discounts(self):
        catalog = Catalog.extended()
        purchase = PurchaseRecord(catalog)
        quantities = {"APPLE": 3, "BANANA": 7, "GRAPE": 1, "WATERMELON": 11}
        for product_id, quantity in quantities.items():
            purchase.add_quantity(product_id, quantity)

        expected = sum(catalog.get_product(pid).subtotal(qty) for pid, qty in quantities.items())
        assert StandardPricingRule().calculate_total(purchase) == expected

    def test_rounding_happens_once_after_summation(self):
        catalog = Catalog().add("A", "A", "0.05").add("B", "B", "0.05").add("C", "C", "0.05")
        discounts = DiscountConfig(rates={"A": "0.9", "B": "0.9", "C": "0.9"})
        purchase = PurchaseRecord(catalog).add_quantity("A", 1).add_quantity("B", 1).add_quantity("C", 1)

        # each line is 0.045; rounding per line would give 0.15
        assert StandardPricingRule(discounts).calculate_total(purchase) == Decimal("0.14")

    def test_single_half_cent_rounds_up(self):
        catalog = Catalog().add("A", "A", "0.05")
        purchase = PurchaseRecord(catalog).add_quantity("A", 1)
        rule = StandardPricingRule(DiscountConfig(rates={"A": "0.9"}))
        assert rule.calculate_total(purchase) == Decimal("0.05")

    def test_removed_product_is_a_hard_failure(self, catalog, purchase):
        purchase.add_quantity("APPLE", 1).add_quantity("MANGO", 2)
        catalog.remove_product("MANGO")

        with pytest.raises(ProductNotFoundError) as excinfo:
            StandardPricingRule().calculate_total(purchase)
        assert excinfo.value.product_id == "MANGO"
        assert excinfo.value.error_code == "PRODUCT_NOT_FOUND"

    def test_price_update_is_seen_at_calculation_time(self, catalog, purchase):
        purchase.add_quantity("APPLE", 2)
        catalog.update_product_price("APPLE", "10.00")
        assert StandardPricingRule().calculate_total(purchase) == Decimal("20.00")

    def test_calculation_is_idempotent(self, purchase):
        purchase.add_quantity("APPLE", 3).add_quantity("STRAWBERRY", 2).add_quantity("MANGO", 1)
        rule = BulkDiscountRule(PromotionPricingRule(_strawberry_promo()))

        first = rule.calculate_total(purchase)
        second = rule.calculate_total(purchase)

        assert first == second
        assert purchase.as_dict() == {"APPLE": 3, "STRAWBERRY": 2, "MANGO": 1}

    def test_is_applicable(self, purchase):
        rule = StandardPricingRule()
        assert not rule.is_applicable(None)
        assert not rule.is_applicable(purchase)
        assert rule.is_applicable(purchase.add_quantity("APPLE", 1))


class TestPromotionPricing:
    def test_promotional_customer(self, purchase):
        purchase.add_quantity("APPLE", 1).add_quantity("STRAWBERRY", 2).add_quantity("MANGO", 1)
        assert PromotionPricingRule(_strawberry_promo()).calculate_total(purchase) == Decimal("48.80")

    def test_requires_discount_config(self):
        with pytest.raises(InvalidArgumentError):
            PromotionPricingRule(None)

    def test_call_time_config_takes_precedence(self, purchase):
        purchase.add_quantity("APPLE", 1)
        rule = PromotionPricingRule(DiscountConfig(rates={"APPLE": "0.5"}))
        assert rule.calculate_total(purchase) == Decimal("4.00")
        assert rule.calculate_total(purchase, discounts=DiscountConfig()) == Decimal("8.00")

    def test_multi_product_discounts(self):
        catalog = Catalog.extended()
        discounts = DiscountConfig(
            "complex",
            {"APPLE": "0.7", "STRAWBERRY": "0.6", "MANGO": "0.8", "ORANGE": "0.5", "BANANA": "0.4"},
        )
        purchase = PurchaseRecord(catalog)
        for product_id, quantity in [("APPLE", 2), ("STRAWBERRY", 1), ("MANGO", 1), ("ORANGE", 3), ("BANANA", 5)]:
            purchase.add_quantity(product_id, quantity)

        assert PromotionPricingRule(discounts).calculate_total(purchase) == Decimal("65.00")

    def test_description_mentions_rates(self):
        assert "STRAWBERRYx0.8" in PromotionPricingRule(_strawberry_promo()).description


class TestBulkDiscount:
    @pytest.mark.parametrize(
        "subtotal,expected",
        [
            ("99.20", "99.20"),
            ("99.99", "99.99"),
            ("100.00", "90.00"),
            ("100.01", "90.01"),
            ("107.20", "97.20"),
        ],
    )
    def test_threshold_is_inclusive(self, priced_catalog, subtotal, expected):
        purchase = PurchaseRecord(priced_catalog(subtotal)).add_quantity("ITEM", 1)
        rule = BulkDiscountRule(StandardPricingRule(), Decimal("100.00"), Decimal("10.00"))
        assert rule.calculate_total(purchase) == Decimal(expected)

    def test_defaults_are_100_and_10(self):
        rule = BulkDiscountRule(StandardPricingRule())
        assert rule.threshold == Decimal("100.00")
        assert rule.rebate == Decimal("10.00")

    def test_compares_against_discounted_total(self, purchase):
        # 5 apples (40) + 5 strawberries at 0.8 (52) + 1 mango (20) = 112 -> 102
        purchase.add_quantity("APPLE", 5).add_quantity("STRAWBERRY", 5).add_quantity("MANGO", 1)
        rule = BulkDiscountRule(PromotionPricingRule(_strawberry_promo()))
        assert rule.calculate_total(purchase) == Decimal("102.00")

    def test_discount_can_drop_total_below_threshold(self, purchase):
        # 8 strawberries: 104.00 full price, 83.20 with the promotion
        purchase.add_quantity("STRAWBERRY", 8)
        assert BulkDiscountRule(StandardPricingRule()).calculate_total(purchase) == Decimal("94.00")
        assert BulkDiscountRule(PromotionPricingRule(_strawberry_promo())).calculate_total(purchase) == Decimal("83.20")

    def test_decorators_stack(self, priced_catalog):
        purchase = PurchaseRecord(priced_catalog("100.00")).add_quantity("ITEM", 1)
        inner = BulkDiscountRule(StandardPricingRule(), "100", "10")
        outer = BulkDiscountRule(inner, "90", "5")
        assert outer.calculate_total(purchase) == Decimal("85.00")

        breakdown = outer.explain(purchase)
        assert [adj["delta"] for adj in breakdown["adjustments"]] == [Decimal("-10"), Decimal("-5")]
        assert set(breakdown["adjustments"][0]) == {"code", "description", "delta"}
        assert breakdown["adjustments"][1]["description"] == "5 off orders of 90 or more"

    def test_outer_layer_sees_rebated_total(self, priced_catalog):
        purchase = PurchaseRecord(priced_catalog("100.00")).add_quantity("ITEM", 1)
        outer = BulkDiscountRule(BulkDiscountRule(StandardPricingRule()), "95", "5")
        assert outer.calculate_total(purchase) == Decimal("90.00")

    @pytest.mark.parametrize("threshold,rebate", [("0", "10"), ("-1", "10"), ("100", "0"), ("100", "-5"), (None, "10")])
    def test_non_positive_terms_rejected(self, threshold, rebate):
        with pytest.raises(InvalidArgumentError):
            BulkDiscountRule(StandardPricingRule(), threshold, rebate)

    def test_base_rule_required(self):
        with pytest.raises(InvalidArgumentError):
            BulkDiscountRule(None)

    def test_empty_purchase_gets_no_rebate(self, purchase):
        assert BulkDiscountRule(StandardPricingRule()).calculate_total(purchase) == Decimal("0.00")

    def test_black_friday_big_basket(self):
        catalog = Catalog.extended()
        purchase = PurchaseRecord(catalog)
        for product_id, quantity in [("APPLE", 10), ("STRAWBERRY", 8), ("MANGO", 5), ("ORANGE", 6), ("BANANA", 15)]:
            purchase.add_quantity(product_id, quantity)
        promo = PromotionPricingRule(DiscountConfig.from_profile(BUILTIN_PROFILES["black-friday"]))

        assert promo.calculate_total(purchase) == Decimal("248.00")
        assert BulkDiscountRule(promo).calculate_total(purchase) == Decimal("238.00")


class TestExplain:
    def test_explain_total_matches_calculate_total(self, purchase):
        purchase.add_quantity("APPLE", 10).add_quantity("STRAWBERRY", 2).add_quantity("MANGO", 1)
        rule = BulkDiscountRule(PromotionPricingRule(_strawberry_promo()))

        breakdown = rule.explain(purchase)

        assert breakdown["total"] == rule.calculate_total(purchase) == Decimal("110.80")
        assert breakdown["subtotal"] == Decimal("120.80")
        assert breakdown["adjustments"][0]["code"] == ADJUSTMENT_BULK_REBATE
        lines = {line["product_id"]: line for line in breakdown["lines"]}
        assert lines["STRAWBERRY"]["discount_rate"] == Decimal("0.8")
        assert lines["STRAWBERRY"]["amount"] == Decimal("20.80")
        assert lines["APPLE"]["discount_rate"] == Decimal("1")

    def test_explain_below_threshold_has_no_adjustment(self, purchase):
        purchase.add_quantity("APPLE", 1)
        breakdown = BulkDiscountRule(StandardPricingRule()).explain(purchase)
        assert breakdown["adjustments"] == []
        assert breakdown["total"] == breakdown["subtotal"] == Decimal("8.00")


class TestRegistry:
    def test_build_standard_rule(self):
        assert isinstance(build_rule("standard"), StandardPricingRule)

    def test_build_promotion_with_bulk(self, purchase):
        rule = build_rule("promotion", _strawberry_promo(), ("100", "10"))
        assert isinstance(rule, BulkDiscountRule)
        assert isinstance(rule.base, PromotionPricingRule)

        purchase.add_quantity("STRAWBERRY", 10)
        assert rule.calculate_total(purchase) == Decimal("94.00")

    def test_unknown_kind(self):
        with pytest.raises(InvalidArgumentError) as excinfo:
            build_rule("clearance")
        assert "promotion" in excinfo.value.explanation

    def test_duplicate_registration_fails(self):
        class Impostor(PricingRule):
            type_name = "standard"

        with pytest.raises(ValueError):
            register(Impostor)
        assert rule_registry["standard"] is StandardPricingRule

    def test_base_rule_is_abstract(self, purchase):
        with pytest.raises(NotImplementedError):
            PricingRule().calculate_total(purchase)
