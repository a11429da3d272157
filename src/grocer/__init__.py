"""grocer - supermarket pricing with catalogs, discount profiles and bulk rebates"""

__version__ = "0.1.0"

from grocer.catalog import Catalog
from grocer.discounts import DiscountConfig
from grocer.errors import ConfigError, GrocerError, InvalidArgumentError, ProductNotFoundError
from grocer.purchase import PurchaseRecord
from grocer.rules import BulkDiscountRule, PricingRule, PromotionPricingRule, StandardPricingRule, build_rule
from grocer.service import PricingService
from grocer.types import Product

__all__ = [
    "BulkDiscountRule",
    "Catalog",
    "ConfigError",
    "DiscountConfig",
    "GrocerError",
    "InvalidArgumentError",
    "PricingRule",
    "PricingService",
    "Product",
    "ProductNotFoundError",
    "PromotionPricingRule",
    "PurchaseRecord",
    "StandardPricingRule",
    "build_rule",
]
