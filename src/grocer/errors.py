"""Structured error taxonomy for catalog, purchase and pricing failures."""

from __future__ import annotations


class GrocerError(Exception):
    """Base class for all grocer domain exceptions."""

    def __init__(self, error_code: str, category: str, explanation: str):
        self.error_code = error_code
        self.category = category
        self.explanation = explanation
        super().__init__(f"[{self.category}:{self.error_code}] {self.explanation}")


class InvalidArgumentError(GrocerError, ValueError):
    """Raised for rejected input: negative quantities, bad rates, malformed products."""

    def __init__(self, explanation: str):
        super().__init__("INVALID_ARGUMENT", "INPUT", explanation)


class ProductNotFoundError(GrocerError, LookupError):
    """A purchase line references a product that is no longer in the catalog.

    Raised at calculation time. The line item is never skipped or priced at zero.
    """

    def __init__(self, product_id: str, explanation: str | None = None):
        self.product_id = product_id
        super().__init__(
            "PRODUCT_NOT_FOUND",
            "CATALOG",
            explanation or f"Product '{product_id}' is not in the catalog",
        )


class ConfigError(GrocerError):
    def __init__(self, explanation: str):
        super().__init__("CONFIG", "CONFIG", explanation)
