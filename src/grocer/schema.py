"""Strict validation for raw product entries coming from config files or the CLI."""

from __future__ import annotations

from typing import Any

from .errors import InvalidArgumentError
from .types import Product


class ValidationError(InvalidArgumentError):
    """Raised when a product entry violates the entry schema."""


_REQUIRED_FIELDS: tuple[str, ...] = ("id", "name", "price")
_OPTIONAL_TEXT_FIELDS: tuple[str, ...] = ("category", "local_name")


def validate_product_entry(entry: dict[str, Any]) -> Product:
    """Validate one ``{"id", "name", "price", "category"?, "local_name"?}`` mapping."""

    if not isinstance(entry, dict):
        raise ValidationError(f"Product entry must be a table/object, got {type(entry).__name__}")

    for field_name in _REQUIRED_FIELDS:
        if field_name not in entry:
            raise ValidationError(f"Product entry missing required field '{field_name}'")

    for field_name in ("id", "name"):
        value = entry[field_name]
        if not isinstance(value, str):
            actual = type(value).__name__
            raise ValidationError(f"Invalid product field '{field_name}': expected str, got {actual}")
        if not value.strip():
            raise ValidationError(f"Invalid product field '{field_name}': must be non-empty string")

    for field_name in _OPTIONAL_TEXT_FIELDS:
        value = entry.get(field_name)
        if value is not None and not isinstance(value, str):
            actual = type(value).__name__
            raise ValidationError(f"Invalid product field '{field_name}': expected str, got {actual}")

    price = entry["price"]
    if isinstance(price, bool) or not isinstance(price, (str, int, float)):
        actual = type(price).__name__
        raise ValidationError(f"Invalid product field 'price': expected number or string, got {actual}")

    unknown = sorted(set(entry) - set(_REQUIRED_FIELDS) - set(_OPTIONAL_TEXT_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown product field(s): {', '.join(unknown)}")

    return Product(
        product_id=entry["id"].strip(),
        name=entry["name"].strip(),
        unit_price=price,
        category=entry.get("category"),
        local_name=entry.get("local_name"),
    )
