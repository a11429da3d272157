"""Decimal helpers shared by every monetary computation.

All amounts are ``decimal.Decimal``. Caller input is coerced through ``str`` so
that a float literal such as ``0.8`` becomes ``Decimal("0.8")`` rather than its
binary expansion.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .errors import InvalidArgumentError

D = Decimal

ZERO = D("0.00")
ONE = D("1")
CENT = D("0.01")


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """Coerce ``value`` to a finite Decimal or raise InvalidArgumentError."""
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError(f"{field_name} is required, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = D(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise InvalidArgumentError(f"{field_name} is not a decimal number: {value!r}") from exc
    if not result.is_finite():
        raise InvalidArgumentError(f"{field_name} must be finite, got {value!r}")
    return result


def to_money(value: Decimal) -> Decimal:
    """Quantize to two places with ROUND_HALF_UP."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal, currency: str = "") -> str:
    text = f"{to_money(value):.2f}"
    return f"{text} {currency}" if currency else text
