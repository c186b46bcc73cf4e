"""Platform margin calculation - pure, deterministic, no side effects"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, getcontext
from typing import Optional, Union

from foodledger.models.enums import MarginType
from foodledger.services.errors import InvalidMarginInput

getcontext().prec = 28

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(
    value: Optional[Number],
    default: Decimal = ZERO,
    error: type = InvalidMarginInput,
) -> Decimal:
    """Convert a stored number to Decimal via str() so floats keep their printed value"""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise error(f"Not a number: {value!r}") from e
    if not result.is_finite():
        raise error(f"Not a finite number: {value!r}")
    return result


def resolve_margin_type(margin_type: Optional[Union[MarginType, str]]) -> MarginType:
    """Unset margin type means percent"""
    if margin_type is None:
        return MarginType.PERCENT
    if isinstance(margin_type, MarginType):
        return margin_type
    try:
        return MarginType(margin_type)
    except ValueError as e:
        raise InvalidMarginInput(f"Unknown margin type: {margin_type!r}") from e


def compute_margin(
    base_price: Number,
    margin_type: Optional[Union[MarginType, str]] = None,
    margin_value: Optional[Number] = None,
) -> Decimal:
    """
    Platform markup for one unit.

    Args:
        base_price: Cook's base price, must be >= 0
        margin_type: "percent" (of base_price) or "fixed" (flat amount); None means percent
        margin_value: Percentage or flat amount, must be >= 0; None means 0

    Returns:
        Margin amount (never negative)

    Raises:
        InvalidMarginInput: negative base_price or margin_value, or unknown margin_type
    """
    price = to_decimal(base_price)
    value = to_decimal(margin_value)
    mode = resolve_margin_type(margin_type)

    if price < ZERO:
        raise InvalidMarginInput(f"Base price must be >= 0, got {price}")
    if value < ZERO:
        raise InvalidMarginInput(f"Margin value must be >= 0, got {value}")

    if mode is MarginType.FIXED:
        return value
    return price * value / HUNDRED
