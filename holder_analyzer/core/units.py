"""Conversions between human token units and integer base units."""

import math
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

from .exceptions import InvalidInput


def to_token_units(amount: int, decimals: int) -> Decimal:
    """Base units -> exact Decimal token amount (e.g. 1500000, 6 -> 1.5)."""
    with localcontext() as ctx:
        ctx.prec = max(80, len(str(amount)) + decimals + 2)
        return Decimal(amount).scaleb(-decimals)


def to_base_units(amount: Any, decimals: int, field: str = "amount") -> int:
    """
    Token units -> base units, rounding up.

    Used for minimum-balance filters, where "at least 0.5 tokens" must not
    let through a holder with fewer base units than that.
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise InvalidInput(field, amount, "not a number")
    if not value.is_finite():
        raise InvalidInput(field, amount, "must be finite")
    if value < 0:
        raise InvalidInput(field, amount, "must be non-negative")
    with localcontext() as ctx:
        ctx.prec = max(80, len(str(value)) + decimals + 2)
        return math.ceil(value.scaleb(decimals))
