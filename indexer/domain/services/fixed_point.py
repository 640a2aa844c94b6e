from __future__ import annotations

from contextlib import contextmanager
from decimal import (
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    localcontext,
)
from typing import Iterator


# Wide enough for any uint256 (78 digits) plus fractional headroom.
PRECISION = 96

ZERO_BD = Decimal("0")
ONE_BD = Decimal("1")

DECIMAL_CONTEXT = Context(
    prec=PRECISION,
    rounding=ROUND_HALF_EVEN,
    traps=[DivisionByZero, InvalidOperation, Overflow],
)


@contextmanager
def decimal_context() -> Iterator[Context]:
    with localcontext(DECIMAL_CONTEXT) as ctx:
        yield ctx


def exponent_to_decimal(decimals: int) -> Decimal:
    return ONE_BD.scaleb(decimals)


def convert_token_to_decimal(amount: int, decimals: int) -> Decimal:
    if decimals == 0:
        return Decimal(amount)
    return Decimal(amount).scaleb(-decimals)


def safe_div(amount0: Decimal, amount1: Decimal) -> Decimal:
    """Divide, returning zero when the divisor is zero.

    Unset reference prices are normal early in a chain's history, so a zero
    divisor is treated as "no value" instead of an error.
    """
    if amount1 == ZERO_BD:
        return ZERO_BD
    return amount0 / amount1


def fee_fraction(amount: Decimal, fee_tier_ppm: int) -> Decimal:
    return amount * Decimal(fee_tier_ppm) / Decimal(1_000_000)


def fee_rate(fee_tier_ppm: int) -> Decimal:
    return Decimal(fee_tier_ppm) / Decimal(1_000_000)
