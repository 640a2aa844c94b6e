from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from indexer.domain.entities.pool import ADDRESS_ZERO
from indexer.domain.entities.token import Token
from indexer.domain.services.fixed_point import ONE_BD, exponent_to_decimal, safe_div


Q96 = 2**96
Q192 = 2**192
MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342
TICK_BASE = Decimal("1.0001")

_TICK_RATIO_FACTORS = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)


@dataclass(frozen=True)
class NativeTokenDetails:
    symbol: str
    name: str
    decimals: int


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """Exact protocol TickMath: sqrt(1.0001^tick) as Q64.96, rounded up."""
    if tick < MIN_TICK or tick > MAX_TICK:
        raise ValueError(f"tick out of range: {tick}")

    abs_tick = abs(tick)
    ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001 if abs_tick & 0x1 else 1 << 128
    for mask, factor in _TICK_RATIO_FACTORS:
        if abs_tick & mask:
            ratio = (ratio * factor) >> 128

    if tick > 0:
        ratio = ((1 << 256) - 1) // ratio

    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def token_decimals(token: Token, native_token_details: NativeTokenDetails) -> int:
    if token.address.lower() == ADDRESS_ZERO:
        return native_token_details.decimals
    return token.decimals


def sqrt_price_x96_to_token_prices(
    sqrt_price_x96: int,
    token0: Token,
    token1: Token,
    native_token_details: NativeTokenDetails,
) -> tuple[Decimal, Decimal]:
    """Return (token0_price, token1_price) for a pool's sqrt price.

    token1_price is the amount of token1 per token0 and token0_price its
    inverse, both adjusted for each token's decimals.
    """
    numerator = Decimal(sqrt_price_x96) * Decimal(sqrt_price_x96)
    denominator = Decimal(Q192)
    decimals0 = token_decimals(token0, native_token_details)
    decimals1 = token_decimals(token1, native_token_details)

    price1 = safe_div(
        safe_div(numerator, denominator) * exponent_to_decimal(decimals0),
        exponent_to_decimal(decimals1),
    )
    price0 = safe_div(ONE_BD, price1)
    return price0, price1


def tick_to_prices(tick: int) -> tuple[Decimal, Decimal]:
    price0 = TICK_BASE**tick
    return price0, safe_div(ONE_BD, price0)
