from __future__ import annotations

from indexer.domain.services.univ4_math import Q96, get_sqrt_ratio_at_tick


def _mul_div(a: int, b: int, denominator: int) -> int:
    return (a * b) // denominator


def _mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    return -((-(a * b)) // denominator)


def _div_rounding_up(a: int, b: int) -> int:
    return -((-a) // b)


def _amount0_delta_unsigned(sqrt_ratio_a: int, sqrt_ratio_b: int, liquidity: int, round_up: bool) -> int:
    if sqrt_ratio_a > sqrt_ratio_b:
        sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a
    if sqrt_ratio_a <= 0:
        # Uninitialized price; nothing can be priced against it.
        return 0

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b - sqrt_ratio_a
    if round_up:
        return _div_rounding_up(
            _mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b),
            sqrt_ratio_a,
        )
    return _mul_div(numerator1, numerator2, sqrt_ratio_b) // sqrt_ratio_a


def _amount1_delta_unsigned(sqrt_ratio_a: int, sqrt_ratio_b: int, liquidity: int, round_up: bool) -> int:
    if sqrt_ratio_a > sqrt_ratio_b:
        sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a
    if round_up:
        return _mul_div_rounding_up(liquidity, sqrt_ratio_b - sqrt_ratio_a, Q96)
    return _mul_div(liquidity, sqrt_ratio_b - sqrt_ratio_a, Q96)


def get_amount0_delta(*, sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """Signed token0 delta; positive liquidity rounds up, negative rounds down."""
    if liquidity < 0:
        return -_amount0_delta_unsigned(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False)
    return _amount0_delta_unsigned(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True)


def get_amount1_delta(*, sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """Signed token1 delta; positive liquidity rounds up, negative rounds down."""
    if liquidity < 0:
        return -_amount1_delta_unsigned(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False)
    return _amount1_delta_unsigned(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True)


def get_amount0(
    *,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    liquidity_delta: int,
    current_sqrt_price_x96: int,
) -> int:
    sqrt_ratio_b = get_sqrt_ratio_at_tick(tick_upper)
    if current_tick < tick_lower:
        return get_amount0_delta(
            sqrt_ratio_a_x96=get_sqrt_ratio_at_tick(tick_lower),
            sqrt_ratio_b_x96=sqrt_ratio_b,
            liquidity=liquidity_delta,
        )
    if current_tick < tick_upper:
        return get_amount0_delta(
            sqrt_ratio_a_x96=current_sqrt_price_x96,
            sqrt_ratio_b_x96=sqrt_ratio_b,
            liquidity=liquidity_delta,
        )
    return 0


def get_amount1(
    *,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    liquidity_delta: int,
    current_sqrt_price_x96: int,
) -> int:
    sqrt_ratio_a = get_sqrt_ratio_at_tick(tick_lower)
    if current_tick < tick_lower:
        return 0
    if current_tick < tick_upper:
        return get_amount1_delta(
            sqrt_ratio_a_x96=sqrt_ratio_a,
            sqrt_ratio_b_x96=current_sqrt_price_x96,
            liquidity=liquidity_delta,
        )
    return get_amount1_delta(
        sqrt_ratio_a_x96=sqrt_ratio_a,
        sqrt_ratio_b_x96=get_sqrt_ratio_at_tick(tick_upper),
        liquidity=liquidity_delta,
    )


def amounts_for_liquidity_delta(
    *,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    liquidity_delta: int,
    current_sqrt_price_x96: int,
) -> tuple[int, int]:
    """Raw signed token amounts implied by a liquidity delta over [tick_lower, tick_upper)."""
    amount0 = get_amount0(
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        current_tick=current_tick,
        liquidity_delta=liquidity_delta,
        current_sqrt_price_x96=current_sqrt_price_x96,
    )
    amount1 = get_amount1(
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        current_tick=current_tick,
        liquidity_delta=liquidity_delta,
        current_sqrt_price_x96=current_sqrt_price_x96,
    )
    return amount0, amount1
