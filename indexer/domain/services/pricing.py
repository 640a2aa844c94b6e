from __future__ import annotations

from collections.abc import Collection, Iterable
from decimal import Decimal

from indexer.domain.entities.pool import ADDRESS_ZERO, Pool
from indexer.domain.entities.token import Token
from indexer.domain.services.fixed_point import ONE_BD, ZERO_BD, safe_div


def derived_native_price(
    token: Token,
    candidates: Iterable[tuple[Pool, Token]],
    *,
    wrapped_native_address: str,
    stablecoin_addresses: Collection[str],
    minimum_native_locked: Decimal,
    native_price_usd: Decimal,
) -> Decimal:
    """Price of ``token`` in native currency.

    ``candidates`` are the token's whitelist pools paired with the token on
    the other side. The deepest pool (by native value locked on the
    counterpart side) above ``minimum_native_locked`` sets the price. The
    walk is single hop: a token with no qualifying pool is unpriced (zero).
    """
    address = token.address.lower()
    if address == wrapped_native_address.lower() or address == ADDRESS_ZERO:
        return ONE_BD
    if address in stablecoin_addresses:
        return safe_div(ONE_BD, native_price_usd)

    largest_liquidity_native = ZERO_BD
    price_so_far = ZERO_BD
    for pool, counterpart in candidates:
        if pool.liquidity <= 0:
            continue
        if pool.token0 == token.id:
            native_locked = pool.total_value_locked_token1 * counterpart.derived_native_price
            if native_locked > largest_liquidity_native and native_locked > minimum_native_locked:
                largest_liquidity_native = native_locked
                price_so_far = pool.token1_price * counterpart.derived_native_price
        elif pool.token1 == token.id:
            native_locked = pool.total_value_locked_token0 * counterpart.derived_native_price
            if native_locked > largest_liquidity_native and native_locked > minimum_native_locked:
                largest_liquidity_native = native_locked
                price_so_far = pool.token0_price * counterpart.derived_native_price
    return price_so_far


def native_price_in_usd(
    reference_pool: Pool | None,
    *,
    stablecoin_is_token0: bool,
    previous: Decimal,
) -> Decimal:
    if reference_pool is None:
        return previous
    if stablecoin_is_token0:
        return reference_pool.token0_price
    return reference_pool.token1_price


def tracked_amount_usd(
    amount0: Decimal,
    token0: Token,
    amount1: Decimal,
    token1: Token,
    *,
    native_price_usd: Decimal,
    whitelist_tokens: Collection[str],
) -> Decimal:
    """USD value of a trade using only trust-anchored (whitelisted) legs.

    Both legs whitelisted: sum of both. One leg whitelisted: that leg doubled.
    Neither: zero, the trade only counts towards untracked volume.
    """
    price0_usd = token0.derived_native_price * native_price_usd
    price1_usd = token1.derived_native_price * native_price_usd
    token0_whitelisted = token0.address.lower() in whitelist_tokens
    token1_whitelisted = token1.address.lower() in whitelist_tokens

    if token0_whitelisted and token1_whitelisted:
        return amount0 * price0_usd + amount1 * price1_usd
    if token0_whitelisted:
        return amount0 * price0_usd * Decimal(2)
    if token1_whitelisted:
        return amount1 * price1_usd * Decimal(2)
    return ZERO_BD
