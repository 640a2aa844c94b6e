from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from indexer.domain.entities.pool import Pool
from indexer.domain.entities.pool_manager import HookStats, PoolManager
from indexer.domain.entities.token import Token


def pool_tvl_native(pool: Pool, token0: Token, token1: Token) -> Decimal:
    return (
        pool.total_value_locked_token0 * token0.derived_native_price
        + pool.total_value_locked_token1 * token1.derived_native_price
    )


def recompute_pool_tvl(pool: Pool, token0: Token, token1: Token, native_price_usd: Decimal) -> Pool:
    """Derive the pool's native and USD TVL from its token balances."""
    tvl_native = pool_tvl_native(pool, token0, token1)
    return replace(
        pool,
        total_value_locked_eth=tvl_native,
        total_value_locked_usd=tvl_native * native_price_usd,
    )


def recompute_token_tvl_usd(token: Token, native_price_usd: Decimal) -> Token:
    return replace(
        token,
        total_value_locked_usd=token.total_value_locked * token.derived_native_price * native_price_usd,
    )


def roll_manager_tvl(
    manager: PoolManager,
    *,
    previous_pool_tvl_eth: Decimal,
    pool: Pool,
    native_price_usd: Decimal,
) -> PoolManager:
    """Swap the pool's previous native TVL contribution for its new one."""
    tvl_eth = manager.total_value_locked_eth - previous_pool_tvl_eth + pool.total_value_locked_eth
    return replace(
        manager,
        total_value_locked_eth=tvl_eth,
        total_value_locked_usd=tvl_eth * native_price_usd,
    )


def roll_hook_tvl(hook_stats: HookStats, *, previous_pool_tvl_usd: Decimal, pool: Pool) -> HookStats:
    return replace(
        hook_stats,
        total_value_locked_usd=hook_stats.total_value_locked_usd
        - previous_pool_tvl_usd
        + pool.total_value_locked_usd,
    )
