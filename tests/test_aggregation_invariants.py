from __future__ import annotations

from decimal import Decimal

from indexer.domain.entities.pool import Pool
from indexer.domain.entities.pool_manager import HookStats, PoolManager
from indexer.domain.entities.token import Token
from indexer.domain.services.fixed_point import decimal_context
from indexer.domain.services.tvl import pool_tvl_native
from indexer.domain.services.univ4_math import Q96
from tests.builders import (
    CHAIN_ID,
    ETH,
    HOOK,
    MANAGER,
    REF_POOL_ID,
    REF_SQRT_PRICE,
    REF_TICK,
    TKN,
    TKN_POOL_2_ID,
    TKN_POOL_ID,
    USD,
    World,
    initialize_event,
    modify_event,
    swap_event,
)


TOLERANCE = Decimal("1e-60")


def _replay_swaps(world: World, count: int) -> None:
    for index in range(count):
        if index % 2 == 0:
            amount0, amount1 = -(10**17), 9 * 10**18
        else:
            amount0, amount1 = 10**17, -10 * 10**18
        world.swap.execute(
            swap_event(
                pool_id=TKN_POOL_ID,
                amount0=amount0,
                amount1=amount1,
                sqrt_price_x96=10 * Q96 + index,
                block_number=1_000 + index,
            )
        )
        if index % 50 == 0:
            world.swap.execute(
                swap_event(
                    pool_id=REF_POOL_ID,
                    amount0=-(10**15),
                    amount1=16 * 10**17 - index,
                    sqrt_price_x96=REF_SQRT_PRICE - index,
                    tick=REF_TICK,
                    block_number=1_000 + index,
                    log_index=1,
                )
            )


def _stored_pools(world: World) -> list[Pool]:
    return world.store.all(Pool)


def test_pool_tvl_matches_token_prices_after_many_swaps():
    world = World()

    _replay_swaps(world, 2000)

    for pool in _stored_pools(world):
        token0 = world.store.get(Token, pool.token0)
        token1 = world.store.get(Token, pool.token1)
        with decimal_context():
            assert pool.total_value_locked_eth == pool_tvl_native(pool, token0, token1)
    assert world.pool(TKN_POOL_ID).tx_count == 2000


def test_manager_tvl_equals_sum_of_pool_tvl():
    world = World()

    _replay_swaps(world, 400)

    manager = world.store.get(PoolManager, f"{CHAIN_ID}_{MANAGER}")
    with decimal_context():
        total = sum((pool.total_value_locked_eth for pool in _stored_pools(world)), Decimal(0))
        assert abs(manager.total_value_locked_eth - total) <= TOLERANCE


def test_hook_tvl_equals_sum_of_its_pools():
    world = World(tkn_hooks=HOOK)
    world.initialize.execute(
        initialize_event(
            pool_id=TKN_POOL_2_ID,
            currency0=ETH,
            currency1=TKN,
            sqrt_price_x96=10 * Q96,
            tick=46054,
            fee=500,
            hooks=HOOK,
            block_number=3,
        )
    )
    world.modify.execute(
        modify_event(pool_id=TKN_POOL_2_ID, tick_lower=45000, tick_upper=47000, liquidity_delta=10**20, log_index=4)
    )

    _replay_swaps(world, 200)
    world.swap.execute(
        swap_event(pool_id=TKN_POOL_2_ID, amount0=-(10**16), amount1=10**18, block_number=5_000)
    )

    hook = world.store.get(HookStats, f"{CHAIN_ID}_{HOOK}")
    hooked = [pool for pool in _stored_pools(world) if pool.hooks == HOOK]
    assert len(hooked) == 2
    assert hook.number_of_pools == 2
    with decimal_context():
        total = sum((pool.total_value_locked_usd for pool in hooked), Decimal(0))
        assert abs(hook.total_value_locked_usd - total) <= TOLERANCE


def test_swapped_tokens_stay_priced():
    world = World()

    _replay_swaps(world, 100)

    assert world.token(ETH).derived_native_price == Decimal(1)
    assert world.token(TKN).derived_native_price > 0
    assert world.token(USD).derived_native_price > 0
