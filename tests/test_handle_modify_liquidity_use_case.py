from __future__ import annotations

from decimal import Decimal

import pytest

from indexer.domain.entities.bundle import Bundle
from indexer.domain.entities.events import ModifyLiquidity
from indexer.domain.entities.pool_manager import HookStats, PoolManager
from indexer.domain.entities.tick import Tick
from indexer.domain.exceptions import InvalidEventError
from indexer.domain.services.fixed_point import decimal_context
from tests.builders import (
    CHAIN_ID,
    ETH,
    HOOK,
    MANAGER,
    REF_POOL_ID,
    TKN,
    TKN_POOL_ID,
    USD,
    World,
    modify_event,
)


def test_in_range_position_updates_active_liquidity_and_ticks():
    world = World()
    pool_key = f"{CHAIN_ID}_{REF_POOL_ID}"

    pool = world.pool(REF_POOL_ID)
    assert pool.liquidity == 10**21
    assert pool.total_value_locked_token0 > 0
    assert pool.total_value_locked_token1 > 0

    lower = world.store.get(Tick, f"{pool_key}#73000")
    upper = world.store.get(Tick, f"{pool_key}#74000")
    assert (lower.liquidity_gross, lower.liquidity_net) == (10**21, 10**21)
    assert (upper.liquidity_gross, upper.liquidity_net) == (10**21, -(10**21))


def test_out_of_range_position_keeps_active_liquidity_but_moves_tvl():
    world = World()
    before = world.pool(TKN_POOL_ID)

    changes = world.modify.execute(
        modify_event(pool_id=TKN_POOL_ID, tick_lower=50000, tick_upper=51000, liquidity_delta=10**20, log_index=9)
    )

    assert changes is not None
    pool = world.pool(TKN_POOL_ID)
    assert pool.liquidity == before.liquidity
    assert pool.total_value_locked_token0 > before.total_value_locked_token0
    assert pool.total_value_locked_token1 == before.total_value_locked_token1
    [record] = changes.of_type(ModifyLiquidity)
    assert record.amount1 == Decimal(0)
    assert record.amount0 > 0


def test_removing_liquidity_reverses_ticks_and_liquidity():
    world = World()
    before = world.pool(REF_POOL_ID)

    world.modify.execute(
        modify_event(pool_id=REF_POOL_ID, tick_lower=73000, tick_upper=74000, liquidity_delta=-(10**21), log_index=5)
    )

    pool = world.pool(REF_POOL_ID)
    assert pool.liquidity == 0
    assert pool.total_value_locked_token0 < before.total_value_locked_token0
    # Removal rounds down, so at most one wei per token stays behind.
    assert Decimal(0) <= pool.total_value_locked_token0 <= Decimal("1e-18")
    assert Decimal(0) <= pool.total_value_locked_token1 <= Decimal("1e-18")
    lower = world.store.get(Tick, f"{CHAIN_ID}_{REF_POOL_ID}#73000")
    assert (lower.liquidity_gross, lower.liquidity_net) == (0, 0)


def test_record_is_valued_at_stored_prices():
    world = World()
    [record] = [
        entity
        for entity in world.store.all(ModifyLiquidity)
        if entity.pool == f"{CHAIN_ID}_{REF_POOL_ID}"
    ]

    assert record.id == f"{CHAIN_ID}_{'0x' + format(10, '064x')}_0"
    assert record.amount == 10**21
    assert record.origin == "0x" + "ee" * 20
    with decimal_context():
        expected = (record.amount0 * Decimal(1) + record.amount1 * Decimal("0.000625")) * Decimal("1600")
        assert record.amount_usd == expected


def test_token_tvl_follows_position_amounts():
    world = World()
    eth = world.token(ETH)
    usd = world.token(USD)
    ref = world.pool(REF_POOL_ID)
    tkn_pool = world.pool(TKN_POOL_ID)

    with decimal_context():
        assert eth.total_value_locked == ref.total_value_locked_token0 + tkn_pool.total_value_locked_token0
    assert usd.total_value_locked == ref.total_value_locked_token1
    assert world.token(TKN).total_value_locked == tkn_pool.total_value_locked_token1


def test_manager_tvl_matches_pools_and_counts_transactions():
    world = World()

    manager = world.store.get(PoolManager, f"{CHAIN_ID}_{MANAGER}")
    assert manager.tx_count == 2
    with decimal_context():
        total = world.pool(REF_POOL_ID).total_value_locked_eth + world.pool(TKN_POOL_ID).total_value_locked_eth
        assert manager.total_value_locked_eth == total
        assert manager.total_value_locked_usd == total * Decimal("1600")


def test_hook_stats_only_track_tvl():
    world = World(tkn_hooks=HOOK)

    hook = world.store.get(HookStats, f"{CHAIN_ID}_{HOOK}")
    assert hook.total_value_locked_usd == world.pool(TKN_POOL_ID).total_value_locked_usd
    assert hook.number_of_swaps == 0
    assert hook.total_volume_usd == Decimal(0)


def test_inverted_range_is_rejected():
    world = World()
    with pytest.raises(InvalidEventError):
        world.modify.execute(modify_event(pool_id=REF_POOL_ID, tick_lower=100, tick_upper=100, liquidity_delta=1))


def test_missing_bundle_is_noop():
    world = World()
    del world.store.rows[(Bundle, str(CHAIN_ID))]
    commits = len(world.store.commits)

    result = world.modify.execute(
        modify_event(pool_id=REF_POOL_ID, tick_lower=73000, tick_upper=74000, liquidity_delta=1, log_index=7)
    )

    assert result is None
    assert len(world.store.commits) == commits


def test_unknown_pool_is_noop():
    world = World()
    commits = len(world.store.commits)

    assert (
        world.modify.execute(
            modify_event(pool_id="0x" + "99" * 32, tick_lower=-60, tick_upper=60, liquidity_delta=1)
        )
        is None
    )
    assert len(world.store.commits) == commits


def test_preload_does_not_create_ticks():
    world = World()
    commits = len(world.store.commits)

    result = world.modify.execute(
        modify_event(pool_id=TKN_POOL_ID, tick_lower=-600, tick_upper=600, liquidity_delta=5),
        preload=True,
    )

    assert result is None
    assert len(world.store.commits) == commits
    assert world.store.get(Tick, f"{CHAIN_ID}_{TKN_POOL_ID}#-600") is None
    assert world.token(TKN).tx_count == 1
