from __future__ import annotations

import logging
from dataclasses import replace

from indexer.application.dto.events import EventChanges, ModifyLiquidityEventInput
from indexer.application.ports.entity_store_port import EntityStorePort
from indexer.domain.entities.bundle import Bundle, bundle_id
from indexer.domain.entities.events import ModifyLiquidity, modify_liquidity_id
from indexer.domain.entities.pool import Pool, pool_entity_id
from indexer.domain.entities.pool_manager import HookStats, PoolManager, hook_stats_id, pool_manager_id
from indexer.domain.entities.tick import Tick, tick_id
from indexer.domain.entities.token import Token
from indexer.domain.exceptions import InvalidEventError
from indexer.domain.services.fixed_point import convert_token_to_decimal, decimal_context
from indexer.domain.services.liquidity_amounts import amounts_for_liquidity_delta
from indexer.domain.services.tick_ledger import apply_liquidity_delta, create_initial_tick
from indexer.domain.services.tvl import (
    recompute_pool_tvl,
    recompute_token_tvl_usd,
    roll_hook_tvl,
    roll_manager_tvl,
)
from indexer.shared.chains import ChainConfigRegistry


logger = logging.getLogger(__name__)


class HandleModifyLiquidityUseCase:
    def __init__(self, *, store: EntityStorePort, chains: ChainConfigRegistry):
        self._store = store
        self._chains = chains

    def execute(self, event: ModifyLiquidityEventInput, *, preload: bool = False) -> EventChanges | None:
        ctx = event.context
        if event.tick_lower >= event.tick_upper:
            raise InvalidEventError(
                f"tick_lower must be below tick_upper (got {event.tick_lower}, {event.tick_upper})."
            )

        chain_config = self._chains.get(ctx.chain_id)
        if chain_config.is_pool_skipped(event.pool_id):
            self._log_skip("pool_skipped", event)
            return None

        pool = self._store.get(Pool, pool_entity_id(ctx.chain_id, event.pool_id))
        if pool is None:
            self._log_skip("pool_not_found", event)
            return None

        token0 = self._store.get(Token, pool.token0)
        token1 = self._store.get(Token, pool.token1)
        bundle = self._store.get(Bundle, bundle_id(ctx.chain_id))
        manager = self._store.get(PoolManager, pool_manager_id(ctx.chain_id, ctx.src_address))
        if token0 is None or token1 is None or bundle is None or manager is None:
            self._log_skip("dependency_not_found", event)
            return None

        hook_stats = (
            self._store.get(HookStats, hook_stats_id(ctx.chain_id, pool.hooks)) if pool.is_hooked else None
        )
        lower_tick = self._store.get(Tick, tick_id(pool.id, event.tick_lower))
        upper_tick = self._store.get(Tick, tick_id(pool.id, event.tick_upper))

        if preload:
            return None

        with decimal_context():
            if lower_tick is None:
                lower_tick = create_initial_tick(
                    chain_id=ctx.chain_id,
                    pool_id=pool.id,
                    tick_idx=event.tick_lower,
                    block_timestamp=ctx.block_timestamp,
                    block_number=ctx.block_number,
                )
            if upper_tick is None:
                upper_tick = create_initial_tick(
                    chain_id=ctx.chain_id,
                    pool_id=pool.id,
                    tick_idx=event.tick_upper,
                    block_timestamp=ctx.block_timestamp,
                    block_number=ctx.block_number,
                )
            lower_tick, upper_tick = apply_liquidity_delta(lower_tick, upper_tick, event.liquidity_delta)

            current_tick = pool.current_tick()
            amount0_raw, amount1_raw = amounts_for_liquidity_delta(
                tick_lower=event.tick_lower,
                tick_upper=event.tick_upper,
                current_tick=current_tick,
                liquidity_delta=event.liquidity_delta,
                current_sqrt_price_x96=pool.current_sqrt_price(),
            )
            amount0 = convert_token_to_decimal(amount0_raw, token0.decimals)
            amount1 = convert_token_to_decimal(amount1_raw, token1.decimals)

            # Liquidity events value amounts at stored prices; only swaps re-derive them.
            amount_usd = (
                amount0 * token0.derived_native_price + amount1 * token1.derived_native_price
            ) * bundle.native_price_usd

            pool = replace(
                pool,
                total_value_locked_token0=pool.total_value_locked_token0 + amount0,
                total_value_locked_token1=pool.total_value_locked_token1 + amount1,
            )
            if event.tick_lower <= current_tick < event.tick_upper:
                pool = replace(pool, liquidity=pool.liquidity + event.liquidity_delta)

            token0 = recompute_token_tvl_usd(
                replace(
                    token0,
                    total_value_locked=token0.total_value_locked + amount0,
                    tx_count=token0.tx_count + 1,
                ),
                bundle.native_price_usd,
            )
            token1 = recompute_token_tvl_usd(
                replace(
                    token1,
                    total_value_locked=token1.total_value_locked + amount1,
                    tx_count=token1.tx_count + 1,
                ),
                bundle.native_price_usd,
            )

            previous_pool_tvl_eth = pool.total_value_locked_eth
            previous_pool_tvl_usd = pool.total_value_locked_usd
            pool = recompute_pool_tvl(pool, token0, token1, bundle.native_price_usd)

            manager = roll_manager_tvl(
                replace(manager, tx_count=manager.tx_count + 1),
                previous_pool_tvl_eth=previous_pool_tvl_eth,
                pool=pool,
                native_price_usd=bundle.native_price_usd,
            )
            if hook_stats is not None:
                hook_stats = roll_hook_tvl(
                    hook_stats,
                    previous_pool_tvl_usd=previous_pool_tvl_usd,
                    pool=pool,
                )

            record = ModifyLiquidity(
                id=modify_liquidity_id(ctx.chain_id, ctx.transaction_hash, ctx.log_index),
                chain_id=ctx.chain_id,
                transaction=ctx.transaction_hash,
                timestamp=ctx.block_timestamp,
                pool=pool.id,
                token0=token0.id,
                token1=token1.id,
                sender=event.sender,
                origin=ctx.origin,
                amount=event.liquidity_delta,
                amount0=amount0,
                amount1=amount1,
                amount_usd=amount_usd,
                tick_lower=event.tick_lower,
                tick_upper=event.tick_upper,
                log_index=ctx.log_index,
            )

        entities: list[object] = [lower_tick, upper_tick, record, manager, pool, token0, token1]
        if hook_stats is not None:
            entities.append(hook_stats)
        self._store.commit(entities)
        logger.debug(
            "handle_modify_liquidity: applied chain_id=%s pool=%s tick_lower=%s tick_upper=%s liquidity_delta=%s",
            ctx.chain_id,
            pool.id,
            event.tick_lower,
            event.tick_upper,
            event.liquidity_delta,
        )
        return EventChanges(entities=entities)

    @staticmethod
    def _log_skip(reason: str, event: ModifyLiquidityEventInput) -> None:
        logger.debug(
            "handle_modify_liquidity: skipped reason=%s chain_id=%s pool_id=%s block=%s log_index=%s",
            reason,
            event.context.chain_id,
            event.pool_id,
            event.context.block_number,
            event.context.log_index,
        )
