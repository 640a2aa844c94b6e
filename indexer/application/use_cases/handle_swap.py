from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal

from indexer.application.dto.events import EventChanges, SwapEventInput
from indexer.application.ports.entity_store_port import EntityStorePort
from indexer.application.use_cases.price_discovery import find_native_per_token, load_native_price_in_usd
from indexer.domain.entities.bundle import Bundle, bundle_id
from indexer.domain.entities.events import Swap, swap_id
from indexer.domain.entities.pool import Pool, pool_entity_id
from indexer.domain.entities.pool_manager import HookStats, PoolManager, hook_stats_id, pool_manager_id
from indexer.domain.entities.token import Token
from indexer.domain.services.fixed_point import ZERO_BD, decimal_context
from indexer.domain.services.swap_valuation import SwapValuation, value_swap
from indexer.domain.services.tvl import (
    recompute_pool_tvl,
    recompute_token_tvl_usd,
    roll_hook_tvl,
    roll_manager_tvl,
)
from indexer.domain.services.univ4_math import sqrt_price_x96_to_token_prices
from indexer.shared.chains import ChainConfigRegistry


logger = logging.getLogger(__name__)


class HandleSwapUseCase:
    def __init__(self, *, store: EntityStorePort, chains: ChainConfigRegistry):
        self._store = store
        self._chains = chains

    def execute(self, event: SwapEventInput, *, preload: bool = False) -> EventChanges | None:
        ctx = event.context
        chain_config = self._chains.get(ctx.chain_id)

        manager = self._store.get(PoolManager, pool_manager_id(ctx.chain_id, ctx.src_address))
        pool = self._store.get(Pool, pool_entity_id(ctx.chain_id, event.pool_id))
        bundle = self._store.get(Bundle, bundle_id(ctx.chain_id))
        if pool is None or manager is None:
            self._log_skip("pool_or_manager_not_found", event)
            return None

        token0 = self._store.get(Token, pool.token0)
        token1 = self._store.get(Token, pool.token1)
        hook_stats = (
            self._store.get(HookStats, hook_stats_id(ctx.chain_id, pool.hooks)) if pool.is_hooked else None
        )
        if token0 is None or token1 is None:
            self._log_skip("token_not_found", event)
            return None

        if chain_config.is_pool_skipped(event.pool_id):
            self._log_skip("pool_skipped", event)
            return None

        if bundle is None:
            bundle = Bundle(id=bundle_id(ctx.chain_id), native_price_usd=ZERO_BD)

        with decimal_context():
            token0 = replace(
                token0,
                derived_native_price=find_native_per_token(
                    self._store,
                    token0,
                    chain_config,
                    native_price_usd=bundle.native_price_usd,
                ),
            )
            token1 = replace(
                token1,
                derived_native_price=find_native_per_token(
                    self._store,
                    token1,
                    chain_config,
                    native_price_usd=bundle.native_price_usd,
                ),
            )
            native_price_usd = load_native_price_in_usd(
                self._store,
                chain_config,
                previous=bundle.native_price_usd,
            )

            if preload:
                return None

            token0_price, token1_price = sqrt_price_x96_to_token_prices(
                event.sqrt_price_x96,
                token0,
                token1,
                chain_config.native_token_details,
            )
            valuation = value_swap(
                raw_amount0=event.amount0,
                raw_amount1=event.amount1,
                token0=token0,
                token1=token1,
                fee_tier=pool.fee_tier,
                native_price_usd=native_price_usd,
                whitelist_tokens=chain_config.whitelist_tokens,
            )

            previous_pool_tvl_eth = pool.total_value_locked_eth
            previous_pool_tvl_usd = pool.total_value_locked_usd
            pool = replace(
                pool,
                tx_count=pool.tx_count + 1,
                sqrt_price=event.sqrt_price_x96,
                tick=event.tick,
                token0_price=token0_price,
                token1_price=token1_price,
                liquidity=event.liquidity,
                total_value_locked_token0=pool.total_value_locked_token0 + valuation.amount0,
                total_value_locked_token1=pool.total_value_locked_token1 + valuation.amount1,
                volume_token0=pool.volume_token0 + valuation.amount0_abs,
                volume_token1=pool.volume_token1 + valuation.amount1_abs,
                volume_usd=pool.volume_usd + valuation.amount_total_usd_tracked,
                untracked_volume_usd=pool.untracked_volume_usd + valuation.amount_total_usd_untracked,
                fees_usd=pool.fees_usd + valuation.fees_usd,
                fees_usd_untracked=pool.fees_usd_untracked + valuation.fees_usd_untracked,
                collected_fees_token0=pool.collected_fees_token0 + valuation.fees_token0,
                collected_fees_token1=pool.collected_fees_token1 + valuation.fees_token1,
                collected_fees_usd=pool.collected_fees_usd + valuation.fees_usd,
            )
            pool = recompute_pool_tvl(pool, token0, token1, native_price_usd)

            token0 = self._apply_token_swap(
                token0,
                amount=valuation.amount0,
                amount_abs=valuation.amount0_abs,
                valuation=valuation,
                native_price_usd=native_price_usd,
            )
            token1 = self._apply_token_swap(
                token1,
                amount=valuation.amount1,
                amount_abs=valuation.amount1_abs,
                valuation=valuation,
                native_price_usd=native_price_usd,
            )

            manager = replace(
                manager,
                tx_count=manager.tx_count + 1,
                total_volume_eth=manager.total_volume_eth + valuation.amount_total_eth_tracked,
                total_volume_usd=manager.total_volume_usd + valuation.amount_total_usd_tracked,
                untracked_volume_usd=manager.untracked_volume_usd + valuation.amount_total_usd_untracked,
                total_fees_eth=manager.total_fees_eth + valuation.fees_eth,
                total_fees_usd=manager.total_fees_usd + valuation.fees_usd,
                number_of_swaps=manager.number_of_swaps + 1,
                hooked_swaps=manager.hooked_swaps + 1 if pool.is_hooked else manager.hooked_swaps,
            )
            manager = roll_manager_tvl(
                manager,
                previous_pool_tvl_eth=previous_pool_tvl_eth,
                pool=pool,
                native_price_usd=native_price_usd,
            )

            if hook_stats is not None:
                hook_stats = replace(
                    hook_stats,
                    number_of_swaps=hook_stats.number_of_swaps + 1,
                    # Includes untracked volume when the trade has no trusted leg.
                    total_volume_usd=hook_stats.total_volume_usd + valuation.amount_usd,
                    untracked_volume_usd=hook_stats.untracked_volume_usd + valuation.amount_total_usd_untracked,
                    total_fees_usd=hook_stats.total_fees_usd + valuation.hook_fees_usd,
                )
                hook_stats = roll_hook_tvl(
                    hook_stats,
                    previous_pool_tvl_usd=previous_pool_tvl_usd,
                    pool=pool,
                )

            record = Swap(
                id=swap_id(ctx.chain_id, ctx.block_number, ctx.log_index),
                chain_id=ctx.chain_id,
                transaction=ctx.transaction_hash,
                timestamp=ctx.block_timestamp,
                pool=pool.id,
                token0=token0.id,
                token1=token1.id,
                sender=event.sender,
                origin=ctx.origin,
                amount0=valuation.amount0,
                amount1=valuation.amount1,
                amount_usd=valuation.amount_usd,
                sqrt_price_x96=event.sqrt_price_x96,
                tick=event.tick,
                log_index=ctx.log_index,
            )
            bundle = replace(bundle, native_price_usd=native_price_usd)

        entities: list[object] = [bundle, pool, manager, record, token0, token1]
        if hook_stats is not None:
            entities.append(hook_stats)
        self._store.commit(entities)
        logger.debug(
            "handle_swap: applied chain_id=%s pool=%s block=%s log_index=%s amount_usd=%s",
            ctx.chain_id,
            pool.id,
            ctx.block_number,
            ctx.log_index,
            record.amount_usd,
        )
        return EventChanges(entities=entities)

    @staticmethod
    def _apply_token_swap(
        token: Token,
        *,
        amount: Decimal,
        amount_abs: Decimal,
        valuation: SwapValuation,
        native_price_usd: Decimal,
    ) -> Token:
        token = replace(
            token,
            total_value_locked=token.total_value_locked + amount,
            volume=token.volume + amount_abs,
            volume_usd=token.volume_usd + valuation.amount_total_usd_tracked,
            untracked_volume_usd=token.untracked_volume_usd + valuation.amount_total_usd_untracked,
            fees_usd=token.fees_usd + valuation.fees_usd,
            tx_count=token.tx_count + 1,
        )
        return recompute_token_tvl_usd(token, native_price_usd)

    @staticmethod
    def _log_skip(reason: str, event: SwapEventInput) -> None:
        logger.debug(
            "handle_swap: skipped reason=%s chain_id=%s pool_id=%s block=%s log_index=%s",
            reason,
            event.context.chain_id,
            event.pool_id,
            event.context.block_number,
            event.context.log_index,
        )
