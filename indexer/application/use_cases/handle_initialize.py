from __future__ import annotations

import logging
from dataclasses import replace

from indexer.application.dto.events import EventChanges, InitializeEventInput
from indexer.application.ports.entity_store_port import EntityStorePort
from indexer.application.ports.token_metadata_port import TokenMetadataPort
from indexer.application.use_cases.price_discovery import find_native_per_token, load_native_price_in_usd
from indexer.domain.entities.bundle import Bundle, bundle_id
from indexer.domain.entities.pool import Pool, pool_entity_id
from indexer.domain.entities.pool_manager import HookStats, PoolManager, hook_stats_id, pool_manager_id
from indexer.domain.entities.token import Token, TokenMetadata, token_id
from indexer.domain.services.fixed_point import ZERO_BD, decimal_context
from indexer.domain.services.univ4_math import sqrt_price_x96_to_token_prices
from indexer.shared.chains import ChainConfig, ChainConfigRegistry


logger = logging.getLogger(__name__)


def _new_token(chain_id: int, address: str, metadata: TokenMetadata) -> Token:
    return Token(
        id=token_id(chain_id, address),
        chain_id=chain_id,
        address=address.lower(),
        symbol=metadata.symbol,
        name=metadata.name,
        decimals=metadata.decimals,
        derived_native_price=ZERO_BD,
        total_value_locked=ZERO_BD,
        total_value_locked_usd=ZERO_BD,
        volume=ZERO_BD,
        volume_usd=ZERO_BD,
        untracked_volume_usd=ZERO_BD,
        fees_usd=ZERO_BD,
        tx_count=0,
        pool_count=0,
    )


def _new_manager(chain_id: int, address: str) -> PoolManager:
    return PoolManager(
        id=pool_manager_id(chain_id, address),
        chain_id=chain_id,
        pool_count=0,
        tx_count=0,
        total_volume_eth=ZERO_BD,
        total_volume_usd=ZERO_BD,
        untracked_volume_usd=ZERO_BD,
        total_fees_eth=ZERO_BD,
        total_fees_usd=ZERO_BD,
        total_value_locked_eth=ZERO_BD,
        total_value_locked_usd=ZERO_BD,
        number_of_swaps=0,
        hooked_pools=0,
        hooked_swaps=0,
    )


def _new_hook_stats(chain_id: int, hook_address: str, created_at: int) -> HookStats:
    return HookStats(
        id=hook_stats_id(chain_id, hook_address),
        chain_id=chain_id,
        hook_address=hook_address.lower(),
        number_of_pools=0,
        number_of_swaps=0,
        total_volume_usd=ZERO_BD,
        untracked_volume_usd=ZERO_BD,
        total_fees_usd=ZERO_BD,
        total_value_locked_usd=ZERO_BD,
        first_pool_created_at=created_at,
    )


class HandleInitializeUseCase:
    """Creates a pool and the entities it references on the pool's Initialize log."""

    def __init__(
        self,
        *,
        store: EntityStorePort,
        chains: ChainConfigRegistry,
        token_metadata: TokenMetadataPort,
    ):
        self._store = store
        self._chains = chains
        self._token_metadata = token_metadata

    def execute(self, event: InitializeEventInput, *, preload: bool = False) -> EventChanges | None:
        ctx = event.context
        chain_config = self._chains.get(ctx.chain_id)
        if chain_config.is_pool_skipped(event.pool_id):
            logger.debug(
                "handle_initialize: skipped reason=pool_skipped chain_id=%s pool_id=%s",
                ctx.chain_id,
                event.pool_id,
            )
            return None

        pool_key = pool_entity_id(ctx.chain_id, event.pool_id)
        if self._store.get(Pool, pool_key) is not None:
            logger.debug(
                "handle_initialize: skipped reason=pool_exists chain_id=%s pool_id=%s",
                ctx.chain_id,
                event.pool_id,
            )
            return None

        manager = self._store.get(PoolManager, pool_manager_id(ctx.chain_id, ctx.src_address))
        bundle = self._store.get(Bundle, bundle_id(ctx.chain_id))
        token0 = self._store.get(Token, token_id(ctx.chain_id, event.currency0))
        token1 = self._store.get(Token, token_id(ctx.chain_id, event.currency1))
        hooks = event.hooks.lower()
        pool = Pool(
            id=pool_key,
            chain_id=ctx.chain_id,
            token0=token_id(ctx.chain_id, event.currency0),
            token1=token_id(ctx.chain_id, event.currency1),
            fee_tier=event.fee,
            tick_spacing=event.tick_spacing,
            hooks=hooks,
            created_at_timestamp=ctx.block_timestamp,
            created_at_block_number=ctx.block_number,
            liquidity=0,
            sqrt_price=event.sqrt_price_x96,
            tick=event.tick,
            token0_price=ZERO_BD,
            token1_price=ZERO_BD,
            tx_count=0,
            volume_token0=ZERO_BD,
            volume_token1=ZERO_BD,
            volume_usd=ZERO_BD,
            untracked_volume_usd=ZERO_BD,
            fees_usd=ZERO_BD,
            fees_usd_untracked=ZERO_BD,
            collected_fees_token0=ZERO_BD,
            collected_fees_token1=ZERO_BD,
            collected_fees_usd=ZERO_BD,
            total_value_locked_token0=ZERO_BD,
            total_value_locked_token1=ZERO_BD,
            total_value_locked_eth=ZERO_BD,
            total_value_locked_usd=ZERO_BD,
        )
        hook_stats = self._store.get(HookStats, hook_stats_id(ctx.chain_id, hooks)) if pool.is_hooked else None

        if preload:
            return None

        # Metadata failures propagate before anything is written.
        if token0 is None:
            token0 = _new_token(ctx.chain_id, event.currency0, self._resolve(event.currency0, ctx.chain_id))
        if token1 is None:
            token1 = _new_token(ctx.chain_id, event.currency1, self._resolve(event.currency1, ctx.chain_id))

        with decimal_context():
            if manager is None:
                manager = _new_manager(ctx.chain_id, ctx.src_address)
            manager = replace(
                manager,
                pool_count=manager.pool_count + 1,
                hooked_pools=manager.hooked_pools + 1 if pool.is_hooked else manager.hooked_pools,
            )
            if bundle is None:
                bundle = Bundle(id=bundle_id(ctx.chain_id), native_price_usd=ZERO_BD)

            token0, token1 = self._link_whitelist_pools(token0, token1, pool, chain_config)

            token0_price, token1_price = sqrt_price_x96_to_token_prices(
                event.sqrt_price_x96,
                token0,
                token1,
                chain_config.native_token_details,
            )
            pool = replace(pool, token0_price=token0_price, token1_price=token1_price)

            if pool.is_hooked:
                if hook_stats is None:
                    hook_stats = _new_hook_stats(ctx.chain_id, hooks, ctx.block_timestamp)
                hook_stats = replace(hook_stats, number_of_pools=hook_stats.number_of_pools + 1)

            bundle = replace(
                bundle,
                native_price_usd=load_native_price_in_usd(
                    self._store,
                    chain_config,
                    previous=bundle.native_price_usd,
                    pending=pool,
                ),
            )
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

        entities: list[object] = [manager, bundle, token0, token1, pool]
        if hook_stats is not None:
            entities.append(hook_stats)
        self._store.commit(entities)
        logger.info(
            "handle_initialize: pool_created chain_id=%s pool=%s token0=%s token1=%s fee=%s hooks=%s",
            ctx.chain_id,
            pool.id,
            token0.symbol,
            token1.symbol,
            pool.fee_tier,
            pool.hooks,
        )
        return EventChanges(entities=entities)

    def _resolve(self, address: str, chain_id: int) -> TokenMetadata:
        return self._token_metadata.resolve(address=address, chain_id=chain_id)

    @staticmethod
    def _link_whitelist_pools(
        token0: Token,
        token1: Token,
        pool: Pool,
        chain_config: ChainConfig,
    ) -> tuple[Token, Token]:
        whitelist_pools0 = token0.whitelist_pools
        whitelist_pools1 = token1.whitelist_pools
        if token0.address in chain_config.whitelist_tokens:
            whitelist_pools1 = whitelist_pools1 + (pool.id,)
        if token1.address in chain_config.whitelist_tokens:
            whitelist_pools0 = whitelist_pools0 + (pool.id,)
        return (
            replace(token0, whitelist_pools=whitelist_pools0, pool_count=token0.pool_count + 1),
            replace(token1, whitelist_pools=whitelist_pools1, pool_count=token1.pool_count + 1),
        )
