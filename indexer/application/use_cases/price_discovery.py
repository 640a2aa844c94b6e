from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal

from indexer.application.ports.entity_store_port import EntityStorePort
from indexer.domain.entities.pool import Pool, pool_entity_id
from indexer.domain.entities.token import Token
from indexer.domain.services.pricing import derived_native_price, native_price_in_usd
from indexer.shared.chains import ChainConfig


def _iter_price_candidates(store: EntityStorePort, token: Token) -> Iterator[tuple[Pool, Token]]:
    for pool_id in token.whitelist_pools:
        pool = store.get(Pool, pool_id)
        if pool is None:
            continue
        counterpart_id = pool.token1 if pool.token0 == token.id else pool.token0
        counterpart = store.get(Token, counterpart_id)
        if counterpart is None:
            continue
        yield pool, counterpart


def find_native_per_token(
    store: EntityStorePort,
    token: Token,
    chain_config: ChainConfig,
    *,
    native_price_usd: Decimal,
) -> Decimal:
    return derived_native_price(
        token,
        _iter_price_candidates(store, token),
        wrapped_native_address=chain_config.wrapped_native_address,
        stablecoin_addresses=chain_config.stablecoin_addresses,
        minimum_native_locked=chain_config.minimum_native_locked,
        native_price_usd=native_price_usd,
    )


def load_native_price_in_usd(
    store: EntityStorePort,
    chain_config: ChainConfig,
    *,
    previous: Decimal,
    pending: Pool | None = None,
) -> Decimal:
    """Read the chain's reference pool; ``pending`` wins over the stored copy."""
    reference_id = pool_entity_id(chain_config.chain_id, chain_config.stablecoin_wrapped_native_pool_id)
    if pending is not None and pending.id == reference_id:
        reference_pool: Pool | None = pending
    else:
        reference_pool = store.get(Pool, reference_id)
    return native_price_in_usd(
        reference_pool,
        stablecoin_is_token0=chain_config.stablecoin_is_token0,
        previous=previous,
    )
