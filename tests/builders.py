from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from indexer.application.dto.events import (
    EventContext,
    InitializeEventInput,
    ModifyLiquidityEventInput,
    SwapEventInput,
)
from indexer.application.use_cases.handle_initialize import HandleInitializeUseCase
from indexer.application.use_cases.handle_modify_liquidity import HandleModifyLiquidityUseCase
from indexer.application.use_cases.handle_swap import HandleSwapUseCase
from indexer.domain.entities.pool import ADDRESS_ZERO, Pool
from indexer.domain.entities.token import Token, TokenMetadata, token_id
from indexer.domain.services.univ4_math import NativeTokenDetails, Q96
from indexer.shared.chains import ChainConfig, ChainConfigRegistry


CHAIN_ID = 1
MANAGER = "0x" + "44" * 20
ETH = ADDRESS_ZERO
USD = "0x" + "aa" * 20
TKN = "0x" + "bb" * 20
HOOK = "0x" + "cc" * 20

REF_POOL_ID = "0x" + "11" * 32
TKN_POOL_ID = "0x" + "22" * 32
TKN_POOL_2_ID = "0x" + "33" * 32

# 1600 USD per ETH and 100 TKN per ETH; every token uses 18 decimals so prices are exact.
REF_SQRT_PRICE = 40 * Q96
REF_TICK = 73781
TKN_SQRT_PRICE = 10 * Q96
TKN_TICK = 46054

METADATA = {
    USD: TokenMetadata(name="Test Dollar", symbol="USD", decimals=18),
    TKN: TokenMetadata(name="Test Token", symbol="TKN", decimals=18),
}


def make_token(address: str, *, decimals: int = 18, derived_native_price: str = "0", **overrides) -> Token:
    token = Token(
        id=token_id(CHAIN_ID, address),
        chain_id=CHAIN_ID,
        address=address.lower(),
        symbol="T",
        name="Token",
        decimals=decimals,
        derived_native_price=Decimal(derived_native_price),
        total_value_locked=Decimal(0),
        total_value_locked_usd=Decimal(0),
        volume=Decimal(0),
        volume_usd=Decimal(0),
        untracked_volume_usd=Decimal(0),
        fees_usd=Decimal(0),
        tx_count=0,
        pool_count=0,
    )
    return replace(token, **overrides)


def make_pool(pool_id: str, token0: Token, token1: Token, **overrides) -> Pool:
    pool = Pool(
        id=f"{CHAIN_ID}_{pool_id}",
        chain_id=CHAIN_ID,
        token0=token0.id,
        token1=token1.id,
        fee_tier=3000,
        tick_spacing=60,
        hooks=ADDRESS_ZERO,
        created_at_timestamp=0,
        created_at_block_number=0,
        liquidity=0,
        sqrt_price=None,
        tick=None,
        token0_price=Decimal(0),
        token1_price=Decimal(0),
        tx_count=0,
        volume_token0=Decimal(0),
        volume_token1=Decimal(0),
        volume_usd=Decimal(0),
        untracked_volume_usd=Decimal(0),
        fees_usd=Decimal(0),
        fees_usd_untracked=Decimal(0),
        collected_fees_token0=Decimal(0),
        collected_fees_token1=Decimal(0),
        collected_fees_usd=Decimal(0),
        total_value_locked_token0=Decimal(0),
        total_value_locked_token1=Decimal(0),
        total_value_locked_eth=Decimal(0),
        total_value_locked_usd=Decimal(0),
    )
    return replace(pool, **overrides)


def make_chain_config(**overrides) -> ChainConfig:
    config = ChainConfig(
        chain_id=CHAIN_ID,
        pool_manager_address=MANAGER,
        stablecoin_wrapped_native_pool_id=REF_POOL_ID,
        stablecoin_is_token0=False,
        wrapped_native_address=ADDRESS_ZERO,
        minimum_native_locked=Decimal("1"),
        native_token_details=NativeTokenDetails(symbol="ETH", name="Ether", decimals=18),
        stablecoin_addresses=frozenset({USD}),
        whitelist_tokens=frozenset({ETH, USD}),
    )
    return replace(config, **overrides)


def make_registry(**overrides) -> ChainConfigRegistry:
    return ChainConfigRegistry({CHAIN_ID: make_chain_config(**overrides)})


class InMemoryEntityStore:
    def __init__(self):
        self.rows: dict[tuple[type, str], object] = {}
        self.commits: list[list[object]] = []

    def get(self, entity_type, entity_id):
        return self.rows.get((entity_type, entity_id))

    def commit(self, entities) -> None:
        self.commits.append(list(entities))
        for entity in entities:
            self.rows[(type(entity), entity.id)] = entity

    def all(self, entity_type) -> list:
        return [entity for (kind, _), entity in self.rows.items() if kind is entity_type]


class FakeTokenMetadata:
    def __init__(self, metadata: dict[str, TokenMetadata] | None = None):
        self.metadata = dict(METADATA if metadata is None else metadata)
        self.calls: list[tuple[str, int]] = []

    def resolve(self, *, address: str, chain_id: int) -> TokenMetadata:
        self.calls.append((address, chain_id))
        if address.lower() == ETH:
            return TokenMetadata(name="Ether", symbol="ETH", decimals=18)
        return self.metadata[address.lower()]


def make_context(*, block_number: int = 100, log_index: int = 0, tx: str | None = None) -> EventContext:
    return EventContext(
        chain_id=CHAIN_ID,
        block_number=block_number,
        block_timestamp=1_700_000_000 + block_number * 12,
        transaction_hash=tx or f"0x{block_number:064x}",
        log_index=log_index,
        src_address=MANAGER,
        transaction_from="0x" + "ee" * 20,
    )


def initialize_event(
    *,
    pool_id: str,
    currency0: str,
    currency1: str,
    sqrt_price_x96: int,
    tick: int,
    fee: int = 3000,
    hooks: str = ADDRESS_ZERO,
    block_number: int = 1,
) -> InitializeEventInput:
    return InitializeEventInput(
        context=make_context(block_number=block_number),
        pool_id=pool_id,
        currency0=currency0,
        currency1=currency1,
        fee=fee,
        tick_spacing=60,
        hooks=hooks,
        sqrt_price_x96=sqrt_price_x96,
        tick=tick,
    )


def modify_event(
    *,
    pool_id: str,
    tick_lower: int,
    tick_upper: int,
    liquidity_delta: int,
    block_number: int = 10,
    log_index: int = 0,
) -> ModifyLiquidityEventInput:
    return ModifyLiquidityEventInput(
        context=make_context(block_number=block_number, log_index=log_index),
        pool_id=pool_id,
        sender="0x" + "dd" * 20,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        liquidity_delta=liquidity_delta,
    )


def swap_event(
    *,
    pool_id: str,
    amount0: int,
    amount1: int,
    sqrt_price_x96: int = TKN_SQRT_PRICE,
    tick: int = TKN_TICK,
    liquidity: int = 10**21,
    block_number: int = 20,
    log_index: int = 0,
) -> SwapEventInput:
    return SwapEventInput(
        context=make_context(block_number=block_number, log_index=log_index),
        pool_id=pool_id,
        sender="0x" + "dd" * 20,
        amount0=amount0,
        amount1=amount1,
        sqrt_price_x96=sqrt_price_x96,
        tick=tick,
        liquidity=liquidity,
    )


class World:
    """Store seeded with an ETH/USD reference pool and an ETH/TKN pool, both with liquidity."""

    def __init__(self, *, tkn_hooks: str = ADDRESS_ZERO, registry: ChainConfigRegistry | None = None):
        self.store = InMemoryEntityStore()
        self.registry = registry or make_registry()
        self.metadata = FakeTokenMetadata()
        self.initialize = HandleInitializeUseCase(
            store=self.store,
            chains=self.registry,
            token_metadata=self.metadata,
        )
        self.swap = HandleSwapUseCase(store=self.store, chains=self.registry)
        self.modify = HandleModifyLiquidityUseCase(store=self.store, chains=self.registry)

        self.initialize.execute(
            initialize_event(
                pool_id=REF_POOL_ID,
                currency0=ETH,
                currency1=USD,
                sqrt_price_x96=REF_SQRT_PRICE,
                tick=REF_TICK,
            )
        )
        self.initialize.execute(
            initialize_event(
                pool_id=TKN_POOL_ID,
                currency0=ETH,
                currency1=TKN,
                sqrt_price_x96=TKN_SQRT_PRICE,
                tick=TKN_TICK,
                hooks=tkn_hooks,
                block_number=2,
            )
        )
        self.modify.execute(
            modify_event(pool_id=REF_POOL_ID, tick_lower=73000, tick_upper=74000, liquidity_delta=10**21)
        )
        self.modify.execute(
            modify_event(
                pool_id=TKN_POOL_ID,
                tick_lower=45000,
                tick_upper=47000,
                liquidity_delta=10**21,
                log_index=1,
            )
        )

    def pool(self, pool_id: str) -> Pool:
        return self.store.get(Pool, f"{CHAIN_ID}_{pool_id}")

    def token(self, address: str) -> Token:
        return self.store.get(Token, token_id(CHAIN_ID, address))
