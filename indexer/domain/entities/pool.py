from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


ADDRESS_ZERO = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class Pool:
    id: str
    chain_id: int
    token0: str
    token1: str
    fee_tier: int
    tick_spacing: int
    hooks: str
    created_at_timestamp: int
    created_at_block_number: int
    liquidity: int
    # None until the pool has been initialized on chain.
    sqrt_price: int | None
    tick: int | None
    token0_price: Decimal
    token1_price: Decimal
    tx_count: int
    volume_token0: Decimal
    volume_token1: Decimal
    volume_usd: Decimal
    untracked_volume_usd: Decimal
    fees_usd: Decimal
    fees_usd_untracked: Decimal
    collected_fees_token0: Decimal
    collected_fees_token1: Decimal
    collected_fees_usd: Decimal
    total_value_locked_token0: Decimal
    total_value_locked_token1: Decimal
    total_value_locked_eth: Decimal
    total_value_locked_usd: Decimal

    @property
    def is_hooked(self) -> bool:
        return self.hooks.lower() != ADDRESS_ZERO

    def current_tick(self) -> int:
        return self.tick if self.tick is not None else 0

    def current_sqrt_price(self) -> int:
        return self.sqrt_price if self.sqrt_price is not None else 0


def pool_entity_id(chain_id: int, pool_id: str) -> str:
    return f"{chain_id}_{pool_id.lower()}"
