from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PoolManager:
    id: str
    chain_id: int
    pool_count: int
    tx_count: int
    total_volume_eth: Decimal
    total_volume_usd: Decimal
    untracked_volume_usd: Decimal
    total_fees_eth: Decimal
    total_fees_usd: Decimal
    total_value_locked_eth: Decimal
    total_value_locked_usd: Decimal
    number_of_swaps: int
    hooked_pools: int
    hooked_swaps: int


@dataclass(frozen=True)
class HookStats:
    id: str
    chain_id: int
    hook_address: str
    number_of_pools: int
    number_of_swaps: int
    total_volume_usd: Decimal
    untracked_volume_usd: Decimal
    total_fees_usd: Decimal
    total_value_locked_usd: Decimal
    first_pool_created_at: int


def pool_manager_id(chain_id: int, address: str) -> str:
    return f"{chain_id}_{address.lower()}"


def hook_stats_id(chain_id: int, hook_address: str) -> str:
    return f"{chain_id}_{hook_address.lower()}"
