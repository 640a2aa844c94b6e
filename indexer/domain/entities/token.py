from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Token:
    id: str
    chain_id: int
    address: str
    symbol: str
    name: str
    decimals: int
    derived_native_price: Decimal
    total_value_locked: Decimal
    total_value_locked_usd: Decimal
    volume: Decimal
    volume_usd: Decimal
    untracked_volume_usd: Decimal
    fees_usd: Decimal
    tx_count: int
    pool_count: int
    # Pools pairing this token with a whitelisted token, used for price discovery.
    whitelist_pools: tuple[str, ...] = ()


def token_id(chain_id: int, address: str) -> str:
    return f"{chain_id}_{address.lower()}"


@dataclass(frozen=True)
class TokenMetadata:
    name: str
    symbol: str
    decimals: int
