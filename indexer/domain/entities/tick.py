from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Tick:
    id: str
    chain_id: int
    pool_id: str
    tick_idx: int
    liquidity_gross: int
    liquidity_net: int
    price0: Decimal
    price1: Decimal
    created_at_timestamp: int
    created_at_block_number: int


def tick_id(pool_id: str, tick_idx: int) -> str:
    return f"{pool_id}#{tick_idx}"
