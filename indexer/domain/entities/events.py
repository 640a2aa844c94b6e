from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Swap:
    id: str
    chain_id: int
    transaction: str
    timestamp: int
    pool: str
    token0: str
    token1: str
    sender: str
    origin: str
    amount0: Decimal
    amount1: Decimal
    amount_usd: Decimal
    sqrt_price_x96: int
    tick: int
    log_index: int


@dataclass(frozen=True)
class ModifyLiquidity:
    id: str
    chain_id: int
    transaction: str
    timestamp: int
    pool: str
    token0: str
    token1: str
    sender: str
    origin: str
    amount: int
    amount0: Decimal
    amount1: Decimal
    amount_usd: Decimal
    tick_lower: int
    tick_upper: int
    log_index: int


def swap_id(chain_id: int, block_number: int, log_index: int) -> str:
    return f"{chain_id}_{block_number}_{log_index}"


def modify_liquidity_id(chain_id: int, transaction_hash: str, log_index: int) -> str:
    return f"{chain_id}_{transaction_hash}_{log_index}"
