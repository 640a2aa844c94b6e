from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from indexer.domain.entities.pool import Pool
from indexer.domain.entities.token import Token


@dataclass(frozen=True)
class PoolSnapshotOutput:
    pool: Pool
    token0: Token
    token1: Token
    native_price_usd: Decimal
