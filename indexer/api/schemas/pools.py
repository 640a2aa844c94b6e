from __future__ import annotations

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    id: str
    chain_id: int
    address: str
    symbol: str
    name: str
    decimals: int
    derived_native_price: str
    total_value_locked: str
    total_value_locked_usd: str
    volume: str
    volume_usd: str
    untracked_volume_usd: str
    fees_usd: str
    tx_count: int
    pool_count: int


class PoolResponse(BaseModel):
    id: str
    chain_id: int
    token0: str
    token1: str
    fee_tier: int
    tick_spacing: int
    hooks: str
    liquidity: str
    sqrt_price: str | None = Field(None, description="Q64.96 sqrt price, absent until the first price is known.")
    tick: int | None = None
    token0_price: str
    token1_price: str
    tx_count: int
    volume_token0: str
    volume_token1: str
    volume_usd: str
    untracked_volume_usd: str
    fees_usd: str
    total_value_locked_token0: str
    total_value_locked_token1: str
    total_value_locked_eth: str
    total_value_locked_usd: str


class PoolSnapshotResponse(BaseModel):
    pool: PoolResponse
    token0: TokenResponse
    token1: TokenResponse
    native_price_usd: str
