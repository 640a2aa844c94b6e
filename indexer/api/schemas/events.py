from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class EventContextRequest(BaseModel):
    chain_id: int = Field(..., gt=0, description="Chain the log was emitted on.")
    block_number: int = Field(..., ge=0)
    block_timestamp: int = Field(..., ge=0, description="Block timestamp in unix seconds.")
    transaction_hash: str
    log_index: int = Field(..., ge=0)
    src_address: str = Field(..., description="Pool manager contract that emitted the log.")
    transaction_from: str | None = Field(None, description="Transaction sender, when the delivery layer has it.")


class InitializeEventRequest(BaseModel):
    context: EventContextRequest
    pool_id: str = Field(..., description="bytes32 pool id.")
    currency0: str
    currency1: str
    fee: int = Field(..., ge=0, description="Fee tier in hundredths of a bip.")
    tick_spacing: int
    hooks: str
    sqrt_price_x96: int = Field(..., ge=0)
    tick: int


class SwapEventRequest(BaseModel):
    context: EventContextRequest
    pool_id: str
    sender: str
    amount0: int = Field(..., description="Raw signed int128, pool perspective.")
    amount1: int = Field(..., description="Raw signed int128, pool perspective.")
    sqrt_price_x96: int = Field(..., ge=0)
    tick: int
    liquidity: int = Field(..., ge=0)


class ModifyLiquidityEventRequest(BaseModel):
    context: EventContextRequest
    pool_id: str
    sender: str
    tick_lower: int
    tick_upper: int
    liquidity_delta: int
    salt: str = "0x" + "00" * 32


class WrittenEntityResponse(BaseModel):
    entity_type: str
    id: str


class EventResultResponse(BaseModel):
    status: Literal["applied", "skipped"]
    entities: list[WrittenEntityResponse] = Field(default_factory=list)
