from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EventContext:
    chain_id: int
    block_number: int
    block_timestamp: int
    transaction_hash: str
    log_index: int
    src_address: str
    transaction_from: str | None = None

    @property
    def origin(self) -> str:
        return self.transaction_from or "NONE"


@dataclass(frozen=True)
class InitializeEventInput:
    context: EventContext
    pool_id: str
    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str
    sqrt_price_x96: int
    tick: int


@dataclass(frozen=True)
class SwapEventInput:
    context: EventContext
    pool_id: str
    sender: str
    amount0: int
    amount1: int
    sqrt_price_x96: int
    tick: int
    liquidity: int


@dataclass(frozen=True)
class ModifyLiquidityEventInput:
    context: EventContext
    pool_id: str
    sender: str
    tick_lower: int
    tick_upper: int
    liquidity_delta: int
    salt: str = "0x" + "00" * 32


@dataclass(frozen=True)
class EventChanges:
    """Entities written, as one unit, while applying an event."""

    entities: list[object] = field(default_factory=list)

    def of_type(self, entity_type: type) -> list:
        return [entity for entity in self.entities if isinstance(entity, entity_type)]
