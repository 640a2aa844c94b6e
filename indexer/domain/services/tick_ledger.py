from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, replace

from indexer.domain.entities.tick import Tick, tick_id
from indexer.domain.services.univ4_math import tick_to_prices


def create_initial_tick(
    *,
    chain_id: int,
    pool_id: str,
    tick_idx: int,
    block_timestamp: int,
    block_number: int,
) -> Tick:
    price0, price1 = tick_to_prices(tick_idx)
    return Tick(
        id=tick_id(pool_id, tick_idx),
        chain_id=chain_id,
        pool_id=pool_id,
        tick_idx=tick_idx,
        liquidity_gross=0,
        liquidity_net=0,
        price0=price0,
        price1=price1,
        created_at_timestamp=block_timestamp,
        created_at_block_number=block_number,
    )


def apply_liquidity_delta(lower: Tick, upper: Tick, liquidity_delta: int) -> tuple[Tick, Tick]:
    """Apply a position's liquidity delta to its boundary ticks.

    The upper tick's net liquidity moves opposite to the delta so that summing
    ``liquidity_net`` in tick order reconstructs the active liquidity.
    """
    new_lower = replace(
        lower,
        liquidity_gross=lower.liquidity_gross + liquidity_delta,
        liquidity_net=lower.liquidity_net + liquidity_delta,
    )
    new_upper = replace(
        upper,
        liquidity_gross=upper.liquidity_gross + liquidity_delta,
        liquidity_net=upper.liquidity_net - liquidity_delta,
    )
    return new_lower, new_upper


@dataclass(frozen=True)
class LiquidityCurve:
    ticks: list[int]
    cumulative: list[int]


def build_liquidity_curve(ticks: list[Tick]) -> LiquidityCurve:
    ordered = sorted(ticks, key=lambda row: row.tick_idx)
    tick_indexes: list[int] = []
    cumulative: list[int] = []
    running = 0
    for row in ordered:
        running += row.liquidity_net
        tick_indexes.append(row.tick_idx)
        cumulative.append(running)
    return LiquidityCurve(ticks=tick_indexes, cumulative=cumulative)


def active_liquidity_at_tick(*, curve: LiquidityCurve, tick: int) -> int:
    idx = bisect_right(curve.ticks, tick) - 1
    if idx < 0:
        return 0
    return curve.cumulative[idx]
