from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from decimal import Decimal

from indexer.domain.entities.token import Token
from indexer.domain.services.fixed_point import (
    ZERO_BD,
    convert_token_to_decimal,
    fee_fraction,
    fee_rate,
    safe_div,
)
from indexer.domain.services.pricing import tracked_amount_usd


@dataclass(frozen=True)
class SwapValuation:
    # Trader's perspective: positive means the trader received the asset.
    amount0: Decimal
    amount1: Decimal
    amount0_abs: Decimal
    amount1_abs: Decimal
    amount0_usd: Decimal
    amount1_usd: Decimal
    amount_total_usd_tracked: Decimal
    amount_total_eth_tracked: Decimal
    amount_total_usd_untracked: Decimal
    fees_eth: Decimal
    fees_usd: Decimal
    fees_usd_untracked: Decimal
    fees_token0: Decimal
    fees_token1: Decimal
    fee_tier: int

    @property
    def amount_usd(self) -> Decimal:
        if self.amount_total_usd_tracked > ZERO_BD:
            return self.amount_total_usd_tracked
        return self.amount_total_usd_untracked

    @property
    def hook_fees_usd(self) -> Decimal:
        if self.amount_total_usd_tracked > ZERO_BD:
            return self.fees_usd
        return self.amount_total_usd_untracked * fee_rate(self.fee_tier)


def value_swap(
    *,
    raw_amount0: int,
    raw_amount1: int,
    token0: Token,
    token1: Token,
    fee_tier: int,
    native_price_usd: Decimal,
    whitelist_tokens: Collection[str],
) -> SwapValuation:
    """Convert a swap's raw pool deltas into decimal amounts, volumes and fees.

    The protocol reports a negative amount for assets sent into the pool, so
    the sign is inverted to store amounts from the trader's side.
    """
    amount0 = -convert_token_to_decimal(raw_amount0, token0.decimals)
    amount1 = -convert_token_to_decimal(raw_amount1, token1.decimals)
    amount0_abs = abs(amount0)
    amount1_abs = abs(amount1)

    amount0_usd = amount0_abs * token0.derived_native_price * native_price_usd
    amount1_usd = amount1_abs * token1.derived_native_price * native_price_usd

    tracked_usd = tracked_amount_usd(
        amount0_abs,
        token0,
        amount1_abs,
        token1,
        native_price_usd=native_price_usd,
        whitelist_tokens=whitelist_tokens,
    )
    amount_total_usd_tracked = tracked_usd / Decimal(2)
    amount_total_eth_tracked = safe_div(amount_total_usd_tracked, native_price_usd)
    amount_total_usd_untracked = (amount0_usd + amount1_usd) / Decimal(2)

    return SwapValuation(
        amount0=amount0,
        amount1=amount1,
        amount0_abs=amount0_abs,
        amount1_abs=amount1_abs,
        amount0_usd=amount0_usd,
        amount1_usd=amount1_usd,
        amount_total_usd_tracked=amount_total_usd_tracked,
        amount_total_eth_tracked=amount_total_eth_tracked,
        amount_total_usd_untracked=amount_total_usd_untracked,
        fees_eth=fee_fraction(amount_total_eth_tracked, fee_tier),
        fees_usd=fee_fraction(amount_total_usd_tracked, fee_tier),
        fees_usd_untracked=amount_total_usd_untracked * fee_rate(fee_tier),
        fees_token0=fee_fraction(amount0_abs, fee_tier),
        fees_token1=fee_fraction(amount1_abs, fee_tier),
        fee_tier=fee_tier,
    )
