from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException

from indexer.api.deps import get_pool_snapshot_use_case, get_token_use_case
from indexer.api.schemas.pools import PoolResponse, PoolSnapshotResponse, TokenResponse
from indexer.application.use_cases.get_pool_snapshot import GetPoolSnapshotUseCase, GetTokenUseCase
from indexer.domain.entities.pool import Pool
from indexer.domain.entities.token import Token
from indexer.domain.exceptions import EntityNotFoundError

router = APIRouter()


def _dec_to_str(value: Decimal) -> str:
    return str(value)


def _token_response(token: Token) -> TokenResponse:
    return TokenResponse(
        id=token.id,
        chain_id=token.chain_id,
        address=token.address,
        symbol=token.symbol,
        name=token.name,
        decimals=token.decimals,
        derived_native_price=_dec_to_str(token.derived_native_price),
        total_value_locked=_dec_to_str(token.total_value_locked),
        total_value_locked_usd=_dec_to_str(token.total_value_locked_usd),
        volume=_dec_to_str(token.volume),
        volume_usd=_dec_to_str(token.volume_usd),
        untracked_volume_usd=_dec_to_str(token.untracked_volume_usd),
        fees_usd=_dec_to_str(token.fees_usd),
        tx_count=token.tx_count,
        pool_count=token.pool_count,
    )


def _pool_response(pool: Pool) -> PoolResponse:
    return PoolResponse(
        id=pool.id,
        chain_id=pool.chain_id,
        token0=pool.token0,
        token1=pool.token1,
        fee_tier=pool.fee_tier,
        tick_spacing=pool.tick_spacing,
        hooks=pool.hooks,
        liquidity=str(pool.liquidity),
        sqrt_price=str(pool.sqrt_price) if pool.sqrt_price is not None else None,
        tick=pool.tick,
        token0_price=_dec_to_str(pool.token0_price),
        token1_price=_dec_to_str(pool.token1_price),
        tx_count=pool.tx_count,
        volume_token0=_dec_to_str(pool.volume_token0),
        volume_token1=_dec_to_str(pool.volume_token1),
        volume_usd=_dec_to_str(pool.volume_usd),
        untracked_volume_usd=_dec_to_str(pool.untracked_volume_usd),
        fees_usd=_dec_to_str(pool.fees_usd),
        total_value_locked_token0=_dec_to_str(pool.total_value_locked_token0),
        total_value_locked_token1=_dec_to_str(pool.total_value_locked_token1),
        total_value_locked_eth=_dec_to_str(pool.total_value_locked_eth),
        total_value_locked_usd=_dec_to_str(pool.total_value_locked_usd),
    )


@router.get("/v1/chains/{chain_id}/pools/{pool_id}", response_model=PoolSnapshotResponse)
def get_pool(
    chain_id: int,
    pool_id: str,
    use_case: GetPoolSnapshotUseCase = Depends(get_pool_snapshot_use_case),
):
    try:
        result = use_case.execute(chain_id=chain_id, pool_id=pool_id)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return PoolSnapshotResponse(
        pool=_pool_response(result.pool),
        token0=_token_response(result.token0),
        token1=_token_response(result.token1),
        native_price_usd=_dec_to_str(result.native_price_usd),
    )


@router.get("/v1/chains/{chain_id}/tokens/{address}", response_model=TokenResponse)
def get_token(
    chain_id: int,
    address: str,
    use_case: GetTokenUseCase = Depends(get_token_use_case),
):
    try:
        token = use_case.execute(chain_id=chain_id, address=address)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _token_response(token)
