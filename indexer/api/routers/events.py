from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from indexer.api.deps import (
    get_handle_initialize_use_case,
    get_handle_modify_liquidity_use_case,
    get_handle_swap_use_case,
)
from indexer.api.schemas.events import (
    EventContextRequest,
    EventResultResponse,
    InitializeEventRequest,
    ModifyLiquidityEventRequest,
    SwapEventRequest,
    WrittenEntityResponse,
)
from indexer.application.dto.events import (
    EventChanges,
    EventContext,
    InitializeEventInput,
    ModifyLiquidityEventInput,
    SwapEventInput,
)
from indexer.application.use_cases.handle_initialize import HandleInitializeUseCase
from indexer.application.use_cases.handle_modify_liquidity import HandleModifyLiquidityUseCase
from indexer.application.use_cases.handle_swap import HandleSwapUseCase
from indexer.domain.exceptions import InvalidEventError, UnsupportedChainError
from indexer.infrastructure.clients.token_metadata_client import TokenMetadataLookupError

router = APIRouter()


def _to_context(req: EventContextRequest) -> EventContext:
    return EventContext(
        chain_id=req.chain_id,
        block_number=req.block_number,
        block_timestamp=req.block_timestamp,
        transaction_hash=req.transaction_hash,
        log_index=req.log_index,
        src_address=req.src_address,
        transaction_from=req.transaction_from,
    )


def _to_response(changes: EventChanges | None) -> EventResultResponse:
    if changes is None:
        return EventResultResponse(status="skipped")
    return EventResultResponse(
        status="applied",
        entities=[
            WrittenEntityResponse(entity_type=type(entity).__name__, id=entity.id)
            for entity in changes.entities
        ],
    )


@router.post("/v1/events/initialize", response_model=EventResultResponse)
def ingest_initialize(
    req: InitializeEventRequest,
    use_case: HandleInitializeUseCase = Depends(get_handle_initialize_use_case),
):
    try:
        changes = use_case.execute(
            InitializeEventInput(
                context=_to_context(req.context),
                pool_id=req.pool_id,
                currency0=req.currency0,
                currency1=req.currency1,
                fee=req.fee,
                tick_spacing=req.tick_spacing,
                hooks=req.hooks,
                sqrt_price_x96=req.sqrt_price_x96,
                tick=req.tick,
            )
        )
    except UnsupportedChainError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except TokenMetadataLookupError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return _to_response(changes)


@router.post("/v1/events/swap", response_model=EventResultResponse)
def ingest_swap(
    req: SwapEventRequest,
    use_case: HandleSwapUseCase = Depends(get_handle_swap_use_case),
):
    try:
        changes = use_case.execute(
            SwapEventInput(
                context=_to_context(req.context),
                pool_id=req.pool_id,
                sender=req.sender,
                amount0=req.amount0,
                amount1=req.amount1,
                sqrt_price_x96=req.sqrt_price_x96,
                tick=req.tick,
                liquidity=req.liquidity,
            )
        )
    except UnsupportedChainError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _to_response(changes)


@router.post("/v1/events/modify-liquidity", response_model=EventResultResponse)
def ingest_modify_liquidity(
    req: ModifyLiquidityEventRequest,
    use_case: HandleModifyLiquidityUseCase = Depends(get_handle_modify_liquidity_use_case),
):
    try:
        changes = use_case.execute(
            ModifyLiquidityEventInput(
                context=_to_context(req.context),
                pool_id=req.pool_id,
                sender=req.sender,
                tick_lower=req.tick_lower,
                tick_upper=req.tick_upper,
                liquidity_delta=req.liquidity_delta,
                salt=req.salt,
            )
        )
    except (UnsupportedChainError, InvalidEventError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _to_response(changes)
