from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException

from indexer.application.use_cases.get_pool_snapshot import GetPoolSnapshotUseCase, GetTokenUseCase
from indexer.application.use_cases.handle_initialize import HandleInitializeUseCase
from indexer.application.use_cases.handle_modify_liquidity import HandleModifyLiquidityUseCase
from indexer.application.use_cases.handle_swap import HandleSwapUseCase
from indexer.infrastructure.clients.token_metadata_client import Web3TokenMetadataClient
from indexer.infrastructure.db.engine import get_engine
from indexer.infrastructure.db.repositories.entity_store_repository import SqlEntityStoreRepository
from indexer.shared.chains import ChainConfigRegistry, load_chain_registry
from indexer.shared.config import get_settings


@lru_cache(maxsize=1)
def _get_entity_store() -> SqlEntityStoreRepository:
    settings = get_settings()
    if not settings.database_dsn:
        raise HTTPException(status_code=500, detail="DATABASE_DSN is required.")
    store = SqlEntityStoreRepository(get_engine(settings.database_dsn))
    store.create_schema()
    return store


@lru_cache(maxsize=1)
def _get_chain_registry() -> ChainConfigRegistry:
    return load_chain_registry(get_settings().chain_config_path)


@lru_cache(maxsize=1)
def _get_token_metadata_client() -> Web3TokenMetadataClient:
    settings = get_settings()
    return Web3TokenMetadataClient(
        rpc_urls=settings.rpc_urls,
        chains=_get_chain_registry(),
        timeout_seconds=settings.rpc_timeout_seconds,
    )


def get_handle_initialize_use_case() -> HandleInitializeUseCase:
    return HandleInitializeUseCase(
        store=_get_entity_store(),
        chains=_get_chain_registry(),
        token_metadata=_get_token_metadata_client(),
    )


def get_handle_swap_use_case() -> HandleSwapUseCase:
    return HandleSwapUseCase(store=_get_entity_store(), chains=_get_chain_registry())


def get_handle_modify_liquidity_use_case() -> HandleModifyLiquidityUseCase:
    return HandleModifyLiquidityUseCase(store=_get_entity_store(), chains=_get_chain_registry())


def get_pool_snapshot_use_case() -> GetPoolSnapshotUseCase:
    return GetPoolSnapshotUseCase(store=_get_entity_store())


def get_token_use_case() -> GetTokenUseCase:
    return GetTokenUseCase(store=_get_entity_store())
