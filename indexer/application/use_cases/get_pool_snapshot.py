from __future__ import annotations

from indexer.application.dto.pool_snapshot import PoolSnapshotOutput
from indexer.application.ports.entity_store_port import EntityStorePort
from indexer.domain.entities.bundle import Bundle, bundle_id
from indexer.domain.entities.pool import Pool, pool_entity_id
from indexer.domain.entities.token import Token, token_id
from indexer.domain.exceptions import EntityNotFoundError
from indexer.domain.services.fixed_point import ZERO_BD


class GetPoolSnapshotUseCase:
    def __init__(self, *, store: EntityStorePort):
        self._store = store

    def execute(self, *, chain_id: int, pool_id: str) -> PoolSnapshotOutput:
        pool = self._store.get(Pool, pool_entity_id(chain_id, pool_id))
        if pool is None:
            raise EntityNotFoundError("Pool not found.")
        token0 = self._store.get(Token, pool.token0)
        token1 = self._store.get(Token, pool.token1)
        if token0 is None or token1 is None:
            raise EntityNotFoundError("Pool tokens not found.")
        bundle = self._store.get(Bundle, bundle_id(chain_id))
        return PoolSnapshotOutput(
            pool=pool,
            token0=token0,
            token1=token1,
            native_price_usd=bundle.native_price_usd if bundle is not None else ZERO_BD,
        )


class GetTokenUseCase:
    def __init__(self, *, store: EntityStorePort):
        self._store = store

    def execute(self, *, chain_id: int, address: str) -> Token:
        token = self._store.get(Token, token_id(chain_id, address))
        if token is None:
            raise EntityNotFoundError("Token not found.")
        return token
