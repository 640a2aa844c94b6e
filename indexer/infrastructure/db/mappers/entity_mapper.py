from __future__ import annotations

import json
from dataclasses import fields
from decimal import Decimal
from typing import Any

from indexer.domain.entities.bundle import Bundle
from indexer.domain.entities.events import ModifyLiquidity, Swap
from indexer.domain.entities.pool import Pool
from indexer.domain.entities.pool_manager import HookStats, PoolManager
from indexer.domain.entities.tick import Tick
from indexer.domain.entities.token import Token


ENTITY_TYPES: dict[str, type] = {
    "Bundle": Bundle,
    "Token": Token,
    "Pool": Pool,
    "PoolManager": PoolManager,
    "HookStats": HookStats,
    "Tick": Tick,
    "Swap": Swap,
    "ModifyLiquidity": ModifyLiquidity,
}

_DECIMAL_TAG = "$decimal"


def entity_type_name(entity_type: type) -> str:
    name = entity_type.__name__
    if ENTITY_TYPES.get(name) is not entity_type:
        raise ValueError(f"Unsupported entity type: {name}")
    return name


def _encode_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        # str() keeps every digit; floats never enter the payload.
        return {_DECIMAL_TAG: str(value)}
    if isinstance(value, tuple):
        return [_encode_value(item) for item in value]
    return value


def _decode_value(value: Any) -> Any:
    if isinstance(value, dict) and _DECIMAL_TAG in value:
        return Decimal(value[_DECIMAL_TAG])
    if isinstance(value, list):
        return tuple(_decode_value(item) for item in value)
    return value


def map_entity_to_payload(entity: Any) -> str:
    payload = {field.name: _encode_value(getattr(entity, field.name)) for field in fields(entity)}
    return json.dumps(payload, sort_keys=True)


def map_payload_to_entity(entity_type: type, payload: str) -> Any:
    raw = json.loads(payload)
    known = {field.name for field in fields(entity_type)}
    return entity_type(**{key: _decode_value(value) for key, value in raw.items() if key in known})


def entity_chain_id(entity: Any) -> int:
    chain_id = getattr(entity, "chain_id", None)
    if chain_id is not None:
        return int(chain_id)
    # Bundle is keyed by its chain id.
    return int(entity.id)
