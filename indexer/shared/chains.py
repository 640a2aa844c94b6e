from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from pathlib import Path

from indexer.domain.entities.pool import ADDRESS_ZERO
from indexer.domain.exceptions import UnsupportedChainError
from indexer.domain.services.univ4_math import NativeTokenDetails


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenOverride:
    address: str
    symbol: str
    name: str
    decimals: int


@dataclass(frozen=True)
class ChainConfig:
    chain_id: int
    pool_manager_address: str
    stablecoin_wrapped_native_pool_id: str
    stablecoin_is_token0: bool
    wrapped_native_address: str
    minimum_native_locked: Decimal
    native_token_details: NativeTokenDetails
    stablecoin_addresses: frozenset[str] = frozenset()
    whitelist_tokens: frozenset[str] = frozenset()
    pools_to_skip: frozenset[str] = frozenset()
    token_overrides: tuple[TokenOverride, ...] = ()

    def is_pool_skipped(self, pool_id: str) -> bool:
        return pool_id.lower() in self.pools_to_skip

    def token_override(self, address: str) -> TokenOverride | None:
        key = address.lower()
        for override in self.token_overrides:
            if override.address == key:
                return override
        return None


_ETHEREUM_USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
_ETHEREUM_DAI = "0x6b175474e89094c44da98b954eedeac495271d0f"
_ETHEREUM_USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"
_ETHEREUM_WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
_ETHEREUM_WBTC = "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599"

_BASE_USDC = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
_BASE_WETH = "0x4200000000000000000000000000000000000006"

_ETH_DETAILS = NativeTokenDetails(symbol="ETH", name="Ethereum", decimals=18)


BUILTIN_CHAINS: dict[int, ChainConfig] = {
    1: ChainConfig(
        chain_id=1,
        pool_manager_address="0x000000000004444c5dc75cb358380d2e3de08a90",
        stablecoin_wrapped_native_pool_id="0x21c67e77068de97969ba93d4aab21826d33ca12bb9f565d8496e8fda8a82ca27",
        stablecoin_is_token0=False,
        wrapped_native_address=ADDRESS_ZERO,
        minimum_native_locked=Decimal("1"),
        native_token_details=_ETH_DETAILS,
        stablecoin_addresses=frozenset({_ETHEREUM_USDC, _ETHEREUM_DAI, _ETHEREUM_USDT}),
        whitelist_tokens=frozenset(
            {
                ADDRESS_ZERO,
                _ETHEREUM_WETH,
                _ETHEREUM_USDC,
                _ETHEREUM_DAI,
                _ETHEREUM_USDT,
                _ETHEREUM_WBTC,
            }
        ),
    ),
    8453: ChainConfig(
        chain_id=8453,
        pool_manager_address="0x498581ff718922c3f8e6a244956af099b2652b2b",
        stablecoin_wrapped_native_pool_id="0x96d4b53a38337a5733179751781178a2613306063c511b78cd02684739288c0a",
        stablecoin_is_token0=False,
        wrapped_native_address=ADDRESS_ZERO,
        minimum_native_locked=Decimal("1"),
        native_token_details=_ETH_DETAILS,
        stablecoin_addresses=frozenset({_BASE_USDC}),
        whitelist_tokens=frozenset({ADDRESS_ZERO, _BASE_WETH, _BASE_USDC}),
    ),
}


class ChainConfigRegistry:
    def __init__(self, chains: dict[int, ChainConfig] | None = None):
        self._chains = dict(BUILTIN_CHAINS if chains is None else chains)

    def get(self, chain_id: int) -> ChainConfig:
        config = self._chains.get(chain_id)
        if config is None:
            raise UnsupportedChainError(f"No chain configuration for chain_id={chain_id}.")
        return config

    def chain_ids(self) -> list[int]:
        return sorted(self._chains)

    def with_chain(self, config: ChainConfig) -> "ChainConfigRegistry":
        chains = dict(self._chains)
        chains[config.chain_id] = config
        return ChainConfigRegistry(chains)


def _lower_set(values: list[str] | None) -> frozenset[str]:
    return frozenset(value.strip().lower() for value in values or [])


def parse_chain_config(raw: dict, base: ChainConfig | None = None) -> ChainConfig:
    """Build a ChainConfig from a JSON object; keys missing from ``raw`` come from ``base``."""
    chain_id = int(raw["chain_id"])
    native_raw = raw.get("native_token_details")
    native = (
        NativeTokenDetails(
            symbol=str(native_raw["symbol"]),
            name=str(native_raw["name"]),
            decimals=int(native_raw["decimals"]),
        )
        if native_raw
        else (base.native_token_details if base else _ETH_DETAILS)
    )
    overrides = tuple(
        TokenOverride(
            address=str(item["address"]).lower(),
            symbol=str(item["symbol"]),
            name=str(item["name"]),
            decimals=int(item["decimals"]),
        )
        for item in raw.get("token_overrides") or []
    )

    if base is not None:
        changes: dict = {"native_token_details": native}
        if "pool_manager_address" in raw:
            changes["pool_manager_address"] = str(raw["pool_manager_address"]).lower()
        if "stablecoin_wrapped_native_pool_id" in raw:
            changes["stablecoin_wrapped_native_pool_id"] = str(raw["stablecoin_wrapped_native_pool_id"]).lower()
        if "stablecoin_is_token0" in raw:
            changes["stablecoin_is_token0"] = bool(raw["stablecoin_is_token0"])
        if "wrapped_native_address" in raw:
            changes["wrapped_native_address"] = str(raw["wrapped_native_address"]).lower()
        if "minimum_native_locked" in raw:
            changes["minimum_native_locked"] = Decimal(str(raw["minimum_native_locked"]))
        for key in ("stablecoin_addresses", "whitelist_tokens", "pools_to_skip"):
            if key in raw:
                changes[key] = _lower_set(raw[key])
        if "token_overrides" in raw:
            changes["token_overrides"] = overrides
        return replace(base, **changes)

    return ChainConfig(
        chain_id=chain_id,
        pool_manager_address=str(raw["pool_manager_address"]).lower(),
        stablecoin_wrapped_native_pool_id=str(raw["stablecoin_wrapped_native_pool_id"]).lower(),
        stablecoin_is_token0=bool(raw.get("stablecoin_is_token0", False)),
        wrapped_native_address=str(raw.get("wrapped_native_address", ADDRESS_ZERO)).lower(),
        minimum_native_locked=Decimal(str(raw.get("minimum_native_locked", "1"))),
        native_token_details=native,
        stablecoin_addresses=_lower_set(raw.get("stablecoin_addresses")),
        whitelist_tokens=_lower_set(raw.get("whitelist_tokens")),
        pools_to_skip=_lower_set(raw.get("pools_to_skip")),
        token_overrides=overrides,
    )


def load_chain_registry(path: str | None) -> ChainConfigRegistry:
    registry = ChainConfigRegistry()
    if not path:
        return registry

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    entries = payload.get("chains", []) if isinstance(payload, dict) else payload
    for raw in entries:
        chain_id = int(raw["chain_id"])
        base = BUILTIN_CHAINS.get(chain_id)
        registry = registry.with_chain(parse_chain_config(raw, base=base))
    logger.info(
        "chains: loaded_chain_config path=%s chains=%s",
        path,
        registry.chain_ids(),
    )
    return registry
