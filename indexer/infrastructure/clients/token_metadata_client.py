from __future__ import annotations

import logging
import re
from collections.abc import Callable
from threading import Lock

from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError
from web3.providers.rpc import HTTPProvider

from indexer.domain.entities.pool import ADDRESS_ZERO
from indexer.domain.entities.token import TokenMetadata
from indexer.shared.chains import ChainConfigRegistry


logger = logging.getLogger(__name__)


class TokenMetadataLookupError(RuntimeError):
    pass


DEFAULT_DECIMALS = 18
MAX_DECIMALS = 50
UNKNOWN_NAME = "unknown"
UNKNOWN_SYMBOL = "UNKNOWN"

ERC20_METADATA_ABI = [
    {"inputs": [], "name": "name", "outputs": [{"type": "string"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "NAME", "outputs": [{"type": "bytes32"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "symbol", "outputs": [{"type": "string"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "SYMBOL", "outputs": [{"type": "bytes32"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "decimals", "outputs": [{"type": "uint8"}], "stateMutability": "view", "type": "function"},
]

_CONTROL_CHARS = re.compile("[\x00-\x1f\x7f-\x9f]")

# Reverts and undecodable return data mean the token does not implement the method.
_UNSUPPORTED_CALL_ERRORS = (ContractLogicError, BadFunctionCallOutput, ValueError)


def sanitize_string(value: str | None) -> str:
    if not value:
        return ""
    return _CONTROL_CHARS.sub("", value).strip()


def decode_bytes32(value: bytes | None) -> str:
    if not value:
        return ""
    raw = bytes(byte for byte in bytes(value) if byte != 0)
    return sanitize_string(raw.decode("utf-8", errors="replace"))


def normalize_decimals(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return DEFAULT_DECIMALS
    # Some tokens report absurd decimals; anything above the largest seen in practice falls back.
    if value < 0 or value > MAX_DECIMALS:
        return DEFAULT_DECIMALS
    return value


def _build_web3(rpc_url: str, timeout_seconds: float) -> Web3:
    return Web3(HTTPProvider(rpc_url, request_kwargs={"timeout": timeout_seconds}))


class Web3TokenMetadataClient:
    """Resolves ERC20 name, symbol and decimals, caching results per chain and address.

    The native currency (zero address) and configured overrides never touch the RPC.
    """

    def __init__(
        self,
        *,
        rpc_urls: dict[int, str],
        chains: ChainConfigRegistry,
        timeout_seconds: float = 30,
        web3_factory: Callable[[str, float], Web3] = _build_web3,
    ):
        self._rpc_urls = dict(rpc_urls)
        self._chains = chains
        self._timeout_seconds = timeout_seconds
        self._web3_factory = web3_factory
        self._clients: dict[int, Web3] = {}
        self._cache: dict[tuple[int, str], TokenMetadata] = {}
        self._locks: dict[tuple, Lock] = {}
        self._locks_guard = Lock()

    def _key_lock(self, key: tuple) -> Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
            return lock

    def resolve(self, *, address: str, chain_id: int) -> TokenMetadata:
        key = (chain_id, address.lower())
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        # Concurrent lookups of one token wait for the first instead of hitting the RPC again.
        with self._key_lock(("token",) + key):
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            metadata = self._lookup(address=key[1], chain_id=chain_id)
            self._cache[key] = metadata
        return metadata

    def _lookup(self, *, address: str, chain_id: int) -> TokenMetadata:
        chain_config = self._chains.get(chain_id)
        if address == ADDRESS_ZERO:
            native = chain_config.native_token_details
            return TokenMetadata(name=native.name, symbol=native.symbol, decimals=int(native.decimals))

        override = chain_config.token_override(address)
        if override is not None:
            return TokenMetadata(name=override.name, symbol=override.symbol, decimals=int(override.decimals))

        try:
            return self._fetch_onchain(address=address, chain_id=chain_id)
        except TokenMetadataLookupError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "token_metadata_client: lookup_failed chain_id=%s address=%s error=%s",
                chain_id,
                address,
                exc,
            )
            raise TokenMetadataLookupError(
                f"Failed to fetch metadata for {address} on chain {chain_id}."
            ) from exc

    def _get_web3(self, chain_id: int) -> Web3:
        with self._key_lock(("client", chain_id)):
            w3 = self._clients.get(chain_id)
            if w3 is not None:
                return w3
            rpc_url = self._rpc_urls.get(chain_id)
            if not rpc_url:
                raise TokenMetadataLookupError(f"No RPC URL configured for chainId {chain_id}.")
            w3 = self._web3_factory(rpc_url, self._timeout_seconds)
            self._clients[chain_id] = w3
        logger.info("token_metadata_client: created_client chain_id=%s", chain_id)
        return w3

    def _fetch_onchain(self, *, address: str, chain_id: int) -> TokenMetadata:
        w3 = self._get_web3(chain_id)
        contract = w3.eth.contract(address=Web3.to_checksum_address(address), abi=ERC20_METADATA_ABI)

        name = UNKNOWN_NAME
        name_result = _call_optional(contract, "name")
        if name_result is not None:
            name = sanitize_string(name_result)
        else:
            name_bytes = _call_optional(contract, "NAME")
            if name_bytes is not None:
                name = decode_bytes32(name_bytes)

        symbol = UNKNOWN_SYMBOL
        symbol_result = _call_optional(contract, "symbol")
        if symbol_result is not None:
            symbol = sanitize_string(symbol_result)
        else:
            symbol_bytes = _call_optional(contract, "SYMBOL")
            if symbol_bytes is not None:
                symbol = decode_bytes32(symbol_bytes)

        decimals = normalize_decimals(_call_optional(contract, "decimals"))

        metadata = TokenMetadata(
            name=name or UNKNOWN_NAME,
            symbol=symbol or UNKNOWN_SYMBOL,
            decimals=decimals,
        )
        logger.debug(
            "token_metadata_client: fetched chain_id=%s address=%s symbol=%s decimals=%s",
            chain_id,
            address,
            metadata.symbol,
            metadata.decimals,
        )
        return metadata


def _call_optional(contract, function_name: str):
    try:
        return getattr(contract.functions, function_name)().call()
    except _UNSUPPORTED_CALL_ERRORS:
        return None
