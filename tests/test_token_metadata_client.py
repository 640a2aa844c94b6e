from __future__ import annotations

import pytest
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from indexer.domain.entities.pool import ADDRESS_ZERO
from indexer.infrastructure.clients.token_metadata_client import (
    TokenMetadataLookupError,
    Web3TokenMetadataClient,
    decode_bytes32,
    normalize_decimals,
    sanitize_string,
)
from indexer.shared.chains import TokenOverride
from tests.builders import make_registry


TOKEN = "0x" + "bb" * 20


class FakeCall:
    def __init__(self, outcome):
        self._outcome = outcome

    def call(self):
        if isinstance(self._outcome, Exception):
            raise self._outcome
        return self._outcome


class FakeFunctions:
    def __init__(self, outcomes: dict, calls: list):
        self._outcomes = outcomes
        self._calls = calls

    def __getattr__(self, name):
        def _function():
            self._calls.append(name)
            return FakeCall(self._outcomes.get(name, ContractLogicError("execution reverted")))

        return _function


class FakeContract:
    def __init__(self, outcomes: dict, calls: list):
        self.functions = FakeFunctions(outcomes, calls)


class FakeEth:
    def __init__(self, outcomes: dict):
        self.outcomes = outcomes
        self.calls: list[str] = []
        self.addresses: list[str] = []

    def contract(self, *, address, abi):
        self.addresses.append(address)
        return FakeContract(self.outcomes, self.calls)


class FakeWeb3:
    def __init__(self, outcomes: dict):
        self.eth = FakeEth(outcomes)


def _client(outcomes: dict | None = None, **registry_overrides):
    w3 = FakeWeb3(outcomes or {})
    created: list[tuple[str, float]] = []

    def factory(url: str, timeout: float):
        created.append((url, timeout))
        return w3

    client = Web3TokenMetadataClient(
        rpc_urls={1: "https://rpc.test"},
        chains=make_registry(**registry_overrides),
        timeout_seconds=5,
        web3_factory=factory,
    )
    return client, w3, created


def test_sanitize_string_strips_control_characters():
    assert sanitize_string("Tok\x00en\x1f \x85") == "Token"
    assert sanitize_string(None) == ""


def test_decode_bytes32_drops_padding():
    assert decode_bytes32(b"MKR" + b"\x00" * 29) == "MKR"
    assert decode_bytes32(b"") == ""


def test_normalize_decimals_falls_back_to_18():
    assert normalize_decimals(6) == 6
    assert normalize_decimals(50) == 50
    assert normalize_decimals(51) == 18
    assert normalize_decimals(None) == 18
    assert normalize_decimals(9132491757359273498234629765928734) == 18


def test_native_address_uses_chain_details_without_rpc():
    client, _, created = _client()

    metadata = client.resolve(address=ADDRESS_ZERO, chain_id=1)

    assert (metadata.symbol, metadata.name, metadata.decimals) == ("ETH", "Ether", 18)
    assert created == []


def test_token_override_short_circuits_rpc():
    override = TokenOverride(address=TOKEN, symbol="OVR", name="Override", decimals=8)
    client, _, created = _client(token_overrides=(override,))

    metadata = client.resolve(address=TOKEN.upper().replace("0X", "0x"), chain_id=1)

    assert (metadata.symbol, metadata.name, metadata.decimals) == ("OVR", "Override", 8)
    assert created == []


def test_reads_string_metadata():
    client, w3, created = _client({"name": " Test\x00 Token ", "symbol": "TST", "decimals": 6})

    metadata = client.resolve(address=TOKEN, chain_id=1)

    assert (metadata.name, metadata.symbol, metadata.decimals) == ("Test Token", "TST", 6)
    assert created == [("https://rpc.test", 5)]
    assert w3.eth.addresses[0].lower() == TOKEN


def test_falls_back_to_bytes32_methods():
    client, _, _ = _client(
        {
            "name": BadFunctionCallOutput("could not decode"),
            "NAME": b"Maker" + b"\x00" * 27,
            "SYMBOL": b"MKR" + b"\x00" * 29,
            "decimals": 18,
        }
    )

    metadata = client.resolve(address=TOKEN, chain_id=1)

    assert (metadata.name, metadata.symbol) == ("Maker", "MKR")


def test_missing_methods_use_placeholders():
    client, _, _ = _client({})

    metadata = client.resolve(address=TOKEN, chain_id=1)

    assert (metadata.name, metadata.symbol, metadata.decimals) == ("unknown", "UNKNOWN", 18)


def test_empty_strings_use_placeholders():
    client, _, _ = _client({"name": "\x00\x00", "symbol": "", "decimals": 300})

    metadata = client.resolve(address=TOKEN, chain_id=1)

    assert (metadata.name, metadata.symbol, metadata.decimals) == ("unknown", "UNKNOWN", 18)


def test_results_are_cached_per_chain_and_address():
    client, w3, created = _client({"name": "A", "symbol": "A", "decimals": 1})

    first = client.resolve(address=TOKEN, chain_id=1)
    calls = len(w3.eth.calls)
    second = client.resolve(address=TOKEN.upper().replace("0X", "0x"), chain_id=1)

    assert first == second
    assert len(w3.eth.calls) == calls
    assert len(created) == 1


def test_transport_failure_raises_lookup_error():
    client, _, _ = _client({"name": ConnectionError("connection refused")})

    with pytest.raises(TokenMetadataLookupError):
        client.resolve(address=TOKEN, chain_id=1)


def test_missing_rpc_url_raises_lookup_error():
    client = Web3TokenMetadataClient(rpc_urls={}, chains=make_registry())

    with pytest.raises(TokenMetadataLookupError):
        client.resolve(address=TOKEN, chain_id=1)
