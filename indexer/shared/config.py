from __future__ import annotations

import json
import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _json(name: str) -> dict:
    value = _env(name)
    if not value:
        return {}
    return json.loads(value)


DEFAULT_RPC_URLS = {
    1: "https://eth.drpc.org",
    10: "https://optimism.drpc.org",
    56: "https://bsc.drpc.org",
    130: "https://unichain.drpc.org",
    137: "https://polygon.drpc.org",
    8453: "https://base.drpc.org",
    42161: "https://arbitrum.drpc.org",
    43114: "https://avalanche.drpc.org",
    81457: "https://blast.drpc.org",
}


@dataclass(frozen=True)
class Settings:
    database_dsn: str
    rpc_urls: dict[int, str]
    rpc_timeout_seconds: float
    chain_config_path: str
    log_level: str


def get_settings() -> Settings:
    rpc_urls = dict(DEFAULT_RPC_URLS)
    rpc_urls.update({int(chain_id): str(url) for chain_id, url in _json("RPC_URLS").items()})
    return Settings(
        database_dsn=_env("DATABASE_DSN", "sqlite:///./indexer.db"),
        rpc_urls=rpc_urls,
        rpc_timeout_seconds=float(_env("RPC_TIMEOUT_SECONDS", "30")),
        chain_config_path=_env("CHAIN_CONFIG_PATH", ""),
        log_level=_env("LOG_LEVEL", "INFO"),
    )
