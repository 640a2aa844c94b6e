from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Bundle:
    id: str
    native_price_usd: Decimal


def bundle_id(chain_id: int) -> str:
    return str(chain_id)
