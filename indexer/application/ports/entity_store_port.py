from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, TypeVar


EntityT = TypeVar("EntityT")


class EntityStorePort(Protocol):
    def get(self, entity_type: type[EntityT], entity_id: str) -> EntityT | None:
        ...

    def commit(self, entities: Sequence[object]) -> None:
        """Upsert every entity of one event; either all are stored or none."""
        ...
