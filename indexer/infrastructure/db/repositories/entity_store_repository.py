from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypeVar

from sqlalchemy import text

from indexer.application.ports.entity_store_port import EntityStorePort
from indexer.infrastructure.db.engine import Base
from indexer.infrastructure.db.mappers.entity_mapper import (
    entity_chain_id,
    entity_type_name,
    map_entity_to_payload,
    map_payload_to_entity,
)
from indexer.infrastructure.db.models.entities import EntityRecordModel  # noqa: F401


logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")


class SqlEntityStoreRepository(EntityStorePort):
    def __init__(self, engine):
        self._engine = engine

    def create_schema(self) -> None:
        Base.metadata.create_all(self._engine)

    def get(self, entity_type: type[EntityT], entity_id: str) -> EntityT | None:
        sql = text(
            """
            SELECT payload
            FROM indexer_entities
            WHERE entity_type = :entity_type
              AND entity_id = :entity_id
            """
        )
        with self._engine.connect() as conn:
            row = conn.execute(
                sql,
                {"entity_type": entity_type_name(entity_type), "entity_id": entity_id},
            ).mappings().first()
        if row is None:
            return None
        return map_payload_to_entity(entity_type, row["payload"])

    def commit(self, entities: Sequence[object]) -> None:
        if not entities:
            return

        # Later writes of the same key win, matching in-order application.
        rows: dict[tuple[str, str], dict] = {}
        for entity in entities:
            type_name = entity_type_name(type(entity))
            rows[(type_name, entity.id)] = {
                "entity_type": type_name,
                "entity_id": entity.id,
                "chain_id": entity_chain_id(entity),
                "payload": map_entity_to_payload(entity),
            }

        sql = text(
            """
            INSERT INTO indexer_entities (entity_type, entity_id, chain_id, payload, updated_at)
            VALUES (:entity_type, :entity_id, :chain_id, :payload, CURRENT_TIMESTAMP)
            ON CONFLICT (entity_type, entity_id)
            DO UPDATE SET
                chain_id = EXCLUDED.chain_id,
                payload = EXCLUDED.payload,
                updated_at = CURRENT_TIMESTAMP
            """
        )
        with self._engine.begin() as conn:
            conn.execute(sql, list(rows.values()))

        logger.debug(
            "entity_store_repo: commit entities=%s types=%s",
            len(rows),
            sorted({key[0] for key in rows}),
        )
