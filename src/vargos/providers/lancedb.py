"""LanceDB vector provider."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from .base import VectorProvider, ProviderHealth, ProviderStatus
from ..config.providers import VectorConfig
from ..errors import ConfigurationError, NotFoundError
from ..interfaces import VectorIndexData, VectorSearchOptions, VectorSearchResult
from ..utils import derive_point_id

logger = logging.getLogger(__name__)


class LanceDBVectorProvider(VectorProvider[VectorConfig]):
    """LanceDB-backed vector provider.

    Each collection is a table of ``(id, vector, payload)`` rows, with the
    payload stored as a JSON string. Filters are flat
    ``{payload_key: value}`` equality matches applied after retrieval.
    """

    # Extra candidates fetched when a payload filter may discard rows
    FILTER_POOL_MULTIPLIER = 4

    def __init__(self, config: VectorConfig):
        super().__init__(config)
        self._db = None

    async def initialize(self) -> None:
        if self._initialized:
            return
        try:
            import lancedb
        except ImportError:
            raise ImportError("LanceDB not installed. Run: pip install lancedb")

        if not self.config.path:
            raise ConfigurationError("LanceDB requires path")

        Path(self.config.path).mkdir(parents=True, exist_ok=True)
        self._db = lancedb.connect(self.config.path)
        self._initialized = True
        logger.info(f"LanceDB provider ready ({self.config.path})")

    async def shutdown(self) -> None:
        self._db = None
        self._initialized = False

    async def health_check(self) -> ProviderHealth:
        if not self._db:
            return ProviderHealth(
                status=ProviderStatus.UNAVAILABLE,
                message="Database not initialized"
            )

        try:
            start = datetime.utcnow()
            names = self._db.table_names()
            latency = (datetime.utcnow() - start).total_seconds() * 1000
            return ProviderHealth(
                status=ProviderStatus.HEALTHY,
                latency_ms=latency,
                message=f"LanceDB with {len(names)} collections"
            )
        except Exception as e:
            return ProviderHealth(
                status=ProviderStatus.DEGRADED,
                message=str(e)
            )

    async def create_collection(self, name: str, vector_size: int) -> None:
        import pyarrow as pa

        schema = pa.schema([
            pa.field("id", pa.string()),
            pa.field("vector", pa.list_(pa.float32(), vector_size)),
            pa.field("payload", pa.string()),
        ])
        self._get_db().create_table(name, schema=schema)

    async def collection_exists(self, name: str) -> bool:
        return name in self._get_db().table_names()

    async def search(
        self,
        vector: list[float],
        options: VectorSearchOptions,
    ) -> list[VectorSearchResult]:
        table = self._open(options.collection_name)

        fetch = options.limit * self.FILTER_POOL_MULTIPLIER if options.filter else options.limit
        rows = (
            table.search(vector)
            .distance_type("cosine")
            .limit(fetch)
            .to_list()
        )

        results = []
        for row in rows:
            # Cosine distance is 1 - cosine similarity
            score = 1.0 - row.get("_distance", 0.0)
            if options.threshold is not None and score < options.threshold:
                continue
            payload = json.loads(row.get("payload") or "{}")
            if options.filter and not self._matches_filter(payload, options.filter):
                continue
            results.append(VectorSearchResult(id=row["id"], score=score, payload=payload))

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:options.limit]

    async def index(self, data: VectorIndexData) -> None:
        table = self._open(data.collection_name)
        row = {
            "id": derive_point_id(data.id),
            "vector": data.vector,
            "payload": json.dumps(data.payload),
        }
        (
            table.merge_insert("id")
            .when_matched_update_all()
            .when_not_matched_insert_all()
            .execute([row])
        )

    async def delete(self, collection_name: str, id: str) -> None:
        # Derived ids are UUID strings, safe to inline in the predicate
        self._open(collection_name).delete(f"id = '{derive_point_id(id)}'")

    def _get_db(self):
        if not self._db:
            raise ConfigurationError(
                "LanceDB provider is not initialized. Call initialize() first."
            )
        return self._db

    def _open(self, name: str):
        db = self._get_db()
        if name not in db.table_names():
            raise NotFoundError(f"Collection {name} not found")
        return db.open_table(name)

    def _matches_filter(self, payload: dict[str, Any], filters: dict[str, Any]) -> bool:
        return all(payload.get(key) == value for key, value in filters.items())
