"""In-memory vector provider."""

import copy
from dataclasses import dataclass
from typing import Any, Optional

from .base import VectorProvider, ProviderHealth, ProviderStatus
from ..config.providers import VectorConfig
from ..errors import NotFoundError
from ..interfaces import VectorIndexData, VectorSearchOptions, VectorSearchResult
from ..utils import cosine_similarity, derive_point_id


@dataclass
class _Collection:
    vector_size: int
    points: dict[str, tuple[list[float], dict[str, Any]]]


class InMemoryVectorProvider(VectorProvider[VectorConfig]):
    """In-memory vector store for testing and development.

    Filters are flat ``{payload_key: value}`` equality matches.
    """

    def __init__(self, config: Optional[VectorConfig] = None):
        super().__init__(config or VectorConfig())
        self._collections: dict[str, _Collection] = {}

    async def initialize(self) -> None:
        self._initialized = True

    async def shutdown(self) -> None:
        self._collections.clear()
        self._initialized = False

    async def health_check(self) -> ProviderHealth:
        total = sum(len(c.points) for c in self._collections.values())
        return ProviderHealth(
            status=ProviderStatus.HEALTHY,
            latency_ms=0.1,
            message=f"In-memory store with {len(self._collections)} collections, {total} points"
        )

    async def create_collection(self, name: str, vector_size: int) -> None:
        if name in self._collections:
            raise ValueError(f"Collection {name} already exists")
        self._collections[name] = _Collection(vector_size=vector_size, points={})

    async def collection_exists(self, name: str) -> bool:
        return name in self._collections

    async def search(
        self,
        vector: list[float],
        options: VectorSearchOptions,
    ) -> list[VectorSearchResult]:
        collection = self._get_collection(options.collection_name)

        results = []
        for point_id, (point_vector, payload) in collection.points.items():
            if options.filter and not self._matches_filter(payload, options.filter):
                continue
            score = cosine_similarity(vector, point_vector)
            if options.threshold is not None and score < options.threshold:
                continue
            results.append(VectorSearchResult(
                id=point_id,
                score=score,
                payload=copy.deepcopy(payload),
            ))

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:options.limit]

    async def index(self, data: VectorIndexData) -> None:
        collection = self._get_collection(data.collection_name)
        if len(data.vector) != collection.vector_size:
            raise ValueError(
                f"Invalid vector dimension: expected {collection.vector_size}, got {len(data.vector)}"
            )
        collection.points[derive_point_id(data.id)] = (list(data.vector), copy.deepcopy(data.payload))

    async def delete(self, collection_name: str, id: str) -> None:
        collection = self._get_collection(collection_name)
        collection.points.pop(derive_point_id(id), None)

    def count(self, collection_name: str) -> int:
        """Number of points in a collection."""
        return len(self._get_collection(collection_name).points)

    def _get_collection(self, name: str) -> _Collection:
        if name not in self._collections:
            raise NotFoundError(f"Collection {name} not found")
        return self._collections[name]

    def _matches_filter(self, payload: dict[str, Any], filters: dict[str, Any]) -> bool:
        return all(payload.get(key) == value for key, value in filters.items())
