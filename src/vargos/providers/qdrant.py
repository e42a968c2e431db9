"""Qdrant vector provider."""

import logging
from datetime import datetime
from typing import Any, Optional

from qdrant_client import AsyncQdrantClient, models

from .base import VectorProvider, ProviderHealth, ProviderStatus
from ..config.providers import VectorConfig
from ..errors import ConfigurationError
from ..interfaces import VectorIndexData, VectorSearchOptions, VectorSearchResult
from ..utils import derive_point_id

logger = logging.getLogger(__name__)


class QdrantVectorProvider(VectorProvider[VectorConfig]):
    """Qdrant-backed vector provider.

    Client errors propagate unchanged. ``options.filter`` is passed to
    Qdrant as a filter document (``{"must": [...]}``).
    """

    def __init__(self, config: VectorConfig, client: Optional[AsyncQdrantClient] = None):
        super().__init__(config)
        self._client = client

    async def initialize(self) -> None:
        """Connect to Qdrant.

        Raises:
            ConfigurationError: If no url is configured
        """
        if self._initialized:
            return
        if self._client is None:
            if not self.config.url:
                raise ConfigurationError("QDRANT_URL is required for Qdrant provider")
            kwargs: dict[str, Any] = {"url": self.config.url, "api_key": self.config.api_key}
            if self.config.port is not None:
                kwargs["port"] = self.config.port
            self._client = AsyncQdrantClient(**kwargs)
        self._initialized = True
        logger.info(f"Qdrant provider ready ({self.config.url})")

    async def shutdown(self) -> None:
        if self._client:
            await self._client.close()
            self._client = None
        self._initialized = False

    async def health_check(self) -> ProviderHealth:
        if not self._client:
            return ProviderHealth(
                status=ProviderStatus.UNAVAILABLE,
                message="Client not initialized"
            )

        try:
            start = datetime.utcnow()
            response = await self._client.get_collections()
            latency = (datetime.utcnow() - start).total_seconds() * 1000
            return ProviderHealth(
                status=ProviderStatus.HEALTHY,
                latency_ms=latency,
                message=f"Qdrant with {len(response.collections)} collections"
            )
        except Exception as e:
            return ProviderHealth(
                status=ProviderStatus.UNAVAILABLE,
                message=str(e)
            )

    async def create_collection(self, name: str, vector_size: int) -> None:
        await self._get_client().create_collection(
            collection_name=name,
            vectors_config=models.VectorParams(
                size=vector_size,
                distance=models.Distance.COSINE,
            ),
        )

    async def collection_exists(self, name: str) -> bool:
        return bool(await self._get_client().collection_exists(collection_name=name))

    async def search(
        self,
        vector: list[float],
        options: VectorSearchOptions,
    ) -> list[VectorSearchResult]:
        response = await self._get_client().query_points(
            collection_name=options.collection_name,
            query=vector,
            limit=options.limit,
            score_threshold=options.threshold,
            query_filter=self._to_filter(options.filter),
            with_payload=True,
        )

        results = [
            VectorSearchResult(
                id=str(point.id),
                score=point.score,
                payload=dict(point.payload or {}),
            )
            for point in response.points
            if options.threshold is None or point.score >= options.threshold
        ]
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:options.limit]

    async def index(self, data: VectorIndexData) -> None:
        await self._get_client().upsert(
            collection_name=data.collection_name,
            points=[
                models.PointStruct(
                    id=derive_point_id(data.id),
                    vector=data.vector,
                    payload=data.payload,
                )
            ],
        )

    async def delete(self, collection_name: str, id: str) -> None:
        await self._get_client().delete(
            collection_name=collection_name,
            points_selector=models.PointIdsList(points=[derive_point_id(id)]),
        )

    def _get_client(self) -> AsyncQdrantClient:
        if not self._client or not self._initialized:
            raise ConfigurationError(
                "Qdrant provider is not initialized. Call initialize() first."
            )
        return self._client

    @staticmethod
    def _to_filter(filter_doc: Optional[dict[str, Any]]) -> Optional[models.Filter]:
        if not filter_doc:
            return None
        return models.Filter(**filter_doc)
