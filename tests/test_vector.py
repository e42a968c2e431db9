"""Tests for vector providers and the vector service."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from vargos.config import LLMConfig, LLMProviderType, VectorConfig, VectorProviderType
from vargos.errors import ConfigurationError, NotFoundError, RemoteServiceError
from vargos.interfaces import VectorIndexData, VectorSearchOptions
from vargos.providers.memory import InMemoryVectorProvider
from vargos.providers.mock import MockLLMProvider
from vargos.providers.qdrant import QdrantVectorProvider
from vargos.services import LLMService, VectorService
from vargos.utils import derive_point_id


def point(collection: str, id: str, vector: list[float], **payload) -> VectorIndexData:
    return VectorIndexData(collection_name=collection, id=id, vector=vector, payload=payload)


class TestInMemoryVectorProvider:
    """Tests for the in-memory store."""

    @pytest.fixture
    async def provider(self):
        p = InMemoryVectorProvider()
        await p.initialize()
        await p.create_collection("docs", 3)
        yield p
        await p.shutdown()

    async def test_collection_lifecycle(self, provider):
        assert await provider.collection_exists("docs")
        assert not await provider.collection_exists("other")
        with pytest.raises(ValueError, match="already exists"):
            await provider.create_collection("docs", 3)

    async def test_search_sorted_limited_thresholded(self, provider):
        await provider.index(point("docs", "x", [1.0, 0.0, 0.0]))
        await provider.index(point("docs", "near-x", [0.9, 0.1, 0.0]))
        await provider.index(point("docs", "y", [0.0, 1.0, 0.0]))
        await provider.index(point("docs", "minus-x", [-1.0, 0.0, 0.0]))

        results = await provider.search(
            [1.0, 0.0, 0.0],
            VectorSearchOptions(collection_name="docs", limit=2),
        )
        assert [r.id for r in results] == [derive_point_id("x"), derive_point_id("near-x")]
        assert results[0].score >= results[1].score

        results = await provider.search(
            [1.0, 0.0, 0.0],
            VectorSearchOptions(collection_name="docs", limit=10, threshold=0.5),
        )
        assert len(results) == 2
        assert all(r.score >= 0.5 for r in results)

    async def test_reindex_same_id_overwrites(self, provider):
        await provider.index(point("docs", "a", [1.0, 0.0, 0.0], version=1))
        await provider.index(point("docs", "a", [0.0, 1.0, 0.0], version=2))

        assert provider.count("docs") == 1
        results = await provider.search([0.0, 1.0, 0.0], VectorSearchOptions("docs"))
        assert results[0].payload == {"version": 2}
        assert results[0].score == pytest.approx(1.0)

    async def test_filter_by_payload_equality(self, provider):
        await provider.index(point("docs", "a", [1.0, 0.0, 0.0], kind="note"))
        await provider.index(point("docs", "b", [1.0, 0.1, 0.0], kind="todo"))

        results = await provider.search(
            [1.0, 0.0, 0.0],
            VectorSearchOptions("docs", filter={"kind": "todo"}),
        )
        assert [r.payload["kind"] for r in results] == ["todo"]

    async def test_delete(self, provider):
        await provider.index(point("docs", "a", [1.0, 0.0, 0.0]))
        await provider.delete("docs", "a")
        await provider.delete("docs", "never-there")

        assert provider.count("docs") == 0

    async def test_dimension_mismatch_rejected(self, provider):
        with pytest.raises(ValueError, match="dimension"):
            await provider.index(point("docs", "a", [1.0, 0.0]))

    async def test_missing_collection_raises(self, provider):
        with pytest.raises(NotFoundError):
            await provider.search([1.0, 0.0, 0.0], VectorSearchOptions("missing"))
        with pytest.raises(NotFoundError):
            await provider.index(point("missing", "a", [1.0, 0.0, 0.0]))
        with pytest.raises(NotFoundError):
            await provider.delete("missing", "a")

    async def test_payloads_are_copied(self, provider):
        payload = {"tags": ["a"]}
        await provider.index(VectorIndexData("docs", "a", [1.0, 0.0, 0.0], payload))
        payload["tags"].append("mutated")

        results = await provider.search([1.0, 0.0, 0.0], VectorSearchOptions("docs"))
        results[0].payload["tags"].append("also mutated")

        again = await provider.search([1.0, 0.0, 0.0], VectorSearchOptions("docs"))
        assert again[0].payload == {"tags": ["a"]}


class TestQdrantVectorProvider:
    """Tests for the Qdrant provider against a mocked client."""

    @pytest.fixture
    def client(self):
        client = AsyncMock()
        client.collection_exists.return_value = True
        client.query_points.return_value = SimpleNamespace(points=[
            SimpleNamespace(id="p2", score=0.4, payload={"name": "low"}),
            SimpleNamespace(id="p1", score=0.9, payload={"name": "high"}),
            SimpleNamespace(id="p3", score=0.2, payload=None),
        ])
        return client

    @pytest.fixture
    async def provider(self, client):
        p = QdrantVectorProvider(VectorConfig(url="http://qdrant:6333"), client=client)
        await p.initialize()
        return p

    async def test_requires_url(self):
        provider = QdrantVectorProvider(VectorConfig(provider=VectorProviderType.QDRANT))
        with pytest.raises(ConfigurationError, match="QDRANT_URL"):
            await provider.initialize()

    async def test_uninitialized_raises(self, client):
        provider = QdrantVectorProvider(VectorConfig(url="http://qdrant:6333"), client=client)
        with pytest.raises(ConfigurationError, match="not initialized"):
            await provider.collection_exists("docs")

    async def test_create_collection_uses_cosine(self, provider, client):
        from qdrant_client import models

        await provider.create_collection("docs", 8)

        kwargs = client.create_collection.call_args.kwargs
        assert kwargs["collection_name"] == "docs"
        assert kwargs["vectors_config"].size == 8
        assert kwargs["vectors_config"].distance == models.Distance.COSINE

    async def test_index_upserts_derived_id(self, provider, client):
        await provider.index(point("docs", "weather", [0.1, 0.2], name="Weather"))

        kwargs = client.upsert.call_args.kwargs
        assert kwargs["collection_name"] == "docs"
        (stored,) = kwargs["points"]
        assert stored.id == derive_point_id("weather")
        assert stored.payload == {"name": "Weather"}

    async def test_search_sorts_and_applies_threshold(self, provider, client):
        results = await provider.search(
            [0.1, 0.2],
            VectorSearchOptions("docs", limit=5, threshold=0.3),
        )

        assert [r.id for r in results] == ["p1", "p2"]
        assert results[0].payload == {"name": "high"}
        kwargs = client.query_points.call_args.kwargs
        assert kwargs["score_threshold"] == 0.3
        assert kwargs["limit"] == 5
        assert kwargs["query_filter"] is None

    async def test_search_passes_filter_document(self, provider, client):
        from qdrant_client import models

        await provider.search(
            [0.1, 0.2],
            VectorSearchOptions("docs", filter={
                "must": [{"key": "category", "match": {"value": "utility"}}],
            }),
        )

        query_filter = client.query_points.call_args.kwargs["query_filter"]
        assert isinstance(query_filter, models.Filter)
        assert query_filter.must[0].key == "category"

    async def test_delete_uses_derived_id(self, provider, client):
        await provider.delete("docs", "weather")

        selector = client.delete.call_args.kwargs["points_selector"]
        assert selector.points == [derive_point_id("weather")]

    async def test_client_errors_propagate(self, provider, client):
        client.upsert.side_effect = RuntimeError("qdrant down")
        with pytest.raises(RuntimeError, match="qdrant down"):
            await provider.index(point("docs", "a", [0.1]))

    async def test_shutdown_closes_client(self, provider, client):
        await provider.shutdown()
        client.close.assert_awaited_once()
        assert not provider.is_initialized


class TestLanceDBVectorProvider:
    """Tests for the LanceDB provider (skipped without lancedb)."""

    @pytest.fixture
    async def provider(self, tmp_path):
        pytest.importorskip("lancedb")
        from vargos.providers.lancedb import LanceDBVectorProvider

        p = LanceDBVectorProvider(VectorConfig(
            provider=VectorProviderType.LANCEDB,
            path=str(tmp_path / "lancedb"),
        ))
        await p.initialize()
        await p.create_collection("docs", 3)
        yield p
        await p.shutdown()

    async def test_index_search_and_overwrite(self, provider):
        await provider.index(point("docs", "x", [1.0, 0.0, 0.0], version=1))
        await provider.index(point("docs", "y", [0.0, 1.0, 0.0]))
        await provider.index(point("docs", "x", [1.0, 0.0, 0.0], version=2))

        results = await provider.search([1.0, 0.0, 0.0], VectorSearchOptions("docs", limit=10))

        assert results[0].id == derive_point_id("x")
        assert results[0].payload == {"version": 2}
        assert results[0].score == pytest.approx(1.0, abs=1e-5)
        assert len([r for r in results if r.id == derive_point_id("x")]) == 1

    async def test_threshold_and_filter(self, provider):
        await provider.index(point("docs", "a", [1.0, 0.0, 0.0], kind="note"))
        await provider.index(point("docs", "b", [0.0, 1.0, 0.0], kind="note"))
        await provider.index(point("docs", "c", [1.0, 0.1, 0.0], kind="todo"))

        results = await provider.search(
            [1.0, 0.0, 0.0],
            VectorSearchOptions("docs", threshold=0.5, filter={"kind": "note"}),
        )
        assert [r.id for r in results] == [derive_point_id("a")]

    async def test_delete_and_missing_collection(self, provider):
        await provider.index(point("docs", "a", [1.0, 0.0, 0.0]))
        await provider.delete("docs", "a")

        assert await provider.search([1.0, 0.0, 0.0], VectorSearchOptions("docs")) == []
        with pytest.raises(NotFoundError):
            await provider.search([1.0, 0.0, 0.0], VectorSearchOptions("missing"))


class TestVectorService:
    """Tests for text search through the LLM."""

    @pytest.fixture
    async def llm(self):
        provider = MockLLMProvider(LLMConfig(provider=LLMProviderType.MOCK, dimensions=32))
        await provider.initialize()
        return LLMService(provider)

    async def test_search_embeds_query(self, llm):
        store = InMemoryVectorProvider()
        await store.initialize()
        service = VectorService(store, llm)
        await service.create_collection("notes", 32)

        for id, text in [("w", "weather forecast"), ("e", "send email")]:
            await service.index(VectorIndexData("notes", id, await llm.generate_embeddings(text), {"text": text}))

        results = await service.search("weather forecast", VectorSearchOptions("notes", limit=1))

        assert results[0].payload["text"] == "weather forecast"

    async def test_missing_embedding_raises(self):
        llm = AsyncMock()
        llm.generate_embeddings.return_value = []
        service = VectorService(InMemoryVectorProvider(), llm)

        with pytest.raises(RemoteServiceError, match="embedding"):
            await service.search("anything", VectorSearchOptions("notes"))

    async def test_delegates_management_calls(self):
        provider = AsyncMock()
        provider.collection_exists.return_value = False
        service = VectorService(provider, AsyncMock())

        assert await service.collection_exists("c") is False
        await service.create_collection("c", 4)
        await service.delete("c", "id-1")

        provider.create_collection.assert_awaited_once_with("c", 4)
        provider.delete.assert_awaited_once_with("c", "id-1")
