"""Functions service: discovery, semantic search and execution."""

import asyncio
import logging
from typing import Any

from .llm import LLMService
from .vector import VectorService
from ..interfaces import (
    CreateFunctionInput,
    FunctionListResponse,
    FunctionMetadata,
    VectorIndexData,
    VectorSearchOptions,
    VectorSearchResult,
)
from ..providers.base import FunctionsProvider

logger = logging.getLogger(__name__)

DEFAULT_META_COLLECTION = "vargos-functions-meta"


def function_index_text(metadata: FunctionMetadata) -> str:
    """Text embedded for a function's search entry."""
    return (
        f"Name: {metadata.name}\n"
        f"Description: {metadata.description}\n"
        f"Tags: {', '.join(metadata.tags)}"
    )


class FunctionsService:
    """Combines the functions provider with the vector index.

    Execution and creation are delegated unchanged; indexing keeps one
    point per function id in the metadata collection, so re-indexing a
    function overwrites its previous entry.
    """

    def __init__(
        self,
        provider: FunctionsProvider,
        llm: LLMService,
        vector: VectorService,
        collection_name: str = DEFAULT_META_COLLECTION,
    ):
        self.provider = provider
        self.llm = llm
        self.vector = vector
        self.collection_name = collection_name
        self._collection_lock = asyncio.Lock()
        self._collection_ready = False

    async def list_functions(self) -> FunctionListResponse:
        return await self.provider.list_functions()

    async def get_function_metadata(self, function_id: str) -> FunctionMetadata:
        return await self.provider.get_function_metadata(function_id)

    async def index_function(self, metadata: FunctionMetadata) -> None:
        """Embed a function's name, description and tags and upsert it."""
        vector = await self.llm.generate_embeddings(function_index_text(metadata))
        await self._ensure_collection(len(vector))
        await self.vector.index(VectorIndexData(
            collection_name=self.collection_name,
            id=metadata.id,
            vector=vector,
            payload=metadata.to_dict(),
        ))
        logger.debug(f"Indexed function {metadata.id}")

    async def reindex_functions(self) -> int:
        """Index every discovered function.

        Returns:
            Number of functions indexed
        """
        listing = await self.list_functions()
        await asyncio.gather(*(self.index_function(meta) for meta in listing.functions))
        logger.info(f"Reindexed {listing.total} functions into {self.collection_name}")
        return listing.total

    async def search_functions(self, query: str, limit: int = 10) -> list[VectorSearchResult]:
        """Functions ranked by similarity of their index text to ``query``."""
        return await self.vector.search(
            query,
            VectorSearchOptions(collection_name=self.collection_name, limit=limit),
        )

    async def execute_function(self, function_id: str, params: dict[str, Any]) -> Any:
        return await self.provider.execute_function(function_id, params)

    async def create_function(self, request: CreateFunctionInput) -> FunctionMetadata:
        return await self.provider.create_function(request)

    async def _ensure_collection(self, vector_size: int) -> None:
        if self._collection_ready:
            return
        async with self._collection_lock:
            if self._collection_ready:
                return
            if not await self.vector.collection_exists(self.collection_name):
                await self.vector.create_collection(self.collection_name, vector_size)
                logger.info(f"Created collection {self.collection_name} (size={vector_size})")
            self._collection_ready = True
