"""Free-form semantic memory on top of the vector service."""

import logging
from typing import Any, Optional

from .llm import LLMService
from .vector import VectorService
from ..interfaces import VectorIndexData, VectorSearchOptions, VectorSearchResult

logger = logging.getLogger(__name__)


class MemoryService:
    """Remember and recall text snippets in named collections.

    Usage:
        memory = MemoryService(llm, vector)

        await memory.remember("notes", "lang", "Joe prefers TypeScript")
        results = await memory.recall("notes", "What language?")
    """

    def __init__(self, llm: LLMService, vector: VectorService):
        self.llm = llm
        self.vector = vector

    async def create_collection(self, name: str, vector_size: Optional[int] = None) -> bool:
        """Create a collection sized for the LLM's embeddings.

        Returns:
            False if the collection already existed
        """
        if await self.vector.collection_exists(name):
            return False
        await self.vector.create_collection(name, vector_size or self.llm.dimensions)
        logger.info(f"Created memory collection {name}")
        return True

    async def remember(
        self,
        collection: str,
        id: str,
        text: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        """Store ``text`` under ``id``, replacing any previous entry."""
        vector = await self.llm.generate_embeddings(text)
        await self.create_collection(collection, len(vector))
        await self.vector.index(VectorIndexData(
            collection_name=collection,
            id=id,
            vector=vector,
            payload={"text": text, **(metadata or {})},
        ))

    async def recall(
        self,
        collection: str,
        query: str,
        limit: int = 5,
        threshold: Optional[float] = None,
        filter: Optional[dict[str, Any]] = None,
    ) -> list[VectorSearchResult]:
        return await self.vector.search(
            query,
            VectorSearchOptions(
                collection_name=collection,
                limit=limit,
                threshold=threshold,
                filter=filter,
            ),
        )

    async def forget(self, collection: str, id: str) -> None:
        await self.vector.delete(collection, id)
