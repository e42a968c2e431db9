"""Vector service: text search on top of a vector provider."""

import logging

from .llm import LLMService
from ..errors import RemoteServiceError
from ..interfaces import VectorIndexData, VectorSearchOptions, VectorSearchResult
from ..providers.base import VectorProvider

logger = logging.getLogger(__name__)


class VectorService:
    """Embeds queries with the LLM service before searching.

    Everything else is passed to the provider unchanged.
    """

    def __init__(self, provider: VectorProvider, llm: LLMService):
        self.provider = provider
        self.llm = llm

    async def create_collection(self, name: str, vector_size: int) -> None:
        await self.provider.create_collection(name, vector_size)

    async def collection_exists(self, name: str) -> bool:
        return await self.provider.collection_exists(name)

    async def search(self, query: str, options: VectorSearchOptions) -> list[VectorSearchResult]:
        """Embed ``query`` and return its nearest neighbours.

        Raises:
            RemoteServiceError: If the LLM returned no embedding
        """
        embeddings = await self.llm.generate_embeddings([query])
        if not embeddings or not embeddings[0]:
            raise RemoteServiceError("Failed to generate embedding for search query")

        logger.debug(f"Searching {options.collection_name} (limit={options.limit})")
        return await self.provider.search(embeddings[0], options)

    async def index(self, data: VectorIndexData) -> None:
        await self.provider.index(data)

    async def delete(self, collection_name: str, id: str) -> None:
        await self.provider.delete(collection_name, id)
