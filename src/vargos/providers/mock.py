"""Mock providers for testing."""

from typing import Union

from .base import LLMProvider, ProviderHealth, ProviderStatus
from ..config.providers import LLMConfig
from ..errors import ConfigurationError
from ..interfaces import ChatResponse, Message
from ..testing.embedding_utils import hash_to_embedding


class MockLLMProvider(LLMProvider[LLMConfig]):
    """Mock LLM provider using deterministic hashing.

    ``chat`` echoes the last user message back as the assistant.
    """

    @property
    def dimensions(self) -> int:
        return self.config.dimensions

    async def initialize(self) -> None:
        self._initialized = True

    async def health_check(self) -> ProviderHealth:
        return ProviderHealth(
            status=ProviderStatus.HEALTHY,
            latency_ms=0.1,
            message="Mock provider always healthy"
        )

    async def generate_embeddings(
        self,
        texts: Union[str, list[str]],
    ) -> Union[list[float], list[list[float]]]:
        self._ensure_initialized()
        if isinstance(texts, str):
            return hash_to_embedding(texts, self.dimensions)
        return [hash_to_embedding(t, self.dimensions) for t in texts]

    async def chat(self, messages: list[Message]) -> ChatResponse:
        self._ensure_initialized()
        last_user = next((m.content for m in reversed(messages) if m.role == "user"), "")
        return ChatResponse(content=last_user, role="assistant")

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise ConfigurationError("Mock LLM provider is not initialized. Call initialize() first.")
