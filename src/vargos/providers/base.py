"""Abstract base classes for all providers.

These define the contracts that provider implementations must satisfy.
A service wraps exactly one provider per capability; the provider
registry can hold several implementations side by side.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

from ..interfaces import (
    ChatResponse,
    CreateFunctionInput,
    FunctionListResponse,
    FunctionMetadata,
    Message,
    VectorIndexData,
    VectorSearchOptions,
    VectorSearchResult,
)

# Type variable for provider-specific configuration
TConfig = TypeVar('TConfig')


class ProviderStatus(Enum):
    """Provider health status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"
    INITIALIZING = "initializing"


@dataclass
class ProviderHealth:
    """Health check result for a provider."""
    status: ProviderStatus
    latency_ms: Optional[float] = None
    message: Optional[str] = None
    last_check: datetime = None

    def __post_init__(self):
        if self.last_check is None:
            self.last_check = datetime.utcnow()


class Provider(ABC, Generic[TConfig]):
    """Base class for all providers.

    Provides common functionality:
    - Configuration management
    - Health checking
    - Lifecycle management (init/shutdown)
    """

    def __init__(self, config: TConfig):
        self.config = config
        self._initialized = False

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the provider. Called once before first use."""
        pass

    async def shutdown(self) -> None:
        """Gracefully shutdown the provider."""
        self._initialized = False

    async def health_check(self) -> ProviderHealth:
        """Check provider health and connectivity."""
        if not self._initialized:
            return ProviderHealth(
                status=ProviderStatus.UNAVAILABLE,
                message="Provider not initialized",
            )
        return ProviderHealth(status=ProviderStatus.HEALTHY)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def __aenter__(self):
        if not self._initialized:
            await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()


class LLMProvider(Provider[TConfig]):
    """Abstract LLM provider.

    Converts text to embeddings and answers chat requests.
    """

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return the embedding dimension size."""
        pass

    @abstractmethod
    async def generate_embeddings(
        self,
        texts: Union[str, list[str]],
    ) -> Union[list[float], list[list[float]]]:
        """Embed one text (returns a vector) or a list (returns one vector
        per input, in input order)."""
        pass

    @abstractmethod
    async def chat(self, messages: list[Message]) -> ChatResponse:
        """Send a conversation and return the assistant's reply."""
        pass


class VectorProvider(Provider[TConfig]):
    """Abstract vector store provider.

    Points are addressed by ``derive_point_id(logical_id)`` so indexing
    the same logical id twice overwrites the point.
    """

    @abstractmethod
    async def create_collection(self, name: str, vector_size: int) -> None:
        """Create a cosine-distance collection."""
        pass

    @abstractmethod
    async def collection_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    async def search(
        self,
        vector: list[float],
        options: VectorSearchOptions,
    ) -> list[VectorSearchResult]:
        """Nearest neighbours by descending score, at most ``options.limit``,
        none below ``options.threshold``."""
        pass

    @abstractmethod
    async def index(self, data: VectorIndexData) -> None:
        """Upsert one point."""
        pass

    @abstractmethod
    async def delete(self, collection_name: str, id: str) -> None:
        """Remove the point stored for a logical id."""
        pass


class FunctionsProvider(Provider[TConfig]):
    """Abstract functions provider: discovery, execution, creation."""

    @abstractmethod
    async def list_functions(self) -> FunctionListResponse:
        pass

    @abstractmethod
    async def get_function_metadata(self, function_id: str) -> FunctionMetadata:
        pass

    @abstractmethod
    async def execute_function(self, function_id: str, params: dict[str, Any]) -> Any:
        """Run a function and return its JSON result."""
        pass

    @abstractmethod
    async def create_function(self, request: CreateFunctionInput) -> FunctionMetadata:
        pass


class EnvProvider(Provider[TConfig]):
    """Abstract key/value env store."""

    @abstractmethod
    def read(self) -> dict[str, str]:
        pass

    @abstractmethod
    def write(self, env: dict[str, str]) -> None:
        pass

    @abstractmethod
    def search(self, keyword: str, censor: bool = False) -> dict[str, str]:
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    def load_into_environ(self, override: bool = False) -> int:
        """Copy stored entries into ``os.environ``.

        Existing variables are kept unless ``override`` is set, so values
        exported in the shell win over the store.

        Returns:
            Number of variables set
        """
        loaded = 0
        for key, value in self.read().items():
            if override or key not in os.environ:
                os.environ[key] = value
                loaded += 1
        return loaded
