"""Provider interfaces and implementations.

Providers are swappable backends that implement standard interfaces.
Each provider type has an abstract base and concrete implementations.
"""

from .base import (
    Provider,
    ProviderHealth,
    ProviderStatus,
    LLMProvider,
    VectorProvider,
    FunctionsProvider,
    EnvProvider,
)
from .openai import OpenAIProvider
from .mock import MockLLMProvider
from .qdrant import QdrantVectorProvider
from .lancedb import LanceDBVectorProvider
from .memory import InMemoryVectorProvider
from .local_directory import LocalDirectoryProvider
from .filepath_env import FilepathEnvProvider

__all__ = [
    # Base interfaces
    "Provider",
    "ProviderHealth",
    "ProviderStatus",
    "LLMProvider",
    "VectorProvider",
    "FunctionsProvider",
    "EnvProvider",
    # LLM providers
    "OpenAIProvider",
    "MockLLMProvider",
    # Vector providers
    "QdrantVectorProvider",
    "LanceDBVectorProvider",
    "InMemoryVectorProvider",
    # Functions providers
    "LocalDirectoryProvider",
    # Env providers
    "FilepathEnvProvider",
]
