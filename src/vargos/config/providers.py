"""Provider-specific configuration classes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class LLMProviderType(Enum):
    """Available LLM (embedding + chat) providers."""
    OPENAI = "openai"
    MOCK = "mock"


class VectorProviderType(Enum):
    """Available vector store providers."""
    QDRANT = "qdrant"
    LANCEDB = "lancedb"
    MEMORY = "memory"


class FunctionsProviderType(Enum):
    """Available function execution providers."""
    LOCAL_DIRECTORY = "local-directory"


class EnvProviderType(Enum):
    """Available env store providers."""
    FILEPATH = "filepath"


DEFAULT_CENSORED_SUFFIXES = ["_KEY", "_SECRET", "_PASSWORD", "_TOKEN", "_CREDENTIALS"]


@dataclass
class LLMConfig:
    """Configuration for the LLM provider.

    Attributes:
        provider: Which LLM provider to use
        api_key: API key (for cloud providers)
        api_base: Custom API base URL (any OpenAI-compatible endpoint)
        embedding_model: Model used for embeddings
        chat_model: Model used for chat completions
        dimensions: Embedding dimension size
        timeout_seconds: Request timeout
    """
    provider: LLMProviderType = LLMProviderType.OPENAI
    api_key: Optional[str] = None
    api_base: Optional[str] = None
    embedding_model: str = "text-embedding-3-small"
    chat_model: str = "gpt-4o-mini"
    dimensions: int = 1536
    timeout_seconds: float = 30.0


@dataclass
class VectorConfig:
    """Configuration for the vector store provider.

    Attributes:
        provider: Which vector provider to use
        url: Qdrant server URL
        api_key: Qdrant API key
        port: Qdrant port override
        path: Local database directory (for LanceDB)
    """
    provider: VectorProviderType = VectorProviderType.QDRANT
    url: Optional[str] = None
    api_key: Optional[str] = None
    port: Optional[int] = None
    path: Optional[str] = None


@dataclass
class FunctionsConfig:
    """Configuration for the functions provider.

    Attributes:
        provider: Which functions provider to use
        functions_dir: Root of the functions repository (holds ``src/``)
        runner_command: Command used to run one function; the function id
            and JSON parameters are appended. Defaults to the bundled
            ``python -m vargos.runner``.
        entry_file: Name of the entry code file inside a function directory
        meta_collection: Vector collection holding function metadata
    """
    provider: FunctionsProviderType = FunctionsProviderType.LOCAL_DIRECTORY
    functions_dir: Optional[str] = None
    runner_command: Optional[list[str]] = None
    entry_file: str = "index.py"
    meta_collection: str = "vargos-functions-meta"


@dataclass
class EnvConfig:
    """Configuration for the env store.

    Attributes:
        enabled: Whether to wire the env service at all
        provider: Which env provider to use
        env_file_path: Path of the ``KEY="value"`` file
        censored_keys: Key suffixes whose values are masked in censored search
    """
    enabled: bool = True
    provider: EnvProviderType = EnvProviderType.FILEPATH
    env_file_path: str = ".env"
    censored_keys: list[str] = field(default_factory=lambda: list(DEFAULT_CENSORED_SUFFIXES))


@dataclass
class ShellConfig:
    """Configuration for the persistent shell session.

    Attributes:
        enabled: Whether to start a shell session
        data_dir: Working directory of the shell
        shell_path: Shell executable
    """
    enabled: bool = True
    data_dir: str = "/tmp"
    shell_path: str = "/bin/bash"
