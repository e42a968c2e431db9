"""Core services bundle.

Wires providers and services through the container and hands back an
explicit bundle. There is no module-level instance; callers own the
bundle and shut it down.
"""

import logging
from dataclasses import asdict
from enum import Enum
from typing import Any, Optional

from .config import CoreConfig
from .config.providers import (
    EnvProviderType,
    FunctionsProviderType,
    LLMProviderType,
    VectorProviderType,
)
from .container import ProviderRegistry, ServiceContainer, Tokens
from .providers.base import (
    EnvProvider,
    FunctionsProvider,
    LLMProvider,
    Provider,
    ProviderHealth,
    VectorProvider,
)
from .services import (
    EnvService,
    FunctionsService,
    LLMService,
    MemoryService,
    ShellService,
    VectorService,
)

logger = logging.getLogger(__name__)

_SECRET_FIELDS = {"api_key"}


def sanitize_config(config: CoreConfig) -> dict[str, Any]:
    """Config as a dict with secrets masked, for logging."""
    def scrub(value: Any) -> Any:
        if isinstance(value, dict):
            return {
                k: ("***" if k in _SECRET_FIELDS and v else scrub(v))
                for k, v in value.items()
            }
        if isinstance(value, list):
            return [scrub(v) for v in value]
        if isinstance(value, Enum):
            return value.value
        return value

    return scrub(asdict(config))


def create_llm_provider(config: CoreConfig) -> LLMProvider:
    from .providers.openai import OpenAIProvider
    from .providers.mock import MockLLMProvider

    cfg = config.llm
    if cfg.provider == LLMProviderType.OPENAI:
        return OpenAIProvider(cfg)
    elif cfg.provider == LLMProviderType.MOCK:
        return MockLLMProvider(cfg)
    else:
        raise ValueError(f"Unknown LLM provider: {cfg.provider}")


def create_vector_provider(config: CoreConfig) -> VectorProvider:
    from .providers.qdrant import QdrantVectorProvider
    from .providers.lancedb import LanceDBVectorProvider
    from .providers.memory import InMemoryVectorProvider

    cfg = config.vector
    if cfg.provider == VectorProviderType.QDRANT:
        return QdrantVectorProvider(cfg)
    elif cfg.provider == VectorProviderType.LANCEDB:
        return LanceDBVectorProvider(cfg)
    elif cfg.provider == VectorProviderType.MEMORY:
        return InMemoryVectorProvider(cfg)
    else:
        raise ValueError(f"Unknown vector provider: {cfg.provider}")


def create_functions_provider(config: CoreConfig) -> FunctionsProvider:
    from .providers.local_directory import LocalDirectoryProvider

    cfg = config.functions
    if cfg.provider == FunctionsProviderType.LOCAL_DIRECTORY:
        return LocalDirectoryProvider(cfg)
    else:
        raise ValueError(f"Unknown functions provider: {cfg.provider}")


def create_env_provider(config: CoreConfig) -> EnvProvider:
    from .providers.filepath_env import FilepathEnvProvider

    cfg = config.env
    if cfg.provider == EnvProviderType.FILEPATH:
        return FilepathEnvProvider(cfg)
    else:
        raise ValueError(f"Unknown env provider: {cfg.provider}")


class CoreServices:
    """The wired runtime: one service per capability.

    Usage:
        services = await create_core_services(CoreConfig.from_env())
        async with services:
            results = await services.functions.search_functions("weather")
    """

    def __init__(
        self,
        container: ServiceContainer,
        registry: ProviderRegistry,
        config: CoreConfig,
        llm: LLMService,
        vector: VectorService,
        functions: FunctionsService,
        memory: MemoryService,
        env: Optional[EnvService] = None,
        shell: Optional[ShellService] = None,
    ):
        self.container = container
        self.registry = registry
        self.config = config
        self.llm = llm
        self.vector = vector
        self.functions = functions
        self.memory = memory
        self.env = env
        self.shell = shell
        self._closed = False

    def providers(self) -> dict[str, Provider]:
        """The active provider for each capability."""
        active = {
            "llm": self.llm.provider,
            "vector": self.vector.provider,
            "functions": self.functions.provider,
        }
        if self.env:
            active["env"] = self.env.provider
        return active

    async def health(self) -> dict[str, ProviderHealth]:
        return {name: await p.health_check() for name, p in self.providers().items()}

    async def shutdown(self) -> None:
        """Stop the shell and providers in reverse wiring order."""
        if self._closed:
            return
        logger.info("Shutting down core services")

        if self.shell:
            await self.shell.shutdown()
        for provider in reversed(list(self.providers().values())):
            await provider.shutdown()

        self.container.clear()
        self._closed = True
        logger.info("Core services shutdown complete")

    async def __aenter__(self) -> "CoreServices":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()


async def create_core_services(
    config: CoreConfig,
    container: Optional[ServiceContainer] = None,
) -> CoreServices:
    """Build and initialize every service described by ``config``.

    Providers are created and initialized in dependency order:
    1. LLM (no dependencies)
    2. Vector (search embeds through the LLM service)
    3. Functions (indexes through LLM and vector)
    4. Env and shell (optional, independent)

    Args:
        config: Runtime configuration
        container: Container to register into; a new one by default.
            Factories already registered for a token are replaced.

    Raises:
        ConfigurationError: A provider is missing required settings
    """
    logger.info("Initializing core services")
    logger.debug(f"Config: {sanitize_config(config)}")

    container = container or ServiceContainer()
    registry = ProviderRegistry()

    started: list[Provider] = []

    def provider_factory(kind: str, create):
        async def factory():
            provider = create(config)
            await provider.initialize()
            started.append(provider)
            registry.register(kind, getattr(config, kind).provider.value, provider)
            return provider
        return factory

    container.register(Tokens.LLM_PROVIDER, provider_factory("llm", create_llm_provider))
    container.register(Tokens.VECTOR_PROVIDER, provider_factory("vector", create_vector_provider))
    container.register(
        Tokens.FUNCTIONS_PROVIDER, provider_factory("functions", create_functions_provider)
    )

    async def llm_service():
        return LLMService(await container.resolve(Tokens.LLM_PROVIDER))

    async def vector_service():
        return VectorService(
            await container.resolve(Tokens.VECTOR_PROVIDER),
            await container.resolve(Tokens.LLM_SERVICE),
        )

    async def functions_service():
        return FunctionsService(
            await container.resolve(Tokens.FUNCTIONS_PROVIDER),
            await container.resolve(Tokens.LLM_SERVICE),
            await container.resolve(Tokens.VECTOR_SERVICE),
            collection_name=config.functions.meta_collection,
        )

    async def memory_service():
        return MemoryService(
            await container.resolve(Tokens.LLM_SERVICE),
            await container.resolve(Tokens.VECTOR_SERVICE),
        )

    container.register(Tokens.LLM_SERVICE, llm_service)
    container.register(Tokens.VECTOR_SERVICE, vector_service)
    container.register(Tokens.FUNCTIONS_SERVICE, functions_service)
    container.register(Tokens.MEMORY_SERVICE, memory_service)

    if config.env.enabled:
        async def env_service():
            return EnvService(await container.resolve(Tokens.ENV_PROVIDER))

        container.register(Tokens.ENV_PROVIDER, provider_factory("env", create_env_provider))
        container.register(Tokens.ENV_SERVICE, env_service)

    if config.shell.enabled:
        async def shell_service():
            shell = ShellService(config.shell)
            await shell.initialize()
            return shell

        container.register(Tokens.SHELL_SERVICE, shell_service)

    try:
        services = CoreServices(
            container=container,
            registry=registry,
            config=config,
            llm=await container.resolve(Tokens.LLM_SERVICE),
            vector=await container.resolve(Tokens.VECTOR_SERVICE),
            functions=await container.resolve(Tokens.FUNCTIONS_SERVICE),
            memory=await container.resolve(Tokens.MEMORY_SERVICE),
            env=await container.resolve(Tokens.ENV_SERVICE) if config.env.enabled else None,
            shell=await container.resolve(Tokens.SHELL_SERVICE) if config.shell.enabled else None,
        )
    except Exception:
        for provider in reversed(started):
            await provider.shutdown()
        raise

    logger.info(f"Core services ready (providers: {', '.join(sorted(services.providers()))})")
    return services
