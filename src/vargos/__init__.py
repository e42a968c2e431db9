"""vargos function runtime.

Discover, semantically search and execute independent "functions":
self-contained capability units with declared metadata, inputs and
outputs. Key design principles:

1. **Provider Pattern**: All backends (LLM, vector store, functions
   directory, env store) are swappable providers that implement standard
   interfaces.

2. **Dependency Injection**: Services receive their providers through a
   token-keyed container, making testing and configuration easier.

3. **Configuration-Driven**: Setup is driven by configuration objects,
   not hardcoded values.

4. **Process Isolation**: Every function execution is its own OS
   process; results and errors travel as JSON over stdout/stderr.

Usage:
    from vargos import CoreConfig, create_core_services

    config = CoreConfig.from_env()
    async with await create_core_services(config) as services:
        await services.functions.reindex_functions()
        hits = await services.functions.search_functions("weather")
        result = await services.functions.execute_function(hits[0].payload["id"], {"city": "Oslo"})
"""

from .config import CoreConfig
from .container import ProviderRegistry, ServiceContainer, Tokens
from .system import CoreServices, create_core_services

__version__ = "0.1.0"

__all__ = [
    "CoreConfig",
    "CoreServices",
    "create_core_services",
    "ProviderRegistry",
    "ServiceContainer",
    "Tokens",
]
