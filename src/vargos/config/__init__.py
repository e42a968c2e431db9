"""Configuration system for vargos.

Provides strongly-typed configuration objects that can be loaded from:
- Environment variables
- YAML files
- Programmatic construction

Use ``CoreConfig.validate()`` to check a configuration before wiring.
"""

from .system import CoreConfig
from .providers import (
    LLMConfig,
    VectorConfig,
    FunctionsConfig,
    EnvConfig,
    ShellConfig,
    LLMProviderType,
    VectorProviderType,
    FunctionsProviderType,
    EnvProviderType,
)

__all__ = [
    "CoreConfig",
    "LLMConfig",
    "VectorConfig",
    "FunctionsConfig",
    "EnvConfig",
    "ShellConfig",
    "LLMProviderType",
    "VectorProviderType",
    "FunctionsProviderType",
    "EnvProviderType",
]
