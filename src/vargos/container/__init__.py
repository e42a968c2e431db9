"""Dependency Injection Container.

Manages provider lifecycle and dependency resolution.
"""

from .container import ServiceContainer
from .registry import ProviderRegistry
from .tokens import Tokens

__all__ = ["ServiceContainer", "ProviderRegistry", "Tokens"]
