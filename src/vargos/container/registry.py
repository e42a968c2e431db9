"""Registry of provider implementations by capability."""

from typing import Any, Optional


class ProviderRegistry:
    """Two-level map of ``(capability type, name) -> provider``.

    Several implementations of one capability can be registered side by
    side (e.g. ``("vector", "qdrant")`` and ``("vector", "memory")``).
    """

    def __init__(self):
        self._providers: dict[str, dict[str, Any]] = {}

    def register(self, provider_type: str, name: str, provider: Any) -> None:
        self._providers.setdefault(provider_type, {})[name] = provider

    def get(self, provider_type: str, name: str) -> Optional[Any]:
        return self._providers.get(provider_type, {}).get(name)

    def list(self, provider_type: str) -> list[str]:
        """Names registered for a capability, in registration order."""
        return list(self._providers.get(provider_type, {}))

    def has(self, provider_type: str, name: str) -> bool:
        return name in self._providers.get(provider_type, {})
