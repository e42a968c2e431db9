"""Lazy service container."""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from ..errors import ServiceNotRegisteredError

logger = logging.getLogger(__name__)

Factory = Callable[[], Union[Any, Awaitable[Any]]]


class ServiceContainer:
    """Token-keyed registry of service factories.

    Factories may be plain or async callables. Singletons (the default)
    are created on first ``resolve()`` and reused afterwards; a per-token
    lock makes sure concurrent first resolutions run the factory once.
    Non-singleton registrations produce a fresh instance on every resolve.

    Usage:
        container = ServiceContainer()
        container.register(Tokens.LLM_SERVICE, lambda: LLMService(provider))

        llm = await container.resolve(Tokens.LLM_SERVICE)
    """

    def __init__(self):
        self._factories: dict[str, Factory] = {}
        self._singleton_tokens: set[str] = set()
        self._instances: dict[str, Any] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def register(self, token: str, factory: Factory, singleton: bool = True) -> None:
        """Register (or replace) the factory for a token.

        Re-registering drops any instance cached for the token.
        """
        self._factories[token] = factory
        self._instances.pop(token, None)
        if singleton:
            self._singleton_tokens.add(token)
        else:
            self._singleton_tokens.discard(token)

    async def resolve(self, token: str) -> Any:
        """Return the service for a token, creating it if needed.

        Raises:
            ServiceNotRegisteredError: If no factory was registered
        """
        if token in self._instances:
            return self._instances[token]

        if token not in self._factories:
            raise ServiceNotRegisteredError(token)

        if token not in self._singleton_tokens:
            return await self._invoke(token)

        lock = self._locks.setdefault(token, asyncio.Lock())
        async with lock:
            # Another coroutine may have finished the factory while we waited
            if token in self._instances:
                return self._instances[token]
            instance = await self._invoke(token)
            self._instances[token] = instance
            return instance

    def has(self, token: str) -> bool:
        return token in self._factories

    def clear(self) -> None:
        """Forget every registration and cached instance."""
        self._factories.clear()
        self._singleton_tokens.clear()
        self._instances.clear()
        self._locks.clear()

    async def _invoke(self, token: str) -> Any:
        logger.debug(f"Creating service: {token}")
        result = self._factories[token]()
        if inspect.isawaitable(result):
            result = await result
        return result
