"""Tests for the service container and provider registry."""

import asyncio

import pytest

from vargos.container import ProviderRegistry, ServiceContainer, Tokens
from vargos.errors import NotFoundError, ServiceNotRegisteredError


class TestServiceContainer:
    """Tests for token registration and resolution."""

    async def test_resolve_unregistered_raises(self):
        container = ServiceContainer()
        with pytest.raises(ServiceNotRegisteredError, match="Service not registered: missing"):
            await container.resolve("missing")

    async def test_not_registered_is_lookup_error(self):
        container = ServiceContainer()
        with pytest.raises(LookupError):
            await container.resolve("missing")
        with pytest.raises(NotFoundError):
            await container.resolve("missing")

    async def test_singleton_factory_runs_once(self):
        calls = []

        def factory():
            calls.append(1)
            return object()

        container = ServiceContainer()
        container.register("svc", factory)

        first = await container.resolve("svc")
        second = await container.resolve("svc")

        assert first is second
        assert len(calls) == 1

    async def test_async_factory_is_awaited(self):
        async def factory():
            await asyncio.sleep(0)
            return {"ready": True}

        container = ServiceContainer()
        container.register("svc", factory)

        assert await container.resolve("svc") == {"ready": True}

    async def test_non_singleton_creates_fresh_instances(self):
        container = ServiceContainer()
        container.register("svc", object, singleton=False)

        first = await container.resolve("svc")
        second = await container.resolve("svc")

        assert first is not second

    async def test_concurrent_first_resolve_runs_factory_once(self):
        """Callers racing on the first resolve share one instance."""
        calls = []

        async def slow_factory():
            calls.append(1)
            await asyncio.sleep(0.01)
            return object()

        container = ServiceContainer()
        container.register("svc", slow_factory)

        results = await asyncio.gather(*(container.resolve("svc") for _ in range(5)))

        assert len(calls) == 1
        assert all(r is results[0] for r in results)

    async def test_reregister_replaces_factory_and_cache(self):
        container = ServiceContainer()
        container.register("svc", lambda: "old")
        assert await container.resolve("svc") == "old"

        container.register("svc", lambda: "new")
        assert await container.resolve("svc") == "new"

    async def test_factory_can_resolve_dependencies(self):
        container = ServiceContainer()
        container.register(Tokens.LLM_PROVIDER, lambda: "provider")

        async def service():
            return ("service", await container.resolve(Tokens.LLM_PROVIDER))

        container.register(Tokens.LLM_SERVICE, service)

        assert await container.resolve(Tokens.LLM_SERVICE) == ("service", "provider")

    async def test_factory_error_is_not_cached(self):
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("boom")
            return "ok"

        container = ServiceContainer()
        container.register("svc", flaky)

        with pytest.raises(RuntimeError, match="boom"):
            await container.resolve("svc")
        assert await container.resolve("svc") == "ok"

    async def test_has_and_clear(self):
        container = ServiceContainer()
        container.register("svc", lambda: 1)
        await container.resolve("svc")

        assert container.has("svc")
        container.clear()
        assert not container.has("svc")
        with pytest.raises(ServiceNotRegisteredError):
            await container.resolve("svc")


class TestProviderRegistry:
    """Tests for the capability -> name -> provider map."""

    def test_register_and_get(self):
        registry = ProviderRegistry()
        provider = object()
        registry.register("vector", "qdrant", provider)

        assert registry.get("vector", "qdrant") is provider
        assert registry.has("vector", "qdrant")

    def test_get_missing_returns_none(self):
        registry = ProviderRegistry()
        assert registry.get("vector", "qdrant") is None
        assert registry.get("nothing", "x") is None
        assert not registry.has("vector", "qdrant")

    def test_list_preserves_registration_order(self):
        registry = ProviderRegistry()
        registry.register("vector", "qdrant", object())
        registry.register("vector", "memory", object())
        registry.register("llm", "openai", object())

        assert registry.list("vector") == ["qdrant", "memory"]
        assert registry.list("llm") == ["openai"]
        assert registry.list("env") == []

    def test_register_replaces_same_name(self):
        registry = ProviderRegistry()
        first, second = object(), object()
        registry.register("llm", "mock", first)
        registry.register("llm", "mock", second)

        assert registry.get("llm", "mock") is second
        assert registry.list("llm") == ["mock"]
