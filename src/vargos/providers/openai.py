"""OpenAI LLM Provider."""

import logging
from datetime import datetime
from typing import Any, Optional, Union

import httpx

from .base import LLMProvider, ProviderHealth, ProviderStatus
from ..config.providers import LLMConfig
from ..errors import ConfigurationError, RemoteServiceError
from ..interfaces import ChatResponse, Message
from ..utils import normalize_embedding

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider[LLMConfig]):
    """OpenAI-compatible embeddings and chat over HTTP.

    Works against OpenAI or any OpenAI-compatible API (Ollama, vLLM, ...)
    via ``config.api_base``. Failed calls raise ``RemoteServiceError``;
    there is no retry.
    """

    DEFAULT_API_BASE = "https://api.openai.com/v1"

    def __init__(
        self,
        config: LLMConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def dimensions(self) -> int:
        return self.config.dimensions

    @property
    def api_base(self) -> str:
        return (self.config.api_base or self.DEFAULT_API_BASE).rstrip("/")

    def _is_local(self) -> bool:
        return "api.openai.com" not in self.api_base.lower()

    async def initialize(self) -> None:
        """Create the HTTP client.

        Raises:
            ConfigurationError: If no API key is configured for OpenAI
        """
        if self._initialized:
            return
        if not self.config.api_key and not self._is_local():
            raise ConfigurationError("OpenAI API key required (set OPENAI_API_KEY)")

        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        self._client = httpx.AsyncClient(
            base_url=self.api_base,
            timeout=httpx.Timeout(self.config.timeout_seconds),
            headers=headers,
            transport=self._transport,
        )
        self._initialized = True
        logger.info(f"OpenAI provider ready ({self.api_base}, embeddings={self.config.embedding_model})")

    async def shutdown(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        self._initialized = False

    async def health_check(self) -> ProviderHealth:
        if not self._client:
            return ProviderHealth(
                status=ProviderStatus.UNAVAILABLE,
                message="Client not initialized"
            )

        try:
            start = datetime.utcnow()
            await self.generate_embeddings("health check")
            latency = (datetime.utcnow() - start).total_seconds() * 1000
            return ProviderHealth(
                status=ProviderStatus.HEALTHY,
                latency_ms=latency
            )
        except RemoteServiceError as e:
            return ProviderHealth(
                status=ProviderStatus.UNAVAILABLE,
                message=str(e)
            )

    async def generate_embeddings(
        self,
        texts: Union[str, list[str]],
    ) -> Union[list[float], list[list[float]]]:
        single = isinstance(texts, str)
        inputs = [texts] if single else list(texts)
        if not inputs:
            return []

        payload = {
            "model": self.config.embedding_model,
            "input": [self._clean_text(t) for t in inputs],
            "dimensions": self.config.dimensions,
        }
        data = await self._post("embeddings", payload)

        # The API may return items out of order; "index" is authoritative
        items = sorted(data["data"], key=lambda x: x["index"])
        vectors = [normalize_embedding(item["embedding"]) for item in items]
        return vectors[0] if single else vectors

    async def chat(self, messages: list[Message]) -> ChatResponse:
        payload = {
            "model": self.config.chat_model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        data = await self._post("chat/completions", payload)

        choices = data.get("choices") or []
        message = choices[0].get("message", {}) if choices else {}
        return ChatResponse(
            content=message.get("content") or "",
            role=message.get("role") or "",
        )

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        client = self._get_client()
        try:
            response = await client.post(path, json=payload)
        except httpx.RequestError as e:
            raise RemoteServiceError(f"OpenAI request failed: {e}") from e

        if response.status_code != 200:
            try:
                body = response.json()
            except ValueError:
                body = None
            error = body.get("error") if isinstance(body, dict) else None
            if isinstance(error, dict):
                error = error.get("message")
            error = error or response.text
            raise RemoteServiceError(
                f"OpenAI API error ({response.status_code}): {error}",
                status_code=response.status_code,
            )
        return response.json()

    def _get_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise ConfigurationError(
                "OpenAI provider is not initialized. Call initialize() first."
            )
        return self._client

    def _clean_text(self, text: str) -> str:
        cleaned = " ".join(text.split())
        max_bytes = 8191 * 4
        encoded = cleaned.encode('utf-8')
        if len(encoded) > max_bytes:
            cleaned = encoded[:max_bytes].decode('utf-8', errors='ignore')
        return cleaned
