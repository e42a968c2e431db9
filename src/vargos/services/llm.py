"""LLM service."""

from typing import Union

from ..interfaces import ChatResponse, Message
from ..providers.base import LLMProvider


class LLMService:
    """Thin façade over one LLM provider."""

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    @property
    def dimensions(self) -> int:
        return self.provider.dimensions

    async def generate_embeddings(
        self,
        texts: Union[str, list[str]],
    ) -> Union[list[float], list[list[float]]]:
        return await self.provider.generate_embeddings(texts)

    async def chat(self, messages: list[Message]) -> ChatResponse:
        return await self.provider.chat(messages)
