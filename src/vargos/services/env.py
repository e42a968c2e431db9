"""Env service."""

from typing import Optional

from ..providers.base import EnvProvider


class EnvService:
    """Façade over one env provider."""

    def __init__(self, provider: EnvProvider):
        self.provider = provider

    def get_all(self) -> dict[str, str]:
        return self.provider.read()

    def search(self, keyword: str = "", censor: bool = False) -> dict[str, str]:
        return self.provider.search(keyword, censor)

    def get(self, key: str) -> Optional[str]:
        return self.provider.get(key)

    def set(self, key: str, value: str) -> None:
        self.provider.set(key, value)

    def load_into_environ(self, override: bool = False) -> int:
        """Export the stored variables into this process's environment."""
        return self.provider.load_into_environ(override)
