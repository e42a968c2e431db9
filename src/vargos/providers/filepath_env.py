"""File-backed env store provider."""

import logging
import math
import os
import re
from pathlib import Path
from typing import Optional

from .base import EnvProvider
from ..config.providers import EnvConfig

logger = logging.getLogger(__name__)

_LINE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$")

MASK_CHAR = "*"


class FilepathEnvProvider(EnvProvider[EnvConfig]):
    """Env store backed by a single ``KEY="value"`` file.

    Every mutation rewrites the whole file: all values are re-quoted and
    comments or blank lines of the existing file are dropped.
    """

    def __init__(self, config: Optional[EnvConfig] = None):
        super().__init__(config or EnvConfig())
        self.path = Path(self.config.env_file_path).expanduser().resolve()
        self.censored_keys = list(self.config.censored_keys)

    async def initialize(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("", encoding="utf-8")
            logger.info(f"Created env file: {self.path}")
        self._initialized = True

    def read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        return self._parse(self.path.read_text(encoding="utf-8"))

    def write(self, env: dict[str, str]) -> None:
        self.path.write_text(self._serialize(env), encoding="utf-8")

    def search(self, keyword: str, censor: bool = False) -> dict[str, str]:
        """Filter entries whose key or value contains ``keyword``.

        Matching is case-insensitive; an empty keyword matches everything.
        With ``censor``, values of keys ending in a censored suffix keep
        their first 5% (at least one character) and the rest is masked.
        """
        env = self.read()
        if keyword:
            lower = keyword.lower()
            env = {
                k: v for k, v in env.items()
                if lower in k.lower() or lower in v.lower()
            }

        if not censor:
            return env

        censored = {}
        for key, value in env.items():
            if any(key.endswith(suffix) for suffix in self.censored_keys):
                logger.debug(f"Censoring key: {key}")
                value = self._mask(value)
            censored[key] = value
        return censored

    def get(self, key: str) -> Optional[str]:
        return self.read().get(key)

    def set(self, key: str, value: str) -> None:
        env = self.read()
        env[key] = value
        self.write(env)
        os.environ[key] = value
        logger.info(f"Set env {key}")

    @staticmethod
    def _mask(value: str) -> str:
        keep = max(1, math.floor(len(value) * 0.05))
        return value[:keep] + MASK_CHAR * (len(value) - keep)

    @staticmethod
    def _parse(content: str) -> dict[str, str]:
        env: dict[str, str] = {}
        for line in content.splitlines():
            match = _LINE.match(line)
            if not match:
                continue
            key, value = match.groups()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                quote = value[0]
                value = value[1:-1]
                if quote == '"':
                    value = value.replace('\\"', '"')
            env[key] = value
        return env

    @staticmethod
    def _serialize(env: dict[str, str]) -> str:
        lines = []
        for key, value in env.items():
            escaped = value.replace('"', '\\"')
            lines.append(f'{key}="{escaped}"')
        return "\n".join(lines) + ("\n" if lines else "")
