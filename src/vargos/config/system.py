"""System-wide configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

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


@dataclass
class CoreConfig:
    """Complete runtime configuration.

    Combines all provider configurations into a single object.
    Can be loaded from environment variables, a YAML file, or
    constructed programmatically.

    Attributes:
        llm: LLM provider configuration
        vector: Vector provider configuration
        functions: Functions provider configuration
        env: Env store configuration
        shell: Shell session configuration
        debug: Enable debug logging
    """
    llm: LLMConfig = field(default_factory=LLMConfig)
    vector: VectorConfig = field(default_factory=VectorConfig)
    functions: FunctionsConfig = field(default_factory=FunctionsConfig)
    env: EnvConfig = field(default_factory=EnvConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    debug: bool = False

    @classmethod
    def from_env(cls, prefix: str = "VARGOS") -> "CoreConfig":
        """Load configuration from environment variables.

        Environment variables:
            {prefix}_DEBUG: Enable debug mode

            {prefix}_LLM_PROVIDER: openai|mock
            {prefix}_LLM_API_BASE: OpenAI-compatible base URL
            {prefix}_EMBEDDING_MODEL / {prefix}_CHAT_MODEL: Model names
            OPENAI_API_KEY: API key

            {prefix}_VECTOR_PROVIDER: qdrant|lancedb|memory
            QDRANT_URL / QDRANT_API_KEY / QDRANT_PORT: Qdrant connection
            {prefix}_VECTOR_PATH: LanceDB directory

            FUNCTIONS_DIR: Functions repository root
            {prefix}_ENV_FILE: Env file path
            DATA_DIR: Shell working directory
            {prefix}_SHELL_PATH: Shell executable (bash)
        """
        def get(key: str, default: Optional[str] = None) -> Optional[str]:
            return os.environ.get(f"{prefix}_{key}", default)

        def get_bool(key: str, default: bool = False) -> bool:
            val = get(key)
            if val is None:
                return default
            return val.lower() in ("true", "1", "yes")

        port = os.environ.get("QDRANT_PORT")

        llm = LLMConfig(
            provider=LLMProviderType(get("LLM_PROVIDER", "openai")),
            api_key=get("LLM_API_KEY") or os.environ.get("OPENAI_API_KEY"),
            api_base=get("LLM_API_BASE"),
            embedding_model=get("EMBEDDING_MODEL", "text-embedding-3-small"),
            chat_model=get("CHAT_MODEL", "gpt-4o-mini"),
        )

        vector = VectorConfig(
            provider=VectorProviderType(get("VECTOR_PROVIDER", "qdrant")),
            url=os.environ.get("QDRANT_URL"),
            api_key=os.environ.get("QDRANT_API_KEY"),
            port=int(port) if port else None,
            path=get("VECTOR_PATH"),
        )

        functions = FunctionsConfig(
            functions_dir=get("FUNCTIONS_DIR") or os.environ.get("FUNCTIONS_DIR"),
        )

        env = EnvConfig(
            enabled=get_bool("ENV_ENABLED", True),
            env_file_path=get("ENV_FILE", ".env"),
        )

        shell = ShellConfig(
            enabled=get_bool("SHELL_ENABLED", True),
            data_dir=os.environ.get("DATA_DIR", "/tmp"),
            shell_path=get("SHELL_PATH", "/bin/bash"),
        )

        return cls(
            llm=llm,
            vector=vector,
            functions=functions,
            env=env,
            shell=shell,
            debug=get_bool("DEBUG", False),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "CoreConfig":
        """Load configuration from a YAML file.

        A missing file yields the defaults.
        """
        path = Path(path).expanduser()
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CoreConfig":
        """Create configuration from a dictionary (e.g. parsed YAML)."""
        llm_data = dict(data.get("llm") or {})
        vector_data = dict(data.get("vector") or {})
        functions_data = dict(data.get("functions") or {})
        env_data = dict(data.get("env") or {})
        shell_data = dict(data.get("shell") or {})

        if "provider" in llm_data:
            llm_data["provider"] = LLMProviderType(llm_data["provider"])
        if "provider" in vector_data:
            vector_data["provider"] = VectorProviderType(vector_data["provider"])
        if "provider" in functions_data:
            functions_data["provider"] = FunctionsProviderType(functions_data["provider"])
        if "provider" in env_data:
            env_data["provider"] = EnvProviderType(env_data["provider"])

        return cls(
            llm=LLMConfig(**llm_data),
            vector=VectorConfig(**vector_data),
            functions=FunctionsConfig(**functions_data),
            env=EnvConfig(**env_data),
            shell=ShellConfig(**shell_data),
            debug=bool(data.get("debug", False)),
        )

    @classmethod
    def for_testing(
        cls,
        functions_dir: Optional[str] = None,
        env_file_path: Optional[str] = None,
        shell_enabled: bool = False,
    ) -> "CoreConfig":
        """Create a configuration suitable for testing.

        Uses mock/in-memory providers to avoid external dependencies.
        """
        return cls(
            llm=LLMConfig(provider=LLMProviderType.MOCK, dimensions=64),
            vector=VectorConfig(provider=VectorProviderType.MEMORY),
            functions=FunctionsConfig(functions_dir=functions_dir),
            env=EnvConfig(
                enabled=env_file_path is not None,
                env_file_path=env_file_path or ".env",
            ),
            shell=ShellConfig(enabled=shell_enabled),
            debug=True,
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Checks:
        - Required API keys for providers
        - Vector store url/path requirements
        - Functions directory presence
        - Positive dimensions and timeouts
        """
        errors = []

        if self.llm.provider == LLMProviderType.OPENAI:
            api_base = (self.llm.api_base or "").strip()
            is_local = api_base != "" and "api.openai.com" not in api_base.lower()
            if not self.llm.api_key and not is_local:
                errors.append("OpenAI LLM provider requires API key (set OPENAI_API_KEY)")
        if self.llm.dimensions <= 0:
            errors.append(f"llm.dimensions must be positive, got {self.llm.dimensions}")
        if self.llm.timeout_seconds <= 0:
            errors.append(f"llm.timeout_seconds must be positive, got {self.llm.timeout_seconds}")

        if self.vector.provider == VectorProviderType.QDRANT:
            if not self.vector.url:
                errors.append("Qdrant vector provider requires url (set QDRANT_URL)")
        elif self.vector.provider == VectorProviderType.LANCEDB:
            if not self.vector.path:
                errors.append("LanceDB vector provider requires path")

        if not self.functions.functions_dir:
            errors.append("functions.functions_dir is required (set FUNCTIONS_DIR)")

        if self.env.enabled and not self.env.env_file_path:
            errors.append("env.env_file_path cannot be empty")

        return errors
