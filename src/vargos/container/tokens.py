"""Registration tokens for the core services."""


class Tokens:
    """Container tokens, one per wired component."""
    LLM_PROVIDER = "llm_provider"
    LLM_SERVICE = "llm_service"
    VECTOR_PROVIDER = "vector_provider"
    VECTOR_SERVICE = "vector_service"
    FUNCTIONS_PROVIDER = "functions_provider"
    FUNCTIONS_SERVICE = "functions_service"
    MEMORY_SERVICE = "memory_service"
    ENV_PROVIDER = "env_provider"
    ENV_SERVICE = "env_service"
    SHELL_SERVICE = "shell_service"
