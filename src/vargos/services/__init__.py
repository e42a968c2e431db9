"""Services wrapping one provider per capability."""

from .llm import LLMService
from .vector import VectorService
from .functions import FunctionsService, function_index_text
from .memory import MemoryService
from .env import EnvService
from .shell import ShellService

__all__ = [
    "LLMService",
    "VectorService",
    "FunctionsService",
    "function_index_text",
    "MemoryService",
    "EnvService",
    "ShellService",
]
