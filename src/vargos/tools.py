"""Agent-facing tools grouped by domain.

Each tool is a named async handler taking the service bundle plus
keyword arguments. ``TOOL_DOMAINS`` is the complete, fixed table; callers
pick a domain with ``get_tools_by_domain`` or take every tool with
``get_all_tools``. ``run_tool`` is the calling convention used by agent
adapters such as the MCP server: the handler's result is returned as
``{"success": True, ...}`` and any failure as
``{"success": False, "error": "<message>"}``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from .errors import ConfigurationError
from .interfaces import CreateFunctionInput, FunctionMetadata

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolSpec:
    """A tool: its public name, what it does, and the handler that runs it."""
    name: str
    description: str
    handler: Handler


def _env(services):
    if services.env is None:
        raise ConfigurationError("Env service is not enabled")
    return services.env


def _shell(services):
    if services.shell is None:
        raise ConfigurationError("Shell service is not enabled")
    return services.shell


# Functions

async def list_functions(services) -> dict[str, Any]:
    return (await services.functions.list_functions()).to_dict()


async def get_function_metadata(services, function_id: str) -> dict[str, Any]:
    metadata = await services.functions.get_function_metadata(function_id)
    return {"function": metadata.to_dict()}


async def search_functions(services, query: str, limit: int = 10) -> dict[str, Any]:
    results = await services.functions.search_functions(query, limit=limit)
    return {
        "functions": [r.payload for r in results],
        "scores": [round(r.score, 4) for r in results],
        "total": len(results),
    }


async def execute_function(
    services,
    function_id: str,
    params: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    result = await services.functions.execute_function(function_id, params or {})
    return {"result": result}


async def create_function(
    services,
    metadata: dict[str, Any],
    code: Optional[str] = None,
) -> dict[str, Any]:
    """Create a function and index it for search."""
    created = await services.functions.create_function(
        CreateFunctionInput(metadata=FunctionMetadata.from_dict(metadata), code=code)
    )
    await services.functions.index_function(created)
    return {"function": created.to_dict()}


# Env

async def get_env(services, key: str) -> dict[str, Any]:
    return {"key": key, "value": _env(services).get(key)}


async def search_env(services, keyword: str = "") -> dict[str, Any]:
    # Agents only ever see censored values
    return {"variables": _env(services).search(keyword, censor=True)}


async def set_env(services, key: str, value: str) -> dict[str, Any]:
    _env(services).set(key, value)
    return {"key": key}


# Shell

async def bash(services, command: str) -> dict[str, Any]:
    return {"output": await _shell(services).execute(command)}


async def bash_history(services) -> dict[str, Any]:
    return {"history": [entry.to_dict() for entry in _shell(services).get_history()]}


async def bash_interrupt(services) -> dict[str, Any]:
    return {"interrupted": _shell(services).interrupt()}


# Memory

async def create_memory_collection(
    services,
    collection: str,
    vector_size: Optional[int] = None,
) -> dict[str, Any]:
    created = await services.memory.create_collection(collection, vector_size)
    return {"collection": collection, "created": created}


async def save_to_memory(
    services,
    collection: str,
    id: str,
    text: str,
    metadata: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    await services.memory.remember(collection, id, text, metadata)
    return {"id": id}


async def search_memory(
    services,
    collection: str,
    query: str,
    limit: int = 5,
    threshold: Optional[float] = None,
) -> dict[str, Any]:
    results = await services.memory.recall(collection, query, limit=limit, threshold=threshold)
    return {"results": [r.to_dict() for r in results], "total": len(results)}


async def delete_from_memory(services, collection: str, id: str) -> dict[str, Any]:
    await services.memory.forget(collection, id)
    return {"id": id}


TOOL_DOMAINS: dict[str, tuple[ToolSpec, ...]] = {
    "functions": (
        ToolSpec("list-functions", "List all available functions with their metadata", list_functions),
        ToolSpec("get-function-metadata", "Get the metadata of one function by id", get_function_metadata),
        ToolSpec(
            "search-functions",
            "Find functions by semantic similarity to a natural language query",
            search_functions,
        ),
        ToolSpec(
            "execute-function",
            "Run a function with JSON parameters and return its result",
            execute_function,
        ),
        ToolSpec(
            "create-function",
            "Create a new function from metadata and optional code, then index it",
            create_function,
        ),
    ),
    "env": (
        ToolSpec("get-env", "Get the value of an environment variable", get_env),
        ToolSpec(
            "search-env",
            "Search environment variables by key or value; secret values are masked",
            search_env,
        ),
        ToolSpec("set-env", "Set an environment variable and persist it", set_env),
    ),
    "shell": (
        ToolSpec("bash", "Execute a bash command in the persistent shell (use cd to change directories)", bash),
        ToolSpec("bash-history", "List the commands run in the shell and their output", bash_history),
        ToolSpec("bash-interrupt", "Interrupt the currently running shell command", bash_interrupt),
    ),
    "memory": (
        ToolSpec(
            "create-memory-collection",
            "Create a vector memory collection (namespace)",
            create_memory_collection,
        ),
        ToolSpec(
            "save-to-memory",
            "Save text to vector memory for later semantic search and recall",
            save_to_memory,
        ),
        ToolSpec("search-memory", "Search vector memory by semantic similarity", search_memory),
        ToolSpec("delete-from-memory", "Delete an entry from vector memory", delete_from_memory),
    ),
}


def get_tools_by_domain(domain: str) -> tuple[ToolSpec, ...]:
    """Tools of one domain.

    Raises:
        KeyError: Unknown domain
    """
    if domain not in TOOL_DOMAINS:
        raise KeyError(f"Unknown tool domain: {domain}. Valid: {', '.join(TOOL_DOMAINS)}")
    return TOOL_DOMAINS[domain]


def get_all_tools() -> list[ToolSpec]:
    return [tool for tools in TOOL_DOMAINS.values() for tool in tools]


def get_tool(name: str) -> ToolSpec:
    for tool in get_all_tools():
        if tool.name == name:
            return tool
    raise KeyError(f"Unknown tool: {name}")


async def run_tool(tool: ToolSpec, services, **kwargs: Any) -> dict[str, Any]:
    """Run a tool, reporting failures in the result instead of raising."""
    try:
        result = await tool.handler(services, **kwargs)
    except Exception as e:
        logger.warning(f"Tool {tool.name} failed: {e}")
        return {"success": False, "error": str(e)}
    return {"success": True, **result}
