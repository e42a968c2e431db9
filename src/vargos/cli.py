"""vargos CLI: list, search, run and index functions; serve MCP.

Usage:
    vargos list                          # List discovered functions
    vargos search "send an email"        # Semantic function search
    vargos run weather '{"city": "Oslo"}'
    vargos reindex                       # Re-embed all function metadata
    vargos mcp                           # Start the MCP server (stdio)

Configuration comes from environment variables (see
``CoreConfig.from_env``) or a YAML file given with ``--config``. The env
file (``VARGOS_ENV_FILE``, default ``.env``) is loaded first; variables
already exported win.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Awaitable, Callable

from .config import CoreConfig, EnvConfig
from .errors import ExecutionError, VargosError
from .providers.filepath_env import FilepathEnvProvider
from .system import CoreServices, create_core_services

logger = logging.getLogger(__name__)


def load_env_file() -> int:
    """Load the env file into os.environ without overwriting anything."""
    path = os.environ.get("VARGOS_ENV_FILE", ".env")
    return FilepathEnvProvider(EnvConfig(env_file_path=path)).load_into_environ()


def load_config(args: argparse.Namespace) -> CoreConfig:
    config = CoreConfig.from_file(args.config) if args.config else CoreConfig.from_env()
    errors = config.validate()
    if errors:
        raise VargosError(f"Invalid configuration: {'; '.join(errors)}")
    return config


def _run(args: argparse.Namespace, action: Callable[[CoreServices], Awaitable[Any]]) -> Any:
    async def runner():
        services = await create_core_services(load_config(args))
        async with services:
            return await action(services)

    return asyncio.run(runner())


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_list(args: argparse.Namespace) -> int:
    listing = _run(args, lambda s: s.functions.list_functions())
    if args.json:
        _print_json(listing.to_dict())
        return 0
    for meta in listing.functions:
        print(f"{meta.id:30} {meta.description}")
    print(f"\n{listing.total} functions")
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    results = _run(args, lambda s: s.functions.search_functions(args.query, limit=args.limit))
    if args.json:
        _print_json([r.to_dict() for r in results])
        return 0
    for r in results:
        print(f"{r.score:.3f}  {r.payload.get('id', r.id):30} {r.payload.get('description', '')}")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    try:
        params = json.loads(args.params)
    except json.JSONDecodeError as e:
        print(f"Invalid JSON parameters: {e}", file=sys.stderr)
        return 2
    if not isinstance(params, dict):
        print("Parameters must be a JSON object", file=sys.stderr)
        return 2

    try:
        result = _run(args, lambda s: s.functions.execute_function(args.function_id, params))
    except ExecutionError as e:
        _print_json(e.to_dict())
        return 1
    _print_json(result)
    return 0


def cmd_reindex(args: argparse.Namespace) -> int:
    count = _run(args, lambda s: s.functions.reindex_functions())
    print(f"Indexed {count} functions")
    return 0


def cmd_mcp(args: argparse.Namespace) -> int:
    from .mcp.server import serve

    asyncio.run(serve(load_config(args)))
    return 0


COMMANDS = {
    "list": cmd_list,
    "search": cmd_search,
    "run": cmd_run,
    "reindex": cmd_reindex,
    "mcp": cmd_mcp,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vargos",
        description="vargos: discover, search and run functions",
    )
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="YAML config file (default: environment variables)")
    parser.add_argument("--log-level", type=str, default="warning",
                        choices=["debug", "info", "warning", "error"])
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List available functions")
    list_parser.add_argument("--json", action="store_true", help="Print JSON")

    search_parser = subparsers.add_parser("search", help="Search functions by meaning")
    search_parser.add_argument("query", type=str)
    search_parser.add_argument("--limit", "-n", type=int, default=10)
    search_parser.add_argument("--json", action="store_true", help="Print JSON")

    run_parser = subparsers.add_parser("run", help="Execute a function")
    run_parser.add_argument("function_id", type=str)
    run_parser.add_argument("params", type=str, nargs="?", default="{}",
                            help="JSON object of parameters")

    subparsers.add_parser("reindex", help="Re-index all functions for search")
    subparsers.add_parser("mcp", help="Start the MCP server (stdio transport)")
    return parser


def main(argv=None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        sys.exit(1)

    # stdout carries results (and MCP traffic); logs go to stderr
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    loaded = load_env_file()
    logger.debug(f"Loaded {loaded} variables from env file")

    try:
        code = COMMANDS[args.command](args)
    except VargosError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
