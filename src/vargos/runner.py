"""Default function runner.

Usage:
    python -m vargos.runner <function-id> '<json params>'

Run with the functions directory as working directory. Loads
``src/<id>/index.py`` (or the file named by ``VARGOS_ENTRY_FILE``), calls
its ``run(**params)`` (awaiting it when it is a coroutine function) and
prints the result as JSON. Failures print
``{"error": <exception type>, "message": <text>}`` to stderr and exit 1.
"""

import asyncio
import importlib.util
import inspect
import json
import os
import sys
from pathlib import Path

DEFAULT_ENTRY_FILE = "index.py"
ENTRY_FILE_ENV = "VARGOS_ENTRY_FILE"


def load_entry(function_id: str, root: Path, entry_file: str = DEFAULT_ENTRY_FILE):
    entry = root / "src" / function_id / entry_file
    if not entry.is_file():
        raise FileNotFoundError(f"Entry file not found: {entry}")

    spec = importlib.util.spec_from_file_location(f"vargos_function_{function_id.replace('-', '_')}", entry)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    run = getattr(module, "run", None)
    if not callable(run):
        raise AttributeError(f"{entry} does not define run()")
    return run


def _fail(error: str, message: str) -> int:
    print(json.dumps({"error": error, "message": message}), file=sys.stderr)
    return 1


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) < 1:
        return _fail("UsageError", "usage: python -m vargos.runner <function-id> [json-params]")

    function_id = args[0]
    try:
        params = json.loads(args[1]) if len(args) > 1 else {}
    except json.JSONDecodeError as e:
        return _fail("BadInput", f"Invalid JSON parameters: {e}")
    if not isinstance(params, dict):
        return _fail("BadInput", "Parameters must be a JSON object")

    try:
        run = load_entry(
            function_id, Path.cwd(), os.environ.get(ENTRY_FILE_ENV) or DEFAULT_ENTRY_FILE
        )
        if inspect.iscoroutinefunction(run):
            result = asyncio.run(run(**params))
        else:
            result = run(**params)
        output = json.dumps(result)
    except Exception as e:
        return _fail(type(e).__name__, str(e))

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
