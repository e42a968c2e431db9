"""Local directory functions provider.

Functions live under ``<functions_dir>/src/<id>/`` with exactly one
metadata file (``<id>.meta.json``) and one entry file (``index.py`` by
default). Each execution is a separate OS process:

    <runner command> <id> '<json params>'

run with the functions directory as working directory and the current
environment inherited. The subprocess prints one JSON value on success;
on failure it exits non-zero and prints ``{"error": ..., "message": ...}``
to stdout or stderr.
"""

import asyncio
import json
import keyword
import logging
import os
import re
import shutil
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

from .base import FunctionsProvider, ProviderHealth, ProviderStatus
from ..config.providers import FunctionsConfig
from ..errors import (
    ConfigurationError,
    ExecutionError,
    FunctionExistsError,
    FunctionNotFoundError,
    MetadataError,
)
from ..interfaces import CreateFunctionInput, FunctionListResponse, FunctionMetadata
from ..utils import extract_json, slugify

logger = logging.getLogger(__name__)

DEFAULT_RUNNER = [sys.executable, "-m", "vargos.runner"]
# Tells the runner which file inside the function directory to load
ENTRY_FILE_ENV = "VARGOS_ENTRY_FILE"

# Declared metadata types -> Python annotations used in generated stubs
_PY_TYPES = {
    "string": "str",
    "number": "float",
    "integer": "int",
    "boolean": "bool",
    "object": "dict",
    "array": "list",
    "null": "None",
}

_NOT_IDENTIFIER = re.compile(r"\W")


def _error_from_output(text: str) -> Optional[tuple[str, str]]:
    """Read an ``{error, message}`` document from one output stream."""
    text = text.strip()
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None

    if isinstance(parsed, dict) and ("error" in parsed or "message" in parsed):
        error = parsed.get("error")
        message = parsed.get("message")
        if not isinstance(message, str):
            message = "" if message is None else json.dumps(message)
        return (error if isinstance(error, str) and error else "UnknownError", message)
    if isinstance(parsed, str):
        return ("UnknownError", parsed)
    return None


def classify_outcome(exit_code: int, stdout: str, stderr: str) -> Any:
    """Turn a finished subprocess into a result or an exception.

    Non-zero exit: the error document is looked for in stdout, then in
    stderr; otherwise the raw stderr (or stdout) becomes the message of an
    ``UnknownError``. An empty message falls back to the error code.

    Zero exit: the JSON value printed to stdout, see ``extract_json``.

    Raises:
        ExecutionError: Non-zero exit
        ParseError: Zero exit without a parseable JSON value
    """
    if exit_code != 0:
        found = _error_from_output(stdout) or _error_from_output(stderr)
        if found is None:
            found = ("UnknownError", stderr.strip() or stdout.strip())
        error, message = found
        raise ExecutionError(error, message or error, exit_code)

    return extract_json(stdout)


def _annotation(type_name: str) -> str:
    return _PY_TYPES.get(type_name.strip().lower(), "Any")


def _param_name(raw: str, taken: set[str]) -> str:
    name = _NOT_IDENTIFIER.sub("_", raw) or "arg"
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name += "_"
    candidate, n = name, 2
    while candidate in taken:
        candidate = f"{name}_{n}"
        n += 1
    return candidate


def generate_stub(metadata: FunctionMetadata) -> str:
    """Entry code for a function created without code.

    The signature mirrors the declared inputs (keyword-only, with their
    defaults) and the first declared output type; calling it raises
    ``NotImplementedError``.
    """
    params = []
    seen: set[str] = set()
    for item in metadata.input:
        name = _param_name(item.name, seen)
        seen.add(name)
        param = f"{name}: {_annotation(item.type)}"
        if item.default_value is not None:
            param += f" = {item.default_value!r}"
        params.append(param)

    signature = f"*, {', '.join(params)}" if params else ""
    returns = _annotation(metadata.output[0].type) if metadata.output else "Any"
    description = metadata.description.replace("\\", "\\\\").replace('"', '\\"')

    return (
        f'"""{description}"""\n'
        f"\n"
        f"from typing import Any\n"
        f"\n"
        f"\n"
        f"async def run({signature}) -> {returns}:\n"
        f'    raise NotImplementedError("Function not yet implemented")\n'
    )


class LocalDirectoryProvider(FunctionsProvider[FunctionsConfig]):
    """Discovers, runs and creates functions in a local directory."""

    def __init__(self, config: FunctionsConfig):
        super().__init__(config)
        self.functions_dir = Path(config.functions_dir).expanduser() if config.functions_dir else None
        self.source_dir = self.functions_dir / "src" if self.functions_dir else None
        self.runner_command = list(config.runner_command or DEFAULT_RUNNER)

    async def initialize(self) -> None:
        """Check the functions directory layout.

        Raises:
            ConfigurationError: If the directory is unset or has no ``src/``
        """
        if not self.functions_dir:
            raise ConfigurationError("FUNCTIONS_DIR is required for LocalDirectoryProvider")
        if not self.source_dir.is_dir():
            raise ConfigurationError(
                f"Functions source directory does not exist: {self.source_dir}"
            )
        self._initialized = True
        logger.info(f"Functions provider ready ({self.source_dir})")

    async def health_check(self) -> ProviderHealth:
        if not self.source_dir or not self.source_dir.is_dir():
            return ProviderHealth(
                status=ProviderStatus.UNAVAILABLE,
                message="Functions source directory missing"
            )
        return ProviderHealth(
            status=ProviderStatus.HEALTHY,
            message=f"{len(self._function_ids())} functions in {self.source_dir}"
        )

    async def get_function_metadata(self, function_id: str) -> FunctionMetadata:
        if not self._is_function(function_id):
            raise FunctionNotFoundError(function_id)
        meta_path = self.source_dir / function_id / f"{function_id}.meta.json"
        try:
            data = json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise MetadataError(function_id, str(e)) from e

        if not isinstance(data, dict) or "name" not in data:
            raise MetadataError(function_id, "metadata must be an object with a name")
        try:
            return FunctionMetadata.from_dict(data, function_id=function_id)
        except (KeyError, TypeError) as e:
            raise MetadataError(function_id, f"invalid field {e}") from e

    async def list_functions(self) -> FunctionListResponse:
        functions = await asyncio.gather(
            *(self.get_function_metadata(fid) for fid in self._function_ids())
        )
        return FunctionListResponse(functions=list(functions), total=len(functions))

    async def execute_function(self, function_id: str, params: dict[str, Any]) -> Any:
        """Run one function in its own subprocess.

        stdout and stderr are buffered until the process exits. No timeout
        is applied.

        Raises:
            FunctionNotFoundError: Unknown function id
            ExecutionError: Non-zero exit
            ParseError: No JSON result on stdout
        """
        if not self._is_function(function_id):
            raise FunctionNotFoundError(function_id)

        args = [*self.runner_command, function_id, json.dumps(params)]
        logger.debug(f"Executing function {function_id}: {args[:-1]}")
        start = time.perf_counter()

        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(self.functions_dir),
            env={**os.environ, ENTRY_FILE_ENV: self.config.entry_file},
        )
        stdout, stderr = await process.communicate()
        elapsed_ms = (time.perf_counter() - start) * 1000

        exit_code = process.returncode
        if exit_code != 0:
            logger.warning(f"Function {function_id} exited with code {exit_code} ({elapsed_ms:.0f}ms)")
        else:
            logger.info(f"Function {function_id} completed ({elapsed_ms:.0f}ms)")

        return classify_outcome(
            exit_code,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def create_function(self, request: CreateFunctionInput) -> FunctionMetadata:
        """Create a function directory with metadata and entry code.

        The id is the kebab-case form of the name. Creating the directory
        is the existence check, so two concurrent creators of the same id
        cannot both succeed.

        Raises:
            FunctionExistsError: The derived id is taken; nothing is written
            ValueError: The name has no alphanumeric characters
        """
        metadata = request.metadata
        function_id = slugify(metadata.name)
        if not function_id:
            raise ValueError(f"Cannot derive a function id from name {metadata.name!r}")

        function_dir = self.source_dir / function_id
        try:
            function_dir.mkdir()
        except FileExistsError:
            raise FunctionExistsError(function_id) from None

        created = replace(metadata, id=function_id)
        try:
            meta_path = function_dir / f"{function_id}.meta.json"
            meta_path.write_text(
                json.dumps(created.to_dict(include_id=False), indent=2) + "\n",
                encoding="utf-8",
            )
            entry_path = function_dir / self.config.entry_file
            entry_path.write_text(request.code or generate_stub(created), encoding="utf-8")
        except OSError:
            shutil.rmtree(function_dir, ignore_errors=True)
            raise

        logger.info(f"Created function {function_id}")
        return created

    def _function_ids(self) -> list[str]:
        return sorted(
            entry.name for entry in self.source_dir.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )

    def _is_function(self, function_id: str) -> bool:
        if not function_id or function_id.startswith(".") or "/" in function_id or "\\" in function_id:
            return False
        return (self.source_dir / function_id).is_dir()
