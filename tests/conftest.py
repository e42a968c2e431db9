"""Pytest fixtures for vargos tests."""

import json
import sys
from pathlib import Path

import pytest

from vargos import runner
from vargos.config import CoreConfig, FunctionsConfig

# Runs without vargos being installed in the subprocess's interpreter
RUNNER_COMMAND = [sys.executable, runner.__file__]

ECHO_CODE = '''
async def run(*, text: str, times: int = 1) -> dict:
    return {"echo": text * times}
'''

FAILING_CODE = '''
class BadInput(Exception):
    pass


def run(*, city: str = "") -> dict:
    raise BadInput("city required")
'''


def write_function(root: Path, function_id: str, metadata: dict, code: str = ECHO_CODE) -> Path:
    """Lay out ``<root>/src/<id>/`` with metadata and entry code."""
    function_dir = root / "src" / function_id
    function_dir.mkdir(parents=True)
    (function_dir / f"{function_id}.meta.json").write_text(json.dumps(metadata))
    (function_dir / "index.py").write_text(code)
    return function_dir


@pytest.fixture
def functions_root(tmp_path):
    """A functions directory with an echo and a failing function."""
    root = tmp_path / "functions"
    (root / "src").mkdir(parents=True)
    write_function(root, "echo", {
        "name": "Echo",
        "category": "utility",
        "description": "Repeat the given text",
        "tags": ["text", "debug"],
        "requiredEnvVars": [],
        "input": [
            {"name": "text", "type": "string", "description": "Text to echo"},
            {"name": "times", "type": "integer", "description": "Repeats", "defaultValue": 1},
        ],
        "output": [{"name": "echo", "type": "object"}],
    })
    write_function(root, "weather", {
        "name": "Weather",
        "category": "data",
        "description": "Get the current weather forecast for a city",
        "tags": ["weather", "forecast"],
        "input": [{"name": "city", "type": "string", "description": "City name"}],
        "output": [{"name": "forecast", "type": "object"}],
    }, code=FAILING_CODE)
    return root


@pytest.fixture
def functions_config(functions_root):
    return FunctionsConfig(functions_dir=str(functions_root), runner_command=list(RUNNER_COMMAND))


@pytest.fixture
def test_config(functions_root, tmp_path):
    """Mock LLM, in-memory vectors, real functions dir and env file."""
    config = CoreConfig.for_testing(
        functions_dir=str(functions_root),
        env_file_path=str(tmp_path / ".env"),
    )
    config.functions.runner_command = list(RUNNER_COMMAND)
    return config
