"""Tests for the agent tool table."""

import shutil

import pytest

from vargos.system import create_core_services
from vargos.tools import (
    TOOL_DOMAINS,
    ToolSpec,
    get_all_tools,
    get_tool,
    get_tools_by_domain,
    run_tool,
)


@pytest.fixture
async def services(test_config):
    s = await create_core_services(test_config)
    yield s
    await s.shutdown()


class TestToolTable:
    """Tests for the domain -> tools table."""

    def test_domains(self):
        assert set(TOOL_DOMAINS) == {"functions", "env", "shell", "memory"}

    def test_get_tools_by_domain(self):
        names = [t.name for t in get_tools_by_domain("memory")]
        assert names == [
            "create-memory-collection",
            "save-to-memory",
            "search-memory",
            "delete-from-memory",
        ]

    def test_unknown_domain_raises(self):
        with pytest.raises(KeyError, match="orchestration"):
            get_tools_by_domain("orchestration")

    def test_all_tools_unique_and_complete(self):
        tools = get_all_tools()
        names = [t.name for t in tools]

        assert len(names) == len(set(names))
        assert len(tools) == sum(len(v) for v in TOOL_DOMAINS.values())
        assert all(isinstance(t, ToolSpec) and t.description for t in tools)

    def test_get_tool(self):
        assert get_tool("bash").name == "bash"
        with pytest.raises(KeyError):
            get_tool("rm-rf")


class TestFunctionTools:
    """Tests for the functions domain."""

    async def test_list_functions(self, services):
        result = await run_tool(get_tool("list-functions"), services)

        assert result["success"] is True
        assert result["total"] == 2
        assert [f["id"] for f in result["functions"]] == ["echo", "weather"]

    async def test_get_function_metadata(self, services):
        result = await run_tool(get_tool("get-function-metadata"), services, function_id="echo")
        assert result["function"]["name"] == "Echo"

    async def test_execute_function(self, services):
        result = await run_tool(
            get_tool("execute-function"), services,
            function_id="echo", params={"text": "tool"},
        )
        assert result == {"success": True, "result": {"echo": "tool"}}

    async def test_execute_failure_is_reported(self, services):
        result = await run_tool(get_tool("execute-function"), services, function_id="weather")

        assert result["success"] is False
        assert "BadInput" in result["error"]
        assert "city required" in result["error"]

    async def test_create_function_indexes_it(self, services):
        result = await run_tool(
            get_tool("create-function"), services,
            metadata={"name": "Translate Text", "description": "Translate text between languages",
                      "tags": ["language"]},
        )
        assert result["success"] is True
        assert result["function"]["id"] == "translate-text"

        search = await run_tool(
            get_tool("search-functions"), services,
            query="translate text between languages", limit=1,
        )
        assert search["functions"][0]["id"] == "translate-text"
        assert search["total"] == 1


class TestEnvTools:
    """Tests for the env domain."""

    async def test_set_get_search(self, services, monkeypatch):
        monkeypatch.setenv("TOOL_API_KEY", "placeholder")

        assert (await run_tool(get_tool("set-env"), services, key="TOOL_API_KEY", value="abcdefghij"))["success"]

        got = await run_tool(get_tool("get-env"), services, key="TOOL_API_KEY")
        assert got["value"] == "abcdefghij"

        found = await run_tool(get_tool("search-env"), services, keyword="tool")
        assert found["variables"] == {"TOOL_API_KEY": "a*********"}

    async def test_env_disabled_is_reported(self, services):
        services.env = None
        result = await run_tool(get_tool("get-env"), services, key="X")

        assert result["success"] is False
        assert "not enabled" in result["error"]


class TestShellTools:
    """Tests for the shell domain."""

    async def test_shell_disabled_is_reported(self, services):
        result = await run_tool(get_tool("bash"), services, command="echo hi")
        assert result == {"success": False, "error": "Shell service is not enabled"}

    @pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")
    async def test_bash_history_interrupt(self, test_config, tmp_path):
        test_config.shell.enabled = True
        test_config.shell.data_dir = str(tmp_path)
        test_config.shell.shell_path = shutil.which("bash")

        async with await create_core_services(test_config) as services:
            result = await run_tool(get_tool("bash"), services, command="echo from-tool")
            assert result == {"success": True, "output": "from-tool"}

            history = await run_tool(get_tool("bash-history"), services)
            assert history["history"] == [
                {"command": "echo from-tool", "output": "from-tool", "exit_code": 0},
            ]

            interrupted = await run_tool(get_tool("bash-interrupt"), services)
            assert interrupted == {"success": True, "interrupted": False}


class TestMemoryTools:
    """Tests for the memory domain."""

    async def test_save_search_delete(self, services):
        created = await run_tool(get_tool("create-memory-collection"), services, collection="notes")
        assert created["created"] is True

        await run_tool(
            get_tool("save-to-memory"), services,
            collection="notes", id="n1", text="The deploy key lives in the vault",
            metadata={"source": "wiki"},
        )
        found = await run_tool(
            get_tool("search-memory"), services,
            collection="notes", query="The deploy key lives in the vault",
        )
        assert found["total"] == 1
        assert found["results"][0]["payload"] == {
            "text": "The deploy key lives in the vault",
            "source": "wiki",
        }

        await run_tool(get_tool("delete-from-memory"), services, collection="notes", id="n1")
        found = await run_tool(get_tool("search-memory"), services, collection="notes", query="deploy")
        assert found["total"] == 0

    async def test_search_missing_collection_is_reported(self, services):
        result = await run_tool(get_tool("search-memory"), services, collection="nope", query="x")
        assert result["success"] is False
        assert "nope" in result["error"]
