"""
FastMCP Server Tests for v1.0.0

Tests:
- Server initialization
- Tool registration
- MCP protocol compliance
"""

import asyncio
import json
import sys
import threading
from dataclasses import replace
from pathlib import Path

import pytest
from mcp.shared.exceptions import McpError
from mcp.types import CallToolResult, INVALID_PARAMS

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from conftest import FakeOpenRouter


@pytest.fixture
def fake_client():
    return FakeOpenRouter(succeed=["default/vision-model", "default/audio-model"])


@pytest.fixture
def server(config, loader, fake_client):
    from openrouter_multimodal.server import create_server
    return create_server(config, client=fake_client, loader=loader)


class TestFastMCPServerInit:
    """FastMCP server initialization tests."""

    def test_server_has_correct_name(self, server):
        """Server has correct name."""
        from openrouter_multimodal.server import SERVER_NAME
        assert server.name == SERVER_NAME == "openrouter-multimodal-server"

    def test_server_has_main_function(self):
        """Server has main() entry point."""
        from openrouter_multimodal import main
        assert callable(main)

    def test_version(self):
        from openrouter_multimodal import __version__
        from openrouter_multimodal.core import Config
        assert __version__ == Config().version == "1.0.0"


class TestToolRegistration:
    """Tool registration tests."""

    def test_both_tools_registered(self, server):
        """Exactly the two media tools are registered."""
        tools = server._tool_manager._tools
        assert sorted(tools.keys()) == ["analyze_audio", "analyze_image"]

    def test_tool_names_drop_private_prefix(self, server):
        """Tool names come from the decorator, not the closure names."""
        tools = server._tool_manager._tools
        assert "_analyze_image" not in tools
        assert "_analyze_audio" not in tools

    def test_tools_have_descriptions(self, server):
        """All tools have descriptions."""
        for name, tool in server._tool_manager._tools.items():
            assert tool.fn.__doc__ is not None, f"{name} missing docstring"
            assert tool.description

    def test_disabled_tool_not_registered(self, config, loader):
        from openrouter_multimodal.server import create_server

        mcp = create_server(replace(config, disabled_tools=["analyze_audio"]),
                            client=FakeOpenRouter(), loader=loader)

        assert list(mcp._tool_manager._tools.keys()) == ["analyze_image"]

    def test_input_schemas(self, server):
        tools = {tool.name: tool for tool in asyncio.run(server.list_tools())}

        image_schema = tools["analyze_image"].inputSchema
        assert image_schema["required"] == ["image_url"]
        assert set(image_schema["properties"]) == {"image_url", "model", "prompt"}

        audio_schema = tools["analyze_audio"].inputSchema
        assert audio_schema["required"] == ["audio_url"]
        assert set(audio_schema["properties"]) == {"audio_url", "model"}


class TestToolInvocation:
    """Registered handlers run the tool functions with the server's context."""

    def test_handlers_are_coroutines(self, server):
        import inspect
        for name, tool in server._tool_manager._tools.items():
            assert inspect.iscoroutinefunction(tool.fn), f"{name} blocks the event loop"

    def test_analyze_image_handler(self, server, fake_client):
        handler = server._tool_manager._tools["analyze_image"].fn

        result = asyncio.run(handler(image_url="https://example.com/cat.png"))

        assert isinstance(result, CallToolResult)
        assert json.loads(result.content[0].text)["model"] == "default/vision-model"
        assert fake_client.completion_calls == ["default/vision-model"]

    def test_analyze_audio_handler(self, server):
        handler = server._tool_manager._tools["analyze_audio"].fn

        result = asyncio.run(handler(audio_url="https://example.com/clip.wav"))

        assert result.isError is False
        assert json.loads(result.content[0].text)["model"] == "default/audio-model"

    def test_missing_argument_raises_invalid_params(self, server, fake_client):
        handler = server._tool_manager._tools["analyze_audio"].fn

        with pytest.raises(McpError) as exc_info:
            asyncio.run(handler(audio_url="   "))

        assert exc_info.value.error.code == INVALID_PARAMS
        assert fake_client.completion_calls == []


def _call_over_session(mcp, name, arguments):
    """Call one tool through an in-memory MCP client session."""
    from mcp.shared.memory import create_connected_server_and_client_session

    async def scenario():
        async with create_connected_server_and_client_session(mcp._mcp_server) as session:
            try:
                return await session.call_tool(name, arguments)
            except McpError as e:
                return e

    outcome = asyncio.run(scenario())
    if isinstance(outcome, McpError):
        raise outcome
    return outcome


class BarrierOpenRouter(FakeOpenRouter):
    """Completions only return once ``parties`` calls are in flight at the same time."""

    def __init__(self, parties, **kwargs):
        super().__init__(**kwargs)
        self.barrier = threading.Barrier(parties, timeout=5)

    def chat_completion(self, model, messages):
        self.barrier.wait()
        return super().chat_completion(model, messages)


class TestClientSession:
    """tools/call over the MCP protocol, through FastMCP's argument model and dispatch."""

    def test_success_envelope(self, server, fake_client):
        result = _call_over_session(server, "analyze_image", {"image_url": "https://example.com/cat.png"})

        payload = json.loads(result.content[0].text)
        assert result.isError is False
        assert payload["model"] == "default/vision-model"
        assert payload["analysis"] == "Mock analysis"
        assert fake_client.completion_calls == ["default/vision-model"]

    def test_soft_failure_envelope(self, server, fake_client):
        result = _call_over_session(server, "analyze_audio", {"audio_url": "https://example.com/missing.wav"})

        payload = json.loads(result.content[0].text)
        assert result.isError is True
        assert payload["error"] == "Failed to fetch media: 404 Not Found"
        assert payload["model"] == "default/audio-model"
        assert payload["usage"] == {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    @pytest.mark.parametrize("arguments", [{}, {"audio_url": ""}, {"audio_url": "   "}, {"model": "m1"}])
    def test_missing_audio_url_is_protocol_error(self, server, fake_client, arguments):
        with pytest.raises(McpError) as exc_info:
            _call_over_session(server, "analyze_audio", arguments)

        assert exc_info.value.error.code == INVALID_PARAMS
        assert exc_info.value.error.message == "audio_url parameter is required"
        assert fake_client.completion_calls == []
        assert fake_client.list_calls == 0

    def test_missing_image_url_is_protocol_error(self, server, fake_client):
        with pytest.raises(McpError) as exc_info:
            _call_over_session(server, "analyze_image", {"prompt": "What is this?"})

        assert exc_info.value.error.code == INVALID_PARAMS
        assert exc_info.value.error.message == "image_url parameter is required"
        assert fake_client.completion_calls == []

    def test_wrong_argument_type_is_protocol_error(self, server):
        with pytest.raises(McpError) as exc_info:
            _call_over_session(server, "analyze_image", {"image_url": 42})

        assert exc_info.value.error.code == INVALID_PARAMS
        assert "image_url" in exc_info.value.error.message

    def test_concurrent_calls_overlap(self, config, loader):
        from mcp.shared.memory import create_connected_server_and_client_session
        from openrouter_multimodal.server import create_server

        client = BarrierOpenRouter(2, succeed=["default/vision-model"])
        mcp = create_server(config, client=client, loader=loader)

        async def scenario():
            async with create_connected_server_and_client_session(mcp._mcp_server) as session:
                return await asyncio.gather(
                    session.call_tool("analyze_image", {"image_url": "https://example.com/cat.png"}),
                    session.call_tool("analyze_image", {"image_url": "https://example.com/photo"}),
                )

        results = asyncio.run(scenario())

        assert [result.isError for result in results] == [False, False]
        assert client.completion_calls == ["default/vision-model", "default/vision-model"]


class TestServerEntry:
    """Server entry point tests."""

    def test_run_py_imports_main(self):
        """run.py imports and calls main from openrouter_multimodal."""
        run_py = Path(__file__).parent.parent.parent / "run.py"
        content = run_py.read_text()

        assert "from openrouter_multimodal import main" in content
        assert "__name__" in content
        assert "main()" in content

    def test_main_exits_without_api_key(self, monkeypatch):
        from openrouter_multimodal import server as server_module

        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
        monkeypatch.setattr(sys, "argv", ["openrouter-multimodal-mcp"])

        with pytest.raises(SystemExit) as exc_info:
            server_module.main()

        assert exc_info.value.code == 1

    def test_package_readme(self):
        """pyproject.toml publishes README.md as the long description."""
        root = Path(__file__).parent.parent.parent
        pyproject = (root / "pyproject.toml").read_text()

        assert 'readme = "README.md"' in pyproject
        assert (root / "README.md").is_file()
