"""
openrouter-multimodal-mcp v1.0.0
FastMCP-based MCP server for multimodal analysis through OpenRouter.

Tools:
- analyze_image: vision model analysis of an image URL or local file
- analyze_audio: transcription/analysis of a WAV/MP3 URL or local file

Each tool tries the requested (or default) model, then the configured backup,
then a free model discovered from the OpenRouter catalogue.

Usage:
    python run.py [--config=/path/to/config.json]
    # or
    python -m openrouter_multimodal
"""

import sys
import time
import uuid
from functools import partial
from typing import Any, Callable, Dict, Iterable, Optional

from anyio import to_thread
from mcp.server.fastmcp import FastMCP
from mcp.shared.exceptions import McpError
from mcp.types import CallToolRequest, CallToolResult

from .core import (
    Config,
    configure_logging,
    find_config_path,
    log_activity,
    read_config_file,
    structured_logger,
)
from .schemas import validate_tool_input
from .services import FallbackInvoker, OpenRouterClient
from .tools import ToolContext, analyze_audio, analyze_image
from .utils.media import MediaLoader


SERVER_NAME = "openrouter-multimodal-server"


def _run_logged(tool_name: str, args: Dict[str, Any], call: Callable[[], CallToolResult]) -> CallToolResult:
    """Run a tool call with start/success/error activity logging."""
    req_id = str(uuid.uuid4())[:8]
    start_time = time.time()
    log_activity(
        tool_name, "start",
        details={"args_keys": [k for k, v in args.items() if v is not None]},
        request_id=req_id,
    )

    try:
        result = call()
    except McpError as e:
        duration_ms = (time.time() - start_time) * 1000
        log_activity(tool_name, "error", duration_ms=duration_ms, error=e.error.message, request_id=req_id)
        raise

    duration_ms = (time.time() - start_time) * 1000
    text = result.content[0].text if result.content else ""
    if result.isError:
        log_activity(tool_name, "error", duration_ms=duration_ms, error=text, request_id=req_id)
    else:
        log_activity(tool_name, "success", duration_ms=duration_ms,
                     details={"result_len": len(text)}, request_id=req_id)
    return result


async def _run_in_worker(tool_name: str, args: Dict[str, Any], call: Callable[[], CallToolResult]) -> CallToolResult:
    """Run a blocking tool call in a worker thread, off the event loop."""
    return await to_thread.run_sync(partial(_run_logged, tool_name, args, call))


def _check_arguments_before_dispatch(mcp: FastMCP, tool_names: Iterable[str]) -> None:
    """
    Validate tool arguments ahead of FastMCP's tools/call handler.

    FastMCP reports every exception raised inside a tool as an isError result,
    so argument faults are raised here instead, where McpError goes back to
    the client as a JSON-RPC INVALID_PARAMS error.
    """
    handlers = mcp._mcp_server.request_handlers
    dispatch = handlers[CallToolRequest]
    checked = frozenset(tool_names)

    async def checked_dispatch(req: CallToolRequest):
        name = req.params.name
        if name in checked:
            try:
                validate_tool_input(name, req.params.arguments or {})
            except McpError as e:
                log_activity(name, "error", error=e.error.message)
                raise
        return await dispatch(req)

    handlers[CallToolRequest] = checked_dispatch


def create_server(
    config: Config,
    client: Optional[Any] = None,
    loader: Optional[MediaLoader] = None,
) -> FastMCP:
    """
    Build the MCP server with its tools bound to one immutable configuration.

    Args:
        config: Startup configuration
        client: Remote API client (defaults to OpenRouterClient from config)
        loader: Media loader (defaults to an httpx-backed MediaLoader)
    """
    ctx = ToolContext(
        config=config,
        loader=loader or MediaLoader(timeout=config.fetch_timeout),
        invoker=FallbackInvoker(client or OpenRouterClient.from_config(config)),
    )

    mcp = FastMCP(name=SERVER_NAME)

    # =========================================================================
    # TOOL: Image Analysis (Vision)
    # =========================================================================

    if "analyze_image" not in config.disabled_tools:
        @mcp.tool(name="analyze_image", structured_output=False)
        async def _analyze_image(
            image_url: str,
            model: Optional[str] = None,
            prompt: Optional[str] = None,
        ) -> CallToolResult:
            """
            Analyze an image using an OpenRouter vision model.
            Describe, extract text (OCR), identify objects, or answer questions about images.

            Args:
                image_url: http(s) URL, data URL, or local file path (PNG, JPEG, GIF, WEBP)
                model: OpenRouter model id (optional, defaults to the configured vision model)
                prompt: Question or instruction about the image (optional)

            Returns:
                JSON with id, analysis, model and usage; or error, model and zeroed usage
            """
            args = {"image_url": image_url, "model": model, "prompt": prompt}
            return await _run_in_worker(
                "analyze_image", args,
                partial(analyze_image, ctx, image_url=image_url, model=model, prompt=prompt),
            )

    # =========================================================================
    # TOOL: Audio Analysis (Transcription)
    # =========================================================================

    if "analyze_audio" not in config.disabled_tools:
        @mcp.tool(name="analyze_audio", structured_output=False)
        async def _analyze_audio(
            audio_url: str,
            model: Optional[str] = None,
        ) -> CallToolResult:
            """
            Transcribe and analyze audio using an OpenRouter audio model.

            Args:
                audio_url: http(s) URL, data URL, or local file path (WAV, MP3)
                model: OpenRouter model id (optional, defaults to the configured audio model)

            Returns:
                JSON with id, analysis, model and usage; or error, model and zeroed usage
            """
            args = {"audio_url": audio_url, "model": model}
            return await _run_in_worker(
                "analyze_audio", args,
                partial(analyze_audio, ctx, audio_url=audio_url, model=model),
            )

    _check_arguments_before_dispatch(mcp, [tool.name for tool in mcp._tool_manager.list_tools()])

    return mcp


def load_config(argv) -> Config:
    """Build the startup configuration from the environment and an optional --config file."""
    config = Config()

    config_path = find_config_path(argv)
    if config_path:
        try:
            config = config.with_options(read_config_file(config_path))
            structured_logger.info(f"Using MCP configuration from {config_path}")
        except (OSError, ValueError) as e:
            structured_logger.error(f"Error parsing MCP configuration: {e}")

    return config


# =============================================================================
# Entry Point
# =============================================================================

def main():
    """Run the MCP server."""
    config = load_config(sys.argv[1:])

    error = config.validate()
    if error:
        structured_logger.error(f"Configuration error: {error}")
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config)
    server = create_server(config)

    structured_logger.info(f"Starting {SERVER_NAME} v{config.version} on stdio")
    structured_logger.info(
        f"Default models: image={config.default_image_model}, audio={config.default_audio_model}"
    )

    try:
        server.run()
    except KeyboardInterrupt:
        structured_logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
