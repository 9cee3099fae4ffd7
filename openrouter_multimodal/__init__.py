"""
openrouter-multimodal-mcp v1.0.0
MCP server for image and audio analysis through OpenRouter.

Features:
- FastMCP SDK for protocol compliance
- Image analysis (vision models) and audio transcription (audio models)
- Model fallback: requested/default model, backup model, discovered free model
- URL, data URL and local file inputs with magic-number format detection
"""

__version__ = "1.0.0"

from .server import create_server, main

__all__ = ["__version__", "create_server", "main"]
