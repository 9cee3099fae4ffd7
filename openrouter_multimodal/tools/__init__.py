"""MCP tool handlers for OpenRouter multimodal analysis."""

from .context import ToolContext
from .media import analyze_image, analyze_audio
from .results import completion_result, error_result, success_result

__all__ = [
    "ToolContext",
    "analyze_image",
    "analyze_audio",
    "completion_result",
    "error_result",
    "success_result",
]
