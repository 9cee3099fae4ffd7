"""
Analyze Image Tool

Image analysis through OpenRouter vision models.
"""

from typing import Optional

from mcp.types import CallToolResult

from ...core import DEFAULT_IMAGE_MODEL, MultimodalError, log_progress
from ...schemas import validate_tool_input
from ...services import VISION_MODEL_MARKERS, resolve_candidates
from ...utils.media import MediaBuffer, detect_image_format, filename_hint
from ..context import ToolContext
from ..results import completion_result, error_result


DEFAULT_IMAGE_PROMPT = "What's in this image? Describe it in detail."


def build_image_messages(media: MediaBuffer, prompt: str) -> list:
    """Single user turn: the question followed by the image as a data URL."""
    return [{
        "role": "user",
        "content": [
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": {"url": media.to_data_url()}},
        ],
    }]


def analyze_image(
    ctx: ToolContext,
    image_url: Optional[str],
    model: Optional[str] = None,
    prompt: Optional[str] = None,
) -> CallToolResult:
    """
    Analyze an image with a vision model.

    Supports: PNG, JPEG, GIF, WEBP from http(s) URLs, data URLs or local paths.
    Use cases: describe images, extract text (OCR), identify objects, answer questions

    Raises:
        McpError: INVALID_PARAMS when image_url is missing (no remote call is made)
    """
    args = validate_tool_input(
        "analyze_image",
        {"image_url": image_url, "model": model, "prompt": prompt},
    )

    candidates = resolve_candidates(
        args["model"],
        ctx.config.default_image_model,
        DEFAULT_IMAGE_MODEL,
        ctx.config.image_backup_model,
    )
    log_progress(f"[Image Tool] Using VISION model: {candidates[0]}")

    try:
        data = ctx.loader.load(args["image_url"])
        media = MediaBuffer(data, detect_image_format(data, filename_hint(args["image_url"])))
        messages = build_image_messages(media, args["prompt"] or DEFAULT_IMAGE_PROMPT)
        outcome = ctx.invoker.invoke(candidates, messages, VISION_MODEL_MARKERS)
    except MultimodalError as e:
        return error_result(str(e), candidates[0])
    except Exception as e:
        log_progress(f"[Image Tool] Unexpected error: {type(e).__name__}: {e}", stage="error")
        return error_result(str(e) or type(e).__name__, candidates[0])

    return completion_result(outcome)
