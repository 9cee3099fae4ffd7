"""
Analyze Audio Tool

Audio transcription/analysis through OpenRouter audio-capable models.
"""

from typing import Optional

from mcp.types import CallToolResult

from ...core import DEFAULT_AUDIO_MODEL, MultimodalError, log_progress
from ...schemas import validate_tool_input
from ...services import AUDIO_MODEL_MARKERS, resolve_candidates
from ...utils.media import MediaBuffer, detect_audio_format, filename_hint
from ..context import ToolContext
from ..results import completion_result, error_result


TRANSCRIBE_PROMPT = "Please transcribe and provide me the raw content of this audio."


def build_audio_messages(media: MediaBuffer) -> list:
    """Single user turn: fixed transcription instruction + base64 audio part."""
    return [{
        "role": "user",
        "content": [
            {"type": "text", "text": TRANSCRIBE_PROMPT},
            {
                "type": "input_audio",
                "input_audio": {
                    "data": media.to_base64(),
                    "format": media.format.value,
                },
            },
        ],
    }]


def analyze_audio(
    ctx: ToolContext,
    audio_url: Optional[str],
    model: Optional[str] = None,
) -> CallToolResult:
    """
    Transcribe and analyze an audio clip.

    Supports: WAV, MP3 from http(s) URLs, data URLs or local paths.

    Raises:
        McpError: INVALID_PARAMS when audio_url is missing (no remote call is made)
    """
    args = validate_tool_input("analyze_audio", {"audio_url": audio_url, "model": model})

    candidates = resolve_candidates(
        args["model"],
        ctx.config.default_audio_model,
        DEFAULT_AUDIO_MODEL,
        ctx.config.audio_backup_model,
    )
    log_progress(f"[Audio Tool] Using AUDIO model: {candidates[0]}")

    try:
        data = ctx.loader.load(args["audio_url"])
        media = MediaBuffer(data, detect_audio_format(data, filename_hint(args["audio_url"])))
        outcome = ctx.invoker.invoke(candidates, build_audio_messages(media), AUDIO_MODEL_MARKERS)
    except MultimodalError as e:
        return error_result(str(e), candidates[0])
    except Exception as e:
        log_progress(f"[Audio Tool] Unexpected error: {type(e).__name__}: {e}", stage="error")
        return error_result(str(e) or type(e).__name__, candidates[0])

    return completion_result(outcome)
