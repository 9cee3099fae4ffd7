"""
Result envelopes returned by the media tools.

Every tool call yields exactly one JSON text block. Soft failures (fetch
errors, exhausted model chain) are data with isError set, not protocol faults.
"""

import json

from mcp.types import CallToolResult, TextContent

from ..services.fallback import CompletionResult, Failure, Success, Usage


def _text_result(payload: dict, is_error: bool = False) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(payload))],
        isError=is_error,
    )


def success_result(outcome: Success) -> CallToolResult:
    """Envelope for a completed analysis: {id, analysis, model, usage}."""
    return _text_result({
        "id": outcome.id,
        "analysis": outcome.text,
        "model": outcome.model,
        "usage": outcome.usage.as_dict(),
    })


def error_result(message: str, model: str) -> CallToolResult:
    """Envelope for a soft failure: {error, model, usage} with zeroed usage."""
    return _text_result({
        "error": message,
        "model": model,
        "usage": Usage().as_dict(),
    }, is_error=True)


def completion_result(outcome: CompletionResult) -> CallToolResult:
    """Map a fallback outcome onto its envelope."""
    if isinstance(outcome, Success):
        return success_result(outcome)
    if isinstance(outcome, Failure):
        return error_result(str(outcome.cause), outcome.model)
    raise TypeError(f"Unexpected completion outcome: {type(outcome).__name__}")
