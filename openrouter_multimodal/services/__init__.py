"""Services layer for OpenRouter integration."""

from .openrouter import OpenRouterClient
from .fallback import (
    AUDIO_MODEL_MARKERS,
    VISION_MODEL_MARKERS,
    AttemptState,
    CompletionResult,
    FallbackInvoker,
    Failure,
    Success,
    Usage,
    dedupe,
    discover_free_model,
    resolve_candidates,
)

__all__ = [
    "OpenRouterClient",
    "AUDIO_MODEL_MARKERS",
    "VISION_MODEL_MARKERS",
    "AttemptState",
    "CompletionResult",
    "FallbackInvoker",
    "Failure",
    "Success",
    "Usage",
    "dedupe",
    "discover_free_model",
    "resolve_candidates",
]
