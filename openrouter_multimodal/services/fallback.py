"""
Model selection and fallback chain.

Candidate order for one request:

    primary  = request model, else caller default, else process default
    backup   = configured backup model (skipped when equal to primary)
    free     = first listed model matching "free" + a domain marker,
               discovered only after the explicit candidates failed

The invoker walks these in order and stops at the first success.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..core import DiscoveryError, RemoteInvocationError, log_progress


# Domain markers used to pick a free model from the listing
AUDIO_MODEL_MARKERS = ("audio", "voxtral", "whisper")
VISION_MODEL_MARKERS = ("vision", "-vl")


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class Usage:
    """Token counts reported by the API."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_completion(cls, completion: Any) -> "Usage":
        usage = getattr(completion, "usage", None)
        if usage is None:
            return cls()
        return cls(
            prompt_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
            completion_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
            total_tokens=int(getattr(usage, "total_tokens", 0) or 0),
        )

    def as_dict(self) -> Dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class Success:
    """A completion that produced an answer."""
    id: str
    model: str
    text: str
    usage: Usage = field(default_factory=Usage)

    @classmethod
    def from_completion(cls, completion: Any, requested_model: str) -> "Success":
        message = completion.choices[0].message
        return cls(
            id=completion.id or "",
            model=completion.model or requested_model,
            text=message.content or "",
            usage=Usage.from_completion(completion),
        )


@dataclass(frozen=True)
class Failure:
    """Every candidate failed; cause is the most recent attempt's error."""
    cause: Exception
    model: str
    attempted: Tuple[str, ...] = ()


CompletionResult = Union[Success, Failure]


# =============================================================================
# MODEL RESOLVER
# =============================================================================

def dedupe(models: Sequence[Optional[str]]) -> List[str]:
    """Drop empty and repeated ids, keeping first-seen order."""
    seen = []
    for model in models:
        if model and model not in seen:
            seen.append(model)
    return seen


def resolve_candidates(
    request_model: Optional[str],
    caller_default: Optional[str],
    process_default: str,
    process_backup: Optional[str] = None,
) -> List[str]:
    """
    Build the ordered explicit candidate list: [primary, backup].

    The primary is the first present of request model, caller default and
    process default. The backup only appears when it differs from the primary.
    """
    primary = next(
        (m for m in (request_model, caller_default, process_default) if m),
        None,
    )
    if primary is None:
        raise ValueError("No model available: process default model is empty")
    return dedupe([primary, process_backup])


def discover_free_model(client: Any, markers: Sequence[str]) -> Optional[str]:
    """
    Find a free model for the tool's domain from the live model listing.

    Returns the first listed id (case-insensitive) containing "free" and any of
    the markers, or None when the listing fails, is empty, or has no match.
    """
    try:
        model_ids = client.list_models()
    except DiscoveryError as e:
        log_progress(f"Free model discovery unavailable: {e}", stage="fallback")
        return None

    for model_id in model_ids or []:
        if not isinstance(model_id, str):
            continue
        lowered = model_id.lower()
        if "free" in lowered and any(marker in lowered for marker in markers):
            return model_id
    return None


# =============================================================================
# FALLBACK INVOKER
# =============================================================================

class AttemptState(str, Enum):
    """Fallback chain states."""
    TRY_PRIMARY = "try_primary"
    TRY_BACKUP = "try_backup"
    TRY_FREE = "try_free"
    EXHAUSTED = "exhausted"


class FallbackInvoker:
    """
    Run a chat completion through the candidate chain.

    Attempts are strictly sequential: at most three completion calls (primary,
    backup, discovered free model) and one listing call. Holds no per-request
    state, so one instance can serve concurrent tool calls.

    Usage:
        invoker = FallbackInvoker(client)
        result = invoker.invoke(["m1", "m2"], messages, VISION_MODEL_MARKERS)
        if isinstance(result, Success): ...
    """

    def __init__(self, client: Any):
        self.client = client

    def _attempt(self, model: str, messages: List[Dict[str, Any]]) -> Success:
        completion = self.client.chat_completion(model, messages)
        return Success.from_completion(completion, model)

    def invoke(
        self,
        candidates: Sequence[str],
        messages: List[Dict[str, Any]],
        markers: Sequence[str],
    ) -> CompletionResult:
        if not candidates:
            raise ValueError("invoke() needs at least one candidate model")

        primary = candidates[0]
        backup = candidates[1] if len(candidates) > 1 and candidates[1] != primary else None

        attempted: List[str] = []
        last_error: Optional[Exception] = None
        state = AttemptState.TRY_PRIMARY

        while True:
            if state is AttemptState.TRY_PRIMARY:
                model = primary
            elif state is AttemptState.TRY_BACKUP:
                model = backup
            elif state is AttemptState.TRY_FREE:
                model = discover_free_model(self.client, markers)
                if not model or model in attempted:
                    state = AttemptState.EXHAUSTED
                    continue
                log_progress(f"Trying discovered free model: {model}", stage="fallback")
            else:
                log_progress(
                    f"All candidate models failed ({', '.join(attempted)}): {last_error}",
                    stage="fallback",
                )
                return Failure(cause=last_error, model=primary, attempted=tuple(attempted))

            attempted.append(model)
            try:
                return self._attempt(model, messages)
            except RemoteInvocationError as e:
                last_error = e
                log_progress(f"Model {model} failed: {e}", stage="fallback")

            if state is AttemptState.TRY_PRIMARY and backup:
                state = AttemptState.TRY_BACKUP
            elif state is AttemptState.TRY_FREE:
                state = AttemptState.EXHAUSTED
            else:
                state = AttemptState.TRY_FREE
