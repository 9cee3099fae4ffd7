"""
Error types for media loading and remote model invocation.

Validation faults are not defined here: they are raised as MCP protocol
errors (McpError with INVALID_PARAMS), see schemas/inputs.py.
"""

from typing import Optional


class MultimodalError(Exception):
    """Base class for errors surfaced to callers as soft-failure envelopes."""
    pass


class FetchError(MultimodalError):
    """Raised when a media URL cannot be retrieved."""

    def __init__(self, url: str, status: Optional[int] = None, status_text: str = ""):
        self.url = url
        self.status = status
        self.status_text = status_text
        if status is not None:
            message = f"Failed to fetch media: {status} {status_text}".rstrip()
        else:
            message = f"Failed to fetch media: {status_text or 'unknown error'}"
        super().__init__(message)


class FileReadError(MultimodalError):
    """Raised when a local media file cannot be read. The OSError is chained as __cause__."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read media file {path}: {reason}")


class RemoteInvocationError(MultimodalError):
    """A chat completion call failed for one model."""

    def __init__(self, model: str, cause: object):
        self.model = model
        self.cause = cause
        super().__init__(str(cause))


class DiscoveryError(MultimodalError):
    """The model listing call failed."""
    pass
