"""Dependencies shared by the tool handlers for the lifetime of the server."""

from dataclasses import dataclass

from ..core import Config
from ..services import FallbackInvoker
from ..utils.media import MediaLoader


@dataclass(frozen=True)
class ToolContext:
    """Read-only bundle handed to every tool call."""
    config: Config
    loader: MediaLoader
    invoker: FallbackInvoker
