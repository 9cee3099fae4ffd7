"""Core modules: config, errors, security, logging."""

from .config import (
    Config,
    DEFAULT_AUDIO_MODEL,
    DEFAULT_IMAGE_MODEL,
    OPENROUTER_BASE_URL,
    find_config_path,
    read_config_file,
)
from .errors import (
    MultimodalError,
    FetchError,
    FileReadError,
    RemoteInvocationError,
    DiscoveryError,
)
from .logging import (
    StructuredLogger,
    structured_logger,
    configure_logging,
    log_activity,
    log_progress,
)
from .security import SecretsSanitizer, secrets_sanitizer, RegexTimeoutError, regex_timeout

__all__ = [
    "Config",
    "DEFAULT_AUDIO_MODEL",
    "DEFAULT_IMAGE_MODEL",
    "OPENROUTER_BASE_URL",
    "find_config_path",
    "read_config_file",
    "MultimodalError",
    "FetchError",
    "FileReadError",
    "RemoteInvocationError",
    "DiscoveryError",
    "StructuredLogger",
    "structured_logger",
    "configure_logging",
    "log_activity",
    "log_progress",
    "SecretsSanitizer",
    "secrets_sanitizer",
    "RegexTimeoutError",
    "regex_timeout",
]
