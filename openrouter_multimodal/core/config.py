"""
Configuration management for openrouter-multimodal-mcp.
Centralizes all environment variables and settings.
"""

import os
import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# Used when neither the request, the config file nor the environment names a model
DEFAULT_IMAGE_MODEL = "qwen/qwen2.5-vl-32b-instruct"
DEFAULT_AUDIO_MODEL = "mistralai/voxtral-small-24b-2507"


def _optional_env(name: str) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    return value or None


@dataclass(frozen=True)
class Config:
    """
    Central configuration for openrouter-multimodal-mcp.

    All settings are loaded from environment variables with sensible defaults.
    Instances are immutable: build one at startup and pass it to whatever needs it.
    """

    # Version
    version: str = "1.0.0"

    # API Configuration
    api_key: str = field(default_factory=lambda: os.environ.get("OPENROUTER_API_KEY", ""))
    base_url: str = field(
        default_factory=lambda: os.environ.get("OPENROUTER_BASE_URL", OPENROUTER_BASE_URL)
    )
    referer: str = field(
        default_factory=lambda: os.environ.get(
            "OPENROUTER_REFERER", "https://github.com/openrouter-multimodal-mcp"
        )
    )
    title: str = field(
        default_factory=lambda: os.environ.get("OPENROUTER_TITLE", "OpenRouter Multimodal MCP")
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("OPENROUTER_TIMEOUT", "120"))
    )
    fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("OPENROUTER_FETCH_TIMEOUT", "60"))
    )
    # SDK-level retries; model fallback is the retry mechanism
    max_retries: int = field(
        default_factory=lambda: int(os.environ.get("OPENROUTER_MAX_RETRIES", "0"))
    )

    # Models
    default_image_model: str = field(
        default_factory=lambda: _optional_env("OPENROUTER_DEFAULT_MODEL_IMG") or DEFAULT_IMAGE_MODEL
    )
    image_backup_model: Optional[str] = field(
        default_factory=lambda: _optional_env("OPENROUTER_DEFAULT_MODEL_IMG_BACKUP")
    )
    default_audio_model: str = field(
        default_factory=lambda: _optional_env("OPENROUTER_DEFAULT_MODEL_AUDIO") or DEFAULT_AUDIO_MODEL
    )
    audio_backup_model: Optional[str] = field(
        default_factory=lambda: _optional_env("OPENROUTER_DEFAULT_MODEL_AUDIO_BACKUP")
    )

    # Activity Logging
    activity_log_enabled: bool = field(
        default_factory=lambda: os.environ.get("OPENROUTER_MCP_ACTIVITY_LOG", "true").lower() == "true"
    )
    log_dir: str = field(
        default_factory=lambda: os.environ.get(
            "OPENROUTER_MCP_LOG_DIR", os.path.expanduser("~/.openrouter-multimodal-mcp")
        )
    )
    log_max_bytes: int = field(
        default_factory=lambda: int(os.environ.get("OPENROUTER_MCP_LOG_MAX_BYTES", str(10 * 1024 * 1024)))
    )
    log_backup_count: int = field(
        default_factory=lambda: int(os.environ.get("OPENROUTER_MCP_LOG_BACKUP_COUNT", "5"))
    )
    log_format: str = field(
        default_factory=lambda: os.environ.get("OPENROUTER_MCP_LOG_FORMAT", "text").lower()
    )

    # Tool Management
    disabled_tools: List[str] = field(
        default_factory=lambda: [
            t.strip() for t in os.environ.get("OPENROUTER_MCP_DISABLED_TOOLS", "").split(",") if t.strip()
        ]
    )

    def with_options(self, options: Dict[str, Any]) -> "Config":
        """
        Return a copy with values from an MCP config payload applied.

        Accepts both the environment-style keys (OPENROUTER_API_KEY) and the
        camelCase keys (apiKey) used by MCP client configuration files.
        Missing or empty values leave the current setting untouched.
        """
        key_map = {
            "api_key": ("OPENROUTER_API_KEY", "apiKey"),
            "default_image_model": ("OPENROUTER_DEFAULT_MODEL", "defaultModel"),
            "default_audio_model": ("OPENROUTER_DEFAULT_MODEL_AUDIO", "defaultAudioModel"),
        }
        changes = {}
        for attr, keys in key_map.items():
            for key in keys:
                value = options.get(key)
                if isinstance(value, str) and value.strip():
                    changes[attr] = value.strip()
                    break
        return replace(self, **changes) if changes else self

    def validate(self) -> Optional[str]:
        """
        Validate configuration.

        Returns:
            Error message if invalid, None if valid.
        """
        if not self.api_key or self.api_key == "YOUR_API_KEY_HERE":
            return (
                "OpenRouter API key is required. Provide it via --config "
                "or the OPENROUTER_API_KEY environment variable"
            )
        return None


def find_config_path(argv: List[str]) -> Optional[str]:
    """Return the value of a --config=<path> argument, if present."""
    for arg in argv:
        if arg.startswith("--config="):
            path = arg.split("=", 1)[1]
            return path or None
    return None


def read_config_file(path: str) -> Dict[str, Any]:
    """
    Read an MCP configuration file.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not a JSON object
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return data
