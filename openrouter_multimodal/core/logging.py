"""
Structured logging for openrouter-multimodal-mcp.
Supports both text and JSON formats for container observability.

stdout carries the MCP stdio transport, so everything here writes to
stderr or to the rotating activity log file.
"""

import os
import sys
import json
import logging
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, Any, Optional
from logging.handlers import RotatingFileHandler

from .config import Config
from .security import secrets_sanitizer


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


@dataclass
class LogRecord:
    """Structured log record for JSON logging."""
    timestamp: str
    level: str
    tool: Optional[str]
    status: str
    duration_ms: Optional[float]
    request_id: Optional[str]
    details: Dict[str, Any]
    error: Optional[str]


class StructuredLogger:
    """
    JSON-structured logger for production observability.

    Features:
    - JSON output to stderr for container logging
    - Automatic secrets sanitization
    - Request ID tracking
    - Duration tracking

    Output format:
    {"timestamp": "...", "level": "INFO", "tool": "analyze_image", ...}
    """

    def __init__(self, name: str = "openrouter-multimodal-mcp"):
        self.name = name

    def _emit(self, record: LogRecord):
        """Output log record as JSON to stderr."""
        safe_details = {}
        for k, v in record.details.items():
            str_val = str(v) if not isinstance(v, str) else v
            safe_details[k] = secrets_sanitizer.sanitize(str_val)

        output = {
            "timestamp": record.timestamp,
            "level": record.level,
            "logger": self.name,
            "tool": record.tool,
            "status": record.status,
            "duration_ms": record.duration_ms,
            "request_id": record.request_id,
            "details": safe_details,
            "error": secrets_sanitizer.sanitize(record.error) if record.error else None
        }

        # Remove None values for cleaner output
        output = {k: v for k, v in output.items() if v is not None}

        print(json.dumps(output), file=sys.stderr, flush=True)

    def tool_start(self, tool: str, request_id: str, args: Dict):
        """Log tool execution start."""
        self._emit(LogRecord(
            timestamp=_utc_timestamp(),
            level="INFO",
            tool=tool,
            status="start",
            duration_ms=None,
            request_id=request_id,
            details={"args_keys": list(args.keys())},
            error=None
        ))

    def tool_success(self, tool: str, request_id: str, duration_ms: float, details: Dict):
        """Log tool execution success."""
        self._emit(LogRecord(
            timestamp=_utc_timestamp(),
            level="INFO",
            tool=tool,
            status="success",
            duration_ms=round(duration_ms, 2),
            request_id=request_id,
            details=details,
            error=None
        ))

    def tool_error(self, tool: str, request_id: str, duration_ms: float, error: str):
        """Log tool execution error."""
        self._emit(LogRecord(
            timestamp=_utc_timestamp(),
            level="ERROR",
            tool=tool,
            status="error",
            duration_ms=round(duration_ms, 2),
            request_id=request_id,
            details={},
            error=error
        ))

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._emit(LogRecord(
            timestamp=_utc_timestamp(),
            level="INFO",
            tool=kwargs.get("tool"),
            status=kwargs.get("status", "info"),
            duration_ms=None,
            request_id=kwargs.get("request_id"),
            details={"message": message},
            error=None
        ))

    def error(self, message: str, **kwargs):
        """Log error message."""
        self._emit(LogRecord(
            timestamp=_utc_timestamp(),
            level="ERROR",
            tool=kwargs.get("tool"),
            status=kwargs.get("status", "error"),
            duration_ms=None,
            request_id=kwargs.get("request_id"),
            details={},
            error=message
        ))


# Global structured logger instance
structured_logger = StructuredLogger()


# =============================================================================
# ACTIVITY LOGGER (File-based)
# =============================================================================

activity_logger: Optional[logging.Logger] = None
_log_format = "text"


def configure_logging(config: Config) -> None:
    """
    Apply logging settings from the startup configuration.

    Called once from main(); until then only stderr progress output is active.
    """
    global activity_logger, _log_format

    _log_format = config.log_format

    if not config.activity_log_enabled or activity_logger is not None:
        return

    try:
        os.makedirs(config.log_dir, exist_ok=True)
        activity_log_path = os.path.join(config.log_dir, "activity.log")

        logger = logging.getLogger("openrouter_multimodal_activity")
        logger.setLevel(logging.INFO)
        logger.propagate = False

        handler = RotatingFileHandler(
            activity_log_path,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count
        )
        handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(handler)
        activity_logger = logger
    except OSError as e:
        activity_logger = None
        print(f"[openrouter-multimodal] Activity log disabled: {e}", file=sys.stderr, flush=True)


def log_activity(tool_name: str, status: str, duration_ms: float = 0,
                 details: Dict[str, Any] = None, error: str = None,
                 request_id: str = None):
    """
    Log tool activity for usage monitoring.

    Args:
        tool_name: Name of the tool called
        status: "start", "success", or "error"
        duration_ms: Execution time in milliseconds
        details: Additional details (truncated for privacy)
        error: Error message if status is "error"
        request_id: Unique request identifier
    """
    if _log_format == "json":
        if status == "start":
            structured_logger.tool_start(tool_name, request_id or "", details or {})
        elif status == "success":
            structured_logger.tool_success(tool_name, request_id or "", duration_ms, details or {})
        elif status == "error":
            structured_logger.tool_error(tool_name, request_id or "", duration_ms, error or "")
        return

    if not activity_logger:
        return

    parts = [f"tool={tool_name}", f"status={status}"]

    if request_id:
        parts.append(f"req_id={request_id}")

    if duration_ms > 0:
        parts.append(f"duration={duration_ms:.0f}ms")

    if details:
        safe_details = {}
        for k, v in details.items():
            if isinstance(v, str) and len(v) > 100:
                safe_details[k] = f"{v[:100]}... ({len(v)} chars)"
            elif isinstance(v, list):
                safe_details[k] = f"[{len(v)} items]"
            else:
                safe_details[k] = v
        parts.append(f"details={secrets_sanitizer.sanitize(json.dumps(safe_details))}")

    if error:
        safe_error = secrets_sanitizer.sanitize(error[:200])
        parts.append(f"error={safe_error}")

    activity_logger.info(" | ".join(parts))


def log_progress(message: str, stage: str = "progress"):
    """
    Log progress messages to stderr (model selection, fallback transitions).
    """
    if _log_format == "json":
        structured_logger.info(message, status=stage)
    else:
        print(f"[openrouter-multimodal] {secrets_sanitizer.sanitize(message)}", file=sys.stderr, flush=True)
