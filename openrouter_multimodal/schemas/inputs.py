"""
Pydantic input schemas for tool validation.
"""

from typing import Optional

from mcp.shared.exceptions import McpError
from mcp.types import ErrorData, INVALID_PARAMS
from pydantic import BaseModel, Field, ValidationError, field_validator


def _blank_to_none(v):
    """Treat null/blank optional strings from MCP clients as absent."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

class AnalyzeImageInput(BaseModel):
    """Schema for analyze_image tool input."""

    image_url: str = Field(
        ...,
        min_length=1,
        description="Image URL (http/https/data) or local file path"
    )
    prompt: Optional[str] = Field(
        default=None,
        description="Question or instruction about the image"
    )
    model: Optional[str] = Field(
        default=None,
        description="OpenRouter model id; defaults to the configured vision model"
    )

    @field_validator('image_url', mode='before')
    @classmethod
    def strip_image_url(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('prompt', 'model', mode='before')
    @classmethod
    def handle_blank(cls, v):
        return _blank_to_none(v)


class AnalyzeAudioInput(BaseModel):
    """Schema for analyze_audio tool input."""

    audio_url: str = Field(
        ...,
        min_length=1,
        description="Audio URL (http/https/data) or local file path (WAV or MP3)"
    )
    model: Optional[str] = Field(
        default=None,
        description="OpenRouter model id; defaults to the configured audio model"
    )

    @field_validator('audio_url', mode='before')
    @classmethod
    def strip_audio_url(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('model', mode='before')
    @classmethod
    def handle_blank(cls, v):
        return _blank_to_none(v)


# =============================================================================
# VALIDATION HELPER
# =============================================================================

TOOL_SCHEMAS = {
    "analyze_image": AnalyzeImageInput,
    "analyze_audio": AnalyzeAudioInput,
}


def invalid_params(message: str) -> McpError:
    """Build the protocol-level invalid-parameters fault."""
    return McpError(ErrorData(code=INVALID_PARAMS, message=message))


def validate_tool_input(tool_name: str, args: dict) -> dict:
    """
    Validate and normalize tool input using Pydantic schemas.

    Args:
        tool_name: Name of the tool
        args: Raw input arguments

    Returns:
        Validated arguments (blank optionals become None)

    Raises:
        McpError: INVALID_PARAMS if a required field is missing or malformed
    """
    schema = TOOL_SCHEMAS.get(tool_name)
    if schema is None:
        return args

    try:
        return schema(**args).model_dump()
    except ValidationError as e:
        first = e.errors()[0]
        field_name = ".".join(str(part) for part in first.get("loc", ())) or "input"
        if first.get("type") in ("missing", "string_too_short") or first.get("input") is None:
            raise invalid_params(f"{field_name} parameter is required") from e
        raise invalid_params(f"Invalid input for {tool_name}: {field_name}: {first.get('msg')}") from e
