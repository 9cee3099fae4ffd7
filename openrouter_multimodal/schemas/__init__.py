"""Pydantic schemas for input validation."""

from .inputs import (
    AnalyzeImageInput,
    AnalyzeAudioInput,
    TOOL_SCHEMAS,
    invalid_params,
    validate_tool_input,
)

__all__ = [
    "AnalyzeImageInput",
    "AnalyzeAudioInput",
    "TOOL_SCHEMAS",
    "invalid_params",
    "validate_tool_input",
]
