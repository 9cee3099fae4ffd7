"""Utility functions."""

from .media import (
    AudioFormat,
    ImageFormat,
    MediaBuffer,
    MediaLoader,
    detect_audio_format,
    detect_image_format,
    filename_hint,
    is_url,
    normalize_path,
)

__all__ = [
    "AudioFormat",
    "ImageFormat",
    "MediaBuffer",
    "MediaLoader",
    "detect_audio_format",
    "detect_image_format",
    "filename_hint",
    "is_url",
    "normalize_path",
]
