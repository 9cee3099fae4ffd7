"""Media analysis tools."""

from .analyze_image import analyze_image, build_image_messages
from .analyze_audio import analyze_audio, build_audio_messages

__all__ = ["analyze_image", "analyze_audio", "build_image_messages", "build_audio_messages"]
