"""
Media loading and format detection.

Resolves a media reference (remote URL, data URL or local path) into raw
bytes and classifies the container format from magic numbers, falling back
to the filename extension.
"""

import os
import base64
import binascii
from enum import Enum
from dataclasses import dataclass
from typing import Callable, Optional, Union
from urllib.parse import unquote_to_bytes, urlsplit
from urllib.request import url2pathname

import httpx

from ..core.errors import FetchError, FileReadError


class ImageFormat(str, Enum):
    """Image container formats accepted by vision models."""
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"


class AudioFormat(str, Enum):
    """Audio container formats accepted by the input_audio content part."""
    WAV = "wav"
    MP3 = "mp3"


DEFAULT_IMAGE_FORMAT = ImageFormat.JPEG
DEFAULT_AUDIO_FORMAT = AudioFormat.WAV

IMAGE_EXTENSIONS = {
    ".png": ImageFormat.PNG,
    ".jpg": ImageFormat.JPEG,
    ".jpeg": ImageFormat.JPEG,
    ".gif": ImageFormat.GIF,
    ".webp": ImageFormat.WEBP,
}

AUDIO_EXTENSIONS = {
    ".wav": AudioFormat.WAV,
    ".mp3": AudioFormat.MP3,
}


@dataclass(frozen=True)
class MediaBuffer:
    """Raw media bytes plus the detected format. Lives for one tool call."""
    data: bytes
    format: Union[ImageFormat, AudioFormat]

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        """data: URL for image_url content parts (images only)."""
        return f"data:{self.format.mime_type};base64,{self.to_base64()}"


# =============================================================================
# REFERENCE CLASSIFICATION
# =============================================================================

def is_url(ref: str) -> bool:
    """
    Check if a media reference is a URL rather than a filesystem path.

    A reference is a URL when it parses with a scheme of at least two
    characters; single-letter schemes are Windows drive letters.
    """
    try:
        scheme = urlsplit(ref).scheme
    except ValueError:
        return False
    return len(scheme) > 1


def normalize_path(file_path: str) -> str:
    """Normalize a file path to forward slashes."""
    return file_path.replace("\\", "/")


def filename_hint(ref: str) -> str:
    """Filename to use for extension-based detection (URL path without query)."""
    if is_url(ref):
        return unquote_to_bytes(urlsplit(ref).path).decode("utf-8", "replace")
    return normalize_path(ref)


# =============================================================================
# FORMAT DETECTION
# =============================================================================

def _extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def detect_audio_format(data: bytes, filename: str = "") -> AudioFormat:
    """
    Detect audio format from magic numbers, then the filename extension.

    Never fails: unknown content defaults to WAV.
    """
    header = bytes(data[:4])

    if header.startswith(b"RIFF"):
        return AudioFormat.WAV
    if header.startswith(b"ID3"):
        return AudioFormat.MP3
    if len(header) >= 2 and header[0] == 0xFF and (header[1] & 0xE0) == 0xE0:
        return AudioFormat.MP3

    return AUDIO_EXTENSIONS.get(_extension(filename), DEFAULT_AUDIO_FORMAT)


def detect_image_format(data: bytes, filename: str = "") -> ImageFormat:
    """
    Detect image format from magic numbers, then the filename extension.

    Never fails: unknown content defaults to JPEG.
    """
    header = bytes(data[:12])

    if header.startswith(b"\x89PNG"):
        return ImageFormat.PNG
    if header.startswith(b"\xff\xd8\xff"):
        return ImageFormat.JPEG
    if header.startswith(b"GIF8"):
        return ImageFormat.GIF
    if header.startswith(b"RIFF") and header[8:12] == b"WEBP":
        return ImageFormat.WEBP

    return IMAGE_EXTENSIONS.get(_extension(filename), DEFAULT_IMAGE_FORMAT)


# =============================================================================
# PAYLOAD LOADER
# =============================================================================

class MediaLoader:
    """
    Load media bytes from a URL or the local filesystem.

    No retries here: a failed fetch is reported once and the caller decides.
    """

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 60.0,
        cwd: Callable[[], str] = os.getcwd,
    ):
        self._http = http_client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._cwd = cwd

    def close(self) -> None:
        self._http.close()

    def load(self, ref: str) -> bytes:
        """
        Resolve a media reference into bytes.

        Raises:
            FetchError: URL could not be retrieved (non-2xx, transport error, bad scheme)
            FileReadError: Local file could not be read
        """
        if is_url(ref):
            return self._load_url(ref)
        return self._read_file(ref)

    def _load_url(self, url: str) -> bytes:
        scheme = urlsplit(url).scheme.lower()

        if scheme in ("http", "https"):
            return self._fetch(url)
        if scheme == "data":
            return self._decode_data_url(url)
        if scheme == "file":
            return self._read_file(url2pathname(urlsplit(url).path))

        raise FetchError(url, status_text=f"unsupported URL scheme '{scheme}'")

    def _fetch(self, url: str) -> bytes:
        try:
            response = self._http.get(url)
        except httpx.HTTPError as e:
            raise FetchError(url, status_text=str(e) or type(e).__name__) from e

        if not response.is_success:
            raise FetchError(url, status=response.status_code, status_text=response.reason_phrase)

        return response.content

    @staticmethod
    def _decode_data_url(url: str) -> bytes:
        try:
            header, payload = url[len("data:"):].split(",", 1)
        except ValueError:
            raise FetchError(url[:64], status_text="malformed data URL")

        if header.endswith(";base64"):
            try:
                return base64.b64decode(payload, validate=True)
            except (binascii.Error, ValueError) as e:
                raise FetchError(url[:64], status_text=f"invalid base64 data: {e}") from e

        return unquote_to_bytes(payload)

    def _read_file(self, file_path: str) -> bytes:
        resolved = normalize_path(file_path)
        if not os.path.isabs(resolved):
            resolved = os.path.join(self._cwd(), resolved)
        resolved = os.path.normpath(resolved)

        try:
            with open(resolved, "rb") as f:
                return f.read()
        except OSError as e:
            raise FileReadError(resolved, e.strerror or str(e)) from e
