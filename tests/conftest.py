"""
Pytest configuration and fixtures for openrouter-multimodal-mcp tests.
"""

import pytest
import sys
import tempfile
import shutil
from pathlib import Path

import httpx
from openai.types.chat import ChatCompletion

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from openrouter_multimodal.core import Config, DiscoveryError, RemoteInvocationError


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32
WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt " + b"\x00" * 24
MP3_BYTES = b"\xff\xfb\x90\x64" + b"\x00" * 32


def make_completion(model: str, content="Mock analysis", completion_id: str = "gen-123") -> ChatCompletion:
    """Real ChatCompletion object as returned by the OpenAI SDK."""
    return ChatCompletion.model_validate({
        "id": completion_id,
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [{
            "index": 0,
            "finish_reason": "stop",
            "message": {"role": "assistant", "content": content},
        }],
        "usage": {"prompt_tokens": 12, "completion_tokens": 8, "total_tokens": 20},
    })


class FakeOpenRouter:
    """
    Stand-in for OpenRouterClient that records every call.

    Models in ``succeed`` return a completion; every other model fails with a
    RemoteInvocationError naming the model.
    """

    def __init__(self, succeed=(), listing=None, listing_error=False):
        self.succeed = set(succeed)
        self.listing = list(listing or [])
        self.listing_error = listing_error
        self.completion_calls = []
        self.messages = []
        self.list_calls = 0

    def chat_completion(self, model, messages):
        self.completion_calls.append(model)
        self.messages.append(messages)
        if model in self.succeed:
            return make_completion(model)
        raise RemoteInvocationError(model, RuntimeError(f"{model} is rate limited"))

    def list_models(self):
        self.list_calls += 1
        if self.listing_error:
            raise DiscoveryError("Model listing failed: 503 Service Unavailable")
        return list(self.listing)


def media_transport(routes=None) -> httpx.MockTransport:
    """httpx transport serving ``routes`` (url -> bytes); anything else is a 404."""
    routes = routes or {}

    def handler(request: httpx.Request) -> httpx.Response:
        body = routes.get(str(request.url))
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, content=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def config():
    """Deterministic configuration (environment defaults overridden)."""
    return Config(
        api_key="sk-or-v1-test",
        default_image_model="default/vision-model",
        image_backup_model=None,
        default_audio_model="default/audio-model",
        audio_backup_model=None,
        activity_log_enabled=False,
        log_format="text",
        disabled_tools=[],
    )


@pytest.fixture
def temp_dir():
    """Temporary directory for media files."""
    tmpdir = tempfile.mkdtemp(prefix="openrouter_mcp_test_")
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def media_routes():
    return {
        "https://example.com/cat.png": PNG_BYTES,
        "https://example.com/photo": JPEG_BYTES,
        "https://example.com/clip.wav": WAV_BYTES,
        "https://example.com/song.mp3?dl=1": MP3_BYTES,
    }


@pytest.fixture
def loader(media_routes):
    """MediaLoader whose HTTP requests never leave the process."""
    from openrouter_multimodal.utils.media import MediaLoader

    client = httpx.Client(transport=media_transport(media_routes))
    media_loader = MediaLoader(http_client=client)
    yield media_loader
    media_loader.close()


@pytest.fixture
def make_context(config, loader):
    """Factory for ToolContext around a FakeOpenRouter and optional config overrides."""
    from dataclasses import replace
    from openrouter_multimodal.services import FallbackInvoker
    from openrouter_multimodal.tools import ToolContext

    def _make(client, **overrides):
        cfg = replace(config, **overrides) if overrides else config
        return ToolContext(config=cfg, loader=loader, invoker=FallbackInvoker(client))

    return _make
