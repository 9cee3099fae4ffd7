"""
OpenRouter Service

Thin client over OpenRouter's OpenAI-compatible API. Exposes the two calls the
fallback chain needs: chat completion for one model and the model listing.
Failures are translated into RemoteInvocationError / DiscoveryError.
"""

import threading
from typing import Any, Dict, List, Optional

import httpx
from openai import OpenAI, OpenAIError
from openai.types.chat import ChatCompletion

from ..core import Config, RemoteInvocationError, DiscoveryError


class OpenRouterClient:
    """
    Client for OpenRouter chat completions and model discovery.

    The underlying OpenAI SDK client is created lazily on first use, with an
    explicit httpx client so timeouts come from the configuration. Tool calls
    run in worker threads, so creation is guarded by a lock.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 120.0,
        max_retries: int = 0,
        headers: Optional[Dict[str, str]] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.headers = dict(headers or {})
        self._http_client = http_client
        self._client: Optional[OpenAI] = None
        self._client_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Config, http_client: Optional[httpx.Client] = None) -> "OpenRouterClient":
        return cls(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            headers={"HTTP-Referer": config.referer, "X-Title": config.title},
            http_client=http_client,
        )

    @property
    def client(self) -> OpenAI:
        """Lazy initialization of the OpenAI SDK client."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    http_client = self._http_client or httpx.Client(
                        timeout=httpx.Timeout(self.timeout),
                        follow_redirects=True,
                    )
                    self._client = OpenAI(
                        api_key=self.api_key,
                        base_url=self.base_url,
                        max_retries=self.max_retries,
                        default_headers=self.headers,
                        http_client=http_client,
                    )
        return self._client

    def chat_completion(self, model: str, messages: List[Dict[str, Any]]) -> ChatCompletion:
        """
        Run one chat completion against a single model.

        Raises:
            RemoteInvocationError: On any API/transport error, or when the
                response carries no choices (OpenRouter reports some upstream
                failures that way with a 200 status).
        """
        try:
            completion = self.client.chat.completions.create(model=model, messages=messages)
        except OpenAIError as e:
            raise RemoteInvocationError(model, e) from e

        if not completion.choices:
            raise RemoteInvocationError(model, f"Model {model} returned no choices")
        return completion

    def list_models(self) -> List[str]:
        """
        List model ids in the order OpenRouter returns them.

        Raises:
            DiscoveryError: If the listing call fails
        """
        try:
            page = self.client.models.list()
        except OpenAIError as e:
            raise DiscoveryError(f"Model listing failed: {e}") from e
        return [
            model.id for model in (page.data or [])
            if isinstance(getattr(model, "id", None), str) and model.id
        ]
