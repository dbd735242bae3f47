"""Anthropic-based recipe generator.

Streams the Messages API over HTTP and yields text deltas as they arrive.

Requirements:
    - ANTHROPIC_API_KEY set in the environment (or passed explicitly)

Wire format (server-sent events, one JSON payload per ``data:`` line):
- ``content_block_delta`` with ``delta.text``: a fragment of output
- ``message_stop``: the message is complete
- ``error``: the provider failed mid-stream
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from recipe_cache.config import settings
from recipe_cache.errors import GenerationFailed

logger = logging.getLogger(__name__)

# Status used when the provider fails without an HTTP status of its own
PROVIDER_ERROR_STATUS = 502


class AnthropicRecipeGenerator:
    """Anthropic Messages API implementation of RecipeGenerator protocol.

    This class satisfies the RecipeGenerator protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        generator = AnthropicRecipeGenerator.create()

        async for fragment in generator.stream("Make banana bread without nuts"):
            print(fragment, end="")
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        base_url: str | None = None,
        max_tokens: int | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Anthropic generator.

        Args:
            api_key: Anthropic API key. Defaults to settings.anthropic_api_key.
            model_name: Model identifier. Defaults to settings.anthropic_model.
            base_url: API base URL. Defaults to settings.anthropic_base_url.
            max_tokens: Output token limit. Defaults to settings.anthropic_max_tokens.
            api_version: Value of the anthropic-version header.
            timeout: Read timeout in seconds; None waits indefinitely.
            client: HTTP client to use. If None, one is created lazily.
        """
        self._api_key = api_key or settings.anthropic_api_key
        self._model_name = model_name or settings.anthropic_model
        self._base_url = (base_url or settings.anthropic_base_url).rstrip("/")
        self._max_tokens = max_tokens or settings.anthropic_max_tokens
        self._api_version = api_version or settings.anthropic_version
        self._timeout = timeout if timeout is not None else settings.anthropic_timeout
        self._client = client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        max_tokens: int | None = None,
    ) -> "AnthropicRecipeGenerator":
        """Factory method to create AnthropicRecipeGenerator with defaults.

        Args:
            model_name: Model name. If None, uses settings.
            max_tokens: Output token limit. If None, uses settings.

        Returns:
            Configured AnthropicRecipeGenerator
        """
        return cls(model_name=model_name, max_tokens=max_tokens)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(10.0, read=self._timeout),
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    def is_available(self) -> bool:
        """Check if an API key is configured."""
        return bool(self._api_key)

    def _headers(self) -> dict[str, str]:
        return {
            "content-type": "application/json",
            "x-api-key": self._api_key or "",
            "anthropic-version": self._api_version,
        }

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self._model_name,
            "max_tokens": self._max_tokens,
            "stream": True,
            "messages": [{"role": "user", "content": prompt}],
        }

    @staticmethod
    def _error_message(body: bytes, fallback: str) -> str:
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return fallback
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return fallback

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        """Stream a completion for the prompt.

        Args:
            prompt: The full user prompt

        Yields:
            Text fragments in arrival order

        Raises:
            GenerationFailed: If the key is missing, the API answers with an
                error status, the connection fails, or the stream reports an
                error or ends before completion
        """
        if not self._api_key:
            raise GenerationFailed("ANTHROPIC_API_KEY environment variable is not set", status=401)

        url = f"{self._base_url}/v1/messages"
        completed = False

        try:
            async with self.client.stream(
                "POST", url, headers=self._headers(), json=self._payload(prompt)
            ) as response:
                if response.status_code >= 400:
                    body = await response.aread()
                    message = self._error_message(body, f"Anthropic API error {response.status_code}")
                    logger.error("Anthropic API error %s: %s", response.status_code, message)
                    raise GenerationFailed(message, status=response.status_code)

                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    try:
                        event = json.loads(line[len("data:"):].strip())
                    except json.JSONDecodeError:
                        logger.debug("Skipping undecodable stream line: %r", line)
                        continue

                    event_type = event.get("type")
                    if event_type == "content_block_delta":
                        text = (event.get("delta") or {}).get("text")
                        if text:
                            yield text
                    elif event_type == "message_stop":
                        completed = True
                        break
                    elif event_type == "error":
                        error = event.get("error") or {}
                        message = error.get("message") or "Anthropic stream error"
                        logger.error("Anthropic stream error: %s", message)
                        raise GenerationFailed(message, status=PROVIDER_ERROR_STATUS)

        except httpx.HTTPError as e:
            logger.error("Anthropic request failed: %s", e)
            raise GenerationFailed(f"Anthropic request failed: {e}", status=PROVIDER_ERROR_STATUS) from e

        if not completed:
            raise GenerationFailed(
                "Anthropic stream ended before the message was complete",
                status=PROVIDER_ERROR_STATUS,
            )

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
