"""Anthropic Claude API client wrapper (text-generation service)."""

import logging
import time
from typing import Optional

from anthropic import (
    Anthropic,
    APIConnectionError,
    APIError,
    APITimeoutError,
    RateLimitError,
)

from ..config import config

logger = logging.getLogger(__name__)


class AnthropicClient:
    """Client handle for Claude text generation with retry logic.

    Instances are passed into the agents that need them instead of living in
    a module-level global, so tests can substitute a fake with the same
    ``create_message`` method.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 60.0,
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Model to use. Defaults to config.default_model.
            max_retries: Maximum number of attempts for transient failures.
            retry_delay: Base delay between retries in seconds (exponential backoff).
            timeout: Per-request timeout in seconds.
        """
        self._api_key = api_key or config.anthropic_api_key
        if not self._api_key:
            raise ValueError(
                "Anthropic API key not provided. Set ANTHROPIC_API_KEY env var."
            )

        # SDK-level retries are disabled; the loop below owns the backoff.
        self._client = Anthropic(api_key=self._api_key, timeout=timeout, max_retries=0)
        self._model = model or config.default_model
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """Send one prompt and return the text of Claude's reply.

        Rate-limit, timeout and connection errors are retried with exponential
        backoff; any other API error is raised immediately.

        Raises:
            APIError: If the request fails or retries are exhausted.
        """
        messages = [{"role": "user", "content": prompt}]
        kwargs = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": messages,
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        for attempt in range(self._max_retries):
            try:
                logger.debug(
                    f"Sending request to Claude (attempt {attempt + 1}/{self._max_retries})"
                )
                response = self._client.messages.create(**kwargs)
                return "".join(
                    block.text for block in response.content if hasattr(block, "text")
                )

            except (RateLimitError, APITimeoutError, APIConnectionError) as e:
                if attempt == self._max_retries - 1:
                    raise
                delay = self._retry_delay * (2**attempt)
                logger.warning(f"{type(e).__name__}: {e}. Retrying in {delay:.1f}s...")
                time.sleep(delay)

            except APIError as e:
                logger.error(f"API error: {e}")
                raise

        raise RuntimeError("Claude request was never attempted (max_retries < 1)")
