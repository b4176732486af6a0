"""Base agent abstraction."""

import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional

from ..services.anthropic import AnthropicClient

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for agents backed by a text-generation client.

    The client handle is injected so several agents (or concurrent runs) can
    share one, and tests can pass a fake exposing ``create_message``.
    """

    max_tokens: int = 4096
    temperature: float = 0.7

    def __init__(self, client: Optional[AnthropicClient] = None) -> None:
        """Initialize the agent.

        Args:
            client: AnthropicClient instance. Created from config if not provided.

        Raises:
            ValueError: If no client is given and no API key is configured.
        """
        self._client = client or AnthropicClient()
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the agent's name."""
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """Return the system prompt for this agent."""
        ...

    @property
    def model(self) -> str:
        """Return the model being used."""
        return getattr(self._client, "model", "unknown")

    @abstractmethod
    def run(self, input_data: InputT) -> OutputT:
        """Execute the agent's main task."""
        ...

    def _create_message(self, prompt: str) -> str:
        """Send ``prompt`` with the agent's system prompt and sampling settings."""
        self._logger.debug(f"Creating message with prompt length: {len(prompt)}")

        response = self._client.create_message(
            prompt=prompt,
            max_tokens=self.max_tokens,
            system=self.system_prompt,
            temperature=self.temperature,
        )
        self._logger.debug(f"Received response of length: {len(response)}")
        return response
