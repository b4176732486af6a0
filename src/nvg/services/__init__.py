"""External service integrations."""

from .anthropic import AnthropicClient
from .imagen import ImagenClient, ImageResult
from .tts import GTTSClient, SpeechClientError

__all__ = [
    "AnthropicClient",
    "ImagenClient",
    "ImageResult",
    "GTTSClient",
    "SpeechClientError",
]
