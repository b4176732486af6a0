"""Google Translate text-to-speech client (gTTS)."""

import logging
from pathlib import Path
from typing import Optional

from gtts import gTTS, gTTSError
from gtts.lang import tts_langs
import requests

from ..config import config

logger = logging.getLogger(__name__)


class SpeechClientError(RuntimeError):
    """Raised when the speech service rejects or fails a request."""


class GTTSClient:
    """Speech synthesis through the free Google Translate TTS endpoint.

    The endpoint only accepts short inputs reliably; callers are expected to
    split long narration into chunks of at most ``max_chars`` characters
    (see ``nvg.pipeline.narration.split_narration``).
    """

    def __init__(
        self,
        lang: Optional[str] = None,
        tld: Optional[str] = None,
        slow: bool = False,
        max_chars: Optional[int] = None,
    ) -> None:
        self._lang = lang or config.tts_lang
        self._tld = tld or config.tts_tld
        self._slow = slow
        self._max_chars = max_chars or config.tts_max_chars

        if self._lang not in tts_langs():
            raise ValueError(f"NVG_TTS_LANG is not a supported narration language: {self._lang}")

    @property
    def max_chars(self) -> int:
        """Largest input accepted per request."""
        return self._max_chars

    def synthesize(self, text: str, output_path: Path) -> Path:
        """Synthesize ``text`` into an MP3 at ``output_path``.

        Raises:
            ValueError: If text is empty or longer than ``max_chars``.
            SpeechClientError: On network or service failure.
        """
        text = text.strip()
        if not text:
            raise ValueError("Cannot synthesize empty text")
        if len(text) > self._max_chars:
            raise ValueError(
                f"Text of {len(text)} chars exceeds the {self._max_chars} char limit"
            )

        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Synthesizing {len(text)} chars -> {output_path.name}")
        try:
            tts = gTTS(text=text, lang=self._lang, tld=self._tld, slow=self._slow)
            tts.save(str(output_path))
        except (gTTSError, requests.RequestException) as e:
            raise SpeechClientError(f"Speech synthesis failed: {e}") from e

        return output_path
