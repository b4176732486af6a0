"""Narration Audio Generator: speech synthesis and duration probing."""

import logging
import re
import time
from pathlib import Path
from typing import List, Optional, Protocol

from ..editor.audio import concatenate_audio
from ..editor.ffmpeg import FFmpegError, probe_duration
from ..errors import SynthesisFailure
from ..services.tts import SpeechClientError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 200

_SENTENCE_BREAK_RE = re.compile(r"(?<=[.!?;:])\s+")


class SpeechClient(Protocol):
    """Anything that can turn a short text into an audio file."""

    def synthesize(self, text: str, output_path: Path) -> Path:
        ...


def _fit_sentence(sentence: str, max_chars: int) -> List[str]:
    if len(sentence) <= max_chars:
        return [sentence]

    pieces: List[str] = []
    current = ""
    for word in sentence.split(" "):
        while len(word) > max_chars:
            # a single word longer than the limit is cut, never dropped
            if current:
                pieces.append(current)
                current = ""
            pieces.append(word[:max_chars])
            word = word[max_chars:]
        if not word:
            continue
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= max_chars:
            current = f"{current} {word}"
        else:
            pieces.append(current)
            current = word
    if current:
        pieces.append(current)
    return pieces


def split_narration(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> List[str]:
    """Split narration into ordered chunks of at most ``max_chars`` characters.

    Chunks break at sentence ends where possible, then at spaces. Every
    word of the input appears in the output, in order.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be positive")

    text = " ".join(text.split())
    if not text:
        return []
    if len(text) <= max_chars:
        return [text]

    chunks: List[str] = []
    current = ""
    for sentence in _SENTENCE_BREAK_RE.split(text):
        for piece in _fit_sentence(sentence, max_chars):
            if not current:
                current = piece
            elif len(current) + 1 + len(piece) <= max_chars:
                current = f"{current} {piece}"
            else:
                chunks.append(current)
                current = piece
    if current:
        chunks.append(current)
    return chunks


class NarrationGenerator:
    """Turns scene narration into one audio file and measures it.

    Long text is split with ``split_narration``, every chunk synthesized on
    its own (retried ``retries`` times with exponential backoff), and the
    chunks joined in order.
    """

    def __init__(
        self,
        client: SpeechClient,
        max_chars: Optional[int] = None,
        retries: int = 1,
        retry_delay: float = 1.0,
        sample_rate: int = 44100,
        ffprobe_binary: Optional[str] = None,
    ) -> None:
        self._client = client
        self._max_chars = max_chars or getattr(client, "max_chars", DEFAULT_MAX_CHARS)
        self._retries = retries
        self._retry_delay = retry_delay
        self._sample_rate = sample_rate
        self._ffprobe_binary = ffprobe_binary

    @property
    def max_chars(self) -> int:
        return self._max_chars

    def synthesize(self, text: str, output_path: Path, scene_id: Optional[int] = None) -> Path:
        """Synthesize ``text`` into a single audio file at ``output_path``.

        Raises:
            SynthesisFailure: If any chunk still fails after its retries, or
                the chunks cannot be joined.
        """
        chunks = split_narration(text, self._max_chars)
        if not chunks:
            raise SynthesisFailure("Narration text is empty", scene_id)

        if len(chunks) > 1:
            logger.info(f"Narration of {len(text)} chars split into {len(chunks)} chunks")

        chunk_paths = [
            self._synthesize_chunk(
                chunk,
                output_path.with_name(f"{output_path.stem}_part{index:02d}{output_path.suffix}"),
                scene_id,
            )
            for index, chunk in enumerate(chunks)
        ]

        try:
            concatenate_audio(chunk_paths, output_path, fps=self._sample_rate)
        except (OSError, ValueError, RuntimeError) as e:
            raise SynthesisFailure(f"Could not join narration chunks: {e}", scene_id) from e
        finally:
            for path in chunk_paths:
                path.unlink(missing_ok=True)

        return output_path

    def _synthesize_chunk(self, text: str, output_path: Path, scene_id: Optional[int]) -> Path:
        attempts = self._retries + 1
        for attempt in range(attempts):
            try:
                return self._client.synthesize(text, output_path)
            except ValueError as e:
                # bad language or text; retrying cannot help
                raise SynthesisFailure(f"Speech service rejected the request: {e}", scene_id) from e
            except (SpeechClientError, OSError) as e:
                if attempt == attempts - 1:
                    logger.error(f"Speech synthesis failed after {attempts} attempts: {e}")
                    raise SynthesisFailure(
                        f"Speech synthesis failed after {attempts} attempts: {e}", scene_id
                    ) from e
                delay = self._retry_delay * (2**attempt)
                logger.warning(f"Speech synthesis failed: {e}. Retrying in {delay:.1f}s...")
                time.sleep(delay)

        raise SynthesisFailure("Speech synthesis was never attempted", scene_id)

    def probe_duration(self, audio_path: Path, scene_id: Optional[int] = None) -> float:
        """Playable length of ``audio_path`` from its container metadata.

        Raises:
            SynthesisFailure: If the file is missing or reports no valid duration.
        """
        if not audio_path.exists():
            raise SynthesisFailure(f"Audio file not found: {audio_path}", scene_id)
        try:
            return probe_duration(audio_path, self._ffprobe_binary)
        except FFmpegError as e:
            raise SynthesisFailure(f"Could not probe {audio_path.name}: {e}", scene_id) from e
