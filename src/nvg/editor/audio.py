"""Audio helpers for narration tracks."""

import shutil
from pathlib import Path
from typing import List

from moviepy import AudioFileClip, concatenate_audioclips


def load_audio(audio_path: Path) -> AudioFileClip:
    """Load an audio file.

    Raises:
        FileNotFoundError: If audio file doesn't exist.
    """
    if not audio_path.exists():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")

    return AudioFileClip(str(audio_path))


def concatenate_audio(
    chunk_paths: List[Path],
    output_path: Path,
    fps: int = 44100,
) -> Path:
    """Join audio files end to end, in the given order, into one file.

    A single input is moved into place untouched.

    Args:
        chunk_paths: Audio files in playback order.
        output_path: Destination; the container follows its extension.
        fps: Output sample rate when re-encoding is needed.

    Returns:
        ``output_path``.
    """
    if not chunk_paths:
        raise ValueError("No audio chunks provided")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    if len(chunk_paths) == 1:
        if chunk_paths[0] != output_path:
            shutil.move(str(chunk_paths[0]), str(output_path))
        return output_path

    clips = [load_audio(path) for path in chunk_paths]
    try:
        combined = concatenate_audioclips(clips)
        combined.write_audiofile(str(output_path), fps=fps, logger=None)
    finally:
        for clip in clips:
            clip.close()

    return output_path
