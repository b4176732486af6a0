"""Thin wrappers around the ffmpeg / ffprobe executables."""

import json
import logging
import math
import subprocess
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import List, Optional

from ..config import config
from ..models import EncodingProfile

logger = logging.getLogger(__name__)

# Encoder name -> codec name ffprobe reports for its output.
CODEC_NAMES = {
    "libx264": "h264",
    "libx265": "hevc",
    "libvpx": "vp8",
    "libvpx-vp9": "vp9",
    "aac": "aac",
    "libmp3lame": "mp3",
    "libvorbis": "vorbis",
    "libopus": "opus",
}


class FFmpegError(RuntimeError):
    """An ffmpeg or ffprobe invocation failed."""


@dataclass(frozen=True)
class StreamSignature:
    """Encoding parameters that must agree for stream-copy concatenation."""

    video_codec: str
    width: int
    height: int
    pixel_format: str
    frame_rate: Fraction
    audio_codec: Optional[str]
    sample_rate: Optional[int]
    channels: Optional[int]

    def mismatches(self, profile: EncodingProfile) -> List[str]:
        """Describe every way this signature differs from ``profile``."""
        expected = {
            "video codec": CODEC_NAMES.get(profile.video_codec, profile.video_codec),
            "size": (profile.width, profile.height),
            "pixel format": profile.pixel_format,
            "frame rate": Fraction(profile.fps),
            "audio codec": CODEC_NAMES.get(profile.audio_codec, profile.audio_codec),
            "sample rate": profile.audio_sample_rate,
        }
        actual = {
            "video codec": self.video_codec,
            "size": (self.width, self.height),
            "pixel format": self.pixel_format,
            "frame rate": self.frame_rate,
            "audio codec": self.audio_codec,
            "sample rate": self.sample_rate,
        }
        return [
            f"{key}: expected {expected[key]}, got {actual[key]}"
            for key in expected
            if expected[key] != actual[key]
        ]


def _run(cmd: List[str]) -> subprocess.CompletedProcess:
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise FFmpegError(f"Executable not found: {cmd[0]}") from e

    if proc.returncode != 0:
        stderr = (proc.stderr or "").strip()
        raise FFmpegError(
            f"{Path(cmd[0]).name} exited with code {proc.returncode}: {stderr[-1000:]}"
        )
    return proc


def run_ffmpeg(args: List[str], binary: Optional[str] = None) -> None:
    """Run ffmpeg with ``args``, overwriting outputs.

    Raises:
        FFmpegError: On a non-zero exit or a missing executable.
    """
    _run([binary or config.ffmpeg_binary, "-hide_banner", "-loglevel", "error", "-y", *args])


def probe(path: Path, binary: Optional[str] = None) -> dict:
    """Return ffprobe's JSON description (format and streams) of ``path``."""
    proc = _run([
        binary or config.ffprobe_binary,
        "-v", "error",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(path),
    ])
    try:
        return json.loads(proc.stdout)
    except json.JSONDecodeError as e:
        raise FFmpegError(f"Unreadable ffprobe output for {path}: {e}") from e


def probe_duration(path: Path, binary: Optional[str] = None) -> float:
    """Container duration of ``path`` in seconds.

    Raises:
        FFmpegError: If the container reports no usable positive duration.
    """
    info = probe(path, binary)
    raw = info.get("format", {}).get("duration")
    try:
        duration = float(raw)
    except (TypeError, ValueError):
        raise FFmpegError(f"No duration in container metadata of {path}")

    if not math.isfinite(duration) or duration <= 0:
        raise FFmpegError(f"Invalid duration {raw!r} for {path}")
    return duration


def _frame_rate(value: str) -> Fraction:
    try:
        return Fraction(value)
    except (ValueError, ZeroDivisionError):
        return Fraction(0)


def probe_signature(path: Path, binary: Optional[str] = None) -> StreamSignature:
    """Read the first video and audio stream parameters of ``path``."""
    info = probe(path, binary)
    streams = info.get("streams", [])
    video = next((s for s in streams if s.get("codec_type") == "video"), None)
    audio = next((s for s in streams if s.get("codec_type") == "audio"), None)
    if video is None:
        raise FFmpegError(f"No video stream in {path}")

    return StreamSignature(
        video_codec=video.get("codec_name", ""),
        width=int(video.get("width", 0)),
        height=int(video.get("height", 0)),
        pixel_format=video.get("pix_fmt", ""),
        frame_rate=_frame_rate(video.get("r_frame_rate", "0/1")),
        audio_codec=audio.get("codec_name") if audio else None,
        sample_rate=int(audio["sample_rate"]) if audio and "sample_rate" in audio else None,
        channels=audio.get("channels") if audio else None,
    )
