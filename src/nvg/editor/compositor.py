"""Video compositor: still-image segments and segment concatenation."""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from moviepy import ImageClip, VideoClip, VideoFileClip, concatenate_videoclips

from ..models import EncodingProfile
from .audio import load_audio
from .ffmpeg import run_ffmpeg

logger = logging.getLogger(__name__)

# Slack allowed between an audio track's decoded length and its probed length.
AUDIO_TOLERANCE = 0.05


def resize_clip(
    clip: VideoClip,
    width: Optional[int] = None,
    height: Optional[int] = None
) -> VideoClip:
    """Resize a video clip."""
    if width and height:
        return clip.resized((width, height))
    elif width:
        return clip.resized(width=width)
    elif height:
        return clip.resized(height=height)
    return clip


def crop_to_aspect(clip: VideoClip, width: int, height: int) -> VideoClip:
    """Centre-crop a clip to the aspect ratio of width x height."""
    target_ratio = width / height
    current_ratio = clip.w / clip.h

    if abs(current_ratio - target_ratio) < 0.01:
        return clip

    if current_ratio > target_ratio:
        # Too wide - crop horizontally
        new_w = int(clip.h * target_ratio)
        x1 = clip.w // 2 - new_w // 2
        return clip.cropped(x1=x1, x2=x1 + new_w)
    else:
        # Too tall - crop vertically
        new_h = int(clip.w / target_ratio)
        y1 = clip.h // 2 - new_h // 2
        return clip.cropped(y1=y1, y2=y1 + new_h)


def fit_to_frame(clip: VideoClip, size: Tuple[int, int]) -> VideoClip:
    """Crop to the frame's aspect ratio, then scale to exactly ``size``."""
    width, height = size
    clip = crop_to_aspect(clip, width, height)
    if (clip.w, clip.h) != (width, height):
        clip = resize_clip(clip, width, height)
    return clip


def export(
    video: VideoClip,
    output_path: Path,
    profile: EncodingProfile,
    extra_params: Sequence[str] = (),
) -> Path:
    """Encode ``video`` to ``output_path`` with the settings of ``profile``."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    video.write_videofile(
        str(output_path),
        fps=profile.fps,
        codec=profile.video_codec,
        audio_codec=profile.audio_codec,
        audio_bitrate=profile.audio_bitrate,
        audio_fps=profile.audio_sample_rate,
        preset=profile.preset,
        pixel_format=profile.pixel_format,
        ffmpeg_params=list(extra_params),
        temp_audiofile_path=str(output_path.parent),
        logger=None,
    )

    return output_path


def render_still_segment(
    image_path: Path,
    audio_path: Path,
    output_path: Path,
    duration: float,
    profile: EncodingProfile,
) -> Path:
    """Hold one image for ``duration`` seconds with the narration laid over it.

    The audio starts at t=0 and plays in full; the clip lasts exactly
    ``duration`` seconds.

    Raises:
        ValueError: If the audio is longer than ``duration``.
    """
    audio = load_audio(audio_path)
    try:
        if audio.duration > duration + AUDIO_TOLERANCE:
            raise ValueError(
                f"Audio runs {audio.duration:.3f}s but the segment is {duration:.3f}s"
            )

        logger.debug(f"Encoding {duration:.2f}s still segment -> {output_path.name}")
        still = fit_to_frame(ImageClip(str(image_path)), profile.size).with_duration(duration)
        video = still.with_audio(audio.with_duration(min(audio.duration, duration)))
        export(video, output_path, profile, extra_params=["-tune", "stillimage"])
    finally:
        audio.close()

    return output_path


def write_concat_list(segment_paths: List[Path], list_path: Path) -> Path:
    """Write an ffmpeg concat-demuxer list file, one entry per segment, in order."""
    list_path.parent.mkdir(parents=True, exist_ok=True)
    with open(list_path, "w", encoding="utf-8") as f:
        for path in segment_paths:
            escaped = str(path.resolve()).replace("'", "'\\''")
            f.write(f"file '{escaped}'\n")
    return list_path


def concat_copy(
    segment_paths: List[Path],
    output_path: Path,
    list_path: Path,
    ffmpeg_binary: Optional[str] = None,
) -> Path:
    """Concatenate identically-encoded segments by stream copy (no re-encode)."""
    if not segment_paths:
        raise ValueError("No segments provided")

    write_concat_list(segment_paths, list_path)
    logger.debug(f"Stream-copy concat of {len(segment_paths)} segments -> {output_path.name}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    run_ffmpeg(
        [
            "-f", "concat",
            "-safe", "0",
            "-i", str(list_path),
            "-c", "copy",
            "-movflags", "+faststart",
            str(output_path),
        ],
        binary=ffmpeg_binary,
    )
    return output_path


def concat_reencode(
    segment_paths: List[Path],
    output_path: Path,
    profile: EncodingProfile,
) -> Path:
    """Concatenate segments by decoding and re-encoding them with ``profile``."""
    if not segment_paths:
        raise ValueError("No segments provided")

    clips: List[VideoFileClip] = []
    for segment_path in segment_paths:
        if not segment_path.exists():
            raise FileNotFoundError(f"Segment not found: {segment_path}")
        clips.append(fit_to_frame(VideoFileClip(str(segment_path)), profile.size))

    logger.debug(f"Re-encoding {len(clips)} segments -> {output_path.name}")

    try:
        video = clips[0] if len(clips) == 1 else concatenate_videoclips(clips, method="compose")
        export(video, output_path, profile)
    finally:
        for clip in clips:
            clip.close()

    return output_path
