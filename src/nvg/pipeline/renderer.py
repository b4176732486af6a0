"""Scene Renderer: one encoded segment per scene asset."""

import logging
from pathlib import Path
from typing import Optional

from ..editor.compositor import render_still_segment
from ..editor.ffmpeg import FFmpegError, probe_duration, probe_signature
from ..errors import RenderFailure
from ..models import EncodingProfile, SceneAsset, VideoSegment

logger = logging.getLogger(__name__)


class SceneRenderer:
    """Encodes still + narration into a segment and checks the result.

    Every segment is encoded from the same ``EncodingProfile`` and then
    probed: a segment whose streams differ from the profile, or whose length
    is off by more than one frame plus ``duration_tolerance``, is rejected
    here rather than left to break concatenation later.
    """

    def __init__(
        self,
        profile: EncodingProfile,
        duration_tolerance: float = 0.1,
        ffprobe_binary: Optional[str] = None,
    ) -> None:
        self._profile = profile
        self._duration_tolerance = duration_tolerance
        self._ffprobe_binary = ffprobe_binary

    @property
    def profile(self) -> EncodingProfile:
        return self._profile

    def render(self, asset: SceneAsset, output_path: Path) -> VideoSegment:
        """Render ``asset`` to ``output_path``.

        Raises:
            RenderFailure: On encoder error or a segment that fails validation.
        """
        scene_id = asset.scene_id
        try:
            render_still_segment(
                asset.image_path,
                asset.audio_path,
                output_path,
                asset.duration,
                self._profile,
            )
        except ValueError as e:
            raise RenderFailure(f"Cannot render segment: {e}", scene_id) from e
        except (OSError, RuntimeError) as e:
            raise RenderFailure(f"Encoder error: {e}", scene_id) from e

        try:
            signature = probe_signature(output_path, self._ffprobe_binary)
            duration = probe_duration(output_path, self._ffprobe_binary)
        except FFmpegError as e:
            raise RenderFailure(f"Could not probe rendered segment: {e}", scene_id) from e

        problems = signature.mismatches(self._profile)
        if problems:
            raise RenderFailure(
                "Segment encoding differs from the run profile: " + "; ".join(problems),
                scene_id,
            )

        tolerance = 1.0 / self._profile.fps + self._duration_tolerance
        if abs(duration - asset.duration) > tolerance:
            raise RenderFailure(
                f"Segment runs {duration:.3f}s, expected {asset.duration:.3f}s", scene_id
            )

        logger.info(f"Scene {scene_id}: rendered {duration:.2f}s segment")
        return VideoSegment(scene_id=scene_id, path=output_path, duration=duration)
