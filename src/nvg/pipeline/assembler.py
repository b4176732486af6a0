"""Video Assembler: ordered segments -> final video."""

import logging
from pathlib import Path
from typing import List, Optional

from ..editor.compositor import concat_copy, concat_reencode
from ..editor.ffmpeg import FFmpegError, probe_duration, probe_signature
from ..errors import AssemblyFailure
from ..models import EncodingProfile, FinalVideo, VideoSegment

logger = logging.getLogger(__name__)


class VideoAssembler:
    """Concatenates segments in the order given.

    Identically encoded segments are joined by stream copy; anything else
    falls back to a full re-encode with the run's profile.
    """

    def __init__(
        self,
        profile: EncodingProfile,
        ffmpeg_binary: Optional[str] = None,
        ffprobe_binary: Optional[str] = None,
    ) -> None:
        self._profile = profile
        self._ffmpeg_binary = ffmpeg_binary
        self._ffprobe_binary = ffprobe_binary

    def concatenate(
        self,
        segments: List[VideoSegment],
        output_path: Path,
        url: str = "",
        list_path: Optional[Path] = None,
    ) -> FinalVideo:
        """Join ``segments`` into ``output_path``.

        Args:
            segments: Segments in final playback order; never reordered.
            output_path: Where the final video is written.
            url: Public reference recorded on the result.
            list_path: Scratch file for the concat list. Defaults to a file
                next to ``output_path`` that is removed afterwards.

        Raises:
            AssemblyFailure: On empty input or encoder error. A partially
                written output is deleted first.
        """
        if not segments:
            raise AssemblyFailure("No segments to assemble")

        paths = [segment.path for segment in segments]
        scratch = list_path is None
        if scratch:
            list_path = output_path.with_suffix(".concat.txt")

        try:
            signatures = {probe_signature(path, self._ffprobe_binary) for path in paths}
            if len(signatures) == 1:
                logger.info(f"Joining {len(paths)} segments by stream copy")
                concat_copy(paths, output_path, list_path, self._ffmpeg_binary)
            else:
                logger.warning(
                    f"Segments have {len(signatures)} different encodings; re-encoding"
                )
                concat_reencode(paths, output_path, self._profile)
            duration = probe_duration(output_path, self._ffprobe_binary)
        except (FFmpegError, OSError, ValueError) as e:
            output_path.unlink(missing_ok=True)
            raise AssemblyFailure(f"Concatenation failed: {e}") from e
        finally:
            if scratch:
                list_path.unlink(missing_ok=True)

        expected = sum(segment.duration for segment in segments)
        if abs(duration - expected) > 0.5:
            logger.warning(
                f"Final video runs {duration:.2f}s, segments add up to {expected:.2f}s"
            )

        logger.info(f"Assembled {output_path.name} ({duration:.1f}s, {len(segments)} scenes)")
        return FinalVideo(
            path=output_path,
            url=url or str(output_path),
            duration=duration,
            scene_count=len(segments),
        )
