"""Media editing: slides, narration audio, segments and assembly."""

from .compositor import (
    fit_to_frame,
    crop_to_aspect,
    resize_clip,
    export,
    render_still_segment,
    concat_copy,
    concat_reencode,
)
from .overlays import (
    TextStyle,
    STYLES,
    get_style,
    render_text,
    compose_slide,
)
from .audio import (
    load_audio,
    concatenate_audio,
)
from .ffmpeg import (
    FFmpegError,
    StreamSignature,
    probe,
    probe_duration,
    probe_signature,
    run_ffmpeg,
)

__all__ = [
    # Compositor
    "fit_to_frame",
    "crop_to_aspect",
    "resize_clip",
    "export",
    "render_still_segment",
    "concat_copy",
    "concat_reencode",
    # Overlays
    "TextStyle",
    "STYLES",
    "get_style",
    "render_text",
    "compose_slide",
    # Audio
    "load_audio",
    "concatenate_audio",
    # ffmpeg
    "FFmpegError",
    "StreamSignature",
    "probe",
    "probe_duration",
    "probe_signature",
    "run_ffmpeg",
]
