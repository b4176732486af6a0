"""Video-synthesis pipeline stages and orchestrator."""

from .assembler import VideoAssembler
from .narration import NarrationGenerator, SpeechClient, split_narration
from .orchestrator import VideoPipeline, build_pipeline
from .renderer import SceneRenderer
from .slides import SlideGenerator
from .workspace import RunWorkspace

__all__ = [
    "VideoAssembler",
    "NarrationGenerator",
    "SpeechClient",
    "split_narration",
    "VideoPipeline",
    "build_pipeline",
    "SceneRenderer",
    "SlideGenerator",
    "RunWorkspace",
]
