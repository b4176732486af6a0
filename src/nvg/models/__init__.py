"""Data models for the narrated video generator."""

from .scene import Scene, Script
from .assets import SceneAsset, VideoSegment, FinalVideo, EncodingProfile
from .run import PipelineRun, PipelineState

__all__ = [
    "Scene",
    "Script",
    "SceneAsset",
    "VideoSegment",
    "FinalVideo",
    "EncodingProfile",
    "PipelineRun",
    "PipelineState",
]
