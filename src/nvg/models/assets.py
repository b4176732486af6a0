"""Artifact models produced while a script is turned into video."""

from pathlib import Path
from pydantic import BaseModel, Field, field_validator


class SceneAsset(BaseModel):
    """Slide image and narration audio for one scene."""

    scene_id: int = Field(..., ge=1)
    image_path: Path = Field(..., description="Rendered still image")
    audio_path: Path = Field(..., description="Synthesized narration")
    duration: float = Field(..., description="Probed length of audio_path in seconds", gt=0)

    class Config:
        """Pydantic config."""
        frozen = True


class VideoSegment(BaseModel):
    """Encoded clip for exactly one scene."""

    scene_id: int = Field(..., ge=1)
    path: Path
    duration: float = Field(..., gt=0)

    class Config:
        """Pydantic config."""
        frozen = True


class FinalVideo(BaseModel):
    """The concatenated deliverable of a run."""

    path: Path = Field(..., description="Location on disk")
    url: str = Field(..., description="Public reference handed back to callers")
    duration: float = Field(..., description="Sum of segment durations in seconds")
    scene_count: int = Field(..., ge=1)


class EncodingProfile(BaseModel):
    """Encoder settings shared by every segment of a run.

    Stream-copy concatenation only works when all segments were encoded with
    identical parameters, so every segment is rendered from one profile.
    """

    width: int = Field(1280, gt=0)
    height: int = Field(720, gt=0)
    fps: int = Field(30, gt=0)
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    pixel_format: str = "yuv420p"
    audio_bitrate: str = "192k"
    audio_sample_rate: int = 44100
    preset: str = "medium"

    class Config:
        """Pydantic config."""
        frozen = True

    @field_validator("width", "height")
    @classmethod
    def _even(cls, value: int) -> int:
        if value % 2:
            raise ValueError("yuv420p needs even frame dimensions")
        return value

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)
