"""Scene and script data models."""

from typing import Tuple
from pathlib import Path
from pydantic import BaseModel, Field, field_validator
import yaml


class Scene(BaseModel):
    """One narrated unit of the output video."""

    id: int = Field(..., description="1-based position in the script", ge=1)
    visual_description: str = Field("", description="What the slide should show")
    text_overlay: str = Field("", description="Short text burned into the slide")
    narration: str = Field(..., description="Voice-over text")
    target_duration: float = Field(
        5.0, description="Estimated seconds; a hint only, never used for rendering", gt=0
    )

    class Config:
        """Pydantic config."""
        frozen = True

    @field_validator("narration")
    @classmethod
    def _narration_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("narration must not be empty")
        return value


class Script(BaseModel):
    """Ordered, non-empty sequence of scenes for one pipeline run."""

    scenes: Tuple[Scene, ...] = Field(..., description="Scenes in playback order")

    class Config:
        """Pydantic config."""
        frozen = True

    @field_validator("scenes")
    @classmethod
    def _scenes_in_sequence(cls, scenes: Tuple[Scene, ...]) -> Tuple[Scene, ...]:
        if not scenes:
            raise ValueError("a script needs at least one scene")
        ids = [scene.id for scene in scenes]
        expected = list(range(1, len(scenes) + 1))
        if ids != expected:
            raise ValueError(f"scene ids must be sequential from 1, got {ids}")
        return scenes

    def __len__(self) -> int:
        return len(self.scenes)

    @property
    def estimated_duration(self) -> float:
        """Sum of the per-scene duration hints."""
        return sum(scene.target_duration for scene in self.scenes)

    @classmethod
    def from_yaml(cls, path: Path) -> "Script":
        """Load a script from a YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path} does not hold a script mapping")
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save the script to a YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(
                self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False
            )
