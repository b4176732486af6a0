"""Pipeline error taxonomy.

Every failure carries the stage it happened in and, where it is tied to a
single scene, that scene's id, so a caller can tell which part of a run broke.
Only ``GenerationFailure`` is recoverable (the orchestrator falls back to a
locally built script); all others abort the run.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    stage: str = "pipeline"

    def __init__(self, message: str, scene_id: Optional[int] = None) -> None:
        self.message = message
        self.scene_id = scene_id
        super().__init__(str(self))

    def __str__(self) -> str:
        where = self.stage if self.scene_id is None else f"{self.stage}, scene {self.scene_id}"
        return f"[{where}] {self.message}"


class GenerationFailure(PipelineError):
    """The text-generation service failed or returned an unusable script."""

    stage = "scripting"


class AssetFailure(PipelineError):
    """A slide image could not be produced."""

    stage = "slides"


class SynthesisFailure(PipelineError):
    """Narration audio could not be synthesized or probed."""

    stage = "narration"


class RenderFailure(PipelineError):
    """A scene segment could not be encoded or failed validation."""

    stage = "rendering"


class AssemblyFailure(PipelineError):
    """Segments could not be concatenated into the final video."""

    stage = "assembly"
