"""Pipeline run state model."""

import uuid
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field


class PipelineState(str, Enum):
    """Pipeline state enum."""
    SCRIPTING = "scripting"
    ASSET_GENERATION = "asset_generation"
    SCENE_RENDERING = "scene_rendering"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


_NEXT_STATE = {
    PipelineState.SCRIPTING: PipelineState.ASSET_GENERATION,
    PipelineState.ASSET_GENERATION: PipelineState.SCENE_RENDERING,
    PipelineState.SCENE_RENDERING: PipelineState.ASSEMBLING,
    PipelineState.ASSEMBLING: PipelineState.DONE,
}


class PipelineRun(BaseModel):
    """State tracking for one pipeline invocation."""

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Unique run identifier")
    state: PipelineState = Field(default=PipelineState.SCRIPTING, description="Current state")
    history: List[PipelineState] = Field(
        default_factory=lambda: [PipelineState.SCRIPTING], description="States entered, in order"
    )
    used_fallback_script: bool = Field(default=False, description="Script came from the local fallback")
    error: Optional[str] = Field(None, description="Failure description")

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def finished(self) -> bool:
        return self.state in (PipelineState.DONE, PipelineState.FAILED)

    def advance(self, state: PipelineState) -> None:
        """Move to the next stage; only the forward step is allowed."""
        if _NEXT_STATE.get(self.state) != state:
            raise ValueError(f"Illegal transition {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, error: str) -> None:
        """Move to FAILED from any unfinished state."""
        if self.finished:
            raise ValueError(f"Run already finished in state {self.state.value}")
        self.state = PipelineState.FAILED
        self.history.append(PipelineState.FAILED)
        self.error = error
