"""Script agent: turns document text into an ordered scene script."""

import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from anthropic import APIError
from pydantic import BaseModel, Field, ValidationError

from ..errors import GenerationFailure
from ..models import Scene, Script
from ..services.anthropic import AnthropicClient
from .base import BaseAgent

logger = logging.getLogger(__name__)

MIN_SCENES = 2
MAX_SCENES = 8

# Documents longer than this are cut before prompting.
MAX_CONTENT_CHARS = 24000

SYSTEM_PROMPT = """You are an expert video director.
Your task is to turn document content into an engaging short narrated slideshow script.

Output valid JSON only, with no additional text or markdown formatting.
The JSON must be an object with a "scenes" array. Every scene has:
- "id": position in the video, starting at 1 and increasing by 1
- "visual": what should appear on screen (simple, clean, modern)
- "textOverlay": key short phrases to show on screen
- "narration": the voice-over text (engaging, conversational)
- "duration": estimated duration in seconds (5-10 per scene)"""


class _SceneDraft(BaseModel):
    """Scene exactly as the text-generation service is asked to return it."""

    # strict per field: "1" for an id or "5" for a duration is a malformed reply
    id: int = Field(..., strict=True)
    visual: str = Field(..., strict=True)
    text_overlay: str = Field(..., alias="textOverlay", strict=True)
    narration: str = Field(..., strict=True)
    duration: float = Field(..., gt=0, strict=True)

    class Config:
        """Pydantic config."""
        extra = "ignore"


class _ScriptDraft(BaseModel):
    scenes: List[_SceneDraft] = Field(..., min_length=MIN_SCENES, max_length=MAX_SCENES)


@dataclass
class ScriptParseResult:
    """Outcome of validating a service response: either a script or an error."""

    script: Optional[Script] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.script is not None


_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def extract_json(response: str) -> str:
    """Pull the JSON document out of a reply that may be wrapped in prose or fences."""
    fenced = _FENCE_RE.search(response)
    if fenced:
        return fenced.group(1).strip()

    # a bare array only counts when the reply opens with it
    start = response.find("[") if response.lstrip().startswith("[") else response.find("{")
    if start == -1:
        return response.strip()

    depth = 0
    in_string = False
    escaped = False
    for i, char in enumerate(response[start:], start):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth == 0:
                return response[start:i + 1]

    return response[start:].strip()


def parse_script_response(response: str) -> ScriptParseResult:
    """Validate a raw service reply against the scene schema.

    Never raises: malformed JSON, a wrong shape, a scene count outside
    MIN_SCENES..MAX_SCENES, non-sequential ids and blank narration all come
    back as ``ScriptParseResult(error=...)``.
    """
    try:
        data = json.loads(extract_json(response))
    except json.JSONDecodeError as e:
        return ScriptParseResult(error=f"Invalid JSON in response: {e}")

    if isinstance(data, list):
        data = {"scenes": data}

    try:
        draft = _ScriptDraft.model_validate(data)
        script = Script(
            scenes=[
                Scene(
                    id=scene.id,
                    visual_description=scene.visual,
                    text_overlay=scene.text_overlay,
                    narration=scene.narration,
                    target_duration=scene.duration,
                )
                for scene in draft.scenes
            ]
        )
    except ValidationError as e:
        return ScriptParseResult(error=f"Response does not match the script schema: {e}")

    return ScriptParseResult(script=script)


class ScriptAgent(BaseAgent[str, Script]):
    """Agent that asks the text-generation service for a scene script."""

    temperature = 0.7
    max_tokens = 2048

    @property
    def name(self) -> str:
        return "ScriptAgent"

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def run(self, input_data: str) -> Script:
        """Generate a script for ``input_data``.

        Raises:
            GenerationFailure: If the service errors or its reply does not
                validate.
        """
        self._logger.info(f"Generating script for {len(input_data)} chars of content")

        try:
            response = self._create_message(self._build_prompt(input_data))
        except (APIError, RuntimeError) as e:
            raise GenerationFailure(f"Text generation service failed: {e}") from e

        result = parse_script_response(response)
        if not result.ok:
            self._logger.debug(f"Raw response: {response}")
            raise GenerationFailure(result.error)

        self._logger.info(f"Generated {len(result.script)} scenes")
        return result.script

    def _build_prompt(self, content: str) -> str:
        if len(content) > MAX_CONTENT_CHARS:
            self._logger.warning(
                f"Content of {len(content)} chars cut to {MAX_CONTENT_CHARS} for prompting"
            )
            content = content[:MAX_CONTENT_CHARS]

        return "\n".join([
            f"Create a script with {MIN_SCENES + 1}-{MAX_SCENES - 2} scenes for the content below.",
            "",
            "## Content:",
            content,
            "",
            "Respond with ONLY the JSON object.",
        ])


class ScriptService:
    """Script Service: the text-generation step of the pipeline.

    Without a configured API key every call raises ``GenerationFailure`` so
    the caller's fallback takes over.
    """

    def __init__(self, agent: Optional[ScriptAgent] = None) -> None:
        self._agent = agent

    @classmethod
    def from_config(
        cls,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> "ScriptService":
        """Build a service, or a disabled one when no API key is available."""
        try:
            return cls(ScriptAgent(client=AnthropicClient(api_key=api_key, model=model)))
        except ValueError as e:
            logger.warning(f"Text generation disabled: {e}")
            return cls(None)

    @property
    def available(self) -> bool:
        return self._agent is not None

    def generate(self, content: str) -> Script:
        if self._agent is None:
            raise GenerationFailure("No text-generation service configured")
        return self._agent.run(content)
