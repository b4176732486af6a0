"""Shared fakes and fixtures.

The fakes stand in for the slow or networked parts of the pipeline (speech
service, slide rendering, encoders) so orchestration can be tested without
ffmpeg or network access.
"""

import random
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

from nvg.errors import GenerationFailure, SynthesisFailure
from nvg.models import FinalVideo, Scene, Script, VideoSegment
from nvg.pipeline import VideoPipeline
from nvg.services.tts import SpeechClientError


def make_script(count: int, duration: float = 5.0) -> Script:
    return Script(scenes=[
        Scene(
            id=i,
            visual_description=f"Visual {i}",
            text_overlay=f"Point {i}",
            narration=f"This is the narration for scene {i}.",
            target_duration=duration,
        )
        for i in range(1, count + 1)
    ])


class FakeScriptService:
    def __init__(self, script: Optional[Script] = None, error: Optional[str] = None):
        self.script = script
        self.error = error
        self.calls = 0

    def generate(self, content: str) -> Script:
        self.calls += 1
        if self.error:
            raise GenerationFailure(self.error)
        return self.script


class FakeSlideGenerator:
    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.rendered: List[int] = []
        self._lock = threading.Lock()

    def render(self, scene: Scene, output_path: Path) -> Path:
        with self._lock:
            self.rendered.append(scene.id)
        if self.delay:
            time.sleep(self.delay)
        output_path.write_bytes(b"png")
        return output_path


class FakeNarrationGenerator:
    def __init__(
        self,
        durations: Optional[Dict[int, float]] = None,
        default: float = 5.0,
        fail_scenes: Set[int] = frozenset(),
    ):
        self.durations = durations or {}
        self.default = default
        self.fail_scenes = set(fail_scenes)

    def synthesize(self, text: str, output_path: Path, scene_id: Optional[int] = None) -> Path:
        if scene_id in self.fail_scenes:
            raise SynthesisFailure("Speech service unavailable", scene_id)
        output_path.write_bytes(b"mp3")
        return output_path

    def probe_duration(self, audio_path: Path, scene_id: Optional[int] = None) -> float:
        return self.durations.get(scene_id, self.default)


class FakeSceneRenderer:
    def __init__(self, jitter: float = 0.0):
        self.jitter = jitter

    def render(self, asset, output_path: Path) -> VideoSegment:
        if self.jitter:
            time.sleep(random.uniform(0, self.jitter))
        output_path.write_bytes(b"mp4")
        return VideoSegment(scene_id=asset.scene_id, path=output_path, duration=asset.duration)


class FakeAssembler:
    def __init__(self):
        self.received: List[VideoSegment] = []

    def concatenate(self, segments, output_path: Path, url: str = "", list_path=None) -> FinalVideo:
        self.received = list(segments)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"final")
        return FinalVideo(
            path=output_path,
            url=url or str(output_path),
            duration=sum(segment.duration for segment in segments),
            scene_count=len(segments),
        )


class FakeSpeechClient:
    """Writes a small file per request; fails the first ``failures`` calls."""

    max_chars = 200

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.texts: List[str] = []

    def synthesize(self, text: str, output_path: Path) -> Path:
        self.texts.append(text)
        if self.failures > 0:
            self.failures -= 1
            raise SpeechClientError("503 Service Unavailable")
        output_path.write_bytes(text.encode("utf-8"))
        return output_path


@pytest.fixture
def dirs(tmp_path):
    temp_root = tmp_path / "temp"
    output_dir = tmp_path / "generated-videos"
    return temp_root, output_dir


@pytest.fixture
def make_pipeline(dirs):
    temp_root, output_dir = dirs

    def _make(
        script_service=None,
        slides=None,
        narration=None,
        renderer=None,
        assembler=None,
        max_workers: int = 3,
        keep_intermediates: bool = False,
    ) -> VideoPipeline:
        return VideoPipeline(
            script_service=script_service or FakeScriptService(make_script(5)),
            slide_generator=slides or FakeSlideGenerator(),
            narration_generator=narration or FakeNarrationGenerator(),
            scene_renderer=renderer or FakeSceneRenderer(),
            assembler=assembler or FakeAssembler(),
            temp_root=temp_root,
            output_dir=output_dir,
            max_workers=max_workers,
            keep_intermediates=keep_intermediates,
        )

    return _make
