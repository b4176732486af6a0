"""Pipeline Orchestrator: content text -> narrated slideshow video."""

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar

from ..agents.fallback import build_fallback_script
from ..agents.script import ScriptService
from ..config import Config, config as default_config
from ..errors import GenerationFailure
from ..models import (
    EncodingProfile,
    FinalVideo,
    PipelineRun,
    PipelineState,
    Scene,
    SceneAsset,
    Script,
    VideoSegment,
)
from ..services.imagen import ImagenClient
from ..services.tts import GTTSClient
from .assembler import VideoAssembler
from .narration import NarrationGenerator
from .renderer import SceneRenderer
from .slides import SlideGenerator
from .workspace import RunWorkspace

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


class VideoPipeline:
    """Runs Scripting -> AssetGeneration -> SceneRendering -> Assembling.

    Each call works in its own run workspace. Per-scene work is spread over a
    bounded thread pool and re-aligned to script order before the next stage
    starts. Any fatal error cancels the remaining scenes, deletes the
    workspace and propagates; a run never returns a partial video.
    """

    def __init__(
        self,
        script_service: ScriptService,
        slide_generator: SlideGenerator,
        narration_generator: NarrationGenerator,
        scene_renderer: SceneRenderer,
        assembler: VideoAssembler,
        temp_root: Path,
        output_dir: Path,
        public_url_prefix: str = "/generated-videos",
        max_workers: int = 3,
        keep_intermediates: bool = False,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._script_service = script_service
        self._slides = slide_generator
        self._narration = narration_generator
        self._renderer = scene_renderer
        self._assembler = assembler
        self._temp_root = temp_root
        self._output_dir = output_dir
        self._public_url_prefix = public_url_prefix.rstrip("/")
        self._max_workers = max_workers
        self._keep_intermediates = keep_intermediates

    def run(self, content: str, run: Optional[PipelineRun] = None) -> FinalVideo:
        """Turn document text into a final video.

        Args:
            content: Raw document or summary text.
            run: Optional state tracker to observe the run; a fresh one is
                created if omitted.

        Raises:
            ValueError: If content is blank.
            PipelineError: Subclass naming the stage (and scene) that failed.
        """
        if not content or not content.strip():
            raise ValueError("Content is required")
        return self._execute(run or PipelineRun(), content=content)

    def run_script(self, script: Script, run: Optional[PipelineRun] = None) -> FinalVideo:
        """Render an existing script, skipping the text-generation step."""
        return self._execute(run or PipelineRun(), script=script)

    def _execute(
        self,
        run: PipelineRun,
        content: Optional[str] = None,
        script: Optional[Script] = None,
    ) -> FinalVideo:
        workspace = RunWorkspace.create(self._temp_root, run.run_id)
        logger.info(f"Run {run.run_id}: started")

        try:
            if script is None:
                script = self._write_script(content, run)
            script.to_yaml(workspace.script_path)
            logger.info(f"Run {run.run_id}: script has {len(script)} scenes")

            run.advance(PipelineState.ASSET_GENERATION)
            assets = self._map_ordered(
                script.scenes, lambda scene: self._build_asset(scene, workspace)
            )

            run.advance(PipelineState.SCENE_RENDERING)
            segments = self._map_ordered(
                assets,
                lambda asset: self._renderer.render(
                    asset, workspace.segment_path(asset.scene_id)
                ),
            )

            run.advance(PipelineState.ASSEMBLING)
            final = self._assemble(segments, workspace)

            run.advance(PipelineState.DONE)
        except Exception as e:
            run.fail(str(e))
            logger.error(f"Run {run.run_id}: failed - {e}")
            workspace.cleanup()
            raise

        if not self._keep_intermediates:
            workspace.cleanup()

        logger.info(f"Run {run.run_id}: done -> {final.url}")
        return final

    def _write_script(self, content: str, run: PipelineRun) -> Script:
        try:
            return self._script_service.generate(content)
        except GenerationFailure as e:
            logger.warning(f"{e}; using the locally built script")
            run.used_fallback_script = True
            return build_fallback_script(content)

    def _build_asset(self, scene: Scene, workspace: RunWorkspace) -> SceneAsset:
        image_path = self._slides.render(scene, workspace.image_path(scene.id))
        audio_path = self._narration.synthesize(
            scene.narration, workspace.audio_path(scene.id), scene_id=scene.id
        )
        duration = self._narration.probe_duration(audio_path, scene_id=scene.id)
        logger.info(f"Scene {scene.id}: assets ready ({duration:.2f}s narration)")
        return SceneAsset(
            scene_id=scene.id,
            image_path=image_path,
            audio_path=audio_path,
            duration=duration,
        )

    def _assemble(self, segments: List[VideoSegment], workspace: RunWorkspace) -> FinalVideo:
        name = f"video_{uuid.uuid4().hex}.mp4"
        return self._assembler.concatenate(
            segments,
            self._output_dir / name,
            url=f"{self._public_url_prefix}/{name}",
            list_path=workspace.concat_list_path,
        )

    def _map_ordered(
        self,
        items: Sequence[ItemT],
        func: Callable[[ItemT], ResultT],
    ) -> List[ResultT]:
        """Apply ``func`` to every item concurrently; results keep item order.

        The first exception cancels work that has not started, waits for
        in-flight calls to return, and is re-raised.
        """
        results: List[Optional[ResultT]] = [None] * len(items)
        executor = ThreadPoolExecutor(max_workers=self._max_workers)
        try:
            futures = {executor.submit(func, item): index for index, item in enumerate(items)}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return results


def build_pipeline(cfg: Optional[Config] = None) -> VideoPipeline:
    """Wire a pipeline with real service clients from configuration."""
    cfg = cfg or default_config
    cfg.validate_imagen_required()

    profile = EncodingProfile(
        width=cfg.video_width,
        height=cfg.video_height,
        fps=cfg.fps,
    )
    imagen = ImagenClient(project_id=cfg.google_cloud_project) if cfg.slide_backend == "imagen" else None

    return VideoPipeline(
        script_service=ScriptService.from_config(
            api_key=cfg.anthropic_api_key, model=cfg.default_model
        ),
        slide_generator=SlideGenerator(profile, imagen=imagen),
        narration_generator=NarrationGenerator(
            GTTSClient(lang=cfg.tts_lang, tld=cfg.tts_tld, max_chars=cfg.tts_max_chars),
            sample_rate=profile.audio_sample_rate,
            ffprobe_binary=cfg.ffprobe_binary,
        ),
        scene_renderer=SceneRenderer(profile, ffprobe_binary=cfg.ffprobe_binary),
        assembler=VideoAssembler(
            profile,
            ffmpeg_binary=cfg.ffmpeg_binary,
            ffprobe_binary=cfg.ffprobe_binary,
        ),
        temp_root=cfg.temp_root,
        output_dir=cfg.output_root,
        public_url_prefix=cfg.public_url_prefix,
        max_workers=cfg.max_workers,
        keep_intermediates=cfg.keep_intermediates,
    )
