"""Tests for the pipeline orchestrator using in-process fakes for every stage."""

import pytest

from nvg.config import Config
from nvg.errors import AssetFailure, SynthesisFailure
from nvg.models import PipelineRun, PipelineState
from nvg.pipeline import VideoPipeline, build_pipeline

from .conftest import (
    FakeAssembler,
    FakeNarrationGenerator,
    FakeSceneRenderer,
    FakeScriptService,
    FakeSlideGenerator,
    make_script,
)

CONTENT = "Cells\n\nCells are the basic unit of life.\n\nThey divide to reproduce."


def run_dirs(temp_root):
    return sorted(temp_root.glob("run_*")) if temp_root.exists() else []


class TestVideoPipeline:
    def test_five_scenes_of_five_seconds(self, make_pipeline, dirs):
        _, output_dir = dirs
        run = PipelineRun()

        final = make_pipeline().run(CONTENT, run=run)

        assert final.duration == pytest.approx(25.0)
        assert final.scene_count == 5
        assert final.path.parent == output_dir
        assert final.path.name.startswith("video_") and final.path.suffix == ".mp4"
        assert final.url == f"/generated-videos/{final.path.name}"
        assert run.history == [
            PipelineState.SCRIPTING,
            PipelineState.ASSET_GENERATION,
            PipelineState.SCENE_RENDERING,
            PipelineState.ASSEMBLING,
            PipelineState.DONE,
        ]
        assert not run.used_fallback_script

    def test_probed_durations_reach_segments(self, make_pipeline):
        assembler = FakeAssembler()
        narration = FakeNarrationGenerator(durations={1: 3.2, 2: 7.9, 3: 4.4})
        pipeline = make_pipeline(
            script_service=FakeScriptService(make_script(3)),
            narration=narration,
            assembler=assembler,
        )

        final = pipeline.run(CONTENT)

        assert [s.duration for s in assembler.received] == [3.2, 7.9, 4.4]
        assert final.duration == pytest.approx(15.5)

    def test_order_preserved_under_concurrency(self, make_pipeline):
        assembler = FakeAssembler()
        pipeline = make_pipeline(
            script_service=FakeScriptService(make_script(8)),
            renderer=FakeSceneRenderer(jitter=0.02),
            assembler=assembler,
            max_workers=4,
        )

        pipeline.run(CONTENT)

        assert [s.scene_id for s in assembler.received] == list(range(1, 9))
        assert [s.path.name for s in assembler.received] == [
            f"segment_{i:02d}.mp4" for i in range(1, 9)
        ]

    def test_synthesis_failure_aborts_run(self, make_pipeline, dirs):
        temp_root, output_dir = dirs
        run = PipelineRun()
        pipeline = make_pipeline(narration=FakeNarrationGenerator(fail_scenes={3}))

        with pytest.raises(SynthesisFailure) as exc_info:
            pipeline.run(CONTENT, run=run)

        assert exc_info.value.scene_id == 3
        assert run.state == PipelineState.FAILED
        assert run.history[-2] == PipelineState.ASSET_GENERATION
        assert "scene 3" in run.error
        assert not output_dir.exists() or not any(output_dir.iterdir())
        assert run_dirs(temp_root) == []

    def test_fallback_script_used(self, make_pipeline):
        assembler = FakeAssembler()
        run = PipelineRun()
        pipeline = make_pipeline(
            script_service=FakeScriptService(error="Text generation service failed: 500"),
            assembler=assembler,
        )

        final = pipeline.run(CONTENT, run=run)

        assert run.used_fallback_script
        assert run.state == PipelineState.DONE
        # intro, two paragraphs, closing
        assert final.scene_count == 4

    def test_workspace_removed_after_success(self, make_pipeline, dirs):
        temp_root, _ = dirs
        make_pipeline().run(CONTENT)
        assert run_dirs(temp_root) == []

    def test_runs_use_separate_workspaces(self, make_pipeline, dirs):
        temp_root, _ = dirs
        pipeline = make_pipeline(keep_intermediates=True)

        first, second = PipelineRun(), PipelineRun()
        video_a = pipeline.run(CONTENT, run=first)
        video_b = pipeline.run(CONTENT, run=second)

        workspaces = run_dirs(temp_root)
        assert [w.name for w in workspaces] == sorted([f"run_{first.run_id}", f"run_{second.run_id}"])
        assert video_a.path != video_b.path
        for workspace in workspaces:
            assert (workspace / "script.yaml").exists()
            assert (workspace / "segment_01.mp4").exists()

    def test_first_failure_cancels_pending_scenes(self, make_pipeline):
        slides = FakeSlideGenerator(delay=0.05)
        pipeline = make_pipeline(
            slides=slides,
            narration=FakeNarrationGenerator(fail_scenes={1}),
            max_workers=1,
        )

        with pytest.raises(SynthesisFailure):
            pipeline.run(CONTENT)

        assert set(slides.rendered) <= {1, 2}

    def test_asset_failure_names_scene(self, make_pipeline):
        class BrokenSlides(FakeSlideGenerator):
            def render(self, scene, output_path):
                if scene.id == 2:
                    raise AssetFailure("Slide rendering failed: font not found", scene.id)
                return super().render(scene, output_path)

        with pytest.raises(AssetFailure, match=r"\[slides, scene 2\]"):
            make_pipeline(slides=BrokenSlides()).run(CONTENT)

    def test_run_script_skips_generation(self, make_pipeline):
        service = FakeScriptService(make_script(5))
        final = make_pipeline(script_service=service).run_script(make_script(2))
        assert service.calls == 0
        assert final.scene_count == 2

    def test_blank_content(self, make_pipeline):
        with pytest.raises(ValueError):
            make_pipeline().run("   ")

    def test_invalid_worker_count(self, make_pipeline):
        with pytest.raises(ValueError):
            make_pipeline(max_workers=0)


class TestBuildPipeline:
    def test_plain_backend(self, tmp_path):
        cfg = Config(workspace=tmp_path, slide_backend="plain", max_workers=2)
        assert isinstance(build_pipeline(cfg), VideoPipeline)

    def test_imagen_backend_needs_project(self, tmp_path):
        cfg = Config(workspace=tmp_path, slide_backend="imagen", google_cloud_project="")
        with pytest.raises(ValueError, match="GOOGLE_CLOUD_PROJECT"):
            build_pipeline(cfg)

    def test_unknown_backend(self, tmp_path):
        with pytest.raises(ValueError, match="NVG_SLIDE_BACKEND"):
            build_pipeline(Config(workspace=tmp_path, slide_backend="dalle"))

    def test_unsupported_narration_language(self, tmp_path):
        cfg = Config(workspace=tmp_path, slide_backend="plain", tts_lang="xx-not-a-lang")
        with pytest.raises(ValueError, match="NVG_TTS_LANG"):
            build_pipeline(cfg)
