"""Unit tests for scene, asset and run models."""

import pytest
import yaml
from pydantic import ValidationError

from nvg.models import EncodingProfile, PipelineRun, PipelineState, Scene, Script

from .conftest import make_script


class TestScene:
    def test_narration_is_stripped(self):
        scene = Scene(id=1, narration="  Hello there.  ")
        assert scene.narration == "Hello there."

    def test_blank_narration_rejected(self):
        with pytest.raises(ValidationError):
            Scene(id=1, narration="   ")

    def test_id_starts_at_one(self):
        with pytest.raises(ValidationError):
            Scene(id=0, narration="Hi.")

    def test_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            Scene(id=1, narration="Hi.", target_duration=0)

    def test_frozen(self):
        scene = Scene(id=1, narration="Hi.")
        with pytest.raises(ValidationError):
            scene.narration = "Changed."


class TestScript:
    def test_sequential_ids(self):
        script = make_script(3)
        assert [scene.id for scene in script.scenes] == [1, 2, 3]
        assert len(script) == 3

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            Script(scenes=[])

    def test_gap_in_ids_rejected(self):
        with pytest.raises(ValidationError):
            Script(scenes=[Scene(id=1, narration="A."), Scene(id=3, narration="B.")])

    def test_out_of_order_rejected(self):
        with pytest.raises(ValidationError):
            Script(scenes=[Scene(id=2, narration="A."), Scene(id=1, narration="B.")])

    def test_estimated_duration(self):
        assert make_script(4, duration=6).estimated_duration == 24

    def test_yaml_save_and_load(self, tmp_path):
        script = make_script(2)
        path = tmp_path / "script.yaml"
        script.to_yaml(path)
        assert Script.from_yaml(path) == script

    def test_scenes_cannot_be_changed_after_creation(self):
        script = make_script(2)
        assert isinstance(script.scenes, tuple)
        with pytest.raises(AttributeError):
            script.scenes.append(Scene(id=5, narration="Sneaked in."))
        assert len(script) == 2

    def test_yaml_holds_plain_lists(self, tmp_path):
        path = tmp_path / "script.yaml"
        make_script(2).to_yaml(path)
        assert "!!python" not in path.read_text()
        assert isinstance(yaml.safe_load(path.read_text())["scenes"], list)

    def test_yaml_without_mapping_rejected(self, tmp_path):
        path = tmp_path / "script.yaml"
        path.write_text("")
        with pytest.raises(ValueError):
            Script.from_yaml(path)


class TestEncodingProfile:
    def test_defaults(self):
        profile = EncodingProfile()
        assert profile.size == (1280, 720)
        assert profile.fps == 30
        assert profile.video_codec == "libx264"

    def test_odd_dimensions_rejected(self):
        with pytest.raises(ValidationError):
            EncodingProfile(width=1279)


class TestPipelineRun:
    def test_forward_transitions(self):
        run = PipelineRun()
        for state in (
            PipelineState.ASSET_GENERATION,
            PipelineState.SCENE_RENDERING,
            PipelineState.ASSEMBLING,
            PipelineState.DONE,
        ):
            run.advance(state)
        assert run.finished
        assert run.history[0] == PipelineState.SCRIPTING
        assert run.history[-1] == PipelineState.DONE

    def test_skipping_a_stage_rejected(self):
        run = PipelineRun()
        with pytest.raises(ValueError):
            run.advance(PipelineState.SCENE_RENDERING)
        assert run.state == PipelineState.SCRIPTING

    def test_fail_from_any_stage(self):
        run = PipelineRun()
        run.advance(PipelineState.ASSET_GENERATION)
        run.fail("boom")
        assert run.state == PipelineState.FAILED
        assert run.error == "boom"
        assert run.history[-2] == PipelineState.ASSET_GENERATION

    def test_no_transition_out_of_terminal_states(self):
        run = PipelineRun()
        run.fail("boom")
        with pytest.raises(ValueError):
            run.fail("again")
        with pytest.raises(ValueError):
            run.advance(PipelineState.ASSET_GENERATION)

    def test_run_ids_unique(self):
        assert PipelineRun().run_id != PipelineRun().run_id
