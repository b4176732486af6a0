"""Tests for final video assembly (encoders and ffprobe mocked)."""

from fractions import Fraction
from unittest.mock import patch

import pytest

from nvg.editor.compositor import write_concat_list
from nvg.editor.ffmpeg import FFmpegError, StreamSignature
from nvg.errors import AssemblyFailure
from nvg.models import EncodingProfile, VideoSegment
from nvg.pipeline.assembler import VideoAssembler


def signature(fps: int = 30) -> StreamSignature:
    return StreamSignature("h264", 1280, 720, "yuv420p", Fraction(fps), "aac", 44100, 2)


@pytest.fixture
def segments(tmp_path):
    result = []
    for i in range(1, 4):
        path = tmp_path / f"segment_{i:02d}.mp4"
        path.write_bytes(b"mp4")
        result.append(VideoSegment(scene_id=i, path=path, duration=5.0))
    return result


@pytest.fixture
def assembler():
    return VideoAssembler(EncodingProfile())


class TestVideoAssembler:
    def test_empty_input(self, assembler, tmp_path):
        with pytest.raises(AssemblyFailure):
            assembler.concatenate([], tmp_path / "out.mp4")

    @patch("nvg.pipeline.assembler.probe_duration", return_value=15.0)
    @patch("nvg.pipeline.assembler.concat_reencode")
    @patch("nvg.pipeline.assembler.concat_copy")
    @patch("nvg.pipeline.assembler.probe_signature", return_value=signature())
    def test_identical_segments_stream_copied(
        self, mock_signature, mock_copy, mock_reencode, mock_duration, assembler, segments, tmp_path
    ):
        output = tmp_path / "video_abc.mp4"
        list_path = tmp_path / "concat.txt"

        final = assembler.concatenate(segments, output, url="/generated-videos/video_abc.mp4", list_path=list_path)

        mock_copy.assert_called_once()
        mock_reencode.assert_not_called()
        paths, out, listed = mock_copy.call_args[0][:3]
        assert paths == [s.path for s in segments]
        assert (out, listed) == (output, list_path)
        assert final.url == "/generated-videos/video_abc.mp4"
        assert final.duration == 15.0
        assert final.scene_count == 3

    @patch("nvg.pipeline.assembler.probe_duration", return_value=15.0)
    @patch("nvg.pipeline.assembler.concat_reencode")
    @patch("nvg.pipeline.assembler.concat_copy")
    @patch("nvg.pipeline.assembler.probe_signature", side_effect=[signature(), signature(25), signature()])
    def test_mixed_segments_reencoded(
        self, mock_signature, mock_copy, mock_reencode, mock_duration, assembler, segments, tmp_path
    ):
        assembler.concatenate(segments, tmp_path / "out.mp4")

        mock_copy.assert_not_called()
        paths = mock_reencode.call_args[0][0]
        assert paths == [s.path for s in segments]

    @patch("nvg.pipeline.assembler.probe_signature", return_value=signature())
    def test_failure_removes_partial_output(self, mock_signature, assembler, segments, tmp_path):
        output = tmp_path / "out.mp4"

        def partial_write(paths, output_path, list_path, ffmpeg_binary=None):
            output_path.write_bytes(b"partial")
            raise FFmpegError("ffmpeg exited with code 1")

        with patch("nvg.pipeline.assembler.concat_copy", side_effect=partial_write):
            with pytest.raises(AssemblyFailure):
                assembler.concatenate(segments, output)

        assert not output.exists()
        assert not output.with_suffix(".concat.txt").exists()

    @patch("nvg.pipeline.assembler.probe_duration", return_value=15.0)
    @patch("nvg.pipeline.assembler.concat_copy")
    @patch("nvg.pipeline.assembler.probe_signature", return_value=signature())
    def test_url_defaults_to_path(self, mock_signature, mock_copy, mock_duration, assembler, segments, tmp_path):
        output = tmp_path / "out.mp4"
        assert assembler.concatenate(segments, output).url == str(output)


class TestConcatList:
    def test_one_line_per_segment_in_order(self, segments, tmp_path):
        list_path = write_concat_list([s.path for s in reversed(segments)], tmp_path / "list.txt")
        lines = list_path.read_text().splitlines()
        assert len(lines) == 3
        assert lines[0].endswith("segment_03.mp4'")
        assert lines[2].endswith("segment_01.mp4'")

    def test_quotes_escaped(self, tmp_path):
        path = tmp_path / "it's.mp4"
        list_path = write_concat_list([path], tmp_path / "list.txt")
        assert "it'\\''s.mp4" in list_path.read_text()
