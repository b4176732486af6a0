"""Run-scoped temporary storage."""

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class RunWorkspace:
    """Directory holding every intermediate artifact of one pipeline run.

    The run id is part of the directory name, so concurrent runs never share
    files. Nothing here outlives the run except by explicit request.
    """

    def __init__(self, root: Path, run_id: str) -> None:
        self._run_id = run_id
        self._path = root / f"run_{run_id}"

    @classmethod
    def create(cls, root: Path, run_id: str) -> "RunWorkspace":
        """Create the directory; fails if a run with this id already has one."""
        workspace = cls(root, run_id)
        workspace.path.mkdir(parents=True, exist_ok=False)
        logger.debug(f"Created run workspace {workspace.path}")
        return workspace

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def path(self) -> Path:
        return self._path

    @property
    def script_path(self) -> Path:
        return self._path / "script.yaml"

    @property
    def concat_list_path(self) -> Path:
        return self._path / "concat.txt"

    def image_path(self, scene_id: int) -> Path:
        return self._path / f"scene_{scene_id:02d}.png"

    def audio_path(self, scene_id: int) -> Path:
        return self._path / f"scene_{scene_id:02d}.mp3"

    def segment_path(self, scene_id: int) -> Path:
        return self._path / f"segment_{scene_id:02d}.mp4"

    def cleanup(self) -> None:
        """Delete the workspace and everything in it."""
        if not self._path.exists():
            return
        try:
            shutil.rmtree(self._path)
            logger.debug(f"Removed run workspace {self._path}")
        except OSError as e:
            logger.warning(f"Could not remove run workspace {self._path}: {e}")
