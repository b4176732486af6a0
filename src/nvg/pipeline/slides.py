"""Slide Asset Generator: one still image per scene."""

import logging
from pathlib import Path
from typing import Optional

from ..editor.overlays import compose_slide
from ..errors import AssetFailure
from ..models import EncodingProfile, Scene
from ..services.imagen import ImagenClient

logger = logging.getLogger(__name__)


class SlideGenerator:
    """Renders a scene's text overlay onto a background at the run's frame size.

    With an ``ImagenClient`` the background is generated from the scene's
    visual description; otherwise it is a plain fill. Scenes are independent
    of each other, so ``render`` may be called concurrently.
    """

    def __init__(
        self,
        profile: EncodingProfile,
        imagen: Optional[ImagenClient] = None,
        style_name: str = "slide",
    ) -> None:
        self._profile = profile
        self._imagen = imagen
        self._style_name = style_name

    def render(self, scene: Scene, output_path: Path) -> Path:
        """Write the slide for ``scene`` to ``output_path``.

        Raises:
            AssetFailure: If the background or the slide cannot be produced.
        """
        background = self._background(scene, output_path) if self._imagen else None

        try:
            compose_slide(
                scene.text_overlay,
                output_path,
                self._profile.size,
                background=background,
                style_name=self._style_name,
            )
        except (OSError, ValueError, RuntimeError) as e:
            raise AssetFailure(f"Slide rendering failed: {e}", scene.id) from e

        logger.debug(f"Scene {scene.id}: slide -> {output_path.name}")
        return output_path

    def _background(self, scene: Scene, output_path: Path) -> Path:
        prompt = scene.visual_description or scene.text_overlay
        if not prompt.strip():
            raise AssetFailure("Scene has no visual description to render", scene.id)

        result = self._imagen.generate_image(
            prompt=prompt,
            output_path=output_path.with_name(f"{output_path.stem}_background.png"),
            aspect_ratio=ImagenClient.closest_aspect_ratio(*self._profile.size),
            negative_prompt="text, letters, watermark",
        )
        if result.error_message or result.local_path is None:
            raise AssetFailure(f"Background generation failed: {result.error_message}", scene.id)
        return result.local_path
