"""Slide composition: background plus burned-in text overlay."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from moviepy import ColorClip, CompositeVideoClip, ImageClip, TextClip

from .compositor import fit_to_frame


@dataclass
class TextStyle:
    """Configuration for text overlay styling."""

    font: Optional[str] = None  # None -> Pillow's bundled default font
    font_size: int = 56
    color: str = "white"
    stroke_color: Optional[str] = "black"
    stroke_width: int = 2
    margin: Tuple[int, int] = field(default_factory=lambda: (20, 10))


# Preset styles
STYLES = {
    "slide": TextStyle(),
}

DEFAULT_BACKGROUND = (18, 24, 38)


def get_style(name: str) -> TextStyle:
    """Get a text style by name.

    Raises:
        ValueError: If style not found.
    """
    if name not in STYLES:
        raise ValueError(f"Unknown style: {name}. Available: {list(STYLES.keys())}")
    return STYLES[name]


def render_text(
    text: str,
    style: TextStyle,
    max_width: int,
    duration: Optional[float] = None,
) -> TextClip:
    """Create a centre-aligned text clip wrapped to ``max_width`` pixels."""
    params = {
        "text": text,
        "font": style.font,
        "font_size": style.font_size,
        "color": style.color,
        "method": "caption",
        "size": (max_width, None),
        "text_align": "center",
        "margin": style.margin,
    }

    if style.stroke_color and style.stroke_width > 0:
        params["stroke_color"] = style.stroke_color
        params["stroke_width"] = style.stroke_width

    text_clip = TextClip(**params)

    if duration is not None:
        text_clip = text_clip.with_duration(duration)

    return text_clip


def position_overlay(text_clip: TextClip, position: str = "center", margin: int = 60) -> TextClip:
    """Place a text clip at a named spot of the frame."""
    position_map = {
        "center": ("center", "center"),
        "top": ("center", margin),
        "bottom": ("center", "bottom"),
    }

    if position not in position_map:
        raise ValueError(f"Unknown position: {position}. Available: {list(position_map.keys())}")

    return text_clip.with_position(position_map[position])


def compose_slide(
    text: str,
    output_path: Path,
    size: Tuple[int, int],
    background: Optional[Path] = None,
    background_color: Tuple[int, int, int] = DEFAULT_BACKGROUND,
    style_name: str = "slide",
    position: str = "center",
) -> Path:
    """Render one still slide to an image file.

    Args:
        text: Overlay text; may contain newlines. Empty text gives a bare slide.
        output_path: Destination image (PNG recommended).
        size: Frame size (width, height) in pixels.
        background: Optional background image, cropped and scaled to ``size``.
        background_color: RGB fill used when there is no background image.
        style_name: Text style preset.
        position: Where the text block sits.

    Returns:
        ``output_path``.
    """
    style = get_style(style_name)

    if background is not None:
        base = fit_to_frame(ImageClip(str(background)), size)
    else:
        base = ColorClip(size=size, color=background_color)
    layers = [base.with_duration(1)]

    if text.strip():
        text_clip = render_text(text, style, max_width=int(size[0] * 0.85), duration=1)
        layers.append(position_overlay(text_clip, position))

    slide = CompositeVideoClip(layers, size=size)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        slide.save_frame(str(output_path), t=0)
    finally:
        slide.close()

    return output_path
