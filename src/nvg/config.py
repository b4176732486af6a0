"""Configuration management."""

import os
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_path(name: str, default: str) -> Path:
    return Path(os.getenv(name, default))


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_bool(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key"
    )
    google_cloud_project: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_PROJECT", ""),
        description="Google Cloud project ID (Imagen slide backgrounds)"
    )

    # Model settings
    default_model: str = Field(
        default_factory=lambda: os.getenv("NVG_MODEL", "claude-sonnet-4-20250514"),
        description="Claude model used for scene scripts"
    )
    imagen_model: str = Field(
        default_factory=lambda: os.getenv("NVG_IMAGEN_MODEL", "imagen-3.0-generate-001"),
        description="Imagen model used for slide backgrounds"
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: _env_path("NVG_WORKSPACE", "."),
        description="Workspace directory"
    )
    temp_dir: Path = Field(
        default_factory=lambda: _env_path("NVG_TEMP_DIR", "public/temp"),
        description="Root for run-scoped temporary artifacts (relative to workspace)"
    )
    output_dir: Path = Field(
        default_factory=lambda: _env_path("NVG_OUTPUT_DIR", "public/generated-videos"),
        description="Publicly served directory for final videos (relative to workspace)"
    )
    public_url_prefix: str = Field(
        default_factory=lambda: os.getenv("NVG_PUBLIC_URL_PREFIX", "/generated-videos"),
        description="URL prefix under which output_dir is served"
    )

    # Pipeline
    max_workers: int = Field(
        default_factory=lambda: _env_int("NVG_MAX_WORKERS", 3),
        description="Concurrent per-scene jobs",
        ge=1,
    )
    slide_backend: str = Field(
        default_factory=lambda: os.getenv("NVG_SLIDE_BACKEND", "plain"),
        description="Slide background source: 'plain' or 'imagen'"
    )
    keep_intermediates: bool = Field(
        default_factory=lambda: _env_bool("NVG_KEEP_INTERMEDIATES"),
        description="Keep the run workspace after a successful run"
    )
    cache_ttl: float = Field(
        default_factory=lambda: float(os.getenv("NVG_CACHE_TTL", "3600")),
        description="Seconds a content -> video reference stays cached"
    )

    # Speech synthesis
    tts_lang: str = Field(
        default_factory=lambda: os.getenv("NVG_TTS_LANG", "en"),
        description="Narration language"
    )
    tts_tld: str = Field(
        default_factory=lambda: os.getenv("NVG_TTS_TLD", "com"),
        description="Google Translate host top-level domain (accent)"
    )
    tts_max_chars: int = Field(
        default_factory=lambda: _env_int("NVG_TTS_MAX_CHARS", 200),
        description="Maximum characters per synthesis request",
        ge=20,
    )

    # Encoding
    video_width: int = Field(default_factory=lambda: _env_int("NVG_VIDEO_WIDTH", 1280))
    video_height: int = Field(default_factory=lambda: _env_int("NVG_VIDEO_HEIGHT", 720))
    fps: int = Field(default_factory=lambda: _env_int("NVG_FPS", 30))
    ffmpeg_binary: str = Field(
        default_factory=lambda: os.getenv("FFMPEG_BINARY", "ffmpeg"),
        description="ffmpeg executable"
    )
    ffprobe_binary: str = Field(
        default_factory=lambda: os.getenv("FFPROBE_BINARY", "ffprobe"),
        description="ffprobe executable"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def temp_root(self) -> Path:
        """Absolute root for run workspaces."""
        return self.workspace / self.temp_dir

    @property
    def output_root(self) -> Path:
        """Absolute directory for final videos."""
        return self.workspace / self.output_dir

    def validate_imagen_required(self) -> None:
        """Validate that Imagen / Google Cloud settings are present.

        Raises:
            ValueError: If the imagen backend is selected without a project.
        """
        if self.slide_backend not in ("plain", "imagen"):
            raise ValueError(
                f"NVG_SLIDE_BACKEND must be 'plain' or 'imagen'. Got: {self.slide_backend}"
            )
        if self.slide_backend == "imagen" and not self.google_cloud_project:
            raise ValueError(
                "Missing required Imagen configuration: GOOGLE_CLOUD_PROJECT. "
                "Set the corresponding environment variable."
            )


# Global config instance
config = Config()
