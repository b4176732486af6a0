"""CLI entry point for the narrated video generator."""

import logging
import typer
import yaml
from pathlib import Path
from typing import Optional

from . import __version__
from .config import config
from .errors import PipelineError
from .models import PipelineRun, Script

app = typer.Typer(
    name="nvg",
    help="Turn document text into a narrated slideshow video",
    no_args_is_help=True
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"nvg version {__version__}")
        raise typer.Exit()


def read_content(path: Path) -> str:
    """Read a content file, exiting on empty input."""
    content = path.read_text(encoding="utf-8")
    if not content.strip():
        typer.echo(f"❌ {path} is empty")
        raise typer.Exit(1)
    return content


def load_script(path: Path) -> Script:
    """Load a saved script, exiting on unreadable or invalid files."""
    try:
        return Script.from_yaml(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        typer.echo(f"❌ Error loading script: {e}")
        raise typer.Exit(1)


def print_script(script: Script) -> None:
    typer.echo(f"   Scenes: {len(script)}")
    typer.echo(f"   Estimated duration: {script.estimated_duration:.1f}s")
    typer.echo("\n📽️  Scenes:")
    for scene in script.scenes:
        overlay = scene.text_overlay.replace("\n", " / ")
        typer.echo(f"   • {scene.id}: {overlay} (~{scene.target_duration:.0f}s)")
        narration = scene.narration[:70] + "..." if len(scene.narration) > 70 else scene.narration
        typer.echo(f"     → {narration}")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Narrated Video Generator - documents in, slideshow videos out."""
    pass


@app.command()
def status(
    script: Path = typer.Option(
        Path("script.yaml"),
        "--script",
        "-s",
        help="Path to a saved script",
        exists=False,
        file_okay=True,
        dir_okay=False
    )
) -> None:
    """Show a saved script."""
    if not script.exists():
        typer.echo(f"❌ No script found at {script}")
        typer.echo("   Run 'nvg script CONTENT_FILE' to create one")
        raise typer.Exit(1)

    loaded = load_script(script)

    typer.echo(f"📁 Script: {script}")
    print_script(loaded)


@app.command("script")
def write_script(
    content_file: Path = typer.Argument(
        ...,
        help="Text file with the document content",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    output: Path = typer.Option(
        Path("script.yaml"),
        "--output",
        "-o",
        help="Where to save the script"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Generate a scene script (falls back to a local script if generation fails)."""
    from .agents import ScriptService, build_fallback_script
    from .errors import GenerationFailure

    setup_logging(verbose)
    content = read_content(content_file)
    typer.echo(f"🎬 Writing script for {content_file} ({len(content)} chars)")

    service = ScriptService.from_config(api_key=config.anthropic_api_key, model=config.default_model)
    try:
        script = service.generate(content)
    except GenerationFailure as e:
        typer.echo(f"⚠️  {e}")
        typer.echo("   Using the locally built script instead")
        script = build_fallback_script(content)

    output.parent.mkdir(parents=True, exist_ok=True)
    script.to_yaml(output)
    typer.echo(f"\n✅ Script saved: {output}")
    print_script(script)


@app.command()
def render(
    content_file: Optional[Path] = typer.Argument(
        None,
        help="Text file with the document content",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    script: Optional[Path] = typer.Option(
        None,
        "--script",
        "-s",
        help="Render a saved script instead of generating one",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Concurrent per-scene jobs",
        min=1,
        max=16
    ),
    keep: bool = typer.Option(
        False,
        "--keep",
        "-k",
        help="Keep intermediate slides, audio and segments"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Render a narrated slideshow video."""
    from .pipeline import build_pipeline

    setup_logging(verbose)

    if (content_file is None) == (script is None):
        typer.echo("❌ Give either CONTENT_FILE or --script")
        raise typer.Exit(1)

    loaded = load_script(script) if script is not None else None

    cfg = config.model_copy(update={
        "max_workers": workers or config.max_workers,
        "keep_intermediates": keep or config.keep_intermediates,
    })

    try:
        pipeline = build_pipeline(cfg)
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    run = PipelineRun()
    typer.echo(f"🎬 Run {run.run_id}")
    try:
        if loaded is not None:
            final = pipeline.run_script(loaded, run=run)
        else:
            final = pipeline.run(read_content(content_file), run=run)
    except PipelineError as e:
        typer.echo(f"❌ Run failed in {run.history[-2].value}: {e}")
        raise typer.Exit(1)

    if run.used_fallback_script:
        typer.echo("⚠️  Script generation failed; the locally built script was used")
    typer.echo(f"✅ Video: {final.url}")
    typer.echo(f"   File: {final.path}")
    typer.echo(f"   Duration: {final.duration:.1f}s over {final.scene_count} scenes")


@app.command()
def narrate(
    text: str = typer.Argument(..., help="Text to speak"),
    output: Path = typer.Option(
        Path("narration.mp3"),
        "--output",
        "-o",
        help="Output audio file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Synthesize narration and report its probed duration."""
    from .pipeline import NarrationGenerator
    from .services import GTTSClient

    setup_logging(verbose)
    try:
        client = GTTSClient()
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)
    generator = NarrationGenerator(client, ffprobe_binary=config.ffprobe_binary)

    try:
        path = generator.synthesize(text, output)
        duration = generator.probe_duration(path)
    except PipelineError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    typer.echo(f"✅ Narration saved: {path} ({duration:.2f}s)")


if __name__ == "__main__":
    app()
