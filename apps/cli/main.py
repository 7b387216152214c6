"""Command line entry points for writing, narrating and mixing poems."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from services.mixer.ffmpeg import media_duration_ms
from services.poet.client import ClientError, RecitationClient
from services.poet.recitation import DOWNLOAD_NAME, NO_MUSIC, Recitation
from services.poet.timing import CLEAR, HighlightScheduler, line_cues, poem_lines, write_cues
from shared.config import settings

app = typer.Typer(add_completion=False, help="Recitation commands")


@app.callback()
def main() -> None:
    """Recitation commands."""


@app.command()
def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run("apps.api.main:app", host=host, port=port)


@app.command()
def recite(
    text: str = typer.Argument(..., help="Text that inspires the poem"),
    music: str = typer.Option(NO_MUSIC, "--music", help="Background track key or 'none'"),
    output_dir: Path = typer.Option(Path("."), "--output-dir", help="Where to save the MP3"),
    cues: Optional[Path] = typer.Option(None, "--cues", help="Write line timings (.srt or .vtt)"),
    api_base_url: str = typer.Option(settings.API_BASE_URL, "--api-base-url", help="API base URL"),
) -> None:
    """Write a poem, narrate it, optionally mix in music and save it."""

    if not text.strip():
        typer.echo("Please provide some text to inspire the poem.", err=True)
        raise typer.Exit(code=2)

    recitation = Recitation()
    try:
        with RecitationClient(api_base_url) as client:
            typer.echo("Writing poem...")
            poem = client.poem(text)
            typer.echo("Narrating poem...")
            recitation.reset(poem, client.voice(poem))
            if music != NO_MUSIC:
                typer.echo(f"Mixing with {music}...")
                recitation.select_music(music, client.mix, speak=client.voice)
    except ClientError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    typer.echo(recitation.poem)
    output_dir.mkdir(parents=True, exist_ok=True)
    name, audio = recitation.download()
    dest = output_dir / name
    dest.write_bytes(audio)
    typer.echo(f"Saved {dest}")

    if cues:
        duration = media_duration_ms(dest) / 1000.0
        write_cues(line_cues(recitation.lines, duration), cues)
        typer.echo(f"Saved {cues}")


@app.command()
def mix(
    voice: Path = typer.Argument(..., exists=True, dir_okay=False, help="Narration MP3"),
    music: str = typer.Option(..., "--music", help="Background track key"),
    output: Path = typer.Option(Path(DOWNLOAD_NAME), "--output", help="Destination MP3"),
    api_base_url: str = typer.Option(settings.API_BASE_URL, "--api-base-url", help="API base URL"),
) -> None:
    """Mix a local narration file with a background track through the API."""
    try:
        with RecitationClient(api_base_url) as client:
            audio = client.mix(voice.read_bytes(), music)
    except ClientError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    output.write_bytes(audio)
    typer.echo(f"Saved {output}")


async def _follow(lines: list[str], duration: float) -> None:
    def show(index: int) -> None:
        if index == CLEAR:
            typer.echo("")
        else:
            typer.echo(lines[index])

    scheduler = HighlightScheduler(show)
    scheduler.start(line_cues(lines, duration), duration)
    try:
        await asyncio.sleep(duration + 0.05)
    finally:
        scheduler.cancel()


@app.command()
def follow(
    audio: Path = typer.Argument(..., exists=True, dir_okay=False, help="Narration or mix MP3"),
    poem: Path = typer.Argument(..., exists=True, dir_okay=False, help="Poem text file"),
) -> None:
    """Print each poem line when its approximate highlight would start."""
    lines = poem_lines(poem.read_text(encoding="utf-8"))
    duration = media_duration_ms(audio) / 1000.0
    if not duration:
        typer.echo(f"Could not read the duration of {audio}", err=True)
        raise typer.Exit(code=1)
    asyncio.run(_follow(lines, duration))


if __name__ == "__main__":  # pragma: no cover
    app()
