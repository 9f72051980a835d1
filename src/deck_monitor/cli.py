"""Command-line interface for deck-monitor."""

import json
import time
from pathlib import Path
from typing import NoReturn, Optional

import typer
from typing_extensions import Annotated

from deck_monitor.config import build_session, load_config
from deck_monitor.detection.builder import SnapshotBuilder
from deck_monitor.detection.classifier import ChangeClassifier
from deck_monitor.detection.diff import DiffEngine
from deck_monitor.errors import MonitorError
from deck_monitor.models.enums import SlideMatching
from deck_monitor.models.results import ErrorResult
from deck_monitor.observability.export import export_session_json
from deck_monitor.observability.logging import setup_logging
from deck_monitor.providers.base import SnapshotProvider
from deck_monitor.providers.json_document import (
    JsonFileProvider,
    validate_document,
)
from deck_monitor.providers.pptx_file import PptxFileProvider
from deck_monitor.reporting import format_changes_markdown


app = typer.Typer(help="Slide deck change monitor")


def get_provider(path: Path) -> SnapshotProvider:
    suffix = path.suffix.lower()
    if suffix == ".pptx":
        return PptxFileProvider(path)
    if suffix == ".json":
        return JsonFileProvider(path)
    typer.echo(f"Error: Unsupported deck format: {path}", err=True)
    raise typer.Exit(code=1)


def _fail(error: MonitorError) -> NoReturn:
    typer.echo(f"Error: {error.detail}", err=True)
    raise typer.Exit(code=1)


@app.command()
def snapshot(
    path: Annotated[Path, typer.Argument(help="Path to a .pptx or .json deck")],
):
    """Prints a snapshot of a deck as JSON."""
    provider = get_provider(path)
    try:
        result = SnapshotBuilder().build(provider)
    except MonitorError as e:
        _fail(e)
    typer.echo(json.dumps(result.to_json_dict(), indent=2, ensure_ascii=False))


@app.command()
def diff(
    old: Annotated[Path, typer.Argument(help="The earlier deck")],
    new: Annotated[Path, typer.Argument(help="The later deck")],
    identity: Annotated[
        bool, typer.Option(help="Match slides by id and report reorders")
    ] = False,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print changes as JSON")
    ] = False,
):
    """Prints the changes between two decks."""
    builder = SnapshotBuilder()
    try:
        previous = builder.build(get_provider(old))
        current = builder.build(get_provider(new))
    except MonitorError as e:
        _fail(e)

    matching = SlideMatching.IDENTITY if identity else SlideMatching.POSITIONAL
    started = time.perf_counter()
    differences = DiffEngine(matching).diff(previous, current)
    processing_time = (time.perf_counter() - started) * 1000.0
    changes = ChangeClassifier().classify_all(
        differences, processing_time=processing_time
    )

    if as_json:
        payload = [c.to_json_dict() for c in changes]
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        typer.echo(format_changes_markdown(changes))


@app.command()
def watch(
    path: Annotated[Path, typer.Argument(help="Path to a .pptx or .json deck")],
    interval: Annotated[
        Optional[float], typer.Option(help="Seconds between polls")
    ] = None,
    iterations: Annotated[
        int, typer.Option(help="Number of polls; 0 polls until interrupted")
    ] = 0,
    config: Annotated[
        Optional[Path], typer.Option(help="Path to a YAML config file")
    ] = None,
    export: Annotated[
        Optional[Path],
        typer.Option(help="Write the session export to this file on exit"),
    ] = None,
):
    """Polls a deck and prints changes as they are detected."""
    try:
        settings = load_config(config)
    except MonitorError as e:
        _fail(e)
    setup_logging(settings.log_level)

    provider = get_provider(path)
    try:
        session = build_session(provider, settings)
    except MonitorError as e:
        _fail(e)
    result = session.initialize()
    if isinstance(result, ErrorResult):
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(code=1)
    typer.echo(
        f"Monitoring {result.presentation_id} "
        f"({result.initial_snapshot.slide_count} slides)"
    )

    delay = interval if interval is not None else settings.poll_interval
    polls = 0
    try:
        while iterations <= 0 or polls < iterations:
            time.sleep(delay)
            polls += 1
            detected = session.detect_changes()
            if isinstance(detected, ErrorResult):
                typer.echo(f"Error: {detected.error}", err=True)
                continue
            if detected.changes:
                typer.echo(format_changes_markdown(detected.changes))
    except KeyboardInterrupt:
        typer.echo("Stopped.")
    finally:
        session.stop()
        if export is not None:
            export.write_text(export_session_json(session), encoding="utf-8")
            typer.echo(f"Session exported to {export}")
        session.dispose()


@app.command()
def validate(
    path: Annotated[Path, typer.Argument(help="Path to a JSON document export")],
):
    """Validates a JSON document export against the document schema."""
    if not path.exists():
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(code=1)

    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        typer.echo(f"Error parsing JSON: {str(e)}", err=True)
        raise typer.Exit(code=1)

    try:
        validate_document(document)
    except MonitorError as e:
        typer.echo(f"Validation Error: {e.detail}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Document {path} is valid.")


if __name__ == "__main__":
    app()
