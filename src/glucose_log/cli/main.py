"""
Command-line interface for Glucose Log.

Provides commands for logging, listing, summarising, charting, backing up
and discussing blood-glucose measurements.
"""

import asyncio
from pathlib import Path

import typer

from glucose_log.domain.entry import UNIT, GlucoseLevel, Language, RangeWindow
from glucose_log.domain.messages import message
from glucose_log.infrastructure.assistant.client import AssistantClient
from glucose_log.services.app_state import AppState
from glucose_log.services.assistant import AssistantBridge, Conversation
from glucose_log.services.export import ExportService
from glucose_log.services.views import (
    daily_averages,
    filter_by_range,
    list_entries,
    sparkline,
    summary_statistics,
)
from glucose_log.utils.exceptions import GlucoseLogError
from glucose_log.utils.logging_config import get_logger, setup_logging
from glucose_log.utils.parameters import ParameterLoader
from glucose_log.utils.timezone_utils import make_timezone_aware, now, parse_timestamp

app = typer.Typer(help="Glucose Log - Personal blood-glucose tracking")

logger = get_logger(__name__)

_LEVEL_MARKERS = {
    GlucoseLevel.HIGH: "▲",
    GlucoseLevel.LOW: "▼",
    GlucoseLevel.NORMAL: " ",
}


def init_state(config_path: str = "config/config.yaml") -> tuple[ParameterLoader, AppState]:
    """
    Initialize configuration, logging and application state.

    Args:
        config_path: Path to configuration file.

    Returns:
        Parameter loader and loaded application state.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "glucose_log")
    state = AppState.from_config(param_loader.config)
    return param_loader, state


def build_bridge(param_loader: ParameterLoader) -> AssistantBridge:
    """Create the assistant bridge from configuration."""
    assistant_config = param_loader.get_assistant_config()
    return AssistantBridge(AssistantClient(assistant_config), assistant_config.context_size)


@app.command()
def add(
    value: str = typer.Argument(..., help=f"Glucose value in {UNIT}"),
    at: str | None = typer.Option(None, help="Measurement time (ISO-8601, default now)"),
    note: str | None = typer.Option(None, help="Optional note"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """
    Add a measurement.

    Non-positive or non-numeric values are ignored.
    """
    try:
        _, state = init_state(config_path)

        if at:
            try:
                timestamp = parse_timestamp(at, state.timezone, assume_local=True)
            except (ValueError, OverflowError) as e:
                raise GlucoseLogError(f"Invalid timestamp: {at}") from e
        else:
            timestamp = now(state.timezone)

        entry = state.store.add(value, timestamp, note)
        if entry is None:
            typer.echo(f"Ignored invalid value: {value}")
            return

        typer.echo(f"Added {entry.value:g} {UNIT} at {entry.timestamp:%Y-%m-%d %H:%M} ({entry.id})")
        if state.store.last_save and not state.store.last_save.ok:
            typer.echo(f"Warning: not saved: {state.store.last_save.error}", err=True)

    except GlucoseLogError as e:
        logger.error(f"Add failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def delete(
    entry_id: str = typer.Argument(..., help="Id of the entry to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Delete a measurement by id."""
    try:
        _, state = init_state(config_path)

        if not yes and not typer.confirm(f"Delete entry {entry_id}?"):
            raise typer.Abort()

        if state.store.delete(entry_id):
            typer.echo(f"Deleted {entry_id}")
        else:
            typer.echo(f"No entry with id {entry_id}")

    except GlucoseLogError as e:
        logger.error(f"Delete failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command(name="list")
def list_command(
    limit: int | None = typer.Option(None, help="Show at most this many entries"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """List measurements, newest first, flagging high and low values."""
    try:
        _, state = init_state(config_path)

        rows = list_entries(state.entries)
        if not rows:
            typer.echo(message(state.language, "no_data"))
            return

        for row in rows[:limit] if limit else rows:
            local = make_timezone_aware(row.entry.timestamp, state.timezone)
            line = f"{_LEVEL_MARKERS[row.level]} {row.entry.value:5.1f} {UNIT}  {local:%a %d %b %H:%M}  {row.entry.id}"
            if row.entry.note:
                line += f"  {row.entry.note}"
            typer.echo(line)

    except GlucoseLogError as e:
        logger.error(f"List failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def stats(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Show average, highest and lowest value."""
    try:
        _, state = init_state(config_path)

        summary = summary_statistics(state.entries)
        if summary is None:
            typer.echo(message(state.language, "no_data"))
            return

        typer.echo(f"{message(state.language, 'average')}: {summary.average:.1f} {UNIT}")
        typer.echo(f"{message(state.language, 'highest')}: {summary.highest:.1f} {UNIT}")
        typer.echo(f"{message(state.language, 'lowest')}: {summary.lowest:.1f} {UNIT}")

    except GlucoseLogError as e:
        logger.error(f"Stats failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def chart(
    window: RangeWindow = typer.Option(RangeWindow.LAST_14_DAYS, "--range", help="Lookback window"),
    daily: bool = typer.Option(False, help="Show per-day averages instead of single readings"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Chart measurements within a lookback window, oldest first."""
    try:
        _, state = init_state(config_path)

        selected = filter_by_range(state.entries, window, now(state.timezone))
        if not selected:
            typer.echo(message(state.language, "no_data"))
            return

        if daily:
            days = daily_averages(selected, state.timezone)
            typer.echo(sparkline([d.average for d in days]))
            for d in days:
                typer.echo(f"{d.day:%d %b}  {d.average:5.2f} {UNIT}  ({d.count})")
        else:
            typer.echo(sparkline([e.value for e in selected]))
            for e in selected:
                local = make_timezone_aware(e.timestamp, state.timezone)
                typer.echo(f"{local:%d %b %H:%M}  {e.value:5.1f} {UNIT}")

    except GlucoseLogError as e:
        logger.error(f"Chart failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command(name="export")
def export_command(
    output_format: str | None = typer.Option(None, help="Output format: json, csv, or both"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Write a dated backup of all measurements."""
    try:
        param_loader, state = init_state(config_path)
        export_config = param_loader.get_export_config()

        if output_format:
            if output_format == "both":
                export_config.formats = ["json", "csv"]
            else:
                export_config.formats = [output_format]

        paths = ExportService(export_config).write_backup(
            state.entries, now(state.timezone).date()
        )
        for path in paths:
            typer.echo(f"  - {path}")

    except GlucoseLogError as e:
        logger.error(f"Export failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command(name="import")
def import_command(
    input_file: Path = typer.Argument(..., help="JSON backup or log file"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """
    Replace all measurements with the contents of a JSON file.

    Accepts an array of entries or an object with a "sugarLogs" array.
    Invalid files leave the log untouched.
    """
    try:
        _, state = init_state(config_path)

        result = state.store.import_file(input_file)
        if not result.ok:
            typer.echo(message(state.language, "import_error"), err=True)
            raise typer.Exit(code=1)

        typer.echo(message(state.language, "import_success"))
        typer.echo(f"{len(result.entries)} entries")

    except GlucoseLogError as e:
        logger.error(f"Import failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def lang(
    language: Language | None = typer.Argument(None, help="Language code; toggles if omitted"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Show or change the display language."""
    try:
        _, state = init_state(config_path)

        if language is None:
            saved = state.preferences.toggle()
        else:
            saved = state.preferences.set_language(language)

        typer.echo(f"Language: {state.language.value}")
        if not saved:
            typer.echo("Warning: language preference not saved", err=True)

    except GlucoseLogError as e:
        logger.error(f"Language change failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question for the assistant"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Ask the AI assistant one question about recent measurements."""
    try:
        param_loader, state = init_state(config_path)
        bridge = build_bridge(param_loader)

        typer.echo(bridge.ask(question, state.entries, state.language))

    except GlucoseLogError as e:
        logger.error(f"Ask failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def chat(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Interactive conversation with the AI assistant. Empty input ends it."""
    try:
        param_loader, state = init_state(config_path)
        conversation = Conversation(build_bridge(param_loader), state)

        while True:
            text = typer.prompt(">", default="", show_default=False)
            if not text.strip():
                break
            if asyncio.run(conversation.submit(text)):
                typer.echo(conversation.messages[-1].content)

    except GlucoseLogError as e:
        logger.error(f"Chat failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
