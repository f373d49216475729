#!/usr/bin/env python3
"""Command-line tool for managing tabrecorder recordings and auditioning effects."""

import json
import logging
import sys
import time
from typing import Any

import click
import uvicorn
from pydantic import ValidationError

from tabrecorder.config import ConfigManager
from tabrecorder.preview.devices import AudioDeviceService
from tabrecorder.preview.effects import EffectConfig
from tabrecorder.preview.graph import EffectsGraph
from tabrecorder.recordings.catalog import CatalogStore
from tabrecorder.recordings.retention import RetentionScheduler
from tabrecorder.system.file_manager import FileManager
from tabrecorder.system.path_resolver import PathResolver
from tabrecorder.system.structlog_configurator import configure_structlog
from tabrecorder.web.core.container import create_catalog_store

logger = logging.getLogger(__name__)


def build_catalog(obj: dict[str, Any]) -> CatalogStore:
    """Open the catalog described by the loaded configuration."""
    resolver = obj["resolver"]
    return create_catalog_store(resolver, FileManager(resolver), obj["config"])


def parse_device(value: str | None) -> int | str | None:
    """Device selectors are indices when numeric and name substrings otherwise."""
    if value is None or value == "":
        return None
    return int(value) if value.lstrip("-").isdigit() else value


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Manage tabrecorder recordings.

    Inspect, delete and expire stored recordings, list audio devices and
    audition the live effect chain.
    """
    resolver = PathResolver()
    config = ConfigManager(resolver).load()
    if verbose:
        config.logging.level = "DEBUG"
    configure_structlog(config)

    ctx.ensure_object(dict)
    ctx.obj["resolver"] = resolver
    ctx.obj["config"] = config


@cli.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print the entries as JSON")
@click.pass_obj
def list_recordings(obj: dict[str, Any], as_json: bool) -> None:
    """List stored recordings, newest first."""
    recordings = sorted(build_catalog(obj).list(), key=lambda r: r.created_at, reverse=True)

    if as_json:
        payload = [r.model_dump(mode="json", by_alias=True) for r in recordings]
        click.echo(json.dumps(payload, indent=2))
        return

    if not recordings:
        click.echo("No recordings.")
        return

    click.echo(f"{'ID':<38} {'Created':<20} {'Expires':<20} {'Secs':>6} {'Format':<7} Tracks")
    click.echo("-" * 110)
    for r in recordings:
        click.echo(
            f"{r.id:<38} {r.created_at:%Y-%m-%d %H:%M:%S}  {r.expires_at:%Y-%m-%d %H:%M:%S}  "
            f"{r.duration:>6} {r.format.value:<7} {', '.join(r.tracks.roles())}"
        )


@cli.command()
@click.argument("recording_id")
@click.pass_obj
def delete(obj: dict[str, Any], recording_id: str) -> None:
    """Delete a recording and its tracks."""
    if not build_catalog(obj).delete(recording_id):
        click.echo(click.style(f"Recording {recording_id} not found", fg="red"), err=True)
        sys.exit(1)
    click.echo(f"Deleted {recording_id}")


@cli.command()
@click.pass_obj
def sweep(obj: dict[str, Any]) -> None:
    """Delete expired recordings and unindexed artifact directories now."""
    stats = RetentionScheduler(build_catalog(obj)).sweep()
    click.echo(f"Expired recordings removed: {stats.expired_deleted}")
    if stats.orphan_scan_skipped:
        click.echo("Orphan scan skipped: recordings index could not be read")
    else:
        click.echo(f"Orphan directories removed: {stats.orphans_deleted}")


@cli.command()
def devices() -> None:
    """List audio input devices usable for the live preview."""
    found = AudioDeviceService().discover_input_devices()
    if not found:
        click.echo("No input devices found.")
        return
    for device in found:
        click.echo(
            f"[{device.index}] {device.name} "
            f"({device.max_input_channels} in, {device.default_samplerate:g} Hz)"
        )


@cli.command()
@click.option("--highpass", is_flag=True, help="Cut rumble below 80 Hz")
@click.option("--noise-gate", is_flag=True, help="Suppress background noise between phrases")
@click.option("--compressor", is_flag=True, help="Even out voice levels")
@click.option("--echo", is_flag=True, help="Add a room reverb")
@click.option("--boost", type=float, default=1.0, show_default=True, help="Gain from 1.0 to 3.0")
@click.option("--input-device", help="Input device index or name")
@click.option("--output-device", help="Output device index or name")
@click.option(
    "--seconds", type=float, default=0.0, help="Stop after this many seconds; 0 runs until Ctrl-C"
)
@click.pass_obj
def preview(
    obj: dict[str, Any],
    highpass: bool,
    noise_gate: bool,
    compressor: bool,
    echo: bool,
    boost: float,
    input_device: str | None,
    output_device: str | None,
    seconds: float,
) -> None:
    """Monitor the microphone through the effect chain."""
    try:
        effects = EffectConfig(
            highpass=highpass,
            noise_gate=noise_gate,
            compressor=compressor,
            echo=echo,
            boost=boost,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--boost") from e

    preview_config = obj["config"].preview
    graph = EffectsGraph.from_config(preview_config, effects)
    if input_device is not None:
        graph.input_device = parse_device(input_device)
    if output_device is not None:
        graph.output_device = parse_device(output_device)

    graph.start()
    click.echo("Previewing; press Ctrl-C to stop." if seconds <= 0 else f"Previewing {seconds:g}s")
    try:
        if seconds > 0:
            time.sleep(seconds)
        else:
            while True:
                time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        graph.stop()


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=8000, show_default=True)
def serve(host: str, port: int) -> None:
    """Serve the HTTP API."""
    uvicorn.run("tabrecorder.web.main:app", host=host, port=port, log_config=None)


def main() -> None:
    """Entry point for the recordings CLI."""
    cli()


if __name__ == "__main__":
    main()
