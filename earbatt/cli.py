"""Typer CLI entrypoint."""

from __future__ import annotations

import dataclasses
import json
import logging

import typer

from earbatt.core.config import config_path, parse_address_prefix
from earbatt.core.errors import EarbattError, UnexpectedResponseError
from earbatt.core.service import BatteryService

app = typer.Typer(help="Battery status for Nothing Ear earbuds over Bluetooth RFCOMM")


def _build_service(prefix: str | None = None, channel: int | None = None) -> BatteryService:
    service = BatteryService()
    overrides: dict[str, object] = {}
    if prefix is not None:
        overrides["address_prefix"] = parse_address_prefix(prefix)
    if channel is not None:
        overrides["channel"] = channel
    if overrides:
        service.settings = dataclasses.replace(service.settings, **overrides)
    for warning in getattr(service, "runtime_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


@app.command("battery")
def battery(
    prefix: str | None = typer.Option(None, "--prefix", help="Vendor address prefix, e.g. 2C:BE:EB"),
    channel: int | None = typer.Option(None, "--channel", min=1, max=30, help="RFCOMM channel"),
) -> None:
    """Print battery level and charging state of each connected unit as JSON."""
    try:
        service = _build_service(prefix, channel)
        records = service.read_battery()
    except UnexpectedResponseError as exc:
        typer.echo(json.dumps({"error": str(exc)}, separators=(",", ":")))
        return
    except EarbattError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(json.dumps([record.as_dict() for record in records], indent=2))


@app.command("config")
def show_config() -> None:
    """Show the effective connection settings."""
    try:
        service = _build_service()
    except EarbattError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    settings = service.settings
    source = service.config_source or f"{config_path()} (not found, using defaults)"
    typer.echo(f"Config: {source}")
    typer.echo(f"  address_prefix: {settings.address_prefix_str}")
    typer.echo(f"  channel: {settings.channel}")
    typer.echo(f"  attempts: {settings.attempts}")
    typer.echo(f"  backoff_ms: {round(settings.backoff_s * 1000)}")
    typer.echo(f"  timeout_s: {settings.timeout_s}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
