"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

import typer

from lightsync.capture import ScreenSampler
from lightsync.core.ambient import SyncContext, run_ambient
from lightsync.core.config import LightsyncConfig, load_config
from lightsync.core.device_match import matches
from lightsync.core.dispatch import CommandDispatcher
from lightsync.core.errors import LightsyncError
from lightsync.core.manager import LightManager, describe_failure
from lightsync.core.model import AggregateResult, ConnectSummary
from lightsync.transports.ble_gatt import BleakTransport

app = typer.Typer(help="Sync BLE ambient lights with the color of your screen")

_CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to a lightsync YAML config")


class PowerState(str, enum.Enum):
    on = "on"
    off = "off"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_manager(config: LightsyncConfig) -> LightManager:
    return LightManager(
        transport=BleakTransport(connect_timeout_s=config.connect_timeout_s),
        dispatcher=CommandDispatcher(write_timeout_s=config.write_timeout_s),
    )


def _report_connect(summary: ConnectSummary) -> None:
    typer.echo(f"Connected to {len(summary.lights)} of {summary.matched} matching light(s)")
    for failure in summary.failures:
        typer.echo(f"Warning: {describe_failure(failure)}", err=True)


def _report_result(result: AggregateResult) -> None:
    typer.echo(f"Sent frame {result.frame.hex()}")
    for outcome in result.outcomes:
        status = "ok" if outcome.ok else f"FAILED ({outcome.error})"
        typer.echo(f"  {outcome.address}: {status}")


async def _connect_and_send(
    config: LightsyncConfig,
    action: Callable[[LightManager], Awaitable[AggregateResult]],
) -> AggregateResult:
    async with _build_manager(config) as manager:
        summary = await manager.connect(config.prefix, config.num_lights, config.light_wait_millis)
        _report_connect(summary)
        return await action(manager)


def _send_command(
    config_path: Path | None,
    action: Callable[[LightManager], Awaitable[AggregateResult]],
) -> None:
    try:
        config = load_config(config_path)
        result = asyncio.run(_connect_and_send(config, action))
        _report_result(result)
        result.raise_for_policy(config.failure_policy)
    except LightsyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("scan")
def scan(
    prefix: str | None = typer.Option(None, "--prefix", help="Name prefix to mark as a match"),
    timeout_ms: int = typer.Option(5000, "--timeout-ms", min=0, help="Scan window in milliseconds"),
) -> None:
    """List advertising BLE devices and whether they match the light prefix."""
    try:
        manager = LightManager(transport=BleakTransport())
        devices = asyncio.run(manager.scan(timeout_ms))
        if not devices:
            typer.echo("No BLE devices found")
            return

        for device in devices:
            name = device.name or "<unnamed>"
            marker = " *" if prefix is not None and matches(device.name, prefix) else ""
            typer.echo(f"{device.address} {name}{marker}")
    except LightsyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("power")
def power(
    state: PowerState,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Turn every light on or off."""
    _send_command(config, lambda manager: manager.set_power(state is PowerState.on))


@app.command("brightness")
def brightness(
    level: int = typer.Argument(..., min=0, max=255),
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Set the brightness of every light (0-255)."""
    _send_command(config, lambda manager: manager.set_brightness(level))


@app.command("color")
def color(
    red: int = typer.Argument(..., min=0, max=255),
    green: int = typer.Argument(..., min=0, max=255),
    blue: int = typer.Argument(..., min=0, max=255),
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Set every light to one RGB color."""
    _send_command(config, lambda manager: manager.set_color(red, green, blue))


async def _sync(config: LightsyncConfig, frames: int | None) -> int:
    async with _build_manager(config) as manager:
        summary = await manager.connect(config.prefix, config.num_lights, config.light_wait_millis)
        _report_connect(summary)
        if config.brightness is not None:
            (await manager.set_brightness(config.brightness)).raise_for_policy(config.failure_policy)
        (await manager.set_power(True)).raise_for_policy(config.failure_policy)

        context = SyncContext(
            manager=manager,
            source=ScreenSampler(downscale=config.capture_downscale),
            interval_s=config.capture_wait_millis / 1000,
            policy=config.failure_policy,
        )
        return await run_ambient(context, max_frames=frames)


@app.command("run")
def run_sync(
    config: Path | None = _CONFIG_OPTION,
    frames: int | None = typer.Option(None, "--frames", min=1, help="Stop after N colors"),
) -> None:
    """Connect the lights and keep them on the average screen color."""
    try:
        loaded = load_config(config)
        typer.echo(f"Loaded config for prefix '{loaded.prefix}' ({loaded.num_lights} light(s))")
        sent = asyncio.run(_sync(loaded, frames))
        typer.echo(f"Sent {sent} color update(s)")
    except KeyboardInterrupt:
        typer.echo("Stopped")
    except LightsyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
