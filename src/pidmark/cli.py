"""Command line interface for inspecting and managing pidfiles."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

import click
from filelock import Timeout
from pydantic import ValidationError

from pidmark.config import PidmarkConfig
from pidmark.errors import PidfileInvalidError, PidfileStaleError, ProcessRunningError
from pidmark.paths import get_config_path
from pidmark.pidfile import (
    PidfileState,
    locked_write_pid,
    remove,
    status,
    write_pid,
)

EXIT_OK = 0
EXIT_ABSENT = 1
EXIT_RUNNING = 1
EXIT_STALE = 2
EXIT_INVALID = 3
EXIT_OS_ERROR = 4

STATUS_EXIT_CODES = {
    PidfileState.RUNNING: EXIT_OK,
    PidfileState.ABSENT: EXIT_ABSENT,
    PidfileState.STALE: EXIT_STALE,
    PidfileState.INVALID: EXIT_INVALID,
}

_path_argument = click.argument(
    "path", required=False, type=click.Path(dir_okay=False, path_type=Path)
)


def _resolve_path(ctx: click.Context, path: Path | None) -> Path:
    if path is not None:
        return path
    config: PidmarkConfig = ctx.obj
    try:
        return config.pidfile.resolved_path()
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="pidfile.name") from exc


@click.group()
@click.version_option(package_name="pidmark", prog_name="pidmark")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $PIDMARK_CONFIG or the user config dir)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """Inspect and manage pidfiles."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        ctx.obj = PidmarkConfig.load(config_path)
    except (tomllib.TOMLDecodeError, ValidationError) as exc:
        source = config_path if config_path is not None else get_config_path()
        msg = f"Invalid config file {source}: {exc}"
        raise click.ClickException(msg) from exc


@cli.command("status")
@_path_argument
@click.pass_context
def status_cmd(ctx: click.Context, path: Path | None) -> None:
    """Report whether the process recorded in PATH is running."""
    target = _resolve_path(ctx, path)
    try:
        result = status(target)
    except OSError as exc:
        click.secho(f"Cannot read {target}: {exc}", fg="red", err=True)
        ctx.exit(EXIT_OS_ERROR)
    if result.pid is None:
        click.echo(result.state.value)
    else:
        click.echo(f"{result.state.value} {result.pid}")
    ctx.exit(STATUS_EXIT_CODES[result.state])


@cli.command("write")
@_path_argument
@click.option(
    "--pid",
    type=click.IntRange(min=1),
    default=None,
    help="Process id to record (default: parent)",
)
@click.option(
    "--overwrite/--no-overwrite",
    default=None,
    help="Replace a pidfile left by a dead process (default: from config)",
)
@click.option("--lock", is_flag=True, help="Serialize with other writers via <PATH>.lock")
@click.pass_context
def write_cmd(
    ctx: click.Context,
    path: Path | None,
    pid: int | None,
    overwrite: bool | None,
    lock: bool,
) -> None:
    """Record a process id in PATH."""
    config: PidmarkConfig = ctx.obj
    target = _resolve_path(ctx, path)
    if pid is None:
        pid = os.getppid()
    allow_overwrite = config.pidfile.allow_overwrite if overwrite is None else overwrite

    try:
        if lock:
            locked_write_pid(
                target,
                pid,
                allow_overwrite=allow_overwrite,
                timeout=config.pidfile.lock_timeout_seconds,
            )
        else:
            write_pid(target, pid, allow_overwrite=allow_overwrite)
    except ProcessRunningError as exc:
        click.secho(f"Already running: pid {exc.pid}", fg="yellow", err=True)
        ctx.exit(EXIT_RUNNING)
    except PidfileStaleError as exc:
        click.secho(
            f"Stale pidfile for pid {exc.pid}; pass --overwrite to replace it",
            fg="yellow",
            err=True,
        )
        ctx.exit(EXIT_STALE)
    except PidfileInvalidError as exc:
        click.secho(str(exc), fg="red", err=True)
        ctx.exit(EXIT_INVALID)
    except Timeout:
        click.secho(f"Timed out waiting for lock on {target}", fg="red", err=True)
        ctx.exit(EXIT_OS_ERROR)
    except OSError as exc:
        click.secho(f"Cannot write {target}: {exc}", fg="red", err=True)
        ctx.exit(EXIT_OS_ERROR)
    click.echo(f"Wrote pid {pid} to {target}")


@cli.command("remove")
@_path_argument
@click.pass_context
def remove_cmd(ctx: click.Context, path: Path | None) -> None:
    """Delete PATH if it exists."""
    target = _resolve_path(ctx, path)
    try:
        remove(target)
    except OSError as exc:
        click.secho(f"Cannot remove {target}: {exc}", fg="red", err=True)
        ctx.exit(EXIT_OS_ERROR)
