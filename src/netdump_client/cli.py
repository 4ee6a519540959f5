"""Command line entry point: ``netdump -a HOST COMMAND``."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .config import (
    DEFAULT_BCA_PATH,
    DEFAULT_FULL_DIRECTORY,
    DEFAULT_GAME_PATH,
    DEFAULT_PORT,
    DEFAULT_PROTOCOL_VERSION,
)
from .dispatcher import Operation, OperationResult, run
from .errors import NetdumpError
from .protocol.commands import REVISIONS
from .sinks import sink_factory

EXIT_FAILED = 1
EXIT_FATAL = 2


@click.group()
@click.option("-a", "--address", "host", required=True, envvar="NETDUMP_HOST",
              metavar="HOSTNAME", help="Hostname of the Wii to connect to.")
@click.option("-p", "--port", type=click.IntRange(1, 65535), default=DEFAULT_PORT,
              show_default=True, envvar="NETDUMP_PORT", help="Port netdump listens on.")
@click.option("--protocol-version", "version",
              type=click.IntRange(min(REVISIONS), max(REVISIONS)),
              default=DEFAULT_PROTOCOL_VERSION, show_default=True,
              envvar="NETDUMP_PROTOCOL_VERSION",
              help="Protocol version spoken by the server.")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              envvar="NETDUMP_TIMEOUT",
              help="Socket timeout in seconds. Blocks forever if unset.")
@click.option("-v", "--verbose", is_flag=True, help="Log every frame.")
@click.pass_context
def main(ctx, host, port, version, timeout, verbose):
    """Client for netdump running on a Wii."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    ctx.obj = {"host": host, "port": port, "version": version, "timeout": timeout}


def _run(ctx, operation: Operation, factory=None) -> OperationResult:
    """Run one operation, exiting with a non-zero status on failure."""
    settings = ctx.obj
    try:
        result = run(
            settings["host"],
            operation,
            port=settings["port"],
            version=settings["version"],
            timeout=settings["timeout"],
            sink_factory=factory,
        )
    except NetdumpError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_FATAL)

    if not result.ok:
        click.echo(result.message, err=True)
        ctx.exit(EXIT_FAILED)
    return result


@main.command("full")
@click.option("-o", "--output", "location", default=DEFAULT_FULL_DIRECTORY,
              show_default=True, type=click.Path(file_okay=False, path_type=Path),
              metavar="DIRECTORY", help="Where the files would be written to.")
@click.pass_context
def full_cmd(ctx, location):
    """Dump the game, BCA and info to three separate files (unsupported)."""
    _run(ctx, Operation.FULL)


@main.command("game")
@click.option("-o", "--output", "filepath", default=DEFAULT_GAME_PATH,
              show_default=True, metavar="FILE", help="Where to write the game dump.")
@click.option("-s", "--stdout", "use_stdout", is_flag=True,
              help="Write to stdout instead; --output is ignored.")
@click.pass_context
def game_cmd(ctx, filepath, use_stdout):
    """Dump the game image only."""
    _run(ctx, Operation.DUMP_GAME, sink_factory(filepath, use_stdout))


@main.command("bca")
@click.option("-o", "--output", "filepath", default=DEFAULT_BCA_PATH,
              show_default=True, metavar="FILE", help="Where to write the BCA dump.")
@click.option("-s", "--stdout", "use_stdout", is_flag=True,
              help="Write to stdout instead; --output is ignored.")
@click.pass_context
def bca_cmd(ctx, filepath, use_stdout):
    """Dump the disc BCA only."""
    _run(ctx, Operation.DUMP_BCA, sink_factory(filepath, use_stdout))


@main.command("info")
@click.option("-o", "--output", "filepath", default=None,
              type=click.Path(dir_okay=False, path_type=Path),
              metavar="FILE", help="Write the info as JSON to a file.")
@click.pass_context
def info_cmd(ctx, filepath):
    """Show disc type, game name and internal name."""
    result = _run(ctx, Operation.GET_DISC_INFO)
    if filepath is None:
        click.echo(result.disc_info.summary())
        return
    try:
        filepath.write_text(result.disc_info.to_json() + "\n", encoding="utf-8")
    except OSError as e:
        click.echo(f"Error: failed to write {filepath}: {e}", err=True)
        ctx.exit(EXIT_FATAL)


@main.command("disconnect")
@click.pass_context
def disconnect_cmd(ctx):
    """Connect and disconnect again, checking the server answers."""
    _run(ctx, Operation.DISCONNECT)


@main.command("eject")
@click.pass_context
def eject_cmd(ctx):
    """Eject the disc from the drive."""
    _run(ctx, Operation.EJECT_DISC)


@main.command("exit")
@click.pass_context
def exit_cmd(ctx):
    """Exit the netdump program on the Wii."""
    _run(ctx, Operation.EXIT_PROGRAM)


@main.command("shutdown")
@click.pass_context
def shutdown_cmd(ctx):
    """Shut the Wii down."""
    _run(ctx, Operation.SHUTDOWN)


if __name__ == "__main__":
    main()
