"""Output destinations for dumped data."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from .errors import SinkError


@contextmanager
def file_sink(path: str | Path) -> Iterator[BinaryIO]:
    """Open ``path`` for writing, replacing any existing file."""
    try:
        f = open(path, "wb")
    except OSError as e:
        raise SinkError(f"Failed to open {path}: {e}") from e
    with f:
        yield f


@contextmanager
def stdout_sink() -> Iterator[BinaryIO]:
    """Yield the binary standard output, flushed but left open on exit."""
    out = sys.stdout.buffer
    try:
        yield out
    finally:
        out.flush()


def sink_factory(path: str | Path | None, use_stdout: bool = False):
    """Return a callable opening the requested sink.

    ``use_stdout`` wins over ``path``, like the CLI's ``--stdout`` flag.
    """
    if use_stdout:
        return stdout_sink
    if path is None:
        raise ValueError("An output path is required unless writing to stdout")
    return lambda: file_sink(path)
