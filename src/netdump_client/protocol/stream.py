"""Bounded-buffer receivers for the game image payload.

Two wire shapes exist, chosen by the protocol revision:

Single length::

    +--------------------+--------------------------------+
    | Total length (u64) | Image bytes (total length)     |
    +--------------------+--------------------------------+

Chunked, every chunk behind its own response header::

    +--------+-----------------+--------------+-------------+
    | Header | Remaining (u64) | Length (u32) | Chunk bytes |
    +--------+-----------------+--------------+-------------+

The chunked stream ends with the chunk whose length equals the remaining
count.
"""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO

from ..config import IO_SIZE
from ..errors import FramingError, SinkError, UnknownStatusError
from .commands import GamePayload, ProtocolRevision, Status
from .framing import Reader, read_response_header

logger = logging.getLogger(__name__)

LENGTH_FORMAT = ">Q"
CHUNK_HEADER_FORMAT = ">QI"
LENGTH_SIZE = struct.calcsize(LENGTH_FORMAT)
CHUNK_HEADER_SIZE = struct.calcsize(CHUNK_HEADER_FORMAT)


def write_block(sink: BinaryIO, data: bytes) -> None:
    try:
        sink.write(data)
    except OSError as e:
        raise SinkError(f"Failed to write to output: {e}") from e


def copy_exact(
    reader: Reader,
    sink: BinaryIO,
    length: int,
    buffer_size: int = IO_SIZE,
) -> int:
    """Copy exactly ``length`` bytes from ``reader`` to ``sink``.

    Reads at most ``buffer_size`` bytes at a time; the last read is sized
    to the remainder so nothing past ``length`` is consumed.

    Returns:
        Number of bytes copied.
    """
    received = 0
    while received < length:
        # Last block may be shorter than the buffer
        block = reader.read_exact(min(buffer_size, length - received))
        write_block(sink, block)
        received += len(block)
        logger.debug("Copied %d/%d bytes", received, length)
    return received


def receive_single_length(
    reader: Reader,
    sink: BinaryIO,
    buffer_size: int = IO_SIZE,
) -> int:
    """Receive a length-prefixed payload into ``sink``."""
    (total,) = struct.unpack(LENGTH_FORMAT, reader.read_exact(LENGTH_SIZE))
    logger.info("Receiving %d bytes", total)
    return copy_exact(reader, sink, total, buffer_size)


def receive_chunked(
    reader: Reader,
    sink: BinaryIO,
    revision: ProtocolRevision,
    buffer_size: int = IO_SIZE,
) -> int:
    """Receive a chunked payload into ``sink``.

    The caller has already read the ``GAME`` header preceding the first
    chunk. Each following chunk's header is validated before its bytes
    are read. On error, bytes already written to ``sink`` are left as is.

    Raises:
        FramingError: On a bad header, a chunk longer than the remainder,
            or a remaining count that disagrees with the first chunk.
        UnknownStatusError: If a chunk header carries a non-``GAME`` status.
    """
    received = 0
    chunks = 0
    total = None
    while True:
        remaining, length = struct.unpack(
            CHUNK_HEADER_FORMAT, reader.read_exact(CHUNK_HEADER_SIZE)
        )
        if total is None:
            # The first chunk declares the size of the whole stream
            total = remaining
        elif remaining != total - received:
            raise FramingError(
                f"Chunk declares {remaining} bytes remaining, expected "
                f"{total - received} of {total}"
            )
        if length > remaining:
            raise FramingError(
                f"Chunk of {length} bytes exceeds remaining {remaining}"
            )
        received += copy_exact(reader, sink, length, buffer_size)
        chunks += 1
        logger.debug(
            "Chunk %d: %d bytes, %d remaining", chunks, length, remaining - length
        )
        if remaining == length:
            break

        header = read_response_header(reader, revision)
        if header.status is not Status.GAME:
            raise UnknownStatusError(
                f"Expected game chunk, got status 0x{header.code:08X} "
                f"after {received} bytes",
                code=header.code,
            )

    logger.info("Received %d bytes in %d chunks", received, chunks)
    return received


def receive_game(
    reader: Reader,
    sink: BinaryIO,
    revision: ProtocolRevision,
    buffer_size: int = IO_SIZE,
) -> int:
    """Receive a game image using the wire shape of ``revision``."""
    if revision.game_payload is GamePayload.CHUNKED:
        return receive_chunked(reader, sink, revision, buffer_size)
    return receive_single_length(reader, sink, buffer_size)
