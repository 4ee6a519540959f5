"""Request frame builder and response header parser.

Frame layout::

    +-----------+----------+------------------+----------------------+
    | Magic     | Version  | Command / Status | Payload              |
    | 7 bytes   | 4 bytes  | 4 bytes          | status dependent     |
    +-----------+----------+------------------+----------------------+

- Magic: ASCII ``NETDUMP``
- Version: big-endian protocol version, must match exactly
- Command / Status: big-endian code from the active ProtocolRevision
- Payload: only on responses, see ``parser`` and ``stream``
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Protocol

from ..errors import FramingError
from .commands import Command, ProtocolRevision, Status

logger = logging.getLogger(__name__)

MAGIC = b"NETDUMP"
VERSION_FORMAT = ">I"
CODE_FORMAT = ">I"
HEADER_SIZE = len(MAGIC) + struct.calcsize(VERSION_FORMAT)  # 11
CODE_SIZE = struct.calcsize(CODE_FORMAT)
REQUEST_SIZE = HEADER_SIZE + CODE_SIZE  # 15


class Reader(Protocol):
    def read_exact(self, size: int) -> bytes: ...


@dataclass
class ResponseHeader:
    """A validated response header and its decoded status."""

    status: Status
    code: int

    def __repr__(self) -> str:
        return f"ResponseHeader(status={self.status.name}, code=0x{self.code:08X})"


def build_header(revision: ProtocolRevision) -> bytes:
    return MAGIC + struct.pack(VERSION_FORMAT, revision.version)


def build_request(command: Command, revision: ProtocolRevision) -> bytes:
    """Build the 15-byte request frame for ``command``.

    Raises:
        UnsupportedOperationError: If the revision has no code for it.
    """
    code = revision.command_code(command)
    return build_header(revision) + struct.pack(CODE_FORMAT, code)


def check_header(data: bytes, revision: ProtocolRevision) -> None:
    """Validate magic and version byte for byte.

    Raises:
        FramingError: On any mismatch.
    """
    if len(data) != HEADER_SIZE:
        raise FramingError(
            f"Frame header must be {HEADER_SIZE} bytes, got {len(data)}"
        )
    magic = data[: len(MAGIC)]
    if magic != MAGIC:
        raise FramingError(f"Bad magic number {magic!r}, expected {MAGIC!r}")
    (version,) = struct.unpack(VERSION_FORMAT, data[len(MAGIC) :])
    if version != revision.version:
        raise FramingError(
            f"Protocol version mismatch: peer speaks {version}, "
            f"expected {revision.version}"
        )


def parse_request(data: bytes, revision: ProtocolRevision) -> Command:
    """Decode a request frame back into its Command.

    Raises:
        FramingError: On a bad header, wrong size or unknown command code.
    """
    if len(data) != REQUEST_SIZE:
        raise FramingError(
            f"Request frame must be {REQUEST_SIZE} bytes, got {len(data)}"
        )
    check_header(data[:HEADER_SIZE], revision)
    (code,) = struct.unpack(CODE_FORMAT, data[HEADER_SIZE:])
    command = revision.command_from_code(code)
    if command is None:
        raise FramingError(f"Unknown command code 0x{code:08X}")
    return command


def build_response(status: Status, revision: ProtocolRevision) -> bytes:
    """Build a response header + status, as a server would send it."""
    return build_header(revision) + struct.pack(
        CODE_FORMAT, revision.status_code(status)
    )


def read_response_header(
    reader: Reader, revision: ProtocolRevision
) -> ResponseHeader:
    """Read and validate one response header and its status code.

    Unknown status codes decode to ``Status.UNEXPECTED``; only a bad magic
    or version raises.
    """
    check_header(reader.read_exact(HEADER_SIZE), revision)
    (code,) = struct.unpack(CODE_FORMAT, reader.read_exact(CODE_SIZE))
    header = ResponseHeader(status=revision.decode_status(code), code=code)
    logger.debug("Received %r", header)
    return header
