"""Blocking TCP connection to a netdump server.

The netdump homebrew listens on port 9875 and serves one command
exchange at a time. Reads and writes block indefinitely unless a timeout
is given.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass

from ..config import DEFAULT_PORT, DEFAULT_TIMEOUT
from ..errors import PeerConnectionError

logger = logging.getLogger(__name__)


@dataclass
class PeerInfo:
    """Address of the connected server."""

    host: str
    port: int = DEFAULT_PORT


class TCPConnection:
    """Manages the TCP socket to the netdump server.

    Usage::

        conn = TCPConnection("192.168.1.20")
        conn.open()
        conn.write(frame_bytes)
        header = conn.read_exact(15)
        conn.close()
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        self._peer = PeerInfo(host=host, port=port)
        self._timeout = timeout
        self._sock: socket.socket | None = None

    @property
    def connected(self) -> bool:
        return self._sock is not None

    @property
    def peer(self) -> PeerInfo:
        return self._peer

    def open(self) -> PeerInfo:
        """Connect to the server.

        Raises:
            PeerConnectionError: If the connection cannot be established.
        """
        address = (self._peer.host, self._peer.port)
        try:
            self._sock = socket.create_connection(address, timeout=self._timeout)
        except OSError as e:
            raise PeerConnectionError(
                f"Failed to connect to {self._peer.host}:{self._peer.port}: {e}"
            ) from e
        # create_connection leaves the timeout set; None restores blocking mode
        self._sock.settimeout(self._timeout)
        logger.info("Connected to %s:%d", self._peer.host, self._peer.port)
        return self._peer

    def attach(self, sock: socket.socket) -> None:
        """Use an already connected socket."""
        sock.settimeout(self._timeout)
        self._sock = sock

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing socket: %s", e)
        finally:
            self._sock = None
            logger.info("Disconnected")

    def write(self, data: bytes) -> None:
        """Send ``data`` in full.

        Raises:
            PeerConnectionError: If not connected or the send fails.
        """
        sock = self._require_socket()
        try:
            sock.sendall(data)
        except OSError as e:
            raise PeerConnectionError(f"Send failed: {e}") from e

    def read_exact(self, size: int) -> bytes:
        """Read exactly ``size`` bytes, looping over short reads.

        Raises:
            PeerConnectionError: If the peer closes the connection early,
                the read times out or fails.
        """
        sock = self._require_socket()
        buf = bytearray(size)
        view = memoryview(buf)
        received = 0
        while received < size:
            try:
                n = sock.recv_into(view[received:], size - received)
            except OSError as e:
                raise PeerConnectionError(f"Receive failed: {e}") from e
            if n == 0:
                raise PeerConnectionError(
                    f"Connection closed by peer after {received}/{size} bytes"
                )
            received += n
        return bytes(buf)

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise PeerConnectionError("Not connected to server")
        return self._sock

    def __enter__(self) -> TCPConnection:
        if not self.connected:
            self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()
