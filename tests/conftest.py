"""Shared fakes: an in-memory connection and a one-shot TCP server."""

from __future__ import annotations

import io
import socket
import struct
import threading

import pytest

from netdump_client.errors import PeerConnectionError
from netdump_client.protocol.commands import ProtocolRevision, Status
from netdump_client.protocol.framing import REQUEST_SIZE, build_header, build_response


class ScriptedConnection:
    """Stands in for TCPConnection, replaying canned server bytes."""

    def __init__(self, incoming: bytes = b"") -> None:
        self._incoming = io.BytesIO(incoming)
        self.sent = bytearray()
        self.reads: list[int] = []
        self.closed = False

    @property
    def connected(self) -> bool:
        return not self.closed

    def read_exact(self, size: int) -> bytes:
        data = self._incoming.read(size)
        self.reads.append(size)
        if len(data) < size:
            raise PeerConnectionError(
                f"Connection closed by peer after {len(data)}/{size} bytes"
            )
        return data

    def write(self, data: bytes) -> None:
        if self.closed:
            raise PeerConnectionError("Not connected to server")
        self.sent += data

    def close(self) -> None:
        self.closed = True

    def unread(self) -> bytes:
        return self._incoming.read()


def response(status: Status, revision: ProtocolRevision, payload: bytes = b"") -> bytes:
    return build_response(status, revision) + payload


def raw_response(code: int, revision: ProtocolRevision, payload: bytes = b"") -> bytes:
    return build_header(revision) + struct.pack(">I", code) + payload


class OneShotServer:
    """Accepts one connection and answers each request with the next reply."""

    def __init__(self, replies: list[bytes]) -> None:
        self.replies = replies
        self.requests: list[bytes] = []
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(1)
        self.host, self.port = self._listener.getsockname()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _recv_request(self, conn: socket.socket) -> bytes:
        buf = b""
        while len(buf) < REQUEST_SIZE:
            chunk = conn.recv(REQUEST_SIZE - len(buf))
            if not chunk:
                break
            buf += chunk
        return buf

    def _serve(self) -> None:
        conn, _ = self._listener.accept()
        with conn:
            for reply in self.replies:
                request = self._recv_request(conn)
                if len(request) < REQUEST_SIZE:
                    break
                self.requests.append(request)
                conn.sendall(reply)
            # Drain until the client hangs up
            while conn.recv(4096):
                pass
        self._listener.close()

    def join(self) -> None:
        self._thread.join(timeout=5)


@pytest.fixture
def one_shot_server():
    servers: list[OneShotServer] = []

    def start(replies: list[bytes]) -> OneShotServer:
        server = OneShotServer(replies)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.join()
