"""A single NETDUMP session: one connection, one command, one teardown."""

from __future__ import annotations

import logging

from .config import DEFAULT_PORT, DEFAULT_PROTOCOL_VERSION, DEFAULT_TIMEOUT
from .errors import NetdumpError
from .protocol.commands import Command, ProtocolRevision, Status, get_revision
from .protocol.framing import ResponseHeader, build_request, read_response_header
from .transport.tcp_connection import TCPConnection

logger = logging.getLogger(__name__)


class Session:
    """Pairs a connection with the protocol revision spoken over it.

    Usage::

        with Session.connect("192.168.1.20") as session:
            header = session.exchange(Command.EJECT_DISC)
            session.teardown()
    """

    def __init__(self, connection: TCPConnection, revision: ProtocolRevision) -> None:
        self.connection = connection
        self.revision = revision

    @classmethod
    def connect(
        cls,
        host: str,
        port: int = DEFAULT_PORT,
        version: int = DEFAULT_PROTOCOL_VERSION,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> Session:
        """Open a session to ``host:port`` speaking protocol ``version``.

        Raises:
            ValueError: If ``version`` is unknown.
            PeerConnectionError: If the server cannot be reached.
        """
        revision = get_revision(version)
        connection = TCPConnection(host, port, timeout=timeout)
        connection.open()
        return cls(connection, revision)

    def send_command(self, command: Command) -> None:
        frame = build_request(command, self.revision)
        logger.debug("Sending %s (%s)", command.name, frame.hex(" "))
        self.connection.write(frame)

    def read_response_header(self) -> ResponseHeader:
        return read_response_header(self.connection, self.revision)

    def exchange(self, command: Command) -> ResponseHeader:
        """Send ``command`` and return the validated response header."""
        self.send_command(command)
        return self.read_response_header()

    def teardown(self) -> bool:
        """Say goodbye to the server, then close the socket.

        Failures are logged as warnings only; the socket is closed in
        every case.

        Returns:
            True if the server acknowledged the disconnect.
        """
        try:
            header = self.exchange(Command.DISCONNECT)
        except NetdumpError as e:
            logger.warning("Disconnect failed, closing anyway: %s", e)
            return False
        else:
            if header.status is not Status.OK:
                logger.warning(
                    "Unexpected disconnect response 0x%08X, closing anyway",
                    header.code,
                )
                return False
            return True
        finally:
            self.close()

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
