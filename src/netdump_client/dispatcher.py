"""Runs one operation against a netdump server and routes its response."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, ContextManager

from .client import Session
from .config import DEFAULT_PORT, DEFAULT_PROTOCOL_VERSION, DEFAULT_TIMEOUT, IO_SIZE
from .errors import (
    DecodeError,
    DomainError,
    NetdumpError,
    UnknownStatusError,
    UnsupportedOperationError,
)
from .models.disc import DiscInfo
from .protocol.commands import Command, Status
from .protocol.framing import ResponseHeader
from .protocol.parser import read_bca, read_disc_info
from .protocol.stream import receive_game, write_block

logger = logging.getLogger(__name__)

SinkFactory = Callable[[], ContextManager[BinaryIO]]


class Operation(Enum):
    """Everything a user can ask for, one per session."""

    DISCONNECT = "disconnect"
    EXIT_PROGRAM = "exit"
    SHUTDOWN = "shutdown"
    EJECT_DISC = "eject"
    GET_DISC_INFO = "info"
    DUMP_BCA = "bca"
    DUMP_GAME = "game"
    FULL = "full"


OPERATION_COMMANDS: dict[Operation, Command] = {
    Operation.DISCONNECT: Command.DISCONNECT,
    Operation.EXIT_PROGRAM: Command.EXIT_PROGRAM,
    Operation.SHUTDOWN: Command.SHUTDOWN,
    Operation.EJECT_DISC: Command.EJECT_DISC,
    Operation.GET_DISC_INFO: Command.GET_DISC_INFO,
    Operation.DUMP_BCA: Command.DUMP_BCA,
    Operation.DUMP_GAME: Command.DUMP_GAME,
}

SUCCESS_STATUS: dict[Operation, Status] = {
    Operation.DISCONNECT: Status.OK,
    Operation.EXIT_PROGRAM: Status.OK,
    Operation.SHUTDOWN: Status.OK,
    Operation.EJECT_DISC: Status.OK,
    Operation.GET_DISC_INFO: Status.DISC_INFO,
    Operation.DUMP_BCA: Status.BCA,
    Operation.DUMP_GAME: Status.GAME,
}

# These end the conversation themselves, so no Disconnect follows them
SESSION_ENDING = frozenset(
    {Operation.DISCONNECT, Operation.EXIT_PROGRAM, Operation.SHUTDOWN}
)

NEEDS_SINK = frozenset({Operation.DUMP_BCA, Operation.DUMP_GAME})

DOMAIN_MESSAGES: dict[Status, str] = {
    Status.NO_DISC: "No disc in drive, can't proceed",
    Status.UNKNOWN_DISC_TYPE: "Unknown disc type, can't proceed",
    Status.PROTOCOL_ERROR: "Unknown protocol-related error, can't proceed",
}


@dataclass
class OperationResult:
    """Outcome of one operation."""

    operation: Operation
    ok: bool
    message: str
    status: Status | None = None
    code: int | None = None
    disc_info: DiscInfo | None = None
    bytes_written: int = 0
    error: NetdumpError | None = None

    def raise_for_status(self) -> None:
        """Raise the error behind a failed result, if any."""
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict:
        result = {
            "operation": self.operation.value,
            "ok": self.ok,
            "status": self.status.value if self.status else None,
            "message": self.message,
        }
        if self.disc_info is not None:
            result["disc_info"] = self.disc_info.to_dict()
        if self.operation in NEEDS_SINK:
            result["bytes_written"] = self.bytes_written
        return result


def _failure(
    operation: Operation,
    error: NetdumpError,
    header: ResponseHeader | None = None,
) -> OperationResult:
    logger.info("%s failed: %s", operation.value, error)
    return OperationResult(
        operation=operation,
        ok=False,
        message=str(error),
        status=header.status if header else None,
        code=header.code if header else None,
        error=error,
    )


def _reject_full() -> OperationResult:
    return _failure(
        Operation.FULL,
        UnsupportedOperationError(
            "Full dump is not supported; run game, bca and info separately"
        ),
    )


def _refusal(operation: Operation, header: ResponseHeader) -> OperationResult:
    """Turn a non-success status into a failed result without reading a payload."""
    status = header.status
    if status is Status.COULD_NOT_EJECT and operation is Operation.EJECT_DISC:
        error: NetdumpError = DomainError("Couldn't eject disc", status)
    elif status in DOMAIN_MESSAGES:
        error = DomainError(DOMAIN_MESSAGES[status], status)
    else:
        # Reading on would desynchronize the stream
        error = UnknownStatusError(
            f"Unexpected response 0x{header.code:08X} to {operation.value}",
            code=header.code,
        )
    return _failure(operation, error, header)


def _receive_payload(
    session: Session,
    operation: Operation,
    header: ResponseHeader,
    sink_factory: SinkFactory | None,
    buffer_size: int,
) -> OperationResult:
    result = OperationResult(
        operation=operation,
        ok=True,
        message="OK",
        status=header.status,
        code=header.code,
    )

    if operation is Operation.GET_DISC_INFO:
        try:
            result.disc_info = read_disc_info(session.connection)
        except DecodeError as e:
            return _failure(operation, e, header)
        result.message = "Disc info received"

    elif operation is Operation.DUMP_BCA:
        data = read_bca(session.connection)
        with sink_factory() as sink:
            write_block(sink, data)
        result.bytes_written = len(data)
        result.message = f"BCA dumped ({len(data)} bytes)"

    elif operation is Operation.DUMP_GAME:
        with sink_factory() as sink:
            result.bytes_written = receive_game(
                session.connection, sink, session.revision, buffer_size
            )
        result.message = f"Game dumped ({result.bytes_written} bytes)"

    return result


def _dispatch(
    session: Session,
    operation: Operation,
    sink_factory: SinkFactory | None,
    buffer_size: int,
) -> OperationResult:
    if operation is Operation.FULL:
        return _reject_full()

    try:
        header = session.exchange(OPERATION_COMMANDS[operation])
    except UnsupportedOperationError as e:
        return _failure(operation, e)

    if header.status is not SUCCESS_STATUS[operation]:
        return _refusal(operation, header)
    return _receive_payload(session, operation, header, sink_factory, buffer_size)


def execute(
    session: Session,
    operation: Operation,
    sink_factory: SinkFactory | None = None,
    buffer_size: int = IO_SIZE,
) -> OperationResult:
    """Run ``operation`` on an open session and end the session.

    Domain refusals, unexpected statuses and decode failures come back as
    a failed :class:`OperationResult`, followed by the usual Disconnect.
    Framing, connection and sink errors propagate after the socket is
    closed, without a Disconnect.

    Args:
        session: Freshly connected session; it is closed on return.
        operation: What to do.
        sink_factory: Opens the output for BCA and game dumps. Only called
            once the server has agreed to send data.
        buffer_size: Receive buffer size for game images.
    """
    if operation in NEEDS_SINK and sink_factory is None:
        session.close()
        raise ValueError(f"{operation.value} needs an output sink")

    try:
        result = _dispatch(session, operation, sink_factory, buffer_size)
    except Exception:
        session.close()
        raise

    if operation in SESSION_ENDING:
        session.close()
    else:
        session.teardown()

    if result.ok:
        logger.info("%s: %s", operation.value, result.message)
    return result


def run(
    host: str,
    operation: Operation,
    port: int = DEFAULT_PORT,
    version: int = DEFAULT_PROTOCOL_VERSION,
    timeout: float | None = DEFAULT_TIMEOUT,
    sink_factory: SinkFactory | None = None,
    buffer_size: int = IO_SIZE,
) -> OperationResult:
    """Connect to ``host``, run one operation and disconnect."""
    if operation is Operation.FULL:
        # Rejected before any connection is made
        return _reject_full()
    session = Session.connect(host, port, version=version, timeout=timeout)
    return execute(session, operation, sink_factory, buffer_size)
