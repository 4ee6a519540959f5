"""Command and status identifiers, and the per-revision code tables.

Commands and statuses are closed enumerations independent of any wire
value. Each :class:`ProtocolRevision` maps them to the 4-byte big-endian
codes used by one version of the netdump server. Revisions are not wire
compatible with each other: the same code can mean different things.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..errors import UnsupportedOperationError


class Command(Enum):
    """Requests a client can send."""

    DISCONNECT = "disconnect"
    EXIT_PROGRAM = "exit_program"
    SHUTDOWN = "shutdown"
    EJECT_DISC = "eject_disc"
    GET_DISC_INFO = "get_disc_info"
    DUMP_BCA = "dump_bca"
    DUMP_GAME = "dump_game"


class Status(Enum):
    """Response codes a server can answer with.

    ``UNEXPECTED`` is never sent on the wire; it stands for any code the
    revision does not define.
    """

    PROTOCOL_ERROR = "protocol_error"
    NO_DISC = "no_disc"
    COULD_NOT_EJECT = "could_not_eject"
    UNKNOWN_DISC_TYPE = "unknown_disc_type"
    OK = "ok"
    DISC_INFO = "disc_info"
    BCA = "bca"
    GAME = "game"
    UNEXPECTED = "unexpected"


class GamePayload(Enum):
    """How a revision frames the game image after a ``GAME`` status."""

    # u64 total length, then raw bytes
    SINGLE_LENGTH = "single_length"
    # repeated {u64 remaining, u32 length, bytes}, each behind its own header
    CHUNKED = "chunked"


_COMMON_COMMANDS: dict[Command, int] = {
    Command.DISCONNECT: 0xFFFF_FFFF,
    Command.EJECT_DISC: 1,
    Command.GET_DISC_INFO: 2,
    Command.DUMP_BCA: 3,
    Command.DUMP_GAME: 4,
}

_COMMON_STATUSES: dict[Status, int] = {
    Status.PROTOCOL_ERROR: 0xFFFF_FFFF,
    Status.NO_DISC: 0xFFFF_FFFE,
    Status.OK: 0,
    Status.DISC_INFO: 1,
    Status.BCA: 2,
    Status.GAME: 3,
}


@dataclass(frozen=True)
class ProtocolRevision:
    """Wire codes and payload shapes of one protocol version."""

    version: int
    commands: dict[Command, int]
    statuses: dict[Status, int]
    game_payload: GamePayload
    _status_by_code: dict[int, Status] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "_status_by_code",
            {code: status for status, code in self.statuses.items()},
        )

    def supports(self, command: Command) -> bool:
        return command in self.commands

    def command_code(self, command: Command) -> int:
        """Return the wire code for ``command``.

        Raises:
            UnsupportedOperationError: If this revision has no such command.
        """
        try:
            return self.commands[command]
        except KeyError:
            raise UnsupportedOperationError(
                f"Protocol version {self.version} has no "
                f"{command.value} command"
            ) from None

    def command_from_code(self, code: int) -> Command | None:
        for command, value in self.commands.items():
            if value == code:
                return command
        return None

    def status_code(self, status: Status) -> int:
        return self.statuses[status]

    def decode_status(self, code: int) -> Status:
        """Map a wire code to a Status, ``UNEXPECTED`` if unknown."""
        return self._status_by_code.get(code, Status.UNEXPECTED)


REVISIONS: dict[int, ProtocolRevision] = {
    # Earliest server: shutdown shared the 0xFFFFFFFE slot, no exit command,
    # and the game image was sent as self-framed chunks.
    0: ProtocolRevision(
        version=0,
        commands={**_COMMON_COMMANDS, Command.SHUTDOWN: 0xFFFF_FFFE},
        statuses=dict(_COMMON_STATUSES),
        game_payload=GamePayload.CHUNKED,
    ),
    1: ProtocolRevision(
        version=1,
        commands={
            **_COMMON_COMMANDS,
            Command.EXIT_PROGRAM: 0xFFFF_FFFE,
            Command.SHUTDOWN: 0xFFFF_FFFD,
        },
        statuses={
            **_COMMON_STATUSES,
            Status.COULD_NOT_EJECT: 0xFFFF_FFFD,
            Status.UNKNOWN_DISC_TYPE: 0xFFFF_FFFC,
        },
        game_payload=GamePayload.SINGLE_LENGTH,
    ),
}


def get_revision(version: int) -> ProtocolRevision:
    """Look up the code table for a protocol version.

    Raises:
        ValueError: If the version is not one this client speaks.
    """
    if version not in REVISIONS:
        raise ValueError(
            f"Unknown protocol version {version}. "
            f"Valid: {sorted(REVISIONS)}"
        )
    return REVISIONS[version]
