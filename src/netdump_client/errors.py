"""Exception hierarchy for the NETDUMP client."""

from __future__ import annotations


class NetdumpError(Exception):
    """Base class for all client errors."""


class PeerConnectionError(NetdumpError, ConnectionError):
    """The TCP session could not be established or broke down."""


class FramingError(NetdumpError):
    """A frame did not start with the expected magic and version,
    or a transfer chunk declared an impossible length."""


class UnknownStatusError(NetdumpError):
    """A status code arrived that is not valid at this point of the exchange."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class DomainError(NetdumpError):
    """The peer refused the command (no disc, could not eject, ...)."""

    def __init__(self, message: str, status=None) -> None:
        super().__init__(message)
        self.status = status


class DecodeError(NetdumpError):
    """A fixed-width payload could not be decoded."""


class SinkError(NetdumpError):
    """Writing received data to the local output failed."""


class UnsupportedOperationError(NetdumpError):
    """The operation has no wire representation in the selected revision."""
