"""Decoders for the fixed-size response payloads."""

from __future__ import annotations

from ..errors import DecodeError
from ..models.disc import DiscInfo, DiscType
from .framing import Reader

DISC_TYPE_SIZE = 1
GAME_NAME_SIZE = 32
INTERNAL_NAME_SIZE = 512
DISC_INFO_SIZE = DISC_TYPE_SIZE + GAME_NAME_SIZE + INTERNAL_NAME_SIZE  # 545

BCA_SIZE = 64


def decode_disc_type(value: int) -> DiscType:
    try:
        return DiscType(value)
    except ValueError:
        raise DecodeError(f"Unknown disc type byte 0x{value:02X}") from None


def decode_name(field: bytes) -> str:
    """Decode a NUL padded text field.

    Only trailing NUL bytes are removed; embedded ones are kept.

    Raises:
        DecodeError: If the remaining bytes are not valid UTF-8.
    """
    try:
        return field.rstrip(b"\x00").decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Name field is not valid UTF-8: {e}") from e


def parse_disc_info(data: bytes) -> DiscInfo:
    """Parse the 545-byte disc info payload.

    Layout: 1 byte disc type, 32 bytes game name, 512 bytes internal name.
    """
    if len(data) != DISC_INFO_SIZE:
        raise DecodeError(
            f"Disc info payload must be {DISC_INFO_SIZE} bytes, got {len(data)}"
        )
    name_end = DISC_TYPE_SIZE + GAME_NAME_SIZE
    return DiscInfo(
        disc_type=decode_disc_type(data[0]),
        game_name=decode_name(data[DISC_TYPE_SIZE:name_end]),
        internal_name=decode_name(data[name_end:]),
    )


def read_disc_info(reader: Reader) -> DiscInfo:
    """Consume the whole disc info payload, then decode it.

    The payload is always read in full first so a decode failure leaves
    the stream in sync.
    """
    return parse_disc_info(reader.read_exact(DISC_INFO_SIZE))


def read_bca(reader: Reader) -> bytes:
    return reader.read_exact(BCA_SIZE)
