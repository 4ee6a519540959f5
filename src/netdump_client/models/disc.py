"""Disc metadata model."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import IntEnum


class DiscType(IntEnum):
    """Disc type byte reported by the drive."""

    GC = 0
    WII_SINGLE_SIDED = 1
    WII_DOUBLE_SIDED = 2

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def record_name(self) -> str:
        """Name used in the JSON record."""
        return _RECORD_NAMES[self]


_DISPLAY_NAMES = {
    DiscType.GC: "GameCube",
    DiscType.WII_SINGLE_SIDED: "Wii Single-Sided",
    DiscType.WII_DOUBLE_SIDED: "Wii Double-Sided",
}

_RECORD_NAMES = {
    DiscType.GC: "GC",
    DiscType.WII_SINGLE_SIDED: "WiiSingleSided",
    DiscType.WII_DOUBLE_SIDED: "WiiDoubleSided",
}


@dataclass
class DiscInfo:
    """Decoded disc info record."""

    disc_type: DiscType
    game_name: str
    internal_name: str

    def summary(self) -> str:
        """Three-line human readable summary."""
        return (
            f"Disc Type: {self.disc_type.display_name}\n"
            f"Game Name: {self.game_name}\n"
            f"Internal Name: {self.internal_name}"
        )

    def to_dict(self) -> dict:
        return {
            "disc_type": self.disc_type.record_name,
            "game_name": self.game_name,
            "internal_name": self.internal_name,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def __repr__(self) -> str:
        return (
            f"DiscInfo(disc_type={self.disc_type.name}, "
            f"game_name={self.game_name!r})"
        )
