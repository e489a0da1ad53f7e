"""Disk geometry, page identifiers and the binary layout of page headers."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

MAX_TRACKS = 10
MAX_PLATTERS = 2
MAX_FACES = 2
MAX_SECTORS = 16

SECTOR_SIZE = 512
PAGE_SIZE = 2048
SECTORS_PER_PAGE = 4

HOUSING_RECORD_SIZE = 64
TITANIC_RECORD_SIZE = 128

BITMAP_BYTES = 4


@dataclass(frozen=True)
class PageId:
    """Location of a page: platter, face, track and the page's first sector."""

    plato: int
    cara: int
    pista: int
    sector: int


@dataclass
class FixedHeader:
    """Header of a page that stores fixed-length records."""

    record_count: int = 0
    record_size: int = 0
    total_slots: int = 0
    bitmap: bytearray = field(default_factory=lambda: bytearray(BITMAP_BYTES))

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<HHH4s")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def unpack(cls, data: bytes) -> FixedHeader:
        """Read a header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(f"need at least {cls.SIZE} bytes, got {len(data)}")
        count, size, slots, bitmap = cls._STRUCT.unpack_from(data)
        return cls(count, size, slots, bytearray(bitmap))

    def pack(self) -> bytes:
        """Encode the header in its on-disk form."""
        if len(self.bitmap) != BITMAP_BYTES:
            raise ValueError(f"bitmap must be {BITMAP_BYTES} bytes long")
        try:
            return self._STRUCT.pack(
                self.record_count, self.record_size, self.total_slots, bytes(self.bitmap)
            )
        except struct.error as exc:
            raise ValueError(str(exc)) from exc


@dataclass
class VariableHeader:
    """Header of a slotted page that stores variable-length records."""

    record_count: int = 0
    free_offset: int = 0
    slots_offset: int = 0
    slot_count: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<HHHH")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def unpack(cls, data: bytes) -> VariableHeader:
        """Read a header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(f"need at least {cls.SIZE} bytes, got {len(data)}")
        return cls(*cls._STRUCT.unpack_from(data))

    def pack(self) -> bytes:
        """Encode the header in its on-disk form."""
        try:
            return self._STRUCT.pack(
                self.record_count, self.free_offset, self.slots_offset, self.slot_count
            )
        except struct.error as exc:
            raise ValueError(str(exc)) from exc


def sector_path(root, plato: int, cara: int, pista: int, sector: int) -> Path:
    """Path of the file that holds one sector of the disk rooted at ``root``."""
    return Path(root) / f"Plato{plato}" / f"Cara{cara}" / f"Pista{pista}" / f"Sector{sector}"