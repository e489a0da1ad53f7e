"""Buffer pool that caches disk pages in memory with LRU replacement."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path

from megatron.pages import PAGE_SIZE, SECTOR_SIZE, SECTORS_PER_PAGE, PageId, sector_path

MAX_FRAMES = 3

log = logging.getLogger(__name__)


@dataclass
class BufferFrame:
    """One page held in memory together with its bookkeeping."""

    page_id: PageId
    data: bytearray = field(default_factory=lambda: bytearray(PAGE_SIZE))
    dirty: bool = False
    pin_count: int = 1
    is_write: bool = False


class BufferManager:
    """Fixes pages in a bounded pool, writing modified pages back on eviction."""

    def __init__(self, disk_root, max_frames: int = MAX_FRAMES):
        self.disk_root = Path(disk_root)
        self.max_frames = max_frames
        # Least recently used first, most recently used last.
        self._frames: OrderedDict[PageId, BufferFrame] = OrderedDict()

    def __len__(self) -> int:
        return len(self._frames)

    def __contains__(self, page_id: object) -> bool:
        return page_id in self._frames

    def fix_page(self, page_id: PageId, exclusive: bool = False) -> BufferFrame | None:
        """Pin a page, loading it if needed; None if the page holds no data."""
        frame = self._frames.get(page_id)
        if frame is not None:
            frame.pin_count += 1
            frame.is_write |= exclusive
            self._frames.move_to_end(page_id)
            return frame

        self._evict_if_needed()

        frame = BufferFrame(page_id=page_id, is_write=exclusive)
        if not self._load(page_id, frame.data):
            return None
        self._frames[page_id] = frame
        return frame

    def unfix_page(self, page_id: PageId, dirty: bool = False) -> None:
        """Release one pin on a page, marking it modified if ``dirty``."""
        frame = self._frames.get(page_id)
        if frame is None:
            return
        if frame.pin_count > 0:
            frame.pin_count -= 1
        if dirty:
            frame.dirty = True

    def flush_all(self) -> None:
        """Write every modified page that was fixed for writing."""
        for frame in self._frames.values():
            if frame.dirty and frame.is_write:
                self._store(frame.page_id, frame.data)
                frame.dirty = False

    def format_table(self) -> str:
        """Render the pool's contents as a box-drawn table."""
        lines = [
            "┌─────────────────────────────────────────────────────────────────────────────────────────┐",
            "│ ID Frame                   │ ID Página              │ PinCount │ Dirty │ LRU Pos │ Mode │",
            "├─────────────────────────────────────────────────────────────────────────────────────────┤",
        ]
        newest_first = list(reversed(self._frames.items()))
        for position, (page_id, frame) in enumerate(newest_first):
            ident = f"{page_id.plato},{page_id.cara},{page_id.pista},{page_id.sector}"
            lines.append(
                "│ " + hex(id(frame)).ljust(26)
                + "│ " + ident.ljust(24)
                + "│ " + str(frame.pin_count).ljust(8)
                + " │ " + ("Yes" if frame.dirty else "No").ljust(5)
                + " │ " + str(position).ljust(7)
                + " │ " + ("W" if frame.is_write else "L").ljust(4)
                + " │"
            )
        lines.append(
            "└────────────────────────────────────────────────────────────────────────────────────────────┘"
        )
        return "\n".join(lines) + "\n"

    def close(self) -> None:
        """Flush modified pages and drop every frame."""
        self.flush_all()
        self._frames.clear()

    def __enter__(self) -> BufferManager:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _evict_if_needed(self) -> None:
        if len(self._frames) < self.max_frames:
            return
        for page_id, frame in self._frames.items():
            if frame.pin_count == 0:
                if frame.dirty and frame.is_write:
                    self._store(page_id, frame.data)
                del self._frames[page_id]
                return
        log.warning("No se pudo desalojar ninguna página: todas están fijadas.")

    def _sector_paths(self, page_id: PageId):
        for offset in range(SECTORS_PER_PAGE):
            yield offset, sector_path(
                self.disk_root, page_id.plato, page_id.cara, page_id.pista, page_id.sector + offset
            )

    def _load(self, page_id: PageId, data: bytearray) -> bool:
        any_sector = False
        for offset, path in self._sector_paths(page_id):
            start = offset * SECTOR_SIZE
            try:
                chunk = path.read_bytes()[:SECTOR_SIZE]
            except OSError:
                data[start:start + SECTOR_SIZE] = bytes(SECTOR_SIZE)
                continue
            data[start:start + SECTOR_SIZE] = chunk.ljust(SECTOR_SIZE, b"\0")
            any_sector = True
        return any_sector and any(data)

    def _store(self, page_id: PageId, data: bytearray) -> None:
        for offset, path in self._sector_paths(page_id):
            start = offset * SECTOR_SIZE
            try:
                path.write_bytes(bytes(data[start:start + SECTOR_SIZE]))
            except OSError as exc:
                log.warning("No se pudo escribir %s: %s", path, exc)