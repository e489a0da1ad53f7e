"""Creates the directory tree that serves as the simulated disk."""

from __future__ import annotations

import argparse
from pathlib import Path


def build_tree(root, platters: int, faces: int, tracks: int, sectors: int, sector_size: int) -> None:
    """Create Plato/Cara/Pista directories and blank sector files under ``root``."""
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    blank = b" " * sector_size
    for p in range(platters):
        plato = root / f"Plato{p}"
        plato.mkdir(exist_ok=True)
        for c in range(faces):
            cara = plato / f"Cara{c}"
            cara.mkdir(exist_ok=True)
            for t in range(tracks):
                pista = cara / f"Pista{t}"
                pista.mkdir(exist_ok=True)
                for s in range(sectors):
                    (pista / f"Sector{s}").write_bytes(blank)


class Disk:
    """A disk of fixed geometry with its header, free map and index files."""

    NUM_PLATTERS = 2
    NUM_FACES = 2
    NUM_TRACKS = 10
    NUM_SECTORS = 16
    SECTOR_SIZE = 512

    def __init__(self, root):
        self.root = Path(root)

    @property
    def total_sectors(self) -> int:
        return self.NUM_PLATTERS * self.NUM_FACES * self.NUM_TRACKS * self.NUM_SECTORS

    def initialize(self) -> None:
        """Create the sector tree and the header, freemap and index files."""
        self.root.mkdir(parents=True, exist_ok=True)
        build_tree(
            self.root,
            self.NUM_PLATTERS,
            self.NUM_FACES,
            self.NUM_TRACKS,
            self.NUM_SECTORS,
            self.SECTOR_SIZE,
        )
        self._write_header()
        self._write_freemap()
        self._write_index()

    def _write(self, name: str, text: str) -> None:
        with open(self.root / name, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(text)

    def _write_header(self) -> None:
        self._write(
            "header.txt",
            f"Platos: {self.NUM_PLATTERS}\n"
            f"Caras por plato: {self.NUM_FACES}\n"
            f"Pistas por cara: {self.NUM_TRACKS}\n"
            f"Sectores por pista: {self.NUM_SECTORS}\n"
            f"Tamaño sector: {self.SECTOR_SIZE}\n",
        )

    def _write_freemap(self) -> None:
        # 0 marks a free sector
        self._write("freemap.txt", "0\n" * self.total_sectors)

    def _write_index(self) -> None:
        self._write("index.txt", "#id\tsector_path\n")


def main(argv=None) -> int:
    """Build a disk in the given directory (``disco`` by default)."""
    parser = argparse.ArgumentParser(prog="disco", description="Create the simulated disk.")
    parser.add_argument("root", nargs="?", default="disco", help="directory of the disk")
    args = parser.parse_args(argv)
    Disk(args.root).initialize()
    return 0