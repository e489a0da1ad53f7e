"""A resizable simulated disk built from directories and sector files."""

from __future__ import annotations

import argparse
import re
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

FACE_NAMES = ("CaraSuperior", "CaraInferior")
DEFAULT_SECTOR_SIZE = 500
CONFIG_NAME = "config.txt"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class DiskConfig:
    """Tracks per face, sectors per track and bytes per sector."""

    tracks: int = 0
    sectors: int = 0
    sector_size: int = DEFAULT_SECTOR_SIZE


def create_platter(path, tracks: int, sectors: int, sector_size: int) -> None:
    """Create a platter with both faces, its tracks and blank sectors."""
    path = Path(path)
    path.mkdir(exist_ok=True)
    blank = " " * sector_size
    for face in FACE_NAMES:
        face_dir = path / face
        face_dir.mkdir(exist_ok=True)
        for t in range(tracks):
            track_dir = face_dir / f"Pista{t}"
            track_dir.mkdir(exist_ok=True)
            for s in range(sectors):
                (track_dir / f"Sector{s}").write_text(blank, encoding="ascii")


def _platter_number(name: str) -> int:
    match = _LEADING_INT.match(name[len("Plato"):])
    if match is None:
        raise ValueError(f"nombre de plato no válido: {name}")
    return int(match.group(1))


class _EndOfInput(Exception):
    pass


class VirtualDisk:
    """A disk whose platter count and geometry can change after creation."""

    def __init__(self, base):
        self.base = Path(base)
        self.config = DiskConfig()
        self.base.mkdir(parents=True, exist_ok=True)

    def _platter(self, number: int) -> Path:
        return self.base / f"Plato{number}"

    def count_platters(self) -> int:
        """Number of consecutively numbered platters starting at Plato0."""
        count = 0
        while self._platter(count).exists():
            count += 1
        return count

    def save_config(self) -> None:
        """Store the geometry in the disk's configuration file."""
        c = self.config
        (self.base / CONFIG_NAME).write_text(
            f"{c.tracks} {c.sectors} {c.sector_size}", encoding="ascii"
        )

    def load_config(self) -> bool:
        """Read the geometry from disk; False if there is no configuration file."""
        try:
            text = (self.base / CONFIG_NAME).read_text(encoding="ascii")
        except OSError:
            return False
        values = text.split()
        if len(values) < 3:
            raise ValueError(f"configuración incompleta: {text!r}")
        tracks, sectors, size = (int(v) for v in values[:3])
        self.config = DiskConfig(tracks, sectors, size)
        return True

    def expand(self, new_platters: int) -> None:
        """Add platters, filling in any missing tracks and sectors on the way.

        With zero new platters every existing platter is brought up to the
        current geometry.
        """
        existing = self.count_platters()
        total = existing + new_platters
        start = 0 if new_platters == 0 else existing
        blank = " " * self.config.sector_size
        for p in range(start, total):
            platter = self._platter(p)
            platter.mkdir(exist_ok=True)
            for face in FACE_NAMES:
                face_dir = platter / face
                face_dir.mkdir(exist_ok=True)
                for t in range(self.config.tracks):
                    track_dir = face_dir / f"Pista{t}"
                    track_dir.mkdir(exist_ok=True)
                    for s in range(self.config.sectors):
                        sector = track_dir / f"Sector{s}"
                        if not sector.exists():
                            sector.write_text(blank, encoding="ascii")

    def remove_platter(self, number: int) -> bool:
        """Delete a platter; False if it does not exist."""
        platter = self._platter(number)
        if not platter.exists():
            return False
        shutil.rmtree(platter)
        return True

    def reindex_platters(self) -> None:
        """Renumber the remaining platters so they run from Plato0 without gaps."""
        names = sorted(
            (entry.name for entry in self.base.iterdir()
             if entry.is_dir() and entry.name.startswith("Plato")),
            key=_platter_number,
        )
        for index, name in enumerate(names):
            old = self.base / name
            new = self._platter(index)
            if old != new:
                old.rename(new)

    def capacity(self) -> int:
        """Total size of the disk in bytes."""
        c = self.config
        return self.count_platters() * len(FACE_NAMES) * c.tracks * c.sectors * c.sector_size

    def block_size(self, sectors_per_block: int) -> int:
        """Size in bytes of a block made of the given number of sectors."""
        return sectors_per_block * self.config.sector_size

    def run_menu(self, stdin=None, stdout=None) -> None:
        """Interactive menu reading whitespace-separated numbers from ``stdin``."""
        stdin = stdin if stdin is not None else sys.stdin
        out = stdout if stdout is not None else sys.stdout
        tokens = (token for line in stdin for token in line.split())

        def read_int(prompt: str) -> int:
            out.write(prompt)
            out.flush()
            token = next(tokens, None)
            if token is None:
                raise _EndOfInput
            try:
                return int(token)
            except ValueError:
                raise _EndOfInput from None

        try:
            while True:
                out.write(
                    "\nDISCO VIRTUAL\n"
                    "--------------------------------------------------\n"
                    "1. Agregar platos\n"
                    "2. Modificar pistas y sectores en todos los platos\n"
                    "3. Eliminar plato\n"
                    "4. Mostrar capacidad del disco\n"
                    "5. Mostra capacidad de bloque\n"
                    "0. Salir\n"
                    "--------------------------------------------------\n"
                )
                option = read_int("Opción: ")
                if option == 0:
                    return
                if option == 1:
                    count = read_int("Cantidad de platos a agregar: ")
                    if not self.load_config():
                        self.config.tracks = read_int("Cantidad de pistas por cara: ")
                        self.config.sectors = read_int("Cantidad de sectores por pista: ")
                        self.config.sector_size = read_int("Tamaño del sector: ")
                        self.save_config()
                    else:
                        out.write(
                            f"Usando configuración existente: {self.config.tracks} pistas, "
                            f"{self.config.sectors} sectores.\n"
                        )
                    self.expand(count)
                elif option == 2:
                    if not self.load_config():
                        out.write("No hay configuración previa.\n")
                    else:
                        out.write(
                            f"Configuración actual: {self.config.tracks} pistas, "
                            f"{self.config.sectors} sectores.\n"
                        )
                    self.config.tracks = read_int("Nueva cantidad de pistas por cara: ")
                    self.config.sectors = read_int("Nueva cantidad de sectores por pista: ")
                    self.save_config()
                    self.expand(0)
                elif option == 3:
                    number = read_int("Número de plato a eliminar: ")
                    if self.remove_platter(number):
                        out.write(f"Plato {number} eliminado correctamente.\n")
                    else:
                        out.write("Plato no encontrado.\n")
                    self.reindex_platters()
                    out.write("Reindexación completa. Platos reorganizados.\n")
                elif option == 4:
                    if not self.load_config():
                        out.write("No hay configuración previa.\n")
                    else:
                        out.write(f"Cantidad actual de platos: {self.count_platters()}\n")
                        out.write(f"Pistas por cara: {self.config.tracks}\n")
                        out.write(f"Sectores por pista: {self.config.sectors}\n")
                        out.write(f"Tamaño total del disco: {self.capacity()} bytes\n")
                elif option == 5:
                    sectors = read_int("Ingrese la cantidad de sectores por bloque: ")
                    out.write(f"Tamaño del bloque: {self.block_size(sectors)} bytes\n")
        except _EndOfInput:
            return


def main(argv=None) -> int:
    """Run the interactive virtual-disk menu."""
    parser = argparse.ArgumentParser(prog="disco", description="Manage a resizable virtual disk.")
    parser.add_argument("base", nargs="?", default="disco_prueba", help="directory of the disk")
    args = parser.parse_args(argv)
    VirtualDisk(args.base).run_menu(sys.stdin, sys.stdout)
    return 0