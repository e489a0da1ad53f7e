"""Interactive front end: load CSV files, then run queries from a menu."""

from __future__ import annotations

import argparse
import sys

from megatron.buffer_manager import BufferManager
from megatron.catalog import SchemaError
from megatron.loader import LoadError, Loader
from megatron.pages import (
    MAX_FACES,
    MAX_PLATTERS,
    MAX_SECTORS,
    MAX_TRACKS,
    SECTOR_SIZE,
    SECTORS_PER_PAGE,
    FixedHeader,
    VariableHeader,
    sector_path,
)
from megatron.query import ComparisonError
from megatron.select import QueryError, conditional_select, simple_select

MENU = (
    "\n% MEGATRON3000\n"
    "  Welcome to MEGATRON 3000!\n"
    "______________________________________________\n"
    "\n&  1. Execute simple query\n"
    "&  2. Execute query with condition\n"
    "&  3. Show buffer table\n"
    "&  4. Insert records\n"
    "&  5. Update records\n"
    "&  6. Delete records\n"
    "&  7. Inspect page header from disk\n"
    "&  0. Exit\n"
    "%\n"
    "Option: "
)


class _EndOfInput(Exception):
    pass


def inspect_page_header(disk_root, plato, cara, pista, sector, fixed: bool) -> str:
    """Describe the header of the page starting at the given sector."""
    data = bytearray()
    for offset in range(SECTORS_PER_PAGE):
        path = sector_path(disk_root, plato, cara, pista, sector + offset)
        data += path.read_bytes()[:SECTOR_SIZE].ljust(SECTOR_SIZE, b"\0")
    if fixed:
        header = FixedHeader.unpack(data)
        bitmap = "".join(f"{byte:08b} " for byte in header.bitmap)
        return (
            "\n📄 Cabecera de Página de Longitud Fija\n"
            f"  - Número de registros   : {header.record_count}\n"
            f"  - Tamaño de registro    : {header.record_size}\n"
            f"  - Total de slots bitmap : {header.total_slots}\n"
            f"  - Bitmap (binario)      : {bitmap}\n"
        )
    header = VariableHeader.unpack(data)
    return (
        "\n📄 Cabecera de Página de Longitud Variable\n"
        f"  - Número de registros   : {header.record_count}\n"
        f"  - Offset libre          : {header.free_offset}\n"
        f"  - Offset slots          : {header.slots_offset}\n"
        f"  - Cantidad de slots     : {header.slot_count}\n"
    )


def _ask(stdin, out, prompt: str) -> str:
    out.write(prompt)
    out.flush()
    line = stdin.readline()
    if not line:
        raise _EndOfInput
    return line.rstrip("\n")


def _ask_int(stdin, out, prompt: str) -> int:
    try:
        return int(_ask(stdin, out, prompt).strip())
    except ValueError:
        raise _EndOfInput from None


def _inspect_interactive(buffer: BufferManager, stdin, out) -> None:
    plato = _ask_int(stdin, out, f"\nIngrese Plato [0-{MAX_PLATTERS - 1}]: ")
    cara = _ask_int(stdin, out, f"Ingrese Cara [0-{MAX_FACES - 1}]: ")
    pista = _ask_int(stdin, out, f"Ingrese Pista [0-{MAX_TRACKS - 1}]: ")
    sector = _ask_int(
        stdin, out, f"Ingrese Sector (inicio de página) [0-{MAX_SECTORS - SECTORS_PER_PAGE}]: "
    )
    kind = _ask(stdin, out, "¿Es longitud fija (f) o variable (v)? ").strip()[:1].lower()
    if kind not in ("f", "v"):
        out.write("Tipo desconocido.\n")
        return
    try:
        out.write(inspect_page_header(buffer.disk_root, plato, cara, pista, sector, kind == "f"))
    except OSError as exc:
        out.write(f"No se pudo abrir: {exc.filename}\nError al leer los sectores.\n")


def run_menu(buffer: BufferManager, schema_path, stdin=None, stdout=None) -> None:
    """Read menu options until the user exits or input ends."""
    stdin = stdin if stdin is not None else sys.stdin
    out = stdout if stdout is not None else sys.stdout
    try:
        while True:
            try:
                option = int(_ask(stdin, out, MENU).strip())
            except ValueError:
                out.write("Entrada inválida. Intente de nuevo.\n")
                continue
            try:
                if option == 1:
                    query = _ask(stdin, out, "% SELECT QUERY (e.g. SELECT * FROM tabla):\n> ")
                    simple_select(buffer, schema_path, query, out)
                elif option == 2:
                    query = _ask(stdin, out, "% Introduce consulta:\n> ")
                    conditional_select(buffer, schema_path, query, out)
                elif option == 3:
                    out.write(buffer.format_table())
                elif option in (4, 5, 6, 7):
                    # Options 4 to 6 have no handler and share the inspection path.
                    _inspect_interactive(buffer, stdin, out)
                    out.write("Exiting...\n")
                    return
                elif option == 0:
                    out.write("Exiting...\n")
                    return
                else:
                    out.write("Invalid option\n")
            except (QueryError, SchemaError, ComparisonError) as exc:
                out.write(f"{exc}\n")
    except _EndOfInput:
        return


def main(argv=None) -> int:
    """Load CSV files chosen interactively, then open the query menu."""
    parser = argparse.ArgumentParser(prog="megatron3000", description="Tiny disk-backed database.")
    parser.add_argument("--disk-root", default="../Disco/disco", help="root of the simulated disk")
    parser.add_argument("--schema", default="schema/schema.txt", help="catalogue file")
    args = parser.parse_args(argv)

    stdin, out = sys.stdin, sys.stdout
    loader = Loader(args.disk_root, args.schema)
    try:
        while True:
            csv_path = _ask(
                stdin, out,
                "Enter path to CSV file (e.g., data/titanicG.csv or data/Housing.csv): ",
            )
            mode = _ask(stdin, out, "¿Establecer como longitud fija? (s/n): ").strip()[:1]
            try:
                loader.load_csv(csv_path, mode in ("s", "S"))
            except LoadError as exc:
                sys.stderr.write(f"{exc}\nError loading database\n")
            else:
                out.write("Archivo cargado exitosamente.\n")
            again = _ask(stdin, out, "¿Deseas cargar otro archivo? (s/n): ").strip()[:1]
            if again in ("n", "N"):
                break
    except _EndOfInput:
        return 0

    out.write("\nSistema de consultas inicializado. Puedes ejecutar consultas ahora.\n")
    with BufferManager(args.disk_root) as buffer:
        run_menu(buffer, args.schema, stdin, out)
    return 0