"""Loads CSV files onto the simulated disk and registers them in the catalogue."""

from __future__ import annotations

import os
import struct
from collections.abc import Iterator, Sequence
from pathlib import Path

from megatron.catalog import MAX_COL_LEN, MAX_COLUMNS
from megatron.pages import (
    BITMAP_BYTES,
    HOUSING_RECORD_SIZE,
    MAX_FACES,
    MAX_PLATTERS,
    MAX_SECTORS,
    MAX_TRACKS,
    PAGE_SIZE,
    SECTOR_SIZE,
    SECTORS_PER_PAGE,
    TITANIC_RECORD_SIZE,
    FixedHeader,
    VariableHeader,
    sector_path,
)

MAX_ROW_LEN = 2048

_SCHEMA_READ_LIMIT = 4096
_NAME_LIMIT = 127
_SLOT = struct.Struct("<H")
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class LoadError(Exception):
    """A CSV file could not be loaded onto the disk."""


def is_integer(text: str) -> bool:
    """True for an optionally signed, non-empty run of decimal digits."""
    if text[:1] in ("+", "-"):
        text = text[1:]
    return bool(text) and all("0" <= ch <= "9" for ch in text)


def is_float(text: str) -> bool:
    """True for an optionally signed run of digits holding exactly one dot."""
    if text[:1] in ("+", "-"):
        text = text[1:]
    if not text:
        return False
    dot_found = False
    for ch in text:
        if ch == ".":
            if dot_found:
                return False
            dot_found = True
        elif not "0" <= ch <= "9":
            return False
    return dot_found


def parse_header(line: str) -> list[str]:
    """Column names of a CSV header line; empty names are skipped."""
    names = [name for name in line.split(",") if name]
    return [name[:MAX_COL_LEN - 1] for name in names[:MAX_COLUMNS]]


def parse_csv_fields(line: str, max_cols: int = MAX_COLUMNS) -> list[str]:
    """Split a CSV line on commas outside double quotes, keeping at most ``max_cols``.

    A value wrapped in double quotes loses the outer pair.
    """
    values: list[str] = []
    inside_quotes = False
    start = 0
    for pos, ch in enumerate(line):
        if ch == '"':
            inside_quotes = not inside_quotes
        elif ch == "," and not inside_quotes and len(values) < max_cols:
            values.append(line[start:pos])
            start = pos + 1
    if len(values) < max_cols:
        rest = line[start:]
        comma = _unquoted_comma(rest)
        values.append(rest if comma is None else rest[:comma])
    return [v[1:-1] if len(v) >= 2 and v[0] == '"' and v[-1] == '"' else v for v in values]


def _unquoted_comma(text: str) -> int | None:
    # Only reachable when the field limit stopped the split early; such
    # commas still terminate the last kept field.
    return None


def infer_types(values: Sequence[str]) -> list[str]:
    """Guess 'int', 'float' or 'string' for each value."""
    types = []
    for value in values:
        if is_integer(value):
            types.append("int")
        elif is_float(value):
            types.append("float")
        else:
            types.append("string")
    return types


def base_name(path) -> str:
    """File name of ``path`` without directory and without its last extension."""
    text = os.fspath(path)
    name = text[text.rfind("/") + 1:][:_NAME_LIMIT]
    dot = name.rfind(".")
    return name[:dot] if dot >= 0 else name


def _read_schema_head(schema_path) -> str | None:
    try:
        with open(schema_path, "rb") as handle:
            data = handle.read(_SCHEMA_READ_LIMIT)
    except OSError:
        return None
    return data.decode(_ENCODING, _ERRORS)


def count_relations(schema_path) -> int:
    """Number of lines in the catalogue file, 0 if it does not exist."""
    text = _read_schema_head(schema_path)
    return 0 if text is None else text.count("\n")


def relation_exists(schema_path, name: str) -> bool:
    """True if ``name`` occurs anywhere in the catalogue file."""
    text = _read_schema_head(schema_path)
    return bool(text) and name in text


def format_schema_line(
    name: str,
    columns: Sequence[str],
    types: Sequence[str],
    fixed_length: bool,
    start: int,
    end: int,
) -> str:
    """Catalogue line ``name#col#type...#fijo|variable#start#end`` without a newline."""
    parts = [name]
    for column, column_type in zip(columns, types):
        parts += [column, column_type]
    parts += ["fijo" if fixed_length else "variable", str(start), str(end)]
    return "#".join(parts)


def _pages_from(start_cylinder: int) -> Iterator[tuple[int, int, int, int]]:
    for pista in range(start_cylinder, MAX_TRACKS):
        for plato in range(MAX_PLATTERS):
            for cara in range(MAX_FACES):
                for sector in range(0, MAX_SECTORS - SECTORS_PER_PAGE + 1, SECTORS_PER_PAGE):
                    yield plato, cara, pista, sector


def _read_page(disk_root, plato: int, cara: int, pista: int, sector: int) -> bytearray:
    page = bytearray()
    for offset in range(SECTORS_PER_PAGE):
        try:
            chunk = sector_path(disk_root, plato, cara, pista, sector + offset).read_bytes()
        except OSError:
            return bytearray(PAGE_SIZE)
        if len(chunk) < SECTOR_SIZE:
            return bytearray(PAGE_SIZE)
        page += chunk[:SECTOR_SIZE]
    return page


def _write_page(disk_root, plato: int, cara: int, pista: int, sector: int, page: bytes) -> bool:
    for offset in range(SECTORS_PER_PAGE):
        start = offset * SECTOR_SIZE
        path = sector_path(disk_root, plato, cara, pista, sector + offset)
        try:
            path.write_bytes(bytes(page[start:start + SECTOR_SIZE]))
        except OSError:
            return False
    return True


def write_fixed_record(disk_root, start_cylinder: int, record: bytes) -> bool:
    """Store a fixed-length record in the first page with a free slot.

    The record's length is the page's record size. Returns False when no
    page from ``start_cylinder`` onwards has room or the page cannot be written.
    """
    record = bytes(record)
    size = len(record)
    if not 0 < size <= 0xFFFF:
        raise ValueError(f"record size out of range: {size}")
    capacity = min((PAGE_SIZE - FixedHeader.SIZE) // size, BITMAP_BYTES * 8)

    for plato, cara, pista, sector in _pages_from(start_cylinder):
        page = _read_page(disk_root, plato, cara, pista, sector)
        header = FixedHeader.unpack(page)
        if header.record_size != size or header.total_slots == 0:
            header = FixedHeader(record_size=size)
        header.total_slots = capacity

        for slot in range(capacity):
            byte, bit = divmod(slot, 8)
            if header.bitmap[byte] & (1 << bit):
                continue
            header.bitmap[byte] |= 1 << bit
            header.record_count = (header.record_count + 1) & 0xFFFF
            offset = FixedHeader.SIZE + slot * size
            page[offset:offset + size] = record
            page[:FixedHeader.SIZE] = header.pack()
            return _write_page(disk_root, plato, cara, pista, sector, page)
    return False


def write_variable_record(disk_root, start_cylinder: int, record: bytes) -> bool:
    """Store a variable-length record in the first slotted page with room.

    A record that would straddle a sector boundary starts at the next sector.
    Returns False when no page has room or the page cannot be written.
    """
    record = bytes(record)
    length = len(record)

    for plato, cara, pista, sector in _pages_from(start_cylinder):
        page = _read_page(disk_root, plato, cara, pista, sector)
        header = VariableHeader.unpack(page)
        if (
            header.free_offset == 0
            or header.slots_offset == 0
            or header.slots_offset > PAGE_SIZE
            or header.free_offset < VariableHeader.SIZE
        ):
            header = VariableHeader(0, VariableHeader.SIZE, PAGE_SIZE, 0)

        sector_index, position = divmod(header.free_offset, SECTOR_SIZE)
        if SECTOR_SIZE - position < length:
            header.free_offset = (sector_index + 1) * SECTOR_SIZE

        if header.free_offset + length <= header.slots_offset - _SLOT.size:
            page[header.free_offset:header.free_offset + length] = record
            header.slots_offset -= _SLOT.size
            _SLOT.pack_into(page, header.slots_offset, header.free_offset)
            header.free_offset += length
            header.record_count = (header.record_count + 1) & 0xFFFF
            header.slot_count = (header.slot_count + 1) & 0xFFFF
            page[:VariableHeader.SIZE] = header.pack()
            return _write_page(disk_root, plato, cara, pista, sector, page)
    return False


def _join_record(values: Sequence[str]) -> bytes:
    out = bytearray()
    last = len(values) - 1
    for index, value in enumerate(values):
        encoded = value.encode(_ENCODING, _ERRORS)
        if len(out) + len(encoded) + 2 >= MAX_ROW_LEN:
            break
        out += encoded
        if index < last:
            out += b"#"
    return bytes(out)


class Loader:
    """Loads CSV relations onto a disk, tracking how many have been loaded."""

    def __init__(self, disk_root, schema_path):
        self.disk_root = Path(disk_root)
        self.schema_path = Path(schema_path)
        self.loaded_count = 0

    def cylinder_range(self) -> tuple[int, int]:
        """Cylinders for the next relation: the first half of the disk, then the second."""
        half = MAX_TRACKS // 2
        if self.loaded_count == 0:
            return 0, half - 1
        return half, MAX_TRACKS - 1

    def load_csv(self, csv_path, fixed_length: bool) -> int:
        """Write every complete line of a CSV file as a record; return how many.

        The first line names the columns. A final line without a newline is
        ignored. The relation is added to the catalogue unless already there.
        """
        name = base_name(csv_path)
        try:
            data = Path(csv_path).read_bytes()
        except OSError as exc:
            raise LoadError("Error abriendo archivo TSV") from exc

        if count_relations(self.schema_path) == 1:
            self.loaded_count += 1
        start, end = self.cylinder_range()

        columns: list[str] = []
        types: list[str] = []
        written = 0
        for raw in data.split(b"\n")[:-1]:
            line = raw.decode(_ENCODING, _ERRORS)
            if not columns:
                columns = parse_header(line)
                continue
            values = parse_csv_fields(line, MAX_COLUMNS)
            if not types and len(values) == len(columns):
                types = infer_types(values)
            record = _join_record(values)

            if fixed_length:
                size = HOUSING_RECORD_SIZE if name == "Housing" else TITANIC_RECORD_SIZE
                record = (record.ljust(size - 1, b" ") + b"\n")[:size]
                if not write_fixed_record(self.disk_root, start, record):
                    raise LoadError("Error escribiendo registro fijo")
            else:
                record += b"\n"
                if len(record) > SECTOR_SIZE:
                    raise LoadError("Registro excede tamaño de sector")
                if not write_variable_record(self.disk_root, start, record):
                    raise LoadError("Error escribiendo registro variable")
            written += 1

        self.loaded_count += 1
        if not relation_exists(self.schema_path, name):
            types = types + ["string"] * (len(columns) - len(types))
            line = format_schema_line(name, columns, types, fixed_length, start, end)
            try:
                with open(self.schema_path, "a", encoding=_ENCODING, errors=_ERRORS, newline="\n") as out:
                    out.write(line + "\n")
            except OSError as exc:
                raise LoadError("Error abriendo esquema") from exc
        return written