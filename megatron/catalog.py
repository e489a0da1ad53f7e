"""Relation catalogue stored as '#'-separated lines in a schema file."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

MAX_RELATION_NAME = 128
MAX_COLUMNS = 20
MAX_COL_LEN = 64

_LINE_LIMIT = 1023
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")

log = logging.getLogger(__name__)


class SchemaError(Exception):
    """A relation is missing from the catalogue or its entry is malformed."""


@dataclass
class RelSchema:
    """One relation of the catalogue."""

    name: str
    fields: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)
    fixed_length: bool = False
    start_cylinder: int = 0
    end_cylinder: int = 0

    @property
    def num_columns(self) -> int:
        return len(self.fields)


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def find_schema_line(schema_path, name: str) -> str | None:
    """Return the catalogue line describing ``name``, or None if there is none."""
    try:
        text = Path(schema_path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise SchemaError(f"No se pudo abrir el archivo de esquema: {schema_path}") from exc
    log.debug("Buscando tabla '%s' en '%s'", name, schema_path)
    for line in text.split("\n"):
        if line.startswith(name) and line[len(name):len(name) + 1] == "#":
            return line
    return None


def parse_schema_line(line: str) -> RelSchema:
    """Parse ``name#col#type#...#fijo|variable#start#end`` into a RelSchema."""
    tokens = iter([t for t in line[:_LINE_LIMIT].split("#") if t])
    name = next(tokens, None)
    if name is None:
        raise SchemaError("Línea de esquema vacía")

    schema = RelSchema(name=name)
    while True:
        token = next(tokens, None)
        if token is None or len(schema.fields) >= MAX_COLUMNS:
            break
        if token in ("fijo", "variable"):
            schema.fixed_length = token == "fijo"
            break
        column_type = next(tokens, None)
        if column_type is None:
            raise SchemaError(f"Columna sin tipo: {token}")
        schema.fields.append(token)
        schema.types.append(column_type)

    start = next(tokens, None)
    if start is None:
        raise SchemaError("Falta el cilindro inicial")
    end = next(tokens, None)
    if end is None:
        raise SchemaError("Falta el cilindro final")
    schema.start_cylinder = _atoi(start)
    schema.end_cylinder = _atoi(end)
    return schema


def load_schema(schema_path, name: str) -> RelSchema:
    """Look up and parse the catalogue entry of relation ``name``."""
    line = find_schema_line(schema_path, name)
    if line is None:
        raise SchemaError("Tabla no encontrada en el catálogo")
    return parse_schema_line(line)