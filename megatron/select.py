"""SELECT queries, with and without a WHERE condition, over the buffered disk."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from megatron.buffer_manager import BufferManager
from megatron.catalog import RelSchema, load_schema
from megatron.pages import (
    MAX_FACES,
    MAX_PLATTERS,
    MAX_SECTORS,
    PAGE_SIZE,
    SECTORS_PER_PAGE,
    FixedHeader,
    PageId,
    VariableHeader,
)
from megatron.printer import TablePrinter
from megatron.query import ComparisonError, eval_condition, split

MAX_SELECTED = 16

_CONDITIONAL = re.compile(
    r'\s*SELECT\s*([^F]{1,127}?)\s*FROM\s*(\S{1,63})\s*WHERE\s*'
    r'([^<>=! ]{1,63})\s*([=<>!]{1,2})\s*"([^"]{1,63})'
)


class QueryError(Exception):
    """A query is malformed or names something the relation does not have."""


@dataclass
class SimpleQuery:
    """``SELECT fields FROM table``; ``fields`` is None for ``*``."""

    fields: list[str] | None
    table: str


@dataclass
class ConditionalQuery:
    """``SELECT fields FROM table WHERE field op "value"`` with an optional output name."""

    fields: list[str] | None
    table: str
    cond_field: str
    op: str
    value: str
    output: str = ""


def parse_simple_select(query: str) -> SimpleQuery:
    """Parse a query of the form ``SELECT a,b FROM table``; spaces are ignored."""
    select_pos = query.find("SELECT")
    from_pos = query.find("FROM")
    if select_pos < 0 or from_pos < 0 or from_pos <= select_pos:
        raise QueryError("Consulta no válida")
    fields_text = query[select_pos + 6:from_pos].replace(" ", "")
    table = query[from_pos + 4:].replace(" ", "")
    if fields_text == "*":
        return SimpleQuery(None, table)
    return SimpleQuery([f.lower() for f in split(fields_text, ",")], table)


def parse_conditional_select(query: str) -> ConditionalQuery:
    """Parse ``SELECT ... FROM t WHERE f op "v" | output``; '&' and '#' are dropped."""
    text = query.rstrip("\n").replace("&", "").replace("#", "")
    output = ""
    if "|" in text:
        text, output = text.split("|", 1)
        output = output.lstrip()
    match = _CONDITIONAL.match(text)
    if match is None:
        raise QueryError("Consulta mal formada.")
    fields_text, table, cond_field, op, value = match.groups()
    fields_text = fields_text.strip()
    if fields_text == "*":
        fields = None
    else:
        fields = [f.strip() for f in fields_text.split(",") if f.strip()][:MAX_SELECTED]
    return ConditionalQuery(fields, table, cond_field, op, value, output)


def _rows(buffer: BufferManager, schema: RelSchema) -> Iterator[list[str]]:
    header_size = FixedHeader.SIZE if schema.fixed_length else VariableHeader.SIZE
    for pista in range(schema.start_cylinder, schema.end_cylinder + 1):
        for cara in range(MAX_FACES):
            for plato in range(MAX_PLATTERS):
                for sector in range(0, MAX_SECTORS, SECTORS_PER_PAGE):
                    page_id = PageId(plato, cara, pista, sector)
                    frame = buffer.fix_page(page_id, False)
                    if frame is None:
                        continue
                    try:
                        content = bytes(frame.data[header_size:PAGE_SIZE])
                    finally:
                        buffer.unfix_page(page_id, False)
                    end = content.find(b"\0")
                    if end >= 0:
                        content = content[:end]
                    for line in content.decode("utf-8", "replace").split("\n"):
                        if not line or line.startswith("%"):
                            continue
                        yield split(line, "#")


def simple_select(buffer: BufferManager, schema_path, query: str, out=None) -> int:
    """Run a simple SELECT, print the table and return the number of rows."""
    out = out if out is not None else sys.stdout
    parsed = parse_simple_select(query)
    schema = load_schema(schema_path, parsed.table)

    if parsed.fields is None:
        indices = list(range(schema.num_columns))
    else:
        lowered = [name[:63].lower() for name in schema.fields]
        indices = []
        for requested in parsed.fields:
            if requested not in lowered:
                raise QueryError(f"Campo no encontrado: {requested}")
            indices.append(lowered.index(requested))

    printer = TablePrinter(out)
    printer.print_headers([schema.fields[i] for i in indices])
    count = 0
    for fields in _rows(buffer, schema):
        printer.print_row(fields, indices)
        count += 1
    out.write(f"Total de filas: {count}\n")
    return count


def _pick(fields: Sequence[str], idx: int) -> str:
    return fields[idx] if idx < len(fields) else ""


def conditional_select(buffer: BufferManager, schema_path, query: str, out=None, data_dir="data") -> int:
    """Run a SELECT with a WHERE condition; optionally save results as a new relation."""
    out = out if out is not None else sys.stdout
    parsed = parse_conditional_select(query)
    schema = load_schema(schema_path, parsed.table)

    cond_index = -1
    indices: list[int] = []
    wanted = [f.lower() for f in parsed.fields] if parsed.fields is not None else []
    for i, name in enumerate(schema.fields):
        if name.lower() == parsed.cond_field.lower():
            cond_index = i
        if parsed.fields is not None and name.lower() in wanted:
            indices.append(i)
    if cond_index == -1:
        raise QueryError("Campo de condición no encontrado.")
    if parsed.fields is None:
        indices = list(range(schema.num_columns))

    result_file = None
    result_path = None
    if parsed.output:
        result_path = Path(data_dir) / f"{parsed.output}.txt"
        try:
            result_file = open(result_path, "w", encoding="utf-8", newline="\n")
        except OSError as exc:
            raise QueryError(f"No se pudo abrir archivo de salida: {exc}") from exc

    printer = TablePrinter(out)
    printer.print_headers([schema.fields[i] for i in indices])
    count = 0
    try:
        for fields in _rows(buffer, schema):
            if cond_index >= len(fields):
                continue
            try:
                matched = eval_condition(fields[cond_index], parsed.op, parsed.value)
            except ComparisonError:
                matched = False
            if not matched:
                continue
            if result_file is not None:
                result_file.write("#".join(_pick(fields, i) for i in indices) + "\n")
            printer.print_row(fields, indices)
            count += 1
    finally:
        if result_file is not None:
            result_file.close()

    if result_path is not None:
        parts = [parsed.output]
        for i in indices:
            parts += [schema.fields[i], schema.types[i]]
        with open(schema_path, "a", encoding="utf-8", newline="\n") as catalogue:
            catalogue.write("#".join(parts) + "\n")
        out.write(f"Resultados guardados: {result_path}\n")

    out.write(f"Total de filas seleccionadas: {count}\n")
    return count