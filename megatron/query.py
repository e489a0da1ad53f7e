"""Helpers shared by the query handlers: field splitting and conditions."""

from __future__ import annotations

import os
import re

MAX_FIELDS = 20
MAX_FIELD_LEN = 64
MAX_RECORD_LEN = 200
MAX_ROWS = 1000
SCHEMA_PATH = "schema/schema.txt"

_NUMBER_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


class ComparisonError(ValueError):
    """An ordering operator was applied to non-numeric values."""


def split(text: str, delim: str) -> list[str]:
    """Split ``text`` on ``delim`` into at most MAX_FIELDS truncated fields.

    A trailing empty field is not produced.
    """
    limit = MAX_FIELD_LEN - 1
    fields: list[str] = []
    start = 0
    for pos, char in enumerate(text):
        if len(fields) >= MAX_FIELDS:
            break
        if char == delim:
            fields.append(text[start:pos][:limit])
            start = pos + 1
    if len(fields) < MAX_FIELDS and start < len(text):
        fields.append(text[start:][:limit])
    return fields


def _leading_number(text: str) -> float | None:
    match = _NUMBER_PREFIX.match(text)
    return float(match.group(1)) if match else None


def eval_condition(field_value: str, op: str, cond_value: str) -> bool:
    """Compare a field with a condition value, numerically when both are numbers."""
    if not field_value:
        return False

    value = _leading_number(field_value)
    target = _leading_number(cond_value)
    if value is not None and target is not None:
        numeric = {
            "=": value == target,
            ">": value > target,
            "<": value < target,
            ">=": value >= target,
            "<=": value <= target,
            "!=": value != target,
        }
        if op in numeric:
            return numeric[op]

    if op == "=":
        return field_value == cond_value
    if op == "!=":
        return field_value != cond_value
    raise ComparisonError(
        f"Error: No se permiten comparaciones como '{op}' entre cadenas."
    )


def describe_file_size(path) -> str:
    """Describe the size in bytes of the file at ``path``."""
    size = os.stat(path).st_size
    return f"Tamaño del archivo '{path}': {size} bytes"