"""Plain-text table output for query results."""

from __future__ import annotations

import sys
from collections.abc import Sequence


def format_separator(widths: Sequence[int]) -> str:
    """Border line for columns of the given widths."""
    return "".join("+" + "-" * (width + 2) for width in widths) + "+"


class TablePrinter:
    """Prints a header and then rows using the header's column widths."""

    def __init__(self, out=None):
        self.out = out if out is not None else sys.stdout
        self.widths: list[int] = []

    def print_headers(self, headers: Sequence[str]) -> None:
        """Print the header block and remember its column widths."""
        self.widths = [len(header) for header in headers]
        separator = format_separator(self.widths)
        cells = "".join(
            f"| {header:<{width}} " for header, width in zip(headers, self.widths)
        )
        self.out.write(f"{separator}\n{cells}|\n{separator}\n")

    def print_row(self, fields: Sequence[str], indices: Sequence[int] | None = None) -> None:
        """Print one row; ``indices`` picks the field shown in each column, None shows all."""
        cells = []
        for column, width in enumerate(self.widths):
            idx = column if indices is None else indices[column]
            value = fields[idx] if idx < len(fields) else ""
            cells.append(f"| {value:<{width}} ")
        self.out.write("".join(cells) + "|\n")