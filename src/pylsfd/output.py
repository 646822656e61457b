"""Rendering of rows as a table, raw lines or JSON."""

import json
import sys
from collections.abc import Sequence
from enum import Enum
from typing import IO

from rich.cells import cell_len
from rich.console import Console
from rich.table import Table

from pylsfd.columns import ColumnInfo, JsonType
from pylsfd.projection import Row


class OutputMode(Enum):
    """Output formats."""

    PLAIN = "plain"
    RAW = "raw"
    JSON = "json"

    @classmethod
    def from_flags(cls, raw: bool = False, json_mode: bool = False) -> "OutputMode":
        """Pick the mode for the --raw/--json flags; JSON wins over raw."""
        if json_mode:
            return cls.JSON
        if raw:
            return cls.RAW
        return cls.PLAIN


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _hex_escape(text: str, unsafe: str = "") -> str:
    out = []
    for ch in text:
        if ch in unsafe or not ch.isprintable():
            out.extend(f"\\x{b:02x}" for b in ch.encode("utf-8", "surrogateescape"))
        else:
            out.append(ch)
    return "".join(out)


def escape_unprintable(text: str) -> str:
    """Escape control characters and undecodable bytes as \\xHH."""
    return _hex_escape(text)


def escape_raw(text: str) -> str:
    """Escape a value for raw output: spaces and backslashes too."""
    return _hex_escape(text, " \\")


def _json_text(text: str) -> str:
    # undecodable bytes in file names come back from surrogateescape as \xHH
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def _emit_plain(
    rows: Sequence[Row], columns: Sequence[ColumnInfo], noheadings: bool, file: IO[str]
) -> None:
    if noheadings and not rows:
        return
    table = Table(
        box=None,
        show_header=not noheadings,
        header_style=None,
        pad_edge=False,
        padding=(0, 1),
    )
    widths = [len(col.name) if not noheadings else 0 for col in columns]
    for col in columns:
        table.add_column(col.name, justify="right" if col.right else "left", no_wrap=True)
    for row in rows:
        cells = [escape_unprintable(_text(value)) for value in row]
        widths = [max(w, cell_len(cell)) for w, cell in zip(widths, cells)]
        table.add_row(*cells)

    # wide enough that rich never wraps or truncates a cell
    width = sum(widths) + 2 * len(columns) + 1
    console = Console(file=file, width=width, highlight=False, markup=False, emoji=False)
    console.print(table)


def _emit_raw(
    rows: Sequence[Row], columns: Sequence[ColumnInfo], noheadings: bool, file: IO[str]
) -> None:
    if not noheadings:
        file.write(" ".join(col.name for col in columns) + "\n")
    for row in rows:
        file.write(" ".join(escape_raw(_text(value)) for value in row) + "\n")


def _json_value(col: ColumnInfo, value: object) -> object:
    if value is None:
        return None
    if col.json_type is JsonType.NUMBER:
        return int(value)  # type: ignore[call-overload]
    return _json_text(str(value))


def _emit_json(rows: Sequence[Row], columns: Sequence[ColumnInfo], file: IO[str]) -> None:
    records = [
        {col.name.lower(): _json_value(col, value) for col, value in zip(columns, row)}
        for row in rows
    ]
    json.dump({"lsfd": records}, file, indent=3, ensure_ascii=False)
    file.write("\n")


def emit(
    rows: Sequence[Row],
    columns: Sequence[ColumnInfo],
    mode: OutputMode = OutputMode.PLAIN,
    noheadings: bool = False,
    file: IO[str] | None = None,
) -> None:
    """
    Write rows to a stream.

    Args:
        rows: Values in the order of columns.
        columns: Column metadata (name, alignment, JSON type).
        mode: Output format.
        noheadings: Leave out the header line (ignored for JSON).
        file: Destination. Default: sys.stdout at call time.
    """
    file = file or sys.stdout
    if mode is OutputMode.JSON:
        _emit_json(rows, columns, file)
    elif mode is OutputMode.RAW:
        _emit_raw(rows, columns, noheadings, file)
    else:
        _emit_plain(rows, columns, noheadings, file)
