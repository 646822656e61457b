"""Catalog of output columns and column selection."""

from dataclasses import dataclass
from enum import Enum

from pylsfd.errors import UnknownColumnError


class Column(Enum):
    """Identifiers of the selectable output columns."""

    ASSOC = "ASSOC"
    COMMAND = "COMMAND"
    DEVICE = "DEVICE"
    FD = "FD"
    INODE = "INODE"
    NAME = "NAME"
    PID = "PID"
    TYPE = "TYPE"
    UID = "UID"
    USER = "USER"


class JsonType(Enum):
    """Value type of a column in JSON output."""

    STRING = "string"
    NUMBER = "number"


@dataclass(slots=True, frozen=True)
class ColumnInfo:
    """Static metadata of one output column."""

    id: Column
    width_hint: float
    right: bool
    json_type: JsonType
    help: str

    @property
    def name(self) -> str:
        return self.id.value


CATALOG: dict[Column, ColumnInfo] = {
    info.id: info
    for info in (
        ColumnInfo(Column.ASSOC, 0, True, JsonType.STRING, "association between file and process"),
        ColumnInfo(Column.COMMAND, 0, False, JsonType.STRING, "command of the process opening the file"),
        ColumnInfo(Column.DEVICE, 0, True, JsonType.STRING, "device major and minor number"),
        ColumnInfo(Column.FD, 0, True, JsonType.NUMBER, "file descriptor for the file"),
        ColumnInfo(Column.INODE, 0, True, JsonType.NUMBER, "inode number"),
        ColumnInfo(Column.NAME, 0, False, JsonType.STRING, "name of the file"),
        ColumnInfo(Column.PID, 0, True, JsonType.NUMBER, "PID of the process opening the file"),
        ColumnInfo(Column.TYPE, 0, True, JsonType.STRING, "file type"),
        ColumnInfo(Column.UID, 0, True, JsonType.NUMBER, "user ID number"),
        ColumnInfo(Column.USER, 0, True, JsonType.STRING, "user of the process"),
    )
}

DEFAULT_COLUMNS: tuple[Column, ...] = (
    Column.COMMAND,
    Column.PID,
    Column.USER,
    Column.ASSOC,
    Column.TYPE,
    Column.DEVICE,
    Column.INODE,
    Column.NAME,
)


def column_by_name(name: str) -> ColumnInfo:
    """Look up a column by name, case-insensitively.

    Raises:
        UnknownColumnError: If no column has that name.
    """
    wanted = name.upper()
    for info in CATALOG.values():
        if info.name == wanted:
            return info
    raise UnknownColumnError(name)


def parse_columns(text: str | None) -> list[ColumnInfo]:
    """
    Turn a comma-separated column list into column metadata.

    An empty or missing list selects DEFAULT_COLUMNS. A list starting
    with "+" is appended to the default columns instead of replacing them.

    Raises:
        UnknownColumnError: On the first token that names no column.
    """
    if not text:
        return [CATALOG[col] for col in DEFAULT_COLUMNS]

    selected: list[ColumnInfo] = []
    if text.startswith("+"):
        selected.extend(CATALOG[col] for col in DEFAULT_COLUMNS)
        text = text[1:]

    selected.extend(column_by_name(token) for token in text.split(","))
    return selected


def column_help() -> str:
    """Help block listing every column, one per line."""
    return "\n".join(f" {info.name:>11}  {info.help}" for info in CATALOG.values())
