"""Projection of collected processes into output rows."""

from collections.abc import Iterable, Sequence

from pylsfd.classify import Value, dispose_file, render_column
from pylsfd.columns import ColumnInfo
from pylsfd.idcache import UsernameCache
from pylsfd.models import Process

Row = tuple[Value, ...]


def project(
    processes: Iterable[Process],
    columns: Sequence[ColumnInfo],
    usernames: UsernameCache,
) -> list[Row]:
    """One row per file, in process order then file discovery order."""
    return [
        tuple(render_column(proc, file, col.id, usernames) for col in columns)
        for proc in processes
        for file in proc.files
    ]


def dispose(processes: Iterable[Process]) -> None:
    """Release every file of every process."""
    for proc in processes:
        for file in proc.files:
            dispose_file(file)
        proc.files.clear()
