"""
File classification for pylsfd.

Each file is bound to a FileClass chosen from its st_mode. FileClasses
form short chains ending at GENERIC: rendering asks each link in turn,
most specific first, until one claims the column; disposal runs every
link in the same order.

New kinds of files are added with register(); nothing else changes.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from pylsfd.columns import Column
from pylsfd.idcache import UsernameCache
from pylsfd.models import FileRecord, Process, association_label

Value = str | int | None

SetupFunc = Callable[[FileRecord, os.stat_result], None]
RenderFunc = Callable[[Process, FileRecord, Column, UsernameCache], object]
DisposeFunc = Callable[[FileRecord], None]


@dataclass(slots=True, frozen=True)
class FileClass:
    """
    One node of a classification chain.

    Attributes:
        name: Name of the variant, also the key of its payload.
        parent: Next, more generic, link. Only GENERIC has none.
        setup: Attaches variant-private data to a new record.
        render: Returns the column value, or NotImplemented to defer
            to the parent.
        dispose: Releases what setup attached.
    """

    name: str
    parent: FileClass | None = None
    setup: SetupFunc | None = None
    render: RenderFunc | None = None
    dispose: DisposeFunc | None = None

    def chain(self) -> Iterator[FileClass]:
        """Yield this class and its ancestors, most specific first."""
        link: FileClass | None = self
        while link is not None:
            yield link
            link = link.parent


def format_device(dev: int) -> str:
    """Format a device number as "major,minor"."""
    return f"{os.major(dev)},{os.minor(dev)}"


def _generic_type(mode: int) -> str:
    if stat.S_ISDIR(mode):
        return "directory"
    if stat.S_ISFIFO(mode):
        return "fifo"
    if stat.S_ISSOCK(mode):
        return "socket"
    if stat.S_ISLNK(mode):
        return "symbolic link"
    return "unknown"


def _render_generic(
    proc: Process, file: FileRecord, column: Column, usernames: UsernameCache
) -> object:
    if column is Column.COMMAND:
        return proc.command
    if column is Column.PID:
        return proc.pid
    if column is Column.UID:
        return proc.uid
    if column is Column.USER:
        return usernames.get(proc.uid) if proc.uid is not None else None
    if column is Column.ASSOC:
        return association_label(file.association)
    if column is Column.FD:
        # special slots have no descriptor number
        return file.fd if file.fd is not None else NotImplemented
    if column is Column.INODE:
        return file.ino
    if column is Column.NAME:
        return file.name
    if column is Column.DEVICE:
        return format_device(file.dev)
    if column is Column.TYPE:
        return _generic_type(file.mode)
    return NotImplemented


def _dispose_generic(file: FileRecord) -> None:
    file.payloads.clear()


GENERIC = FileClass("generic", render=_render_generic, dispose=_dispose_generic)


def _render_regular(
    proc: Process, file: FileRecord, column: Column, usernames: UsernameCache
) -> object:
    if column is Column.TYPE:
        return "regular"
    return NotImplemented


REGULAR = FileClass("regular", parent=GENERIC, render=_render_regular)


def _device_class(name: str, type_label: str) -> FileClass:
    """Build a FileClass for special files that carry their own device number."""

    def setup(file: FileRecord, st: os.stat_result) -> None:
        file.payloads[name] = st.st_rdev

    def render(
        proc: Process, file: FileRecord, column: Column, usernames: UsernameCache
    ) -> object:
        if column is Column.TYPE:
            return type_label
        if column is Column.DEVICE:
            return format_device(file.payloads[name])
        return NotImplemented

    def dispose(file: FileRecord) -> None:
        file.payloads.pop(name, None)

    return FileClass(name, parent=GENERIC, setup=setup, render=render, dispose=dispose)


CHAR_DEVICE = _device_class("cdev", "character device")
BLOCK_DEVICE = _device_class("bdev", "block device")

_CLASSES: dict[int, FileClass] = {
    stat.S_IFREG: REGULAR,
    stat.S_IFCHR: CHAR_DEVICE,
    stat.S_IFBLK: BLOCK_DEVICE,
}


def register(fmt: int, variant: FileClass) -> None:
    """
    Bind a file format (an S_IFMT value) to a FileClass.

    Raises:
        ValueError: If the variant's chain does not end at GENERIC.
    """
    *_, root = variant.chain()
    if root is not GENERIC:
        raise ValueError(f"FileClass {variant.name!r} does not fall back to {GENERIC.name!r}")
    _CLASSES[stat.S_IFMT(fmt)] = variant


def classify(mode: int) -> FileClass:
    """Pick the FileClass for a st_mode value."""
    return _CLASSES.get(stat.S_IFMT(mode), GENERIC)


def make_file(st: os.stat_result, name: str, association: int) -> FileRecord:
    """Build a classified FileRecord from stat metadata and a link target."""
    variant = classify(st.st_mode)
    file = FileRecord(
        association=association,
        name=name,
        mode=st.st_mode,
        dev=st.st_dev,
        ino=st.st_ino,
        variant=variant,
    )
    for link in reversed(list(variant.chain())):
        if link.setup is not None:
            link.setup(file, st)
    return file


def render_column(
    proc: Process, file: FileRecord, column: Column, usernames: UsernameCache
) -> Value:
    """Value of one column for one file; None when no link claims it."""
    for link in file.variant.chain():
        if link.render is None:
            continue
        value = link.render(proc, file, column, usernames)
        if value is not NotImplemented:
            return value  # type: ignore[return-value]
    return None


def dispose_file(file: FileRecord) -> None:
    """Release the variant-private data of a file, most specific first."""
    for link in file.variant.chain():
        if link.dispose is not None:
            link.dispose(file)
