"""Data models for pylsfd."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pylsfd.classify import FileClass


class Association(IntEnum):
    """Special slots a file can occupy for a process.

    Descriptor numbers are non-negative, so special slots use negative
    values and both can share the ``FileRecord.association`` field.
    """

    CWD = -1
    EXE = -2
    ROOT = -3
    NS_CGROUP = -4
    NS_IPC = -5
    NS_MNT = -6
    NS_NET = -7
    NS_PID = -8
    NS_PID4C = -9
    NS_TIME = -10
    NS_TIME4C = -11
    NS_USER = -12
    NS_UTS = -13

    @property
    def label(self) -> str:
        """Name of the procfs entry backing this slot."""
        return _LABELS[self]


_LABELS = {
    Association.CWD: "cwd",
    Association.EXE: "exe",
    Association.ROOT: "root",
    Association.NS_CGROUP: "cgroup",
    Association.NS_IPC: "ipc",
    Association.NS_MNT: "mnt",
    Association.NS_NET: "net",
    Association.NS_PID: "pid",
    Association.NS_PID4C: "pid_for_children",
    Association.NS_TIME: "time",
    Association.NS_TIME4C: "time_for_children",
    Association.NS_USER: "user",
    Association.NS_UTS: "uts",
}

# Entries living directly in /proc/<pid>
CLASSICAL_ASSOCIATIONS = (Association.CWD, Association.EXE, Association.ROOT)

# Entries living in /proc/<pid>/ns
NAMESPACE_ASSOCIATIONS = (
    Association.NS_CGROUP,
    Association.NS_IPC,
    Association.NS_MNT,
    Association.NS_NET,
    Association.NS_PID,
    Association.NS_PID4C,
    Association.NS_TIME,
    Association.NS_TIME4C,
    Association.NS_USER,
    Association.NS_UTS,
)


def association_label(association: int) -> str:
    """Render an association as the ASSOC column shows it."""
    if association >= 0:
        return str(association)
    return Association(association).label


@dataclass(slots=True)
class FileRecord:
    """A file held by a process: an open descriptor or a special slot."""

    association: int  # fd number (>= 0) or an Association tag (< 0)
    name: str  # symlink target as read from procfs
    mode: int  # st_mode
    dev: int  # st_dev of the file
    ino: int
    variant: FileClass
    payloads: dict[str, Any] = field(default_factory=dict)

    @property
    def fd(self) -> int | None:
        """Descriptor number, or None for special slots."""
        return self.association if self.association >= 0 else None


@dataclass(slots=True)
class Process:
    """A scanned process and the files it owns, in discovery order."""

    pid: int
    command: str | None = None  # set once by the enumerator
    uid: int | None = None
    files: list[FileRecord] = field(default_factory=list)
