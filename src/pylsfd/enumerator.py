"""Per-process enumeration of special slots and open descriptors."""

import os
from collections.abc import Iterable
from pathlib import Path

import structlog

from pylsfd.classify import make_file
from pylsfd.errors import CommandNameError
from pylsfd.models import (
    CLASSICAL_ASSOCIATIONS,
    NAMESPACE_ASSOCIATIONS,
    Association,
    FileRecord,
    Process,
)

log = structlog.get_logger()

_DIR_FLAGS = os.O_RDONLY | os.O_DIRECTORY | getattr(os, "O_CLOEXEC", 0)


class ProcessEnumerator:
    """
    Fills a Process with the files it holds.

    Everything under procfs can disappear while it is being read: a file
    that cannot be stat()ed or readlink()ed is left out, never an error.
    Only a process whose command name cannot be read is fatal, unless
    skip_vanished is set.
    """

    def __init__(self, proc_root: Path | str = "/proc", skip_vanished: bool = False) -> None:
        """
        Initialize the ProcessEnumerator.

        Args:
            proc_root: Mount point of procfs.
            skip_vanished: Skip processes whose command name cannot be
                read instead of raising CommandNameError.
        """
        self._proc_root = Path(proc_root)
        self._skip_vanished = skip_vanished

    @property
    def proc_root(self) -> Path:
        return self._proc_root

    def fill(self, proc: Process) -> bool:
        """
        Resolve the command name, special slots and descriptors of a process.

        Returns:
            False if the process vanished and was skipped, True otherwise.

        Raises:
            CommandNameError: If the command name cannot be read and
                skip_vanished is off.
        """
        proc_dir = self._proc_root / str(proc.pid)
        try:
            proc.command = (proc_dir / "comm").read_text(errors="replace").rstrip("\n")
            proc.uid = os.stat(proc_dir).st_uid
        except OSError as e:
            if not self._skip_vanished:
                raise CommandNameError(proc.pid, e.strerror or str(e)) from e
            log.debug("process.vanished", pid=proc.pid, error=str(e))
            proc.command = None
            proc.uid = None
            return False

        proc.files.extend(self._collect_slots(proc_dir, CLASSICAL_ASSOCIATIONS))
        proc.files.extend(self._collect_slots(proc_dir / "ns", NAMESPACE_ASSOCIATIONS))
        proc.files.extend(self._collect_descriptors(proc_dir / "fd"))
        return True

    def _collect_slots(
        self, directory: Path, associations: Iterable[Association]
    ) -> list[FileRecord]:
        """Resolve fixed, named entries of one directory."""
        dd = _open_dir(directory)
        if dd is None:
            return []
        try:
            files: list[FileRecord] = []
            for assoc in associations:
                file = _resolve(dd, assoc.label, assoc)
                if file is not None:
                    files.append(file)
            return files
        finally:
            os.close(dd)

    def _collect_descriptors(self, fd_dir: Path) -> list[FileRecord]:
        """Resolve every numeric entry of /proc/<pid>/fd."""
        dd = _open_dir(fd_dir)
        if dd is None:
            return []
        files: list[FileRecord] = []
        try:
            # scandir() on a descriptor works on a duplicate and closes it itself
            with os.scandir(dd) as entries:
                for entry in entries:
                    if not (entry.name.isascii() and entry.name.isdigit()):
                        continue
                    file = _resolve(dd, entry.name, int(entry.name))
                    if file is not None:
                        files.append(file)
        except OSError as e:
            # the listing itself can fail midway when the process exits
            log.debug("descriptors.unreadable", path=str(fd_dir), error=str(e))
        finally:
            os.close(dd)
        return files


def _open_dir(path: Path) -> int | None:
    try:
        return os.open(path, _DIR_FLAGS)
    except OSError as e:
        log.debug("directory.unreadable", path=str(path), error=str(e))
        return None


def _resolve(dd: int, entry: str, association: int) -> FileRecord | None:
    """stat() through the link and read its target; None if either fails."""
    try:
        st = os.stat(entry, dir_fd=dd)
        target = os.readlink(entry, dir_fd=dd)
    except OSError as e:
        log.debug("entry.skipped", entry=entry, error=str(e))
        return None
    return make_file(st, target, association)
