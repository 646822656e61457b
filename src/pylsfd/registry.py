"""Process registry: the list of processes to scan."""

import os
from collections.abc import Collection
from pathlib import Path

import structlog

from pylsfd.errors import ProcNamespaceError
from pylsfd.models import Process

log = structlog.get_logger()


def collect_processes(
    proc_root: Path | str = "/proc", pids: Collection[int] | None = None
) -> list[Process]:
    """
    Create one empty Process per numeric entry of the process namespace.

    Entries keep the order the directory listing returns them in.
    Non-numeric names (self, sys, ...) and 0 are skipped.

    Args:
        proc_root: Mount point of procfs.
        pids: If given, keep only these pids.

    Raises:
        ProcNamespaceError: If proc_root cannot be listed.
    """
    processes: list[Process] = []
    try:
        with os.scandir(proc_root) as entries:
            for entry in entries:
                if not (entry.name.isascii() and entry.name.isdigit()):
                    continue
                pid = int(entry.name)
                if pid == 0 or (pids is not None and pid not in pids):
                    continue
                processes.append(Process(pid=pid))
    except OSError as e:
        raise ProcNamespaceError(f"failed to open {proc_root}: {e.strerror or e}") from e

    log.debug("registry.collected", proc_root=str(proc_root), processes=len(processes))
    return processes
