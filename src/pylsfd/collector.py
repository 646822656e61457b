"""Collection engine for pylsfd."""

import threading
from collections.abc import Collection
from pathlib import Path
from queue import Queue

import psutil
import structlog

from pylsfd.enumerator import ProcessEnumerator
from pylsfd.errors import CollectorError
from pylsfd.models import Process
from pylsfd.registry import collect_processes

log = structlog.get_logger()

MAX_DEFAULT_WORKERS = 8


def default_workers() -> int:
    """Pool size used when none is configured: one per CPU, at most 8."""
    return max(1, min(psutil.cpu_count() or 1, MAX_DEFAULT_WORKERS))


class Collector:
    """
    Fixed pool of worker threads that enumerates a list of processes.

    run() blocks until every process has been handed to exactly one
    worker and that worker has finished with it. Workers take processes
    from a shared Queue; one sentinel per worker marks the end of work.

    An exception raised by the enumerator is fatal: the remaining workers
    stop enumerating and run() re-raises the first exception once all
    workers have been joined.
    """

    def __init__(self, enumerator: ProcessEnumerator, workers: int | None = None) -> None:
        """
        Initialize the Collector.

        Args:
            enumerator: Fills each claimed Process.
            workers: Number of worker threads. Default: default_workers().
        """
        if workers is not None and workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self._enumerator = enumerator
        self._workers = workers or default_workers()
        self._abort = threading.Event()
        self._errors: list[BaseException] = []
        self._skipped: set[int] = set()
        self._lock = threading.Lock()

    @property
    def workers(self) -> int:
        """Get the pool size."""
        return self._workers

    def run(self, processes: list[Process]) -> list[Process]:
        """
        Enumerate every process, in parallel, and wait for all of them.

        Returns:
            The processes that were filled, in their original order.
        """
        queue: Queue[Process | None] = Queue()
        self._abort.clear()
        self._errors.clear()
        self._skipped.clear()

        threads = [
            threading.Thread(
                target=self._drain,
                args=(queue,),
                daemon=True,
                name=f"Collector-{i}",
            )
            for i in range(self._workers)
        ]
        started: list[threading.Thread] = []
        for thread in threads:
            try:
                thread.start()
            except RuntimeError as e:
                self._abort.set()
                for _ in started:
                    queue.put(None)
                for worker in started:
                    worker.join()
                raise CollectorError(f"failed to create a thread: {e}") from e
            started.append(thread)

        log.debug("collector.started", workers=self._workers, processes=len(processes))

        for proc in processes:
            queue.put(proc)
        for _ in threads:
            queue.put(None)

        for thread in threads:
            thread.join()

        if self._errors:
            raise self._errors[0]

        filled = [proc for proc in processes if proc.pid not in self._skipped]
        log.debug("collector.finished", filled=len(filled), skipped=len(processes) - len(filled))
        return filled

    def _drain(self, queue: "Queue[Process | None]") -> None:
        """Worker loop: claim processes until the sentinel arrives."""
        while True:
            proc = queue.get()
            if proc is None:
                return
            if self._abort.is_set():
                # keep draining so the coordinator can join
                continue
            try:
                if not self._enumerator.fill(proc):
                    with self._lock:
                        self._skipped.add(proc.pid)
            except Exception as e:
                with self._lock:
                    self._errors.append(e)
                self._abort.set()


def collect(
    proc_root: Path | str = "/proc",
    workers: int | None = None,
    pids: Collection[int] | None = None,
    skip_vanished: bool = False,
) -> list[Process]:
    """
    Take a snapshot of every process and the files it holds.

    Args:
        proc_root: Mount point of procfs.
        workers: Pool size. Default: default_workers().
        pids: If given, scan only these processes.
        skip_vanished: Skip processes that exit before their command name
            is read instead of failing.

    Raises:
        ProcNamespaceError: If proc_root cannot be listed.
        CommandNameError: If a command name cannot be read and
            skip_vanished is off.
    """
    processes = collect_processes(proc_root, pids)
    enumerator = ProcessEnumerator(proc_root, skip_vanished=skip_vanished)
    return Collector(enumerator, workers).run(processes)
