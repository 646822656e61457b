"""Shared test fixtures for pylsfd."""

import subprocess
import sys
from pathlib import Path

import pytest
import structlog

# "ready" is written once interpreter startup has closed the files it reads
SLEEPER_CODE = "import sys, time; sys.stderr.write('ready\\n'); sys.stderr.flush(); time.sleep(60)"


def make_proc(
    root: Path,
    pid: int,
    comm: str | None = "demo",
    fds: dict[int | str, str | Path] | None = None,
    slots: dict[str, str | Path] | None = None,
    namespaces: dict[str, str | Path] | None = None,
    fd_dir: bool = True,
) -> Path:
    """
    Build a fake /proc/<pid> directory.

    Descriptors, special slots and namespaces are symlinks, like in procfs:
    stat() follows them and readlink() returns the target.

    Args:
        root: Fake procfs root.
        pid: Process ID (directory name).
        comm: Content of the comm file, or None to leave it out.
        fds: Descriptor name -> link target.
        slots: cwd/exe/root -> link target.
        namespaces: Namespace name -> link target.
        fd_dir: Whether to create the fd directory at all.
    """
    proc_dir = root / str(pid)
    proc_dir.mkdir(parents=True)
    if comm is not None:
        (proc_dir / "comm").write_text(comm + "\n")
    if fd_dir:
        (proc_dir / "fd").mkdir()
        for fd, target in (fds or {}).items():
            (proc_dir / "fd" / str(fd)).symlink_to(target)
    for name, target in (slots or {}).items():
        (proc_dir / name).symlink_to(target)
    if namespaces:
        (proc_dir / "ns").mkdir()
        for name, target in namespaces.items():
            (proc_dir / "ns" / name).symlink_to(target)
    return proc_dir


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def proc_root(tmp_path: Path) -> Path:
    """An empty fake procfs root."""
    root = tmp_path / "proc"
    root.mkdir()
    return root


@pytest.fixture
def regular_file(tmp_path: Path) -> Path:
    """A regular file to point descriptors at."""
    path = tmp_path / "a"
    path.write_text("hello\n")
    return path


def spawn_sleeper(**popen_kwargs) -> subprocess.Popen:
    """Start a Python child that sleeps for a minute."""
    popen_kwargs.setdefault("stdin", subprocess.DEVNULL)
    popen_kwargs.setdefault("stdout", subprocess.DEVNULL)
    proc = subprocess.Popen(
        [sys.executable, "-c", SLEEPER_CODE], stderr=subprocess.PIPE, text=True, **popen_kwargs
    )
    try:
        ready = proc.stderr.readline()
    finally:
        proc.stderr.close()
    if ready != "ready\n":
        reap([proc])
        raise RuntimeError(f"sleeper {proc.pid} did not start: {ready!r}")
    return proc


def reap(processes: list[subprocess.Popen]) -> None:
    """Terminate and wait for spawned children."""
    for p in processes:
        if p.poll() is None:
            p.terminate()
    for p in processes:
        try:
            p.wait(timeout=2.0)
        except subprocess.TimeoutExpired:
            p.kill()
            p.wait()
