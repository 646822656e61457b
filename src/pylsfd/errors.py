"""Exceptions raised by pylsfd.

Every exception here is fatal: the command line reports it and exits
with a nonzero status. Per-item races while scanning procfs are not
errors and never reach this module.
"""


class LsfdError(Exception):
    """Base class for fatal pylsfd errors."""


class ProcNamespaceError(LsfdError):
    """The process namespace (e.g. /proc) could not be listed."""


class CommandNameError(LsfdError):
    """The command name of a process could not be resolved."""

    def __init__(self, pid: int, reason: str) -> None:
        super().__init__(f"failed to get command name of PID {pid}: {reason}")
        self.pid = pid


class UnknownColumnError(LsfdError):
    """A requested output column is not in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown column: {name}")
        self.name = name


class CollectorError(LsfdError):
    """The worker pool could not be started."""
