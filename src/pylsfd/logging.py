"""Console diagnostics and structlog configuration.

Human-readable diagnostics go to stderr through a Rich
console so they never mix with the report on stdout. Structured events
from the collection engine go through structlog and are shown only when
debugging is enabled.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime

import structlog
from rich.console import Console
from rich.markup import escape

# Rich console for colorful human-readable output
_console = Console(stderr=True, highlight=False)

_LEVEL_STYLES = {
    "info": "[bright_blue]\\[info][/]",
    "warn": "[yellow]\\[warn][/]",
    "error": "[bold red]\\[err][/] ",
}


def log(level: str, msg: str) -> None:
    """Print a diagnostic with timestamp and level.

    Args:
        level: Log level (info, warn, error)
        msg: Plain text message; markup characters are escaped
    """
    ts = datetime.now().strftime("%H:%M:%S")
    lvl = _LEVEL_STYLES.get(level, f"[{level}]")
    _console.print(f"[dim]{ts}[/] {lvl} {escape(msg)}")


def error(msg: str) -> None:
    """Log an error message."""
    log("error", msg)


def configure(debug: bool = False) -> None:
    """Configure structlog to render events on stderr.

    Args:
        debug: Show debug events (skipped entries, worker lifecycle).
            Otherwise only warnings and errors are shown.
    """
    level = logging.DEBUG if debug else logging.WARNING
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
