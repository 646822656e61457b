"""Command line interface for pylsfd."""

from pathlib import Path

import click

from pylsfd import logging as lsfd_logging
from pylsfd.collector import collect
from pylsfd.columns import column_help, parse_columns
from pylsfd.config import Config
from pylsfd.errors import LsfdError
from pylsfd.idcache import UsernameCache
from pylsfd.models import Process
from pylsfd.output import OutputMode, emit
from pylsfd.projection import dispose, project

EPILOG = "\b\nAvailable output columns:\n" + column_help()


def _parse_pids(ctx: click.Context, param: click.Parameter, value: str | None) -> set[int] | None:
    """Turn a comma-separated pid list into a set."""
    if value is None:
        return None
    pids = set()
    for token in value.split(","):
        token = token.strip()
        if not (token.isascii() and token.isdigit()):
            raise click.BadParameter(f"not a process ID: {token!r}")
        pids.add(int(token))
    return pids


@click.command(epilog=EPILOG, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-J", "--json", "json_mode", is_flag=True, help="Use JSON output format.")
@click.option("-n", "--noheadings", is_flag=True, help="Don't print headings.")
@click.option("-o", "--output", "output", metavar="LIST", help="Output columns.")
@click.option("-r", "--raw", is_flag=True, help="Use raw output format.")
@click.option(
    "-p", "--pid", "pids", metavar="PIDS", callback=_parse_pids,
    help="Collect only the given processes (comma-separated).",
)
@click.option(
    "-w", "--workers", type=click.IntRange(min=1), default=None,
    help="Number of collector threads.",
)
@click.option(
    "--skip-vanished", is_flag=True,
    help="Skip processes that exit before their command name is read.",
)
@click.option(
    "--proc-root", type=click.Path(file_okay=False, path_type=Path), default=None,
    help="Procfs mount point to scan (default /proc).",
)
@click.option(
    "--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
    help="Configuration file (default ~/.config/pylsfd/config.toml).",
)
@click.option("--debug", is_flag=True, help="Print collection events on stderr.")
@click.version_option(package_name="pylsfd")
@click.pass_context
def main(
    ctx: click.Context,
    json_mode: bool,
    noheadings: bool,
    output: str | None,
    raw: bool,
    pids: set[int] | None,
    workers: int | None,
    skip_vanished: bool,
    proc_root: Path | None,
    config_path: Path | None,
    debug: bool,
) -> None:
    """List file descriptors and special files held by processes."""
    lsfd_logging.configure(debug=debug)

    processes: list[Process] = []
    usernames = UsernameCache()
    try:
        config = Config.load(config_path)
        columns = parse_columns(output if output is not None else config.output.columns)

        processes = collect(
            proc_root=proc_root or config.scan.proc_root,
            workers=workers or config.scan.workers,
            pids=pids,
            skip_vanished=skip_vanished or config.scan.skip_vanished,
        )
        rows = project(processes, columns, usernames)
        emit(rows, columns, OutputMode.from_flags(raw=raw, json_mode=json_mode), noheadings)
    except (LsfdError, ValueError) as e:
        lsfd_logging.error(str(e))
        ctx.exit(1)
    finally:
        dispose(processes)
        usernames.clear()


if __name__ == "__main__":
    main()
