"""Configuration system for pylsfd."""

from dataclasses import dataclass, field
from pathlib import Path

import tomlkit
import tomlkit.exceptions


@dataclass
class ScanConfig:
    """Collection settings."""

    proc_root: str = "/proc"  # Mount point of procfs
    workers: int | None = None  # Collector threads; None = one per CPU, at most 8
    skip_vanished: bool = False  # Skip processes that exit before their name is read


@dataclass
class OutputConfig:
    """Report settings."""

    columns: str | None = None  # Comma-separated column list; None = default columns


@dataclass
class Config:
    """Main configuration container."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "pylsfd"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        Raises:
            ValueError: If the file cannot be parsed or holds invalid values.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f).unwrap()
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls(
            scan=_load_scan_config(data.get("scan", {})),
            output=_load_output_config(data.get("output", {})),
        )


def _load_scan_config(data: dict) -> ScanConfig:
    """Load scan config from TOML data, using dataclass defaults for missing fields."""
    defaults = ScanConfig()

    proc_root = data.get("proc_root", defaults.proc_root)
    if not isinstance(proc_root, str) or not proc_root:
        raise ValueError(f"proc_root must be a non-empty string, got {proc_root!r}")

    workers = data.get("workers", defaults.workers)
    if workers is not None and (
        isinstance(workers, bool) or not isinstance(workers, int) or workers < 1
    ):
        raise ValueError(f"workers must be >= 1, got {workers!r}")

    skip_vanished = data.get("skip_vanished", defaults.skip_vanished)
    if not isinstance(skip_vanished, bool):
        raise ValueError(f"skip_vanished must be true or false, got {skip_vanished!r}")

    return ScanConfig(proc_root=proc_root, workers=workers, skip_vanished=skip_vanished)


def _load_output_config(data: dict) -> OutputConfig:
    """Load output config from TOML data.

    columns may be written as a comma-separated string or as an array.
    """
    columns = data.get("columns", OutputConfig().columns)
    if isinstance(columns, list):
        columns = ",".join(str(name) for name in columns)
    if columns is not None and not isinstance(columns, str):
        raise ValueError(f"columns must be a string or an array, got {columns!r}")
    return OutputConfig(columns=columns or None)
