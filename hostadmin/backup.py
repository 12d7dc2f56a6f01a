"""Timestamped archives of critical system directories."""
from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, List

from .commands import CommandResult, CommandRunner, LocalCommandRunner
from .config import AdminConfig
from .console import Console
from .models import BackupResult

logger = logging.getLogger("hostadmin.backup")

ARCHIVE_PREFIX = "system_backup_"
ARCHIVE_SUFFIX = ".tar.gz"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
ARCHIVE_PATTERN = re.compile(r"^system_backup_\d{8}_\d{6}\.tar\.gz$")


class BackupError(RuntimeError):
    """Raised when a backup cannot be produced."""

    def __init__(self, message: str, result: CommandResult | None = None) -> None:
        super().__init__(message)
        self.result = result


def archive_name(moment: datetime) -> str:
    return f"{ARCHIVE_PREFIX}{moment.strftime(TIMESTAMP_FORMAT)}{ARCHIVE_SUFFIX}"


def format_size(num_bytes: int) -> str:
    """Render a byte count the way ``du -h`` does (``512``, ``4.0K``, ``12M``)."""

    if num_bytes < 1024:
        return str(num_bytes)

    size = num_bytes / 1024
    unit = "K"
    for larger in ("M", "G", "T"):
        if size < 1024:
            break
        size /= 1024
        unit = larger
    return f"{size:.1f}{unit}" if size < 10 else f"{size:.0f}{unit}"


class BackupManager:
    """Creates ``system_backup_<timestamp>.tar.gz`` archives under the destination."""

    def __init__(
        self,
        config: AdminConfig,
        runner: CommandRunner | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._runner = runner or LocalCommandRunner()
        self._clock = clock

    @property
    def destination(self) -> Path:
        return self._config.backup_destination

    @property
    def sources(self) -> List[Path]:
        return list(self._config.backup_sources)

    def ensure_destination(self) -> bool:
        """Create the destination directory; return ``True`` when it was created."""

        if self.destination.is_dir():
            return False
        try:
            self.destination.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BackupError(f"Failed to create backup directory {self.destination}: {exc}") from exc
        logger.info("Created backup destination %s", self.destination)
        return True

    def next_archive_path(self) -> Path:
        return self.destination / archive_name(self._clock())

    def create_archive(self, archive: Path) -> BackupResult:
        if archive.exists():
            raise BackupError(f"Refusing to overwrite existing archive {archive}")

        command = ["tar", "-czvf", str(archive), *(str(source) for source in self.sources)]
        result = self._runner.run(command, interactive=True)
        if not result.ok:
            raise BackupError(f"tar exited with status {result.exit_status}", result)

        size = self.archive_size(archive)
        logger.info("Backup written to %s (%s)", archive, size)
        return BackupResult(path=archive, size=size)

    def archive_size(self, archive: Path) -> str:
        result = self._runner.run(["du", "-sh", str(archive)])
        if result.ok and result.stdout.strip():
            return result.stdout.split()[0]
        try:
            return format_size(archive.stat().st_size)
        except OSError:
            return "unknown"

    def run(self) -> BackupResult:
        self.ensure_destination()
        return self.create_archive(self.next_archive_path())


def system_backup(manager: BackupManager, console: Console) -> bool:
    """Run one backup from the menu, reporting progress on the console."""

    console.echo("--- Initiating System Backup ---")

    if not manager.destination.is_dir():
        console.echo(f"Creating backup destination directory: {manager.destination}")
    try:
        manager.ensure_destination()
    except BackupError as exc:
        logger.error("%s", exc)
        console.echo("❌ Error: Failed to create backup directory.")
        console.pause()
        return False

    archive = manager.next_archive_path()
    console.echo(f"Archiving directories: {' '.join(str(source) for source in manager.sources)}")
    console.echo(f"Destination: {archive}")

    try:
        result = manager.create_archive(archive)
    except BackupError as exc:
        logger.error("Backup failed: %s", exc)
        if exc.result is not None:
            console.echo(
                f"❌ Backup failed (exit {exc.result.exit_status}). Check permissions or disk space."
            )
        else:
            console.echo(f"❌ Backup failed: {exc}")
        console.pause()
        return False

    console.echo(f"✅ Backup successfully created and saved to {result.path}")
    console.echo(f"Archive size: {result.size}")
    console.pause()
    return True


__all__ = [
    "ARCHIVE_PATTERN",
    "BackupError",
    "BackupManager",
    "archive_name",
    "format_size",
    "system_backup",
]
