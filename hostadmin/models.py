"""Read-only views of OS-owned account records."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class Account:
    """Represents an entry in the system password database."""

    name: str
    uid: int
    gid: int
    home: Path
    shell: str


@dataclass(frozen=True)
class Group:
    """Represents an entry in the system group database."""

    name: str
    gid: int
    members: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BackupResult:
    path: Path
    size: str


__all__ = ["Account", "Group", "BackupResult"]
