"""Configuration management for the administration console."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

DEFAULT_CONFIG_PATH = Path("/etc/hostadmin/config.yaml")
CONFIG_ENV = "HOSTADMIN_CONFIG"
BACKUP_DEST_ENV = "HOSTADMIN_BACKUP_DEST"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised when the configuration file is unreadable or invalid."""


@dataclass(frozen=True)
class AdminConfig:
    """Settings shared by the privilege gate, the controllers and the backup."""

    backup_destination: Path = Path("/opt/backups")
    backup_sources: Tuple[Path, ...] = (Path("/etc"), Path("/home"))
    default_shell: str = "/bin/bash"
    min_uid: int = 1000
    protected_users: Tuple[str, ...] = ("root",)
    pause_seconds: float = 2.0
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    @staticmethod
    def from_dict(data: Dict[str, object], base_path: Path | None = None) -> "AdminConfig":
        """Create an :class:`AdminConfig` from raw dictionary data."""
        defaults = AdminConfig()

        backup = _section(data, "backup")
        accounts = _section(data, "accounts")
        menu = _section(data, "menu")
        logging_section = _section(data, "logging")

        destination = backup.get("destination")
        sources = backup.get("sources")
        if sources is not None and not isinstance(sources, list):
            raise ConfigError("backup.sources must be a list of directory paths")
        if sources == []:
            raise ConfigError("backup.sources must name at least one directory")

        protected = accounts.get("protected_users")
        if protected is not None and not isinstance(protected, list):
            raise ConfigError("accounts.protected_users must be a list of user names")

        level = str(logging_section.get("level", defaults.log_level)).upper()
        if level not in _LOG_LEVELS:
            raise ConfigError(f"logging.level must be one of {', '.join(_LOG_LEVELS)}")

        log_file = logging_section.get("file")

        try:
            min_uid = int(accounts.get("min_uid", defaults.min_uid))
            pause_seconds = float(menu.get("pause_seconds", defaults.pause_seconds))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid numeric configuration value: {exc}") from exc
        if pause_seconds < 0:
            raise ConfigError("menu.pause_seconds must not be negative")

        return AdminConfig(
            backup_destination=(
                _resolve_path(str(destination), base_path)
                if destination
                else defaults.backup_destination
            ),
            backup_sources=(
                tuple(Path(str(item)) for item in sources)
                if sources is not None
                else defaults.backup_sources
            ),
            default_shell=str(accounts.get("default_shell") or defaults.default_shell),
            min_uid=min_uid,
            protected_users=(
                tuple(str(name) for name in protected)
                if protected is not None
                else defaults.protected_users
            ),
            pause_seconds=pause_seconds,
            log_level=level,
            log_file=_resolve_path(str(log_file), base_path) if log_file else None,
        )

    def with_overrides(
        self,
        *,
        backup_destination: Optional[str] = None,
        log_level: Optional[str] = None,
    ) -> "AdminConfig":
        config = self
        if backup_destination:
            config = replace(
                config,
                backup_destination=Path(backup_destination).expanduser().resolve(strict=False),
            )
        if log_level:
            normalized = log_level.upper()
            if normalized not in _LOG_LEVELS:
                raise ConfigError(f"Unknown log level '{log_level}'")
            config = replace(config, log_level=normalized)
        return config


def _section(data: Dict[str, object], key: str) -> Dict[str, object]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def _resolve_path(raw: str, base_path: Path | None) -> Path:
    candidate = Path(raw).expanduser()
    if not candidate.is_absolute() and base_path is not None:
        candidate = base_path / candidate
    return candidate.resolve(strict=False)


def load_config(config_path: Path, *, required: bool = False) -> AdminConfig:
    """Load settings from a YAML file, falling back to defaults when absent."""
    logger = logging.getLogger("hostadmin.config")

    if not config_path.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_path}")
        logger.debug("No configuration at %s; using defaults", config_path)
        return AdminConfig()

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    logger.info("Loaded configuration from %s", config_path)
    return AdminConfig.from_dict(raw, base_path=config_path.parent)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return DEFAULT_CONFIG_PATH


__all__ = [
    "AdminConfig",
    "BACKUP_DEST_ENV",
    "CONFIG_ENV",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "resolve_config_path",
]
