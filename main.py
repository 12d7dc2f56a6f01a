"""Command-line interface for the hostadmin user, group and backup console."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from hostadmin.accounts import SystemAccounts
from hostadmin.application import create_app
from hostadmin.backup import BackupError, BackupManager
from hostadmin.config import (
    BACKUP_DEST_ENV,
    CONFIG_ENV,
    AdminConfig,
    ConfigError,
    load_config,
    resolve_config_path,
)
from hostadmin.console import Console, UserInputError
from hostadmin.privileges import Identity, PrivilegeError, current_identity, require_privileges
from hostadmin.users import UserManagement

logger = logging.getLogger("hostadmin.main")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def _running_in_virtualenv() -> bool:
    """Return ``True`` when the current interpreter is executing inside a venv."""

    base_prefix = getattr(sys, "base_prefix", sys.prefix)
    return sys.prefix != base_prefix


def _bootstrap_virtualenv() -> None:
    """Re-exec the script using the bundled virtualenv interpreter when available.

    ``sudo`` resets ``PATH``, so an operator running ``sudo ./main.py`` would
    otherwise lose the project's virtualenv and its dependencies.
    """

    if _running_in_virtualenv():
        return

    root = Path(__file__).resolve().parent
    venv_dir = root / ".venv"
    if not venv_dir.is_dir():
        return

    for candidate in (venv_dir / "bin" / "python", venv_dir / "bin" / "python3"):
        if candidate.exists():
            script = str(Path(__file__).resolve())
            os.execv(str(candidate), [str(candidate), script, *sys.argv[1:]])


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Local user, group and backup administration")
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to the YAML configuration file (defaults to ${CONFIG_ENV} or /etc/hostadmin/config.yaml)",
    )
    parser.add_argument(
        "--backup-dest",
        default=None,
        help=f"Directory that receives backup archives (overrides ${BACKUP_DEST_ENV})",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR); overrides the configuration file",
    )

    subparsers = parser.add_subparsers(dest="command")
    parser.set_defaults(command="menu")

    subparsers.add_parser("menu", help="Launch the interactive administration menu (default)")
    subparsers.add_parser("backup", help="Archive the configured directories once and exit")
    subparsers.add_parser("list-users", help="Print the standard (non-system) accounts and exit")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    return parser.parse_args(args_list)


def _load_settings(args: argparse.Namespace) -> AdminConfig:
    explicit = args.config or os.getenv(CONFIG_ENV)
    config_path = resolve_config_path(explicit)
    config = load_config(config_path, required=bool(explicit))
    return config.with_overrides(
        backup_destination=args.backup_dest or os.getenv(BACKUP_DEST_ENV),
        log_level=args.log_level,
    )


def _configure_logging(config: AdminConfig) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_file is not None:
        try:
            config.log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"Unable to open log file {config.log_file}: {exc}") from exc

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
    )


def _run_menu(config: AdminConfig, identity: Identity) -> int:
    print("Root check successful. Starting User/Backup Manager...")
    app = create_app(config, identity)

    try:
        app.run()
    except KeyboardInterrupt:
        print("\nExiting User/Backup Manager.")
        return EXIT_INTERRUPTED
    except UserInputError as exc:
        print(f"\n{exc}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


def _run_backup(config: AdminConfig) -> int:
    manager = BackupManager(config)
    try:
        result = manager.run()
    except BackupError as exc:
        if exc.result is not None:
            print(
                f"❌ Backup failed (exit {exc.result.exit_status}). Check permissions or disk space.",
                file=sys.stderr,
            )
        else:
            print(f"❌ Backup failed: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    print(f"✅ Backup successfully created and saved to {result.path}")
    print(f"Archive size: {result.size}")
    return EXIT_OK


def _list_users(config: AdminConfig, identity: Identity) -> int:
    users = UserManagement(SystemAccounts(), Console(), config, identity)
    for name in users.standard_accounts():
        print(name)
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    identity = current_identity()
    try:
        require_privileges(identity)
    except PrivilegeError as exc:
        print(f"🚨 ERROR: {exc}")
        print("Usage: sudo hostadmin")
        return EXIT_FAILURE

    try:
        config = _load_settings(args)
        _configure_logging(config)
    except ConfigError as exc:
        print(f"❌ Configuration error: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    logger.info(
        "Started by %s (effective user %s)",
        identity.login_user or "<unknown>",
        identity.effective_user,
    )

    if args.command == "backup":
        return _run_backup(config)
    if args.command == "list-users":
        return _list_users(config, identity)
    return _run_menu(config, identity)


if __name__ == "__main__":
    _bootstrap_virtualenv()
    raise SystemExit(main())
