"""Application factory wiring the controllers to the menu dispatcher."""
from __future__ import annotations

from .accounts import AccountAdministrator, SystemAccounts
from .backup import BackupManager
from .commands import CommandRunner, LocalCommandRunner
from .config import AdminConfig
from .console import Console
from .groups import GroupManagement
from .menu import MenuDispatcher, build_menus
from .privileges import Identity
from .users import UserManagement


def create_app(
    config: AdminConfig,
    identity: Identity,
    *,
    accounts: AccountAdministrator | None = None,
    runner: CommandRunner | None = None,
    backup: BackupManager | None = None,
    console: Console | None = None,
) -> MenuDispatcher:
    """Build the interactive console.

    ``accounts`` and ``backup`` default to the real system adapters sharing a
    single command runner.
    """

    runner = runner or LocalCommandRunner()
    console = console or Console()
    accounts = accounts or SystemAccounts(runner)
    backup = backup or BackupManager(config, runner)

    users = UserManagement(accounts, console, config, identity)
    groups = GroupManagement(accounts, console)
    menus = build_menus(users, groups, backup, console)
    return MenuDispatcher(menus, console, pause_seconds=config.pause_seconds)


__all__ = ["create_app"]
