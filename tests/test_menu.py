from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from hostadmin.application import create_app
from hostadmin.backup import BackupManager
from hostadmin.commands import CommandResult
from hostadmin.console import UserInputError
from hostadmin.menu import Menu, MenuDispatcher, MenuState, Transition


class FakeRunner:
    def __init__(self) -> None:
        self.calls = []

    def run(self, args, *, interactive: bool = False, timeout=None) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        if args[0] == "tar":
            Path(args[2]).write_bytes(b"data")
            return CommandResult(command=args, exit_status=0)
        return CommandResult(command=args, exit_status=0, stdout=f"1.0K\t{args[-1]}\n")


def _backup(config, runner=None) -> BackupManager:
    return BackupManager(config, runner or FakeRunner(), clock=lambda: datetime(2024, 1, 1))


def _app(config, identity, accounts, console):
    return create_app(config, identity, accounts=accounts, backup=_backup(config), console=console)


def test_exit_from_main_menu(config, identity, accounts, make_console) -> None:
    console = make_console("4")
    app = _app(config, identity, accounts, console)

    app.run()

    assert app.state is MenuState.EXIT
    assert "Exiting. Goodbye!" in console.text
    assert accounts.calls == []


def test_invalid_choice_keeps_state_and_pauses(config, identity, accounts, make_console) -> None:
    console = make_console("9", "abc", "4")
    app = _app(config, identity, accounts, console)

    app.run()

    assert console.text.count("⚠️ Invalid choice. Please select 1, 2, 3, or 4.") == 2
    assert console.sleeps == [2, 2]
    assert console.text.count("📜 User/Group/Backup Manager") == 3


def test_user_submenu_lists_its_own_keys_when_invalid(config, identity, accounts, make_console) -> None:
    console = make_console("1", "7", "5", "4")
    app = _app(config, identity, accounts, console)

    app.run()

    assert "Please select 1, 2, 3, 4, or 5." in console.text
    assert "👤 USER MANAGEMENT" in console.text


def test_invalid_choice_in_modify_menu_redisplays_it(config, identity, accounts, make_console) -> None:
    console = make_console("1", "2", "bob", "x", "4", "5", "4")
    app = _app(config, identity, accounts, console)

    app.run()

    assert "⚠️ Invalid choice. Please select 1, 2, 3, or 4." in console.text
    assert console.sleeps == [2]
    assert console.text.count("✏️ MODIFY USER") == 2
    assert accounts.mutations == []


def test_invalid_choice_in_group_menu_redisplays_it(config, identity, accounts, make_console) -> None:
    console = make_console("2", "0", "4", "4")
    app = _app(config, identity, accounts, console)

    app.run()

    assert "⚠️ Invalid choice. Please select 1, 2, 3, or 4." in console.text
    assert console.sleeps == [2]
    assert console.text.count("👥 GROUP MANAGEMENT") == 2
    assert accounts.calls == []


def test_create_user_through_menus(config, identity, accounts, make_console) -> None:
    console = make_console("1", "1", "alice", "", "5", "4")
    app = _app(config, identity, accounts, console)

    app.run()

    assert accounts.user_exists("alice")
    assert accounts.mutations == ["create_user", "set_password"]


def test_modify_submenu_flow(config, identity, accounts, make_console) -> None:
    console = make_console(
        "1",  # user management
        "2", "bob",  # modify bob
        "2", "",  # lock
        "3", "",  # unlock
        "4",  # back to user menu
        "5",  # back to main
        "4",  # exit
    )
    app = _app(config, identity, accounts, console)

    app.run()

    assert accounts.mutations == ["lock", "unlock"]
    assert "Account: bob" in console.text
    assert console.text.count("✏️ MODIFY USER") == 3


def test_modify_of_unknown_account_stays_in_user_menu(config, identity, accounts, make_console) -> None:
    console = make_console("1", "2", "ghost", "", "5", "4")
    app = _app(config, identity, accounts, console)

    app.run()

    assert "✏️ MODIFY USER" not in console.text
    assert accounts.calls == []


def test_group_menu_add_member(config, identity, accounts, make_console) -> None:
    console = make_console("2", "3", "bob", "developers", "", "4", "4")
    app = _app(config, identity, accounts, console)

    app.run()

    assert accounts.calls == [("add_to_group", ("bob", "developers"))]


def test_backup_from_main_menu_returns_to_main(config, identity, accounts, make_console) -> None:
    console = make_console("3", "", "4")
    runner = FakeRunner()
    app = create_app(config, identity, accounts=accounts, backup=_backup(config, runner), console=console)

    app.run()

    assert [call[0] for call in runner.calls] == ["tar", "du"]
    assert app.state is MenuState.EXIT
    assert "Archive size: 1.0K" in console.text
    assert (config.backup_destination / "system_backup_20240101_000000.tar.gz").exists()


def test_closed_input_raises_user_input_error(config, identity, accounts, make_console) -> None:
    console = make_console("1")
    app = _app(config, identity, accounts, console)

    with pytest.raises(UserInputError):
        app.run()


def test_action_returning_false_vetoes_transition(make_console) -> None:
    console = make_console()
    menus = {
        MenuState.MAIN: Menu(
            "main",
            (
                Transition("1", "go", lambda: False, MenuState.GROUPS),
                Transition("2", "quit", None, MenuState.EXIT),
            ),
        ),
        MenuState.GROUPS: Menu("groups", (Transition("1", "back", None, MenuState.MAIN),)),
    }
    dispatcher = MenuDispatcher(menus, console, pause_seconds=0)

    assert dispatcher.step("1") is MenuState.MAIN
    assert dispatcher.step("2") is MenuState.EXIT


def test_dispatcher_requires_initial_menu(make_console) -> None:
    with pytest.raises(ValueError):
        MenuDispatcher({}, make_console())
