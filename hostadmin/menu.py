"""Finite-state dispatcher for the numbered menus."""
from __future__ import annotations

import enum
import functools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from .backup import BackupManager, system_backup
from .console import Console
from .groups import GroupManagement
from .users import UserManagement

logger = logging.getLogger("hostadmin.menu")

RULE = "========================================="
THIN_RULE = "-----------------------------------------"


class MenuState(enum.Enum):
    MAIN = "main"
    USERS = "users"
    MODIFY_USER = "modify_user"
    GROUPS = "groups"
    EXIT = "exit"


# An action may return ``False`` to keep the menu in its current state.
Action = Callable[[], Optional[bool]]


@dataclass(frozen=True)
class Transition:
    key: str
    label: str
    action: Optional[Action]
    next_state: MenuState


@dataclass(frozen=True)
class Menu:
    title: str
    options: Tuple[Transition, ...]
    subtitle: Optional[Callable[[], str]] = None

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(option.key for option in self.options)

    def lookup(self, choice: str) -> Optional[Transition]:
        for option in self.options:
            if option.key == choice:
                return option
        return None


def _choices_text(keys: Sequence[str]) -> str:
    if len(keys) == 1:
        return keys[0]
    return f"{', '.join(keys[:-1])}, or {keys[-1]}"


class MenuDispatcher:
    """Runs the menu loop until a transition reaches :attr:`MenuState.EXIT`."""

    def __init__(
        self,
        menus: Dict[MenuState, Menu],
        console: Console,
        *,
        pause_seconds: float = 2.0,
        initial: MenuState = MenuState.MAIN,
    ) -> None:
        if initial not in menus:
            raise ValueError(f"No menu registered for initial state {initial.name}")
        self._menus = menus
        self._console = console
        self._pause_seconds = pause_seconds
        self.state = initial

    def render(self) -> None:
        menu = self._menus[self.state]
        console = self._console
        console.clear()
        console.echo(RULE)
        console.echo(menu.title)
        if menu.subtitle is not None:
            console.echo(menu.subtitle())
        console.echo(RULE)
        for option in menu.options:
            console.echo(f"{option.key}) {option.label}")
        console.echo(THIN_RULE)

    def step(self, choice: str) -> MenuState:
        """Apply one choice to the current state and return the new state."""

        menu = self._menus[self.state]
        transition = menu.lookup(choice)
        if transition is None:
            self._console.echo(f"⚠️ Invalid choice. Please select {_choices_text(menu.keys)}.")
            self._console.wait(self._pause_seconds)
            return self.state

        outcome = transition.action() if transition.action is not None else None
        if outcome is False:
            logger.debug("Action for %s/%s kept state", self.state.name, choice)
            return self.state

        if transition.next_state is not self.state:
            logger.debug("Menu %s -> %s", self.state.name, transition.next_state.name)
        self.state = transition.next_state
        return self.state

    def run(self) -> None:
        while self.state is not MenuState.EXIT:
            self.render()
            keys = self._menus[self.state].keys
            choice = self._console.prompt(f"Enter your choice [{keys[0]}-{keys[-1]}]: ")
            self.step(choice)


def build_menus(
    users: UserManagement,
    groups: GroupManagement,
    backup: BackupManager,
    console: Console,
) -> Dict[MenuState, Menu]:
    """Transition table for the administration console."""

    def goodbye() -> None:
        console.echo("Exiting. Goodbye!")

    def leave_modify() -> None:
        users.release_selection()

    return {
        MenuState.MAIN: Menu(
            "📜 User/Group/Backup Manager",
            (
                Transition("1", "👤 User Management", None, MenuState.USERS),
                Transition("2", "👥 Group Management", None, MenuState.GROUPS),
                Transition(
                    "3",
                    "💾 System Backup",
                    functools.partial(system_backup, backup, console),
                    MenuState.MAIN,
                ),
                Transition("4", "🚪 Exit", goodbye, MenuState.EXIT),
            ),
        ),
        MenuState.USERS: Menu(
            "👤 USER MANAGEMENT",
            (
                Transition("1", "Create a New User", users.create_user, MenuState.USERS),
                Transition("2", "Modify an Existing User", users.select_for_modify, MenuState.MODIFY_USER),
                Transition("3", "Delete an Existing User", users.delete_user, MenuState.USERS),
                Transition("4", "List All Users", users.list_users, MenuState.USERS),
                Transition("5", "↩️ Back to Main Menu", None, MenuState.MAIN),
            ),
        ),
        MenuState.MODIFY_USER: Menu(
            "✏️ MODIFY USER",
            (
                Transition("1", "Change Login Shell", users.change_shell, MenuState.MODIFY_USER),
                Transition("2", "Lock Account", users.lock, MenuState.MODIFY_USER),
                Transition("3", "Unlock Account", users.unlock, MenuState.MODIFY_USER),
                Transition("4", "↩️ Back to User Management", leave_modify, MenuState.USERS),
            ),
            subtitle=lambda: f"Account: {users.selected}",
        ),
        MenuState.GROUPS: Menu(
            "👥 GROUP MANAGEMENT",
            (
                Transition("1", "Create a Group", groups.create_group, MenuState.GROUPS),
                Transition("2", "Delete a Group", groups.delete_group, MenuState.GROUPS),
                Transition("3", "Add a User to a Group", groups.add_user_to_group, MenuState.GROUPS),
                Transition("4", "↩️ Back to Main Menu", None, MenuState.MAIN),
            ),
        ),
    }


__all__ = [
    "Menu",
    "MenuDispatcher",
    "MenuState",
    "Transition",
    "build_menus",
]
