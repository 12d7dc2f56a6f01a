from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hostadmin.commands import CommandResult  # noqa: E402
from hostadmin.config import AdminConfig  # noqa: E402
from hostadmin.console import Console  # noqa: E402
from hostadmin.models import Account, Group  # noqa: E402
from hostadmin.privileges import Identity  # noqa: E402


class FakeAccounts:
    """In-memory account port that records every delegated call.

    ``statuses`` maps an operation name (``"create_user"``, ``"lock"``...) to
    the exit status it should report; successful mutations update the
    in-memory databases so follow-up lookups see them.
    """

    def __init__(self, users: Optional[Dict[str, int]] = None, groups: Optional[Dict[str, List[str]]] = None) -> None:
        self.users: Dict[str, Account] = {}
        for name, uid in (users or {}).items():
            self._add(name, uid)
        self.groups: Dict[str, Set[str]] = {name: set(members) for name, members in (groups or {}).items()}
        self.statuses: Dict[str, int] = {}
        self.calls: List[Tuple[str, Tuple[object, ...]]] = []

    def _add(self, name: str, uid: int, shell: str = "/bin/bash") -> None:
        self.users[name] = Account(name=name, uid=uid, gid=uid, home=Path("/home") / name, shell=shell)

    def _record(self, operation: str, *args: object) -> CommandResult:
        self.calls.append((operation, args))
        return CommandResult(command=[operation, *map(str, args)], exit_status=self.statuses.get(operation, 0))

    @property
    def mutations(self) -> List[str]:
        return [operation for operation, _ in self.calls]

    def user_exists(self, username: str) -> bool:
        return username in self.users

    def group_exists(self, group: str) -> bool:
        return group in self.groups

    def get_group(self, group: str) -> Optional[Group]:
        if group not in self.groups:
            return None
        return Group(name=group, gid=2000, members=tuple(sorted(self.groups[group])))

    def list_accounts(self) -> List[Account]:
        return list(self.users.values())

    def create_user(self, username: str, *, shell: str, create_home: bool = True) -> CommandResult:
        result = self._record("create_user", username, shell, create_home)
        if result.ok:
            next_uid = max([1000 - 1, *(account.uid for account in self.users.values())]) + 1
            self._add(username, next_uid, shell)
        return result

    def set_password(self, username: str) -> CommandResult:
        return self._record("set_password", username)

    def change_shell(self, username: str, shell: str) -> CommandResult:
        result = self._record("change_shell", username, shell)
        if result.ok:
            account = self.users[username]
            self._add(username, account.uid, shell)
        return result

    def lock(self, username: str) -> CommandResult:
        return self._record("lock", username)

    def unlock(self, username: str) -> CommandResult:
        return self._record("unlock", username)

    def delete_user(self, username: str, *, remove_home: bool = True) -> CommandResult:
        result = self._record("delete_user", username, remove_home)
        if result.ok:
            self.users.pop(username, None)
        return result

    def create_group(self, group: str) -> CommandResult:
        result = self._record("create_group", group)
        if result.ok:
            self.groups.setdefault(group, set())
        return result

    def delete_group(self, group: str) -> CommandResult:
        result = self._record("delete_group", group)
        if result.ok:
            self.groups.pop(group, None)
        return result

    def add_to_group(self, username: str, group: str) -> CommandResult:
        result = self._record("add_to_group", username, group)
        if result.ok:
            self.groups[group].add(username)
        return result


class ScriptedConsole(Console):
    """Console fed from a fixed list of answers, capturing everything printed."""

    def __init__(self, answers: List[str]) -> None:
        self.sleeps: List[float] = []
        self.output = io.StringIO()
        super().__init__(
            stdin=io.StringIO("".join(f"{answer}\n" for answer in answers)),
            stdout=self.output,
            sleep=self.sleeps.append,
        )

    @property
    def text(self) -> str:
        return self.output.getvalue()


@pytest.fixture()
def config(tmp_path: Path) -> AdminConfig:
    return AdminConfig(backup_destination=tmp_path / "backups", pause_seconds=2)


@pytest.fixture()
def identity() -> Identity:
    return Identity(effective_uid=0, effective_user="root", login_user="operator")


@pytest.fixture()
def accounts() -> FakeAccounts:
    return FakeAccounts(
        users={"root": 0, "daemon": 1, "operator": 1000, "bob": 1001},
        groups={"developers": [], "operator": ["operator"]},
    )


@pytest.fixture()
def make_console() -> Callable[..., ScriptedConsole]:
    def _factory(*answers: str) -> ScriptedConsole:
        return ScriptedConsole(list(answers))

    return _factory
