"""Account and group administration delegated to the shadow-utils programs."""
from __future__ import annotations

import grp
import logging
import pwd
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from .commands import COMMAND_NOT_FOUND, CommandResult, CommandRunner, LocalCommandRunner
from .models import Account, Group

logger = logging.getLogger("hostadmin.accounts")

# Exit statuses documented in the shadow-utils manual pages.
EXIT_HINTS: Dict[str, Dict[int, str]] = {
    "useradd": {
        1: "The password file could not be updated.",
        3: "An option was given a bad argument (check the shell path).",
        4: "The requested UID is already in use.",
        6: "A requested group does not exist.",
        9: "The username is already in use.",
        10: "The group file could not be updated.",
        12: "The home directory could not be created.",
        14: "The SELinux user mapping could not be updated.",
    },
    "usermod": {
        3: "An option was given a bad argument (check the shell path).",
        6: "The account or group does not exist.",
        8: "The account is currently logged in.",
        10: "The group file could not be updated.",
    },
    "userdel": {
        1: "The password file could not be updated.",
        6: "The account does not exist.",
        8: "The account is currently logged in.",
        10: "The group file could not be updated.",
        12: "The home directory could not be removed.",
    },
    "groupadd": {
        3: "The group name is not valid.",
        4: "The requested GID is already in use.",
        9: "The group name is already in use.",
        10: "The group file could not be updated.",
    },
    "groupdel": {
        2: "Invalid command syntax.",
        6: "The group does not exist.",
        8: "A group cannot be removed while it is the primary group of an existing user.",
        10: "The group file could not be updated.",
    },
}


def describe_failure(result: CommandResult) -> Optional[str]:
    """Return a best-effort explanation for a failed delegated command."""

    if result.exit_status == COMMAND_NOT_FOUND:
        program = result.command[0] if result.command else "the program"
        return f"'{program}' was not found. Is the required package installed?"
    if not result.command:
        return None
    program = Path(str(result.command[0])).name
    return EXIT_HINTS.get(program, {}).get(result.exit_status)


class AccountAdministrator(Protocol):
    """Capability interface over the OS user and group databases."""

    def user_exists(self, username: str) -> bool: ...

    def group_exists(self, group: str) -> bool: ...

    def get_group(self, group: str) -> Optional[Group]: ...

    def list_accounts(self) -> List[Account]: ...

    def create_user(self, username: str, *, shell: str, create_home: bool = True) -> CommandResult: ...

    def set_password(self, username: str) -> CommandResult: ...

    def change_shell(self, username: str, shell: str) -> CommandResult: ...

    def lock(self, username: str) -> CommandResult: ...

    def unlock(self, username: str) -> CommandResult: ...

    def delete_user(self, username: str, *, remove_home: bool = True) -> CommandResult: ...

    def create_group(self, group: str) -> CommandResult: ...

    def delete_group(self, group: str) -> CommandResult: ...

    def add_to_group(self, username: str, group: str) -> CommandResult: ...


class SystemAccounts:
    """Reads the NSS databases and delegates every mutation to shadow-utils.

    ``passwd_db`` and ``group_db`` default to the :mod:`pwd` and :mod:`grp`
    modules; any object exposing the same lookup functions can be used.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        *,
        passwd_db: Any = pwd,
        group_db: Any = grp,
    ) -> None:
        self._runner = runner or LocalCommandRunner()
        self._passwd = passwd_db
        self._group = group_db

    def user_exists(self, username: str) -> bool:
        try:
            self._passwd.getpwnam(username)
        except KeyError:
            return False
        return True

    def group_exists(self, group: str) -> bool:
        return self.get_group(group) is not None

    def list_accounts(self) -> List[Account]:
        return [
            Account(
                name=entry.pw_name,
                uid=entry.pw_uid,
                gid=entry.pw_gid,
                home=Path(entry.pw_dir),
                shell=entry.pw_shell,
            )
            for entry in self._passwd.getpwall()
        ]

    def get_group(self, group: str) -> Optional[Group]:
        try:
            entry = self._group.getgrnam(group)
        except KeyError:
            return None
        return Group(name=entry.gr_name, gid=entry.gr_gid, members=tuple(entry.gr_mem))

    def create_user(self, username: str, *, shell: str, create_home: bool = True) -> CommandResult:
        args = ["useradd"]
        if create_home:
            args.append("-m")
        args.extend(["-s", shell, username])
        return self._execute(args)

    def set_password(self, username: str) -> CommandResult:
        return self._execute(["passwd", username], interactive=True)

    def change_shell(self, username: str, shell: str) -> CommandResult:
        return self._execute(["usermod", "-s", shell, username])

    def lock(self, username: str) -> CommandResult:
        return self._execute(["usermod", "-L", username])

    def unlock(self, username: str) -> CommandResult:
        return self._execute(["usermod", "-U", username])

    def delete_user(self, username: str, *, remove_home: bool = True) -> CommandResult:
        args = ["userdel"]
        if remove_home:
            args.append("-r")
        args.append(username)
        return self._execute(args)

    def create_group(self, group: str) -> CommandResult:
        return self._execute(["groupadd", group])

    def delete_group(self, group: str) -> CommandResult:
        return self._execute(["groupdel", group])

    def add_to_group(self, username: str, group: str) -> CommandResult:
        return self._execute(["usermod", "-aG", group, username])

    def _execute(self, command: List[str], *, interactive: bool = False) -> CommandResult:
        result = self._runner.run(command, interactive=interactive)
        if not result.ok:
            logger.info("%s failed with status %s", command[0], result.exit_status)
        return result


__all__ = [
    "AccountAdministrator",
    "EXIT_HINTS",
    "SystemAccounts",
    "describe_failure",
]
