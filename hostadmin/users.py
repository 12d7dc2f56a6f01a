"""Interactive user account management."""

from __future__ import annotations

import logging
from typing import List, Optional

from .accounts import AccountAdministrator, describe_failure
from .commands import CommandResult
from .config import AdminConfig
from .console import Console
from .privileges import Identity

logger = logging.getLogger("hostadmin.users")

CONFIRM_ANSWERS = ("y", "Y")


class UserManagement:
    """Validation, confirmation and reporting around account operations.

    Every action prints its outcome and waits for Enter before handing control
    back to the menu.
    """

    def __init__(
        self,
        accounts: AccountAdministrator,
        console: Console,
        config: AdminConfig,
        identity: Identity,
    ) -> None:
        self._accounts = accounts
        self._console = console
        self._config = config
        self._identity = identity
        self.selected: Optional[str] = None

    def standard_accounts(self) -> List[str]:
        return [
            account.name
            for account in self._accounts.list_accounts()
            if account.uid >= self._config.min_uid
        ]

    def list_users(self) -> None:
        console = self._console
        console.echo("--- Active User Accounts ---")
        for name in self.standard_accounts():
            console.echo(f"  {name}")
        console.echo("----------------------------")
        console.pause()

    def create_user(self) -> bool:
        console = self._console
        console.echo("--- Create New User Account ---")
        username = console.prompt("Enter username for new account: ")

        if not username:
            return self._reject("❌ Error: Username cannot be empty.")
        if self._accounts.user_exists(username):
            return self._reject(f"❌ Error: User '{username}' already exists. Aborting.")

        console.echo(f"Attempting to create user '{username}'...")
        result = self._accounts.create_user(username, shell=self._config.default_shell, create_home=True)
        if not result.ok:
            console.echo(f"❌ FATAL ERROR ({result.exit_status}): Failed to create user '{username}'.")
            console.echo(
                "Check if necessary packages (like 'passwd') are installed or for disk errors."
            )
            self._hint(result)
            console.pause()
            return False

        logger.info("Created account %s", username)
        console.echo(f"✅ User '{username}' created successfully.")

        password = self._accounts.set_password(username)
        if password.ok:
            console.echo(f"Password for '{username}' set.")
        else:
            # The account stays; there is no rollback of the creation step.
            logger.warning("Password step for %s exited with %s", username, password.exit_status)
            console.echo(
                f"⚠️ Password was not set (exit {password.exit_status}). "
                f"Run 'passwd {username}' to set it manually."
            )
        console.pause()
        return True

    def select_for_modify(self) -> bool:
        """Pick the account the Modify submenu operates on."""

        console = self._console
        console.echo("--- Modify User Account ---")
        username = console.prompt("Enter username to modify: ")

        if not username:
            return self._reject("❌ Error: Username cannot be empty.")
        if not self._accounts.user_exists(username):
            return self._reject(f"❌ Error: User '{username}' does not exist.")

        self.selected = username
        return True

    def release_selection(self) -> None:
        self.selected = None

    def change_shell(self) -> bool:
        username = self._require_selection()
        shell = self._console.prompt(f"Enter new login shell for '{username}': ")
        if not shell:
            return self._reject("❌ Error: Shell path cannot be empty.")

        result = self._accounts.change_shell(username, shell)
        if result.ok:
            self._console.echo(f"✅ Shell for '{username}' changed to {shell}.")
        else:
            self._console.echo(
                f"❌ Error ({result.exit_status}): Failed to change shell for '{username}'."
            )
            self._hint(result)
        self._console.pause()
        return result.ok

    def lock(self) -> bool:
        username = self._require_selection()
        self._note_idempotent(self._accounts.lock(username), "lock", username)
        self._console.echo(f"🔒 Account '{username}' locked.")
        self._console.pause()
        return True

    def unlock(self) -> bool:
        username = self._require_selection()
        self._note_idempotent(self._accounts.unlock(username), "unlock", username)
        self._console.echo(f"🔓 Account '{username}' unlocked.")
        self._console.pause()
        return True

    def is_protected(self, username: str) -> bool:
        if username in self._config.protected_users:
            return True
        # Compare with the operator's login name, not the (root) effective user.
        return self._identity.login_user is not None and username == self._identity.login_user

    def delete_user(self) -> bool:
        console = self._console
        console.echo("--- Delete User Account ---")
        username = console.prompt("Enter username to delete: ")

        if not username:
            return self._reject("❌ Error: Username cannot be empty.")
        if self.is_protected(username):
            return self._reject("❌ Error: Cannot delete critical system user or your own login user.")
        if not self._accounts.user_exists(username):
            return self._reject(f"❌ Error: User '{username}' does not exist. Aborting.")

        confirm = console.prompt(
            f"⚠️ WARNING: Permanently delete user '{username}' AND their home directory? (y/N) "
        )
        if confirm not in CONFIRM_ANSWERS:
            console.echo("Action cancelled.")
            console.pause()
            return False

        result = self._accounts.delete_user(username, remove_home=True)
        if result.ok:
            logger.info("Deleted account %s", username)
            console.echo(f"✅ User '{username}' and their home directory deleted successfully.")
        else:
            console.echo(
                f"❌ Error ({result.exit_status}): Failed to delete user '{username}'. Check system logs."
            )
            self._hint(result)
        console.pause()
        return result.ok

    def _require_selection(self) -> str:
        if self.selected is None:
            raise RuntimeError("No account selected for modification")
        return self.selected

    def _note_idempotent(self, result: CommandResult, action: str, username: str) -> None:
        if not result.ok:
            logger.warning(
                "%s of %s reported status %s: %s",
                action,
                username,
                result.exit_status,
                result.stderr.strip() or "<no output>",
            )

    def _hint(self, result: CommandResult) -> None:
        hint = describe_failure(result)
        if hint:
            self._console.echo(f"Hint: {hint}")

    def _reject(self, message: str) -> bool:
        self._console.echo(message)
        self._console.pause()
        return False


__all__ = ["CONFIRM_ANSWERS", "UserManagement"]
