"""Interactive group management."""

from __future__ import annotations

import logging

from .accounts import AccountAdministrator, describe_failure
from .commands import CommandResult
from .console import Console

logger = logging.getLogger("hostadmin.groups")

PRIMARY_GROUP_HINT = (
    "A group cannot be removed while it is the primary group of an existing user."
)


class GroupManagement:
    def __init__(self, accounts: AccountAdministrator, console: Console) -> None:
        self._accounts = accounts
        self._console = console

    def create_group(self) -> bool:
        console = self._console
        console.echo("--- Create Group ---")
        group = console.prompt("Enter new group name: ")
        if not group:
            return self._reject("❌ Error: Group name cannot be empty.")

        result = self._accounts.create_group(group)
        if result.ok:
            logger.info("Created group %s", group)
            console.echo(f"✅ Group '{group}' created successfully.")
        else:
            console.echo(f"❌ Error ({result.exit_status}): Failed to create group '{group}'.")
            self._hint(result)
        console.pause()
        return result.ok

    def delete_group(self) -> bool:
        console = self._console
        console.echo("--- Delete Group ---")
        group = console.prompt("Enter group name to delete: ")
        if not group:
            return self._reject("❌ Error: Group name cannot be empty.")

        result = self._accounts.delete_group(group)
        if result.ok:
            logger.info("Deleted group %s", group)
            console.echo(f"✅ Group '{group}' deleted successfully.")
        else:
            console.echo(f"❌ Error ({result.exit_status}): Failed to delete group '{group}'.")
            hint = describe_failure(result)
            console.echo(f"Hint: {hint or PRIMARY_GROUP_HINT}")
        console.pause()
        return result.ok

    def add_user_to_group(self) -> bool:
        console = self._console
        console.echo("--- Add User to Group ---")
        username = console.prompt("Enter username: ")
        group = console.prompt("Enter group name: ")

        if not username or not group:
            return self._reject("❌ Error: Username and group name cannot be empty.")
        if not self._accounts.user_exists(username):
            return self._reject(f"❌ Error: User '{username}' does not exist.")
        if not self._accounts.group_exists(group):
            return self._reject(f"❌ Error: Group '{group}' does not exist.")

        result = self._accounts.add_to_group(username, group)
        if result.ok:
            logger.info("Added %s to group %s", username, group)
            console.echo(f"✅ User '{username}' added to group '{group}'.")
            details = self._accounts.get_group(group)
            if details is not None and details.members:
                console.echo(f"Members of '{group}': {', '.join(details.members)}")
        else:
            console.echo(
                f"❌ Error ({result.exit_status}): Failed to add '{username}' to group '{group}'."
            )
            self._hint(result)
        console.pause()
        return result.ok

    def _hint(self, result: CommandResult) -> None:
        hint = describe_failure(result)
        if hint:
            self._console.echo(f"Hint: {hint}")

    def _reject(self, message: str) -> bool:
        self._console.echo(message)
        self._console.pause()
        return False


__all__ = ["GroupManagement", "PRIMARY_GROUP_HINT"]
