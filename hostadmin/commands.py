"""Blocking execution of the system utilities the tool delegates to."""
from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

logger = logging.getLogger("hostadmin.commands")

# Status a POSIX shell reports when the executable cannot be found.
COMMAND_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Result of an executed command."""

    command: Sequence[str]
    exit_status: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_status == 0

    def display(self) -> str:
        return " ".join(shlex.quote(str(part)) for part in self.command)


class CommandRunner(Protocol):
    def run(
        self,
        args: Sequence[str],
        *,
        interactive: bool = False,
        timeout: Optional[int] = None,
    ) -> CommandResult:
        ...


class LocalCommandRunner:
    """Executes commands on the local host.

    Interactive commands inherit the controlling terminal so that prompts
    (``passwd``) and progress listings (``tar -v``) reach the operator
    directly; their output is therefore not captured.
    """

    def run(
        self,
        args: Sequence[str],
        *,
        interactive: bool = False,
        timeout: Optional[int] = None,
    ) -> CommandResult:
        command = [str(arg) for arg in args]
        printable = " ".join(shlex.quote(part) for part in command)
        logger.info("Running %s", printable)

        kwargs = {}
        if not interactive:
            kwargs["capture_output"] = True
            kwargs["text"] = True

        try:
            proc = subprocess.run(command, check=False, timeout=timeout, **kwargs)
        except FileNotFoundError as exc:
            logger.error("Command not found: %s", command[0])
            return CommandResult(
                command=command,
                exit_status=COMMAND_NOT_FOUND,
                stderr=str(exc),
            )

        result = CommandResult(
            command=command,
            exit_status=proc.returncode,
            stdout=(proc.stdout or "") if not interactive else "",
            stderr=(proc.stderr or "") if not interactive else "",
        )
        if result.ok:
            logger.info("%s exited with status 0", printable)
        else:
            logger.warning(
                "%s exited with status %s: %s",
                printable,
                result.exit_status,
                result.stderr.strip() or "<no output>",
            )
        return result


__all__ = ["COMMAND_NOT_FOUND", "CommandResult", "CommandRunner", "LocalCommandRunner"]
