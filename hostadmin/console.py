"""Terminal I/O used by the interactive menus."""

from __future__ import annotations

import contextlib
import sys
import time
from typing import Callable, Iterator, TextIO

_CLEAR_SCREEN = "\033[H\033[2J"


class UserInputError(RuntimeError):
    """Raised when the console cannot obtain interactive user input."""


@contextlib.contextmanager
def _temporary_stdio(stdin: TextIO | None, stdout: TextIO | None) -> Iterator[None]:
    """Temporarily replace ``sys.stdin`` and ``sys.stdout``."""

    original_stdin, original_stdout = sys.stdin, sys.stdout
    try:
        if stdin is not None:
            sys.stdin = stdin
        if stdout is not None:
            sys.stdout = stdout
        yield
    finally:
        sys.stdin = original_stdin
        sys.stdout = original_stdout


class Console:
    """Prompts and status messages for one interactive session.

    ``stdin``/``stdout`` default to the process streams; tests pass
    ``io.StringIO`` objects and a no-op ``sleep`` instead.
    """

    def __init__(
        self,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._stdin = stdin
        self._stdout = stdout
        self._sleep = sleep

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def echo(self, message: str = "") -> None:
        print(message, file=self.stdout, flush=True)

    def prompt(self, text: str) -> str:
        """Read one line, stripped of surrounding whitespace."""

        try:
            if self._stdin is None and self._stdout is None:
                value = input(text)
            else:
                with _temporary_stdio(self._stdin, self._stdout):
                    value = input(text)
        except EOFError as exc:
            raise UserInputError("Input stream closed while waiting for a response.") from exc
        return value.strip()

    def pause(self) -> None:
        self.prompt("Press Enter to continue...")

    def wait(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)

    def clear(self) -> None:
        stream = self.stdout
        isatty = getattr(stream, "isatty", None)
        if isatty is not None and isatty():
            stream.write(_CLEAR_SCREEN)
            stream.flush()


__all__ = ["Console", "UserInputError"]
