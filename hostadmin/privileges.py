"""Identity queries and the root-only gate."""

from __future__ import annotations

import os
import pwd
from dataclasses import dataclass
from typing import Mapping, Optional

ROOT_UID = 0


class PrivilegeError(RuntimeError):
    """Raised when the console is started without administrative rights."""


@dataclass(frozen=True)
class Identity:
    """Who is running the console.

    ``login_user`` is the operator behind a ``sudo`` elevation, which differs
    from ``effective_user`` whenever privileges were raised.
    """

    effective_uid: int
    effective_user: str
    login_user: Optional[str]


def _login_name(environ: Mapping[str, str]) -> Optional[str]:
    try:
        return os.getlogin()
    except OSError:
        # No controlling terminal (cron, pipelines); sudo still records the caller.
        return environ.get("SUDO_USER") or None


def current_identity(environ: Mapping[str, str] | None = None) -> Identity:
    env = os.environ if environ is None else environ
    euid = os.geteuid()
    try:
        effective_user = pwd.getpwuid(euid).pw_name
    except KeyError:
        effective_user = str(euid)
    return Identity(
        effective_uid=euid,
        effective_user=effective_user,
        login_user=_login_name(env),
    )


def require_privileges(identity: Identity) -> None:
    if identity.effective_uid != ROOT_UID:
        raise PrivilegeError("This program must be run as root or with sudo.")


__all__ = ["Identity", "PrivilegeError", "current_identity", "require_privileges"]
