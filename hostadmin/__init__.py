"""Interactive user, group and backup administration for Linux hosts."""

from __future__ import annotations

from .config import AdminConfig, ConfigError, load_config, resolve_config_path
from .privileges import Identity, PrivilegeError, current_identity, require_privileges


def create_app(*args, **kwargs):
    """Factory function that returns the interactive menu dispatcher."""

    from .application import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "AdminConfig",
    "ConfigError",
    "Identity",
    "PrivilegeError",
    "create_app",
    "current_identity",
    "load_config",
    "require_privileges",
    "resolve_config_path",
]
