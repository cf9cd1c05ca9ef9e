"""
CLI Utilities

Core utility functions and classes for tssm.
"""

import os
import re
from pathlib import Path
from typing import Iterable, Mapping, Optional

from tssm.constants import APP_NAME

# Conservative set of characters that never need quoting in sh/bash.
_SHELL_UNSAFE = re.compile(r"[^A-Za-z0-9_@%+=:,./-]")

_FILENAME_UNSAFE = re.compile(r"[/\\:*?\"<>|\s]")


class ShellFormatter:
    """Renders argument vectors as single-line, shell-safe strings."""

    @staticmethod
    def quote(arg: str) -> str:
        """
        Quote one argument for sh.

        Args:
            arg: Raw argument

        Returns:
            The argument unchanged if it only holds safe characters, otherwise
            single-quoted with embedded quotes written as '"'"'. Empty becomes ''.
        """
        if arg == "":
            return "''"
        if not _SHELL_UNSAFE.search(arg):
            return arg
        return "'" + arg.replace("'", "'\"'\"'") + "'"

    @staticmethod
    def format_command_line(argv: Iterable[str]) -> str:
        """
        Join an argument vector into one shell command line.

        Args:
            argv: Arguments to render

        Returns:
            Command line that the shell tokenizes back into argv
        """
        return " ".join(ShellFormatter.quote(a) for a in argv)


class PathUtils:
    """Filesystem locations used by tssm."""

    @staticmethod
    def config_home(environ: Optional[Mapping[str, str]] = None) -> Path:
        """Get the tssm config directory ($XDG_CONFIG_HOME/tssm)."""
        env = os.environ if environ is None else environ
        base = env.get("XDG_CONFIG_HOME", "").strip()
        root = Path(base) if base else Path.home() / ".config"
        return root / APP_NAME

    @staticmethod
    def state_home(environ: Optional[Mapping[str, str]] = None) -> Path:
        """Get the tssm state directory ($XDG_STATE_HOME/tssm)."""
        env = os.environ if environ is None else environ
        base = env.get("XDG_STATE_HOME", "").strip()
        root = Path(base) if base else Path.home() / ".local" / "state"
        return root / APP_NAME

    @staticmethod
    def sanitize_host_key(host_key: str) -> str:
        """
        Convert a host key into a filesystem-safe filename stem.

        Args:
            host_key: Alias, hostname or address

        Returns:
            Filename stem; "host" if nothing usable remains
        """
        stem = _FILENAME_UNSAFE.sub("_", host_key.strip())
        stem = re.sub(r"_+", "_", stem).strip("._-")
        return stem or "host"

    @staticmethod
    def expand(path: str) -> str:
        """Expand ~ and environment variables in a user-supplied path."""
        return os.path.expandvars(os.path.expanduser(path.strip()))


class EnvUtils:
    """Helpers for reading flags from the environment."""

    @staticmethod
    def is_truthy(value: Optional[str]) -> bool:
        return (value or "").strip().lower() in ("1", "true", "yes", "y", "on")

    @staticmethod
    def is_disabled(value: Optional[str]) -> bool:
        return (value or "").strip().lower() in ("0", "false", "no", "n", "off")

    @staticmethod
    def tmux_socket_path(tmux_value: Optional[str]) -> Optional[str]:
        """
        Extract the server socket from a $TMUX value.

        Args:
            tmux_value: Value like "/tmp/tmux-502/default,35218,0"

        Returns:
            Socket path, or None when not inside tmux
        """
        value = (tmux_value or "").strip()
        if not value:
            return None
        return value.split(",", 1)[0] or None


def shell_quote(arg: str) -> str:
    """Quote one argument for sh."""
    return ShellFormatter.quote(arg)


def format_command_line(argv: Iterable[str]) -> str:
    """Join argv into a shell-safe command line."""
    return ShellFormatter.format_command_line(argv)


def split_destination(destination: str) -> tuple[Optional[str], str]:
    """Split 'user@host' into (user, host); user is None when absent."""
    destination = destination.strip()
    if "@" in destination:
        user, host = destination.split("@", 1)
        return (user.strip() or None), host.strip()
    return None, destination
