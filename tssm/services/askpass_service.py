"""
Askpass Service

Credential automation for scp: OpenSSH asks SSH_ASKPASS for the password,
which calls back into `tssm __askpass`.
"""

import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional, Sequence

from tssm.constants import ASKPASS_ENV, ASKPASS_WRAPPER_PREFIX
from tssm.core.settings import Settings
from tssm.utils import format_command_line, shell_quote


def parse_scp_remote(arg: str) -> Optional[tuple[str, Optional[str]]]:
    """
    Extract (host, user) from an scp operand like user@host:path.

    Returns:
        None for local paths
    """
    arg = arg.strip()
    bracket = arg.find("[")
    if bracket != -1 and (bracket == 0 or arg[bracket - 1] == "@"):
        # [v6-address]:path
        close = arg.find("]", bracket)
        if close == -1 or arg[close + 1 : close + 2] != ":":
            return None
        left = arg[:bracket] + arg[bracket + 1 : close]
    else:
        colon = arg.find(":")
        if colon <= 0:
            return None
        left = arg[:colon].strip()
        if "/" in left:
            return None
    if "@" in left:
        user, host = left.split("@", 1)
        host = host.strip()
        if not host:
            return None
        return host, (user.strip() or None)
    return left, None


def find_scp_remote(args: Sequence[str]) -> Optional[tuple[str, Optional[str]]]:
    """First remote operand in scp args, skipping flags."""
    for arg in args:
        if arg.startswith("-"):
            continue
        remote = parse_scp_remote(arg)
        if remote:
            return remote
    return None


class AskpassService:
    """Writes the SSH_ASKPASS wrapper script and the matching environment."""

    def __init__(self, settings: Settings, temp_dir: Optional[Path] = None):
        """
        Initialize askpass service.

        Args:
            settings: Runtime settings (self executable)
            temp_dir: Directory for the wrapper (defaults to $TMPDIR)
        """
        self.settings = settings
        self.temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir())

    def wrapper_path(self) -> Path:
        return self.temp_dir / f"{ASKPASS_WRAPPER_PREFIX}{os.getpid()}.sh"

    def wrapper_script(self, host_key: str, user: Optional[str] = None) -> str:
        args = ["__askpass", "--host", host_key]
        if user:
            args += ["--user", user]
        args += ["--kind", "password"]
        return (
            "#!/usr/bin/env bash\n"
            f"exec {shell_quote(self.settings.self_executable)} {format_command_line(args)}\n"
        )

    def write_wrapper(self, host_key: str, user: Optional[str] = None) -> Path:
        """
        Write the wrapper script (mode 0700).

        The script holds no secret and is left in place after scp exits so a
        failed askpass exec can be inspected.
        """
        path = self.wrapper_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.wrapper_script(host_key, user))
        os.chmod(path, 0o700)
        return path

    def environment(self, wrapper: Path) -> dict[str, str]:
        """Environment overrides that force OpenSSH to use the wrapper."""
        env = {"SSH_ASKPASS": str(wrapper)}
        env.update(ASKPASS_ENV)
        return env

    @staticmethod
    def merged_environment(overrides: Mapping[str, str]) -> dict[str, str]:
        env = dict(os.environ)
        env.update(overrides)
        return env
