"""
Command Builder Service

Builds argument vectors for ssh/scp and single-line, shell-safe command
strings for tmux panes.
"""

import getpass
from pathlib import Path
from typing import Optional, Sequence

from tssm.constants import (
    AUTOMATION_SSH_OPTIONS,
    DEFAULT_SSH_PORT,
    SCP_BINARY,
    SSH_BINARY,
    SSH_MUX_DIRNAME,
    SSH_MUX_PERSIST,
)
from tssm.core.settings import Settings
from tssm.exceptions import TssmError
from tssm.models.host import EffectiveHost
from tssm.services.override_service import HostExtrasService
from tssm.utils import PathUtils, format_command_line


class CommandBuilder:
    """Builds client argv and tmux command lines."""

    def __init__(self, settings: Settings, extras: Optional[HostExtrasService] = None):
        """
        Initialize command builder.

        Args:
            settings: Runtime settings (mux flags, self executable)
            extras: Per-host extras for identity_file (optional)
        """
        self.settings = settings
        self.extras = extras

    # ssh

    def ssh_argv(self, host: EffectiveHost, extra: Sequence[str] = ()) -> list[str]:
        """
        Interactive ssh argv for a catalog host.

        ssh [-p port] [-J jump] [mux options] [-i identity] [user@]hostname [extra...]
        """
        argv = [SSH_BINARY]
        if host.non_default_port:
            argv += ["-p", str(host.port)]
        if host.jump_host:
            argv += ["-J", host.jump_host]
        argv += self.mux_options(host)

        identity = self._identity_file(host)
        if identity:
            argv += ["-i", identity]

        argv.append(host.destination)
        argv.extend(extra)
        return argv

    def literal_ssh_argv(
        self,
        token: str,
        user: Optional[str] = None,
        port: Optional[int] = None,
        extra: Sequence[str] = (),
    ) -> list[str]:
        """
        ssh argv for a destination that is not in the catalog.

        ssh [extra...] [-p port] [user@]token
        """
        argv = [SSH_BINARY]
        argv.extend(extra)
        if port:
            argv += ["-p", str(port)]
        argv.append(f"{user}@{token}" if user else token)
        return argv

    def direct_argv(self, host: EffectiveHost, extra: Sequence[str] = ()) -> list[str]:
        """Manual-login argv for any resolved host."""
        if host.in_catalog:
            return self.ssh_argv(host, extra)
        return self.literal_ssh_argv(
            host.name, user=host.user, port=host.non_default_port, extra=extra
        )

    def automation_argv(self, host: EffectiveHost) -> list[str]:
        """
        ssh argv used when a password will be injected.

        Forces password/keyboard-interactive auth with a single prompt and
        targets the host key the credential was decided for.
        """
        argv = [SSH_BINARY] + list(AUTOMATION_SSH_OPTIONS)
        if host.non_default_port:
            argv += ["-p", str(host.port)]
        if host.jump_host:
            argv += ["-J", host.jump_host]
        argv.append(host.destination)
        return argv

    def mux_options(self, host: EffectiveHost) -> list[str]:
        """ControlMaster options when connection sharing is enabled."""
        if not self.settings.ssh_mux:
            return []
        path = self.control_path(host)
        if not path:
            return []
        return [
            "-o",
            "ControlMaster=auto",
            "-o",
            f"ControlPersist={SSH_MUX_PERSIST}",
            "-o",
            f"ControlPath={path}",
        ]

    def control_path(self, host: EffectiveHost) -> Optional[str]:
        """
        Socket path for ssh connection sharing.

        TSSM_SSH_MUX_PATH wins; otherwise <config_home>/mux/<user>@<host>_<port>.sock
        """
        if self.settings.ssh_mux_path:
            return PathUtils.expand(self.settings.ssh_mux_path)

        user = host.user or _local_user()
        stem = PathUtils.sanitize_host_key(f"{user}@{host.host_key}")
        sock = f"{stem}_{host.port or DEFAULT_SSH_PORT}.sock"
        mux_dir = Path(self.settings.config_home) / SSH_MUX_DIRNAME
        mux_dir.mkdir(parents=True, exist_ok=True, mode=0o700)
        return str(mux_dir / sock)

    def _identity_file(self, host: EffectiveHost) -> Optional[str]:
        if self.extras is None:
            return None
        try:
            identity = self.extras.identity_file(host.host_key)
        except (TssmError, OSError):
            return None
        return PathUtils.expand(identity) if identity else None

    # scp

    def scp_argv(self, args: Sequence[str]) -> list[str]:
        return [SCP_BINARY] + list(args)

    # tmux replicas

    def replica_argv(
        self, target: str, extra: Sequence[str] = (), user: Optional[str] = None
    ) -> list[str]:
        """
        argv that re-invokes this program for one replica.

        <self> ssh --tmux --host <target> [--user U] [-- extra...]
        """
        argv = [self.settings.self_executable, "ssh", "--tmux", "--host", target]
        if user:
            argv += ["--user", user]
        if extra:
            argv += ["--"] + list(extra)
        return argv

    def replica_command_line(
        self, target: str, extra: Sequence[str] = (), user: Optional[str] = None
    ) -> str:
        """Shell line run by `bash -lc` inside a tmux window or pane."""
        return "exec " + format_command_line(self.replica_argv(target, extra, user))


def _local_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "user"
