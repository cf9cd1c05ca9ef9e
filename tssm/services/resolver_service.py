"""Host resolution: catalog entries merged with native ssh configuration."""

import subprocess
from dataclasses import dataclass
from typing import Callable, Optional

from tssm.constants import DEFAULT_SSH_PORT, SSH_BINARY
from tssm.core.config_loader import HostCatalog
from tssm.models.host import EffectiveHost
from tssm.utils import split_destination


@dataclass(frozen=True)
class NativeHostConfig:
    """Subset of `ssh -G` output used for resolution."""

    user: Optional[str] = None
    hostname: Optional[str] = None
    port: Optional[int] = None


class NativeSSHConfig:
    """Evaluates the user's ssh configuration through `ssh -G`."""

    def __init__(self, runner: Callable = subprocess.run, ssh_binary: str = SSH_BINARY):
        """
        Initialize native config reader.

        Args:
            runner: subprocess.run-compatible callable
            ssh_binary: ssh executable
        """
        self.runner = runner
        self.ssh_binary = ssh_binary

    def evaluate(self, host: str) -> NativeHostConfig:
        """
        Evaluate ssh configuration for a host token.

        Args:
            host: Alias or hostname as typed

        Returns:
            NativeHostConfig; empty when ssh is missing or fails
        """
        host = (host or "").strip()
        if not host:
            return NativeHostConfig()

        try:
            result = self.runner(
                [self.ssh_binary, "-G", host],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=10,
            )
        except (OSError, subprocess.SubprocessError):
            return NativeHostConfig()

        if result.returncode != 0:
            return NativeHostConfig()
        return self.parse(result.stdout or "")

    @staticmethod
    def parse(output: str) -> NativeHostConfig:
        """Parse `ssh -G` output; first value of each key wins."""
        values = {}
        for line in output.splitlines():
            parts = line.strip().split(None, 1)
            if len(parts) < 2:
                continue
            key, value = parts[0].lower(), parts[1].strip()
            if key in ("user", "hostname", "port") and key not in values:
                values[key] = value

        port = None
        try:
            port = int(values.get("port", ""))
        except ValueError:
            pass
        if port is not None and port <= 0:
            port = None

        return NativeHostConfig(
            user=values.get("user") or None,
            hostname=values.get("hostname") or None,
            port=port,
        )


class HostResolver:
    """
    Produces EffectiveHost records.

    Precedence:
    - user: explicit (flag or user@) > catalog (host, then group) > native
    - port: explicit > catalog (host, then group) > native > 22
    """

    def __init__(self, catalog: HostCatalog, native: Optional[NativeSSHConfig] = None):
        self.catalog = catalog
        self.native = native or NativeSSHConfig()

    def resolve(
        self,
        token: str,
        user: Optional[str] = None,
        port: Optional[int] = None,
    ) -> EffectiveHost:
        """
        Resolve a typed destination.

        Args:
            token: Alias, hostname or user@host
            user: Explicit user (overrides user@ in token)
            port: Explicit port

        Returns:
            EffectiveHost
        """
        typed_user, alias = split_destination(token)
        if not alias:
            raise ValueError("empty host")
        explicit_user = user or typed_user

        native = self.native.evaluate(alias)
        entry = self.catalog.host_by_name(alias)
        if entry is None and native.hostname:
            entry = self.catalog.host_by_name(native.hostname)

        if entry is None:
            return EffectiveHost(
                name=alias,
                hostname=native.hostname,
                user=explicit_user or native.user,
                port=port or native.port or DEFAULT_SSH_PORT,
                in_catalog=False,
            )

        base = self.catalog.resolve_effective(entry)
        group = self.catalog.groups.get(entry.group) if entry.group else None
        catalog_port = entry.port or (group.default_port if group else None)

        return EffectiveHost(
            name=base.name,
            hostname=native.hostname,
            user=explicit_user or base.user or native.user,
            port=port or catalog_port or native.port or DEFAULT_SSH_PORT,
            jump_host=base.jump_host,
            login_mode=base.login_mode,
            tags=base.tags,
            group=base.group,
            in_catalog=True,
        )
