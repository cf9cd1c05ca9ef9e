"""
Host Extras Service

Per-host settings kept outside the catalog: auth mode override and identity file.
One small YAML file per host under <config_home>/hosts/.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from tssm.exceptions import ConfigurationError
from tssm.models.auth import AuthOverride
from tssm.utils import PathUtils


@dataclass
class HostExtras:
    """Extras for one host."""

    auth_mode: AuthOverride = AuthOverride.UNSET
    identity_file: Optional[str] = None

    def to_dict(self) -> dict:
        data = {}
        if self.auth_mode is not AuthOverride.UNSET:
            data["auth_mode"] = self.auth_mode.value
        if self.identity_file:
            data["identity_file"] = self.identity_file
        return data


class HostExtrasService:
    """
    Reads and writes per-host extras.

    Responsibilities:
    - Map host keys to sanitized file names
    - Parse auth_mode overrides (automate|keychain, manual)
    - Persist overrides set by `tssm cred set`
    """

    def __init__(self, extras_dir: Path):
        """
        Initialize extras service.

        Args:
            extras_dir: Directory holding <host>.yaml files
        """
        self.extras_dir = Path(extras_dir).expanduser()

    def path_for(self, host_key: str) -> Path:
        """Extras file path for a host key."""
        return self.extras_dir / f"{PathUtils.sanitize_host_key(host_key)}.yaml"

    def load(self, host_key: str) -> Optional[HostExtras]:
        """
        Load extras for a host.

        Args:
            host_key: Host key (resolved hostname or alias)

        Returns:
            HostExtras, or None when no extras file exists

        Raises:
            ConfigurationError: If the file exists but cannot be parsed
        """
        path = self.path_for(host_key)
        if not path.is_file():
            return None

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}", context=str(e))
        except OSError as e:
            raise ConfigurationError(f"Cannot read {path}", context=str(e))

        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid host extras in {path}: expected a mapping")

        identity = data.get("identity_file")
        return HostExtras(
            auth_mode=AuthOverride.parse(data.get("auth_mode")),
            identity_file=(str(identity).strip() or None) if identity else None,
        )

    def auth_override(self, host_key: str) -> AuthOverride:
        """Auth mode override for a host; UNSET when absent."""
        extras = self.load(host_key)
        return extras.auth_mode if extras else AuthOverride.UNSET

    def identity_file(self, host_key: str) -> Optional[str]:
        extras = self.load(host_key)
        return extras.identity_file if extras else None

    def set_auth_override(self, host_key: str, mode: AuthOverride) -> Path:
        """
        Persist an auth mode override, keeping other extras.

        Args:
            host_key: Host key
            mode: New override

        Returns:
            Path of the written file
        """
        try:
            extras = self.load(host_key) or HostExtras()
        except ConfigurationError:
            extras = HostExtras()
        extras.auth_mode = mode

        path = self.path_for(host_key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(extras.to_dict(), f, default_flow_style=False, sort_keys=True)
        return path
