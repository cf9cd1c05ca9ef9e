"""Host catalog loading for tssm"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from tssm.constants import CATALOG_FILENAME, DEFAULT_SSH_PORT, ENV_CONFIG
from tssm.exceptions import ConfigurationError
from tssm.models.host import CatalogHost, EffectiveHost, HostGroup, LoginMode


class HostCatalog:
    """Represents a loaded and validated host catalog"""

    def __init__(self, config_dict: Optional[dict] = None, config_path: Path = None):
        """
        Initialize host catalog

        Args:
            config_dict: Raw configuration dictionary from hosts.yaml
            config_path: Path the catalog was read from (optional)
        """
        self.raw_config = config_dict or {}
        self.config_path = config_path
        self.groups: Dict[str, HostGroup] = {}
        self.hosts: List[CatalogHost] = []
        self._parse()

    @classmethod
    def empty(cls) -> "HostCatalog":
        """Catalog used when no hosts.yaml exists."""
        return cls({})

    def _where(self) -> str:
        return str(self.config_path) if self.config_path else "catalog"

    def _parse(self) -> None:
        """Parse and validate groups and hosts"""
        if not isinstance(self.raw_config, dict):
            raise ConfigurationError(
                "Invalid host catalog: top level must be a mapping",
                context=self._where(),
            )

        for i, raw in enumerate(self.raw_config.get("groups") or []):
            group = self._parse_group(i, raw)
            if group.name in self.groups:
                raise ConfigurationError(
                    f"groups[{i}]: duplicate group name '{group.name}'",
                    context=self._where(),
                )
            self.groups[group.name] = group

        seen = set()
        for i, raw in enumerate(self.raw_config.get("hosts") or []):
            host = self._parse_host(i, raw)
            if host.name in seen:
                raise ConfigurationError(
                    f"hosts[{i}]: duplicate host name '{host.name}'",
                    context=self._where(),
                )
            if host.group and host.group not in self.groups:
                raise ConfigurationError(
                    f"hosts[{i}]({host.name}): unknown group '{host.group}'",
                    context=f"Available groups: {', '.join(self.groups) or '(none)'}",
                )
            seen.add(host.name)
            self.hosts.append(host)

    def _parse_group(self, index: int, raw: Any) -> HostGroup:
        if not isinstance(raw, dict) or not str(raw.get("name") or "").strip():
            raise ConfigurationError(
                f"groups[{index}]: missing required field 'name'", context=self._where()
            )
        return HostGroup(
            name=str(raw["name"]).strip(),
            default_user=_optional_str(raw.get("default_user")),
            default_port=self._port(raw.get("default_port"), f"groups[{index}]"),
            jump_host=_optional_str(raw.get("jump_host")),
        )

    def _parse_host(self, index: int, raw: Any) -> CatalogHost:
        if not isinstance(raw, dict) or not str(raw.get("name") or "").strip():
            raise ConfigurationError(
                f"hosts[{index}]: missing required field 'name'", context=self._where()
            )
        name = str(raw["name"]).strip()

        try:
            login_mode = LoginMode.parse(raw.get("login_mode"))
        except ValueError:
            raise ConfigurationError(
                f"hosts[{index}]({name}): invalid login_mode {raw.get('login_mode')!r} "
                "(expected: manual|askpass)",
                context=self._where(),
            )

        tags = raw.get("tags") or []
        if not isinstance(tags, list):
            tags = [tags]

        return CatalogHost(
            name=name,
            group=_optional_str(raw.get("group")),
            user=_optional_str(raw.get("user")),
            port=self._port(raw.get("port"), f"hosts[{index}]({name})"),
            jump_host=_optional_str(raw.get("jump_host")),
            tags=[str(t).strip() for t in tags if str(t).strip()],
            login_mode=login_mode,
        )

    def _port(self, value: Any, where: str) -> Optional[int]:
        if value in (None, ""):
            return None
        try:
            port = int(value)
        except (TypeError, ValueError):
            port = -1
        if not 0 < port < 65536:
            raise ConfigurationError(
                f"{where}: invalid port {value!r}", context=self._where()
            )
        return port

    def host_by_name(self, name: Optional[str]) -> Optional[CatalogHost]:
        """
        Find a host by its catalog name

        Args:
            name: Typed alias or resolved hostname

        Returns:
            CatalogHost or None if not in the catalog
        """
        if not name:
            return None
        for host in self.hosts:
            if host.name == name:
                return host
        return None

    def resolve_effective(self, host: CatalogHost) -> EffectiveHost:
        """
        Merge group defaults with host overrides

        Args:
            host: Catalog entry

        Returns:
            EffectiveHost for the entry (before native config evaluation)
        """
        group = self.groups.get(host.group) if host.group else None

        user = host.user or (group.default_user if group else None)
        port = host.port or (group.default_port if group else None)
        jump = host.jump_host or (group.jump_host if group else None)

        return EffectiveHost(
            name=host.name,
            hostname=None,
            user=user,
            port=port or DEFAULT_SSH_PORT,
            jump_host=jump,
            login_mode=host.login_mode,
            tags=tuple(host.tags),
            group=group.name if group else None,
            in_catalog=True,
        )

    def effective_hosts(self) -> List[EffectiveHost]:
        return [self.resolve_effective(h) for h in self.hosts]


class CatalogLoader:
    """Locates and loads the host catalog"""

    def __init__(self, config_home: Path, explicit_path: Optional[Path] = None):
        """
        Initialize catalog loader

        Args:
            config_home: tssm config directory
            explicit_path: Path given via --config or TSSM_CONFIG
        """
        self.config_home = config_home
        self.explicit_path = explicit_path

    def candidates(self) -> List[Path]:
        """Catalog paths in search order"""
        paths = []
        if self.explicit_path:
            paths.append(Path(self.explicit_path).expanduser())
        paths.append(self.config_home / CATALOG_FILENAME)
        default = Path.home() / ".config" / "tssm" / CATALOG_FILENAME
        if default not in paths:
            paths.append(default)
        return paths

    def find(self) -> Optional[Path]:
        """
        Find the catalog file

        Returns:
            First existing candidate, or None when no catalog exists

        Raises:
            ConfigurationError: If an explicit path was given but does not exist
        """
        if self.explicit_path and not Path(self.explicit_path).expanduser().exists():
            raise ConfigurationError(
                f"Host catalog not found: {self.explicit_path}",
                context=f"Check --config or {ENV_CONFIG}",
            )
        for path in self.candidates():
            if path.is_file():
                return path
        return None

    def load(self) -> HostCatalog:
        """
        Load the catalog

        Returns:
            HostCatalog (empty when no catalog file exists)

        Raises:
            ConfigurationError: If the catalog is unreadable or invalid
        """
        path = self.find()
        if path is None:
            return HostCatalog.empty()

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}", context=str(e))
        except OSError as e:
            raise ConfigurationError(f"Cannot read {path}", context=str(e))

        return HostCatalog(data, config_path=path)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
