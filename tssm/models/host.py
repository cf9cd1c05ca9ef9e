"""
Host Models

Dataclass models for catalog entries and resolved connection targets.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from tssm.constants import DEFAULT_SSH_PORT


class LoginMode(Enum):
    """How authentication is handled for a catalog host."""

    DEFAULT = "default"
    ASKPASS = "askpass"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LoginMode":
        """Parse a catalog value; empty means default. Raises ValueError on unknown values."""
        normalized = (value or "").strip().lower()
        if not normalized:
            return cls.DEFAULT
        return cls(normalized)


@dataclass
class HostGroup:
    """Defaults shared by every host that references this group."""

    name: str
    default_user: Optional[str] = None
    default_port: Optional[int] = None
    jump_host: Optional[str] = None


@dataclass
class CatalogHost:
    """A host entry as written in the catalog."""

    name: str
    group: Optional[str] = None
    user: Optional[str] = None
    port: Optional[int] = None
    jump_host: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    login_mode: LoginMode = LoginMode.DEFAULT


@dataclass(frozen=True)
class EffectiveHost:
    """Fully resolved connection target. Immutable once produced."""

    name: str
    hostname: Optional[str] = None
    user: Optional[str] = None
    port: Optional[int] = None
    jump_host: Optional[str] = None
    login_mode: LoginMode = LoginMode.DEFAULT
    tags: tuple[str, ...] = ()
    group: Optional[str] = None
    in_catalog: bool = False

    @property
    def host_key(self) -> str:
        """Key for credential and override lookups: network name over typed alias."""
        return self.hostname or self.name

    @property
    def destination(self) -> str:
        """Get ssh destination string (user@host)."""
        if self.user:
            return f"{self.user}@{self.host_key}"
        return self.host_key

    @property
    def non_default_port(self) -> Optional[int]:
        """Port to pass explicitly, or None when ssh's default applies."""
        if self.port and self.port != DEFAULT_SSH_PORT:
            return self.port
        return None

    def describe(self) -> str:
        """One-line summary used by `tssm hosts`."""
        parts = [self.name]
        if self.group:
            parts.append(f"[{self.group}]")
        if self.user:
            parts.append(f"as {self.user}")
        if self.non_default_port:
            parts.append(f":{self.port}")
        if self.jump_host:
            parts.append(f"via {self.jump_host}")
        if self.tags:
            parts.append("tags:" + ",".join(self.tags))
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"EffectiveHost(name={self.name}, host_key={self.host_key}, user={self.user})"
